"""Invoice Engine: money arithmetic and owner-scoped invoice CRUD.

Money is Decimal end to end and quantized to cents (ROUND_HALF_UP)
wherever a value leaves this module.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from invoicer.core.errors import EmptyInvoice, InvalidCustomer, NotFound
from invoicer.models.invoice import Invoice
from invoicer.models.invoice_item import InvoiceItem
from invoicer.services.customers import find_customer
from invoicer.services.ownership import log_if_foreign

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")
UPDATABLE_FIELDS = ("customer_id", "date", "due_date", "status")


def round_money(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class InvoiceAmounts:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def compute_amounts(items: Iterable[Any], tax_percentage: Any) -> InvoiceAmounts:
    """total = sum(quantity * price) * (1 + tax_percentage / 100)"""
    subtotal = sum(
        (int(item.quantity) * round_money(item.price) for item in items),
        Decimal("0"),
    )
    subtotal = round_money(subtotal)
    tax_rate = Decimal(str(tax_percentage or 0)) / HUNDRED
    total = round_money(subtotal * (Decimal("1") + tax_rate))
    return InvoiceAmounts(subtotal=subtotal, tax_amount=total - subtotal, total=total)


def stored_amounts(invoice: Invoice) -> InvoiceAmounts:
    """Amounts for an existing invoice; total is the stored one, not recomputed."""
    subtotal = round_money(
        sum((int(item.quantity) * round_money(item.price) for item in invoice.items), Decimal("0"))
    )
    total = round_money(invoice.total)
    return InvoiceAmounts(subtotal=subtotal, tax_amount=total - subtotal, total=total)


def _owned_query(db: Session, user_id: int):
    return (
        db.query(Invoice)
        .options(selectinload(Invoice.items), selectinload(Invoice.customer))
        .filter(Invoice.user_id == user_id)
    )


def list_invoices(db: Session, user_id: int) -> List[Invoice]:
    return _owned_query(db, user_id).order_by(Invoice.date.desc(), Invoice.id.desc()).all()


def get_invoice(db: Session, user_id: int, invoice_id: int) -> Invoice:
    invoice = _owned_query(db, user_id).filter(Invoice.id == invoice_id).first()
    if invoice is None:
        log_if_foreign(db, Invoice, invoice_id, user_id)
        raise NotFound("Invoice not found")
    return invoice


def _require_own_customer(db: Session, user_id: int, customer_id: int) -> None:
    if find_customer(db, user_id, customer_id) is None:
        logger.warning("Rejected invoice customer_id=%s for user_id=%s", customer_id, user_id)
        raise InvalidCustomer()


def create_invoice(
    db: Session,
    user_id: int,
    *,
    customer_id: int,
    invoice_date: date,
    due_date: date,
    items: List[Any],
    tax_percentage: Any = 0,
    status: str = "unpaid",
) -> Invoice:
    _require_own_customer(db, user_id, customer_id)
    if not items:
        raise EmptyInvoice()

    amounts = compute_amounts(items, tax_percentage)
    invoice = Invoice(
        user_id=user_id,
        customer_id=customer_id,
        date=invoice_date,
        due_date=due_date,
        total=amounts.total,
        status=status,
        tax_percentage=round_money(tax_percentage),
    )
    # invoice and items commit together or not at all
    try:
        db.add(invoice)
        db.flush()
        for item in items:
            db.add(
                InvoiceItem(
                    invoice_id=invoice.id,
                    description=item.description,
                    quantity=int(item.quantity),
                    price=round_money(item.price),
                )
            )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Invoice creation rolled back user_id=%s", user_id)
        raise

    logger.info("Invoice created id=%s user_id=%s total=%s", invoice.id, user_id, amounts.total)
    return get_invoice(db, user_id, invoice.id)


def update_invoice(db: Session, user_id: int, invoice_id: int, changes: Dict[str, Any]) -> Invoice:
    invoice = get_invoice(db, user_id, invoice_id)

    customer_id = changes.get("customer_id")
    if customer_id is not None and customer_id != invoice.customer_id:
        _require_own_customer(db, user_id, customer_id)

    for key in UPDATABLE_FIELDS:
        if key in changes and changes[key] is not None:
            setattr(invoice, key, changes[key])
    db.commit()
    return get_invoice(db, user_id, invoice_id)


def delete_invoice(db: Session, user_id: int, invoice_id: int) -> None:
    invoice = get_invoice(db, user_id, invoice_id)
    db.delete(invoice)
    db.commit()
    logger.info("Invoice deleted id=%s user_id=%s", invoice_id, user_id)


def invoice_statistics(db: Session, user_id: int, *, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()

    rows = (
        db.query(
            Invoice.status,
            func.count(Invoice.id),
            func.coalesce(func.sum(Invoice.total), 0),
        )
        .filter(Invoice.user_id == user_id)
        .group_by(Invoice.status)
        .all()
    )
    counts = {status: int(count or 0) for status, count, _ in rows}
    sums = {status: round_money(total) for status, _, total in rows}

    overdue = (
        db.query(func.count(Invoice.id))
        .filter(
            Invoice.user_id == user_id,
            Invoice.status == "unpaid",
            Invoice.due_date < today,
        )
        .scalar()
    )

    return {
        "collected": sums.get("paid", round_money(0)),
        "due": sums.get("unpaid", round_money(0)),
        "open_invoices": counts.get("unpaid", 0),
        "overdue_invoices": int(overdue or 0),
    }
