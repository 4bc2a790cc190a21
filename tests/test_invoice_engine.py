from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import SQLAlchemyError

from invoicer.core.errors import EmptyInvoice, InvalidCustomer, NotFound
from invoicer.models.customer import Customer
from invoicer.models.invoice import Invoice
from invoicer.models.invoice_item import InvoiceItem
from invoicer.models.user import User
from invoicer.services import invoices as invoice_service
from tests.api_client import build_session


def _item(description, quantity, price):
    return SimpleNamespace(description=description, quantity=quantity, price=Decimal(str(price)))


def _seed(db):
    db.add(User(id=1, email="alice@example.com", password_hash="x", phone_number="+1", name="Alice"))
    db.add(User(id=2, email="bob@example.com", password_hash="x", phone_number="+2", name="Bob"))
    db.add(Customer(id=10, user_id=1, name="Acme"))
    db.add(Customer(id=20, user_id=2, name="Globex"))
    db.commit()


def test_compute_amounts():
    amounts = invoice_service.compute_amounts([_item("a", 2, 10), _item("b", 1, 5)], 10)

    assert amounts.subtotal == Decimal("25.00")
    assert amounts.tax_amount == Decimal("2.50")
    assert amounts.total == Decimal("27.50")


def test_compute_amounts_without_tax():
    assert invoice_service.compute_amounts([_item("a", 3, "0.10")], 0).total == Decimal("0.30")


def test_round_money_half_up():
    assert invoice_service.round_money("2.345") == Decimal("2.35")
    assert invoice_service.round_money(None) == Decimal("0.00")


def test_create_invoice_persists_items_and_total():
    db = build_session()
    _seed(db)

    invoice = invoice_service.create_invoice(
        db,
        1,
        customer_id=10,
        invoice_date=date(2024, 1, 1),
        due_date=date(2024, 1, 31),
        items=[_item("a", 2, 10), _item("b", 1, 5)],
        tax_percentage=Decimal("10"),
    )

    assert invoice.total == Decimal("27.50")
    assert len(invoice.items) == 2
    assert invoice.customer.name == "Acme"


def test_create_invoice_with_foreign_customer_persists_nothing():
    db = build_session()
    _seed(db)

    with pytest.raises(InvalidCustomer):
        invoice_service.create_invoice(
            db,
            1,
            customer_id=20,
            invoice_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            items=[_item("a", 1, 1)],
        )

    assert db.query(Invoice).count() == 0


def test_get_invoice_of_other_user_is_not_found():
    db = build_session()
    _seed(db)
    invoice = invoice_service.create_invoice(
        db,
        1,
        customer_id=10,
        invoice_date=date(2024, 1, 1),
        due_date=date(2024, 1, 31),
        items=[_item("a", 1, 1)],
    )

    with pytest.raises(NotFound):
        invoice_service.get_invoice(db, 2, invoice.id)


def test_statistics_use_given_day_for_overdue():
    db = build_session()
    _seed(db)
    for due, status in ((date(2024, 1, 10), "unpaid"), (date(2024, 3, 1), "unpaid"), (date(2024, 1, 5), "paid")):
        invoice_service.create_invoice(
            db,
            1,
            customer_id=10,
            invoice_date=date(2024, 1, 1),
            due_date=due,
            items=[_item("a", 1, 100)],
            status=status,
        )

    stats = invoice_service.invoice_statistics(db, 1, today=date(2024, 2, 1))

    assert stats == {
        "collected": Decimal("100.00"),
        "due": Decimal("200.00"),
        "open_invoices": 2,
        "overdue_invoices": 1,
    }
    assert invoice_service.invoice_statistics(db, 2, today=date(2024, 2, 1))["open_invoices"] == 0


def test_failed_item_insert_rolls_back_the_whole_invoice():
    db = build_session()
    _seed(db)

    # second line violates ck_invoice_items_quantity_positive
    with pytest.raises(SQLAlchemyError):
        invoice_service.create_invoice(
            db,
            1,
            customer_id=10,
            invoice_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            items=[_item("ok", 1, 1), _item("broken", 0, 1)],
        )

    assert db.query(Invoice).count() == 0
    assert db.query(InvoiceItem).count() == 0


def test_invoice_without_items_is_a_domain_error():
    db = build_session()
    _seed(db)

    with pytest.raises(EmptyInvoice) as exc:
        invoice_service.create_invoice(
            db,
            1,
            customer_id=10,
            invoice_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            items=[],
        )

    assert exc.value.status_code == 400
    assert db.query(Invoice).count() == 0
