from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from invoicer.core.database import get_db
from invoicer.deps import get_current_user, get_current_user_id
from invoicer.models.invoice import Invoice
from invoicer.models.user import User
from invoicer.schemas.invoices import (
    InvoiceCreate,
    InvoiceItemRead,
    InvoiceRead,
    InvoiceStatistics,
    InvoiceUpdate,
)
from invoicer.services import invoices as invoice_service
from invoicer.services.invoice_pdf import invoice_pdf_filename, render_invoice_pdf

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _invoice_to_dict(invoice: Invoice) -> Dict[str, Any]:
    amounts = invoice_service.stored_amounts(invoice)
    return {
        "id": invoice.id,
        "user_id": invoice.user_id,
        "customer_id": invoice.customer_id,
        "date": invoice.date,
        "due_date": invoice.due_date,
        "status": invoice.status,
        "tax_percentage": invoice_service.round_money(invoice.tax_percentage),
        "subtotal": amounts.subtotal,
        "tax_amount": amounts.tax_amount,
        "total": amounts.total,
        "items": list(invoice.items),
        "customer": invoice.customer,
    }


@router.get("", response_model=List[InvoiceRead])
def list_invoices(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return [_invoice_to_dict(invoice) for invoice in invoice_service.list_invoices(db, user_id)]


@router.post("", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    invoice = invoice_service.create_invoice(
        db,
        user_id,
        customer_id=payload.customer_id,
        invoice_date=payload.date,
        due_date=payload.due_date,
        items=payload.items,
        tax_percentage=payload.tax_percentage,
        status=payload.status,
    )
    return _invoice_to_dict(invoice)


@router.get("/statistics", response_model=InvoiceStatistics)
def invoice_statistics(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return invoice_service.invoice_statistics(db, user_id)


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(
    invoice_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return _invoice_to_dict(invoice_service.get_invoice(db, user_id, invoice_id))


@router.get("/{invoice_id}/items", response_model=List[InvoiceItemRead])
def list_invoice_items(
    invoice_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return invoice_service.get_invoice(db, user_id, invoice_id).items


@router.get("/{invoice_id}/pdf")
def export_invoice_pdf(
    invoice_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    invoice = invoice_service.get_invoice(db, user.id, invoice_id)
    content = render_invoice_pdf(invoice, owner=user)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{invoice_pdf_filename(invoice)}"'},
    )


@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    invoice = invoice_service.update_invoice(db, user_id, invoice_id, payload.model_dump(exclude_unset=True))
    return _invoice_to_dict(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    invoice_service.delete_invoice(db, user_id, invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
