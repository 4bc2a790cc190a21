from __future__ import annotations

from decimal import Decimal
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from invoicer.models.invoice import Invoice
from invoicer.models.user import User
from invoicer.services.invoices import round_money, stored_amounts

LEFT_MARGIN = 40
RIGHT_MARGIN = 40
TOP_MARGIN = 40
BOTTOM_MARGIN = 50


def format_money(value: Decimal) -> str:
    return f"${round_money(value):,.2f}"


def invoice_pdf_filename(invoice: Invoice) -> str:
    return f"invoice_{invoice.id}.pdf"


def render_invoice_pdf(invoice: Invoice, owner: User | None = None) -> bytes:
    """A4 invoice document: parties, dates, item lines and totals."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Invoice #{invoice.id}")
    width, height = A4
    right_edge = width - RIGHT_MARGIN

    y = height - TOP_MARGIN

    def ensure_room(gap: int) -> None:
        nonlocal y
        if y - gap < BOTTOM_MARGIN:
            c.showPage()
            y = height - TOP_MARGIN

    def write_line(text: str = "", gap: int = 16, bold: bool = False, font_size: int = 10, x: float = LEFT_MARGIN):
        nonlocal y
        ensure_room(gap)
        c.setFont("Helvetica-Bold" if bold else "Helvetica", font_size)
        c.drawString(x, y, text)
        y -= gap

    def write_amount_row(label: str, value: Decimal, bold: bool = False, gap: int = 16):
        nonlocal y
        ensure_room(gap)
        font = "Helvetica-Bold" if bold else "Helvetica"
        c.setFont(font, 11 if bold else 10)
        c.drawRightString(right_edge - 110, y, label)
        c.drawRightString(right_edge, y, format_money(value))
        y -= gap

    write_line(f"INVOICE #{invoice.id}", gap=28, bold=True, font_size=18)

    if owner is not None:
        write_line("FROM", bold=True)
        for part in (owner.name, owner.email, owner.phone_number):
            if part:
                write_line(part)
        y -= 6

    customer = invoice.customer
    write_line("BILL TO", bold=True)
    if customer is None:
        write_line("(customer not available)")
    else:
        for part in (customer.name, customer.company_name, customer.email, customer.phone_number):
            if part:
                write_line(part)
        for line in (customer.address or "").splitlines():
            if line.strip():
                write_line(line.strip())
    y -= 6

    write_line(f"Date: {invoice.date.isoformat()}")
    write_line(f"Due date: {invoice.due_date.isoformat()}")
    write_line(f"Status: {(invoice.status or '').upper()}", gap=24, bold=True)

    # item table
    ensure_room(20)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(LEFT_MARGIN, y, "Description")
    c.drawRightString(right_edge - 180, y, "Qty")
    c.drawRightString(right_edge - 90, y, "Price")
    c.drawRightString(right_edge, y, "Amount")
    y -= 6
    c.line(LEFT_MARGIN, y, right_edge, y)
    y -= 14

    for item in invoice.items:
        ensure_room(16)
        price = round_money(item.price)
        c.setFont("Helvetica", 10)
        c.drawString(LEFT_MARGIN, y, (item.description or "")[:60])
        c.drawRightString(right_edge - 180, y, str(item.quantity))
        c.drawRightString(right_edge - 90, y, format_money(price))
        c.drawRightString(right_edge, y, format_money(price * int(item.quantity)))
        y -= 16

    ensure_room(10)
    c.line(LEFT_MARGIN, y + 6, right_edge, y + 6)
    y -= 8

    amounts = stored_amounts(invoice)
    tax_label = f"Tax ({round_money(invoice.tax_percentage).normalize():f}%)"
    write_amount_row("Subtotal", amounts.subtotal)
    write_amount_row(tax_label, amounts.tax_amount)
    write_amount_row("Total", amounts.total, bold=True, gap=20)

    c.showPage()
    c.save()
    return buffer.getvalue()
