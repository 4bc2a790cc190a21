import datetime as dt
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from invoicer.schemas.base import ApiModel
from invoicer.schemas.customers import CustomerRead

InvoiceStatus = Literal["paid", "unpaid"]

# JSON clients get numbers; values are already quantized to cents.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class InvoiceItemCreate(ApiModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class InvoiceCreate(ApiModel):
    customer_id: int
    date: dt.date
    due_date: dt.date
    items: List[InvoiceItemCreate] = Field(..., min_length=1)
    tax_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=2)
    status: InvoiceStatus = "unpaid"


class InvoiceUpdate(ApiModel):
    """Top-level fields only. Items, tax and total are fixed at creation."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    customer_id: Optional[int] = None
    date: Optional[dt.date] = None
    due_date: Optional[dt.date] = None
    status: Optional[InvoiceStatus] = None


class InvoiceItemRead(ApiModel):
    id: int
    invoice_id: int
    description: str
    quantity: int
    price: Money


class InvoiceRead(ApiModel):
    id: int
    user_id: int
    customer_id: int
    date: dt.date
    due_date: dt.date
    status: InvoiceStatus
    tax_percentage: Money
    subtotal: Money
    tax_amount: Money
    total: Money
    items: List[InvoiceItemRead]
    customer: Optional[CustomerRead] = None


class InvoiceStatistics(ApiModel):
    collected: Money
    due: Money
    open_invoices: int
    overdue_invoices: int
