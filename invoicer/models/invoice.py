from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from invoicer.core.database import Base

INVOICE_STATUSES = ("paid", "unpaid")


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

    date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)

    # computed once from the items at creation; never recomputed
    total = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(10), nullable=False, default="unpaid")  # paid | unpaid
    tax_percentage = Column(Numeric(5, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner = relationship("User", back_populates="invoices")
    customer = relationship("Customer", back_populates="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )
