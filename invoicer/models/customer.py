from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from invoicer.core.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(120), nullable=False)
    company_name = Column(String(120), nullable=False, default="")
    phone_number = Column(String(30), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")
    address = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner = relationship("User", back_populates="customers")
    invoices = relationship("Invoice", back_populates="customer")
