from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from invoicer.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    phone_number = Column(String(30), nullable=False, default="")
    name = Column(String(120), nullable=False, default="")

    # base32, written once at signup
    two_factor_secret = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    customers = relationship("Customer", back_populates="owner")
    invoices = relationship("Invoice", back_populates="owner")
