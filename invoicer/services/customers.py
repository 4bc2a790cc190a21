from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from invoicer.core.errors import CustomerInUse, NotFound
from invoicer.models.customer import Customer
from invoicer.models.invoice import Invoice
from invoicer.services.ownership import log_if_foreign

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ("name", "company_name", "phone_number", "email", "address")


def find_customer(db: Session, user_id: int, customer_id: int) -> Customer | None:
    return (
        db.query(Customer)
        .filter(Customer.id == customer_id, Customer.user_id == user_id)
        .first()
    )


def get_customer(db: Session, user_id: int, customer_id: int) -> Customer:
    customer = find_customer(db, user_id, customer_id)
    if customer is None:
        log_if_foreign(db, Customer, customer_id, user_id)
        raise NotFound("Customer not found")
    return customer


def list_customers(db: Session, user_id: int) -> List[Customer]:
    return (
        db.query(Customer)
        .filter(Customer.user_id == user_id)
        .order_by(Customer.name, Customer.id)
        .all()
    )


def create_customer(db: Session, user_id: int, data: Dict[str, Any]) -> Customer:
    customer = Customer(user_id=user_id, **{key: data[key] for key in CUSTOMER_FIELDS if key in data})
    db.add(customer)
    db.commit()
    db.refresh(customer)
    logger.info("Customer created id=%s user_id=%s", customer.id, user_id)
    return customer


def update_customer(db: Session, user_id: int, customer_id: int, changes: Dict[str, Any]) -> Customer:
    customer = get_customer(db, user_id, customer_id)
    for key in CUSTOMER_FIELDS:
        if key in changes and changes[key] is not None:
            setattr(customer, key, changes[key])
    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, user_id: int, customer_id: int) -> None:
    customer = get_customer(db, user_id, customer_id)
    has_invoices = (
        db.query(Invoice.id)
        .filter(Invoice.customer_id == customer.id, Invoice.user_id == user_id)
        .first()
        is not None
    )
    if has_invoices:
        raise CustomerInUse()
    db.delete(customer)
    db.commit()
    logger.info("Customer deleted id=%s user_id=%s", customer_id, user_id)
