from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from invoicer.core.database import get_db
from invoicer.deps import get_current_user_id
from invoicer.schemas.customers import CustomerCreate, CustomerRead, CustomerUpdate
from invoicer.services import customers as customer_service

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("", response_model=List[CustomerRead])
def list_customers(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return customer_service.list_customers(db, user_id)


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return customer_service.create_customer(db, user_id, payload.model_dump())


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(
    customer_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return customer_service.get_customer(db, user_id, customer_id)


@router.put("/{customer_id}", response_model=CustomerRead)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return customer_service.update_customer(db, user_id, customer_id, payload.model_dump(exclude_unset=True))


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    customer_service.delete_customer(db, user_id, customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
