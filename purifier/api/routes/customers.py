"""
Customers API routes.

Office users (ADMIN, STAFF) maintain the customer directory. Customers are
never deleted; they are deactivated instead.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from purifier.api.dependencies import get_db, require_office
from purifier.services.customer_service import CustomerService


# Pydantic schemas
class CustomerResponse(BaseModel):
    id: UUID
    custom_id: str
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., description="Contact email", examples=["asha@example.com"])
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=500)
    is_active: bool = True


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None


# Router
router = APIRouter(
    prefix="/customers",
    tags=["customers"],
    dependencies=[Depends(require_office)],
)


@router.get("", response_model=List[CustomerResponse])
def list_customers(
    active_only: bool = Query(False, description="Show only active customers"),
    db: Session = Depends(get_db),
):
    """List customers ordered by name."""
    return CustomerService(db).list_customers(active_only=active_only)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: UUID, db: Session = Depends(get_db)):
    return CustomerService(db).get_customer(customer_id)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    return CustomerService(db).create_customer(**payload.model_dump())


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(customer_id: UUID, payload: CustomerUpdate, db: Session = Depends(get_db)):
    return CustomerService(db).update_customer(customer_id, payload.model_dump(exclude_unset=True))
