"""
Orders API routes.

POST /orders creates the order together with its ORDER invoice and returns
the order already linked to that invoice.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from purifier.api.dependencies import get_db, require_admin, require_office
from purifier.lib.session_context import SessionContext
from purifier.models.orders import OrderStatus
from purifier.services.order_service import OrderService


# Pydantic schemas
class OrderResponse(BaseModel):
    id: UUID
    custom_id: str
    customer_id: UUID
    customer_custom_id: Optional[str] = None
    customer_name: str
    product_id: UUID
    product_custom_id: Optional[str] = None
    product_name: str
    quantity: int
    unit_price: float
    total_amount: float
    status: OrderStatus
    created_by: Optional[UUID] = None
    invoice_id: Optional[UUID] = None
    invoice_number: Optional[str] = None
    invoice_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrderCreate(BaseModel):
    customer_id: UUID
    product_id: UUID
    quantity: int = Field(..., ge=1)
    unit_price: Optional[Decimal] = Field(
        None, gt=0, decimal_places=2, description="Defaults to the product price"
    )


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


# Router
router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=List[OrderResponse])
def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    mine: bool = Query(False, description="Only orders created by the caller"),
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_office),
):
    """List orders, newest first."""
    return OrderService(db).list_orders(
        status=status_filter,
        created_by=context.user_id if mine else None,
    )


@router.get("/{order_id}", response_model=OrderResponse, dependencies=[Depends(require_office)])
def get_order(order_id: UUID, db: Session = Depends(get_db)):
    return OrderService(db).get_order(order_id)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_office),
):
    """
    Create an order and its invoice.

    total_amount = unit_price * quantity; the invoice starts PENDING with a
    WhatsApp share link.
    """
    return OrderService(db).create_order(
        customer_id=payload.customer_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
        unit_price=payload.unit_price,
        created_by=context.user_id,
    )


@router.patch("/{order_id}", response_model=OrderResponse, dependencies=[Depends(require_office)])
def update_order_status(order_id: UUID, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    return OrderService(db).update_order_status(order_id, payload.status)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_order(order_id: UUID, db: Session = Depends(get_db)):
    """Delete an order and its ORDER invoice."""
    OrderService(db).delete_order(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
