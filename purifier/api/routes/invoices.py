"""
Invoices API routes.

Provides:
- GET /invoices: all invoices (office) or the caller's service invoices (technician)
- POST /invoices/service: technician bills a COMPLETED service
- PATCH /invoices/{id}/status, POST /invoices/{id}/share-url: office actions
- GET /public/invoices/{id}?token=: customer-facing view behind a signed token
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from purifier.api.dependencies import (
    get_db,
    require_admin,
    require_any_role,
    require_office,
    require_roles,
)
from purifier.lib.routes import UserRole
from purifier.lib.session_context import SessionContext
from purifier.models.invoices import InvoiceStatus, InvoiceType
from purifier.services.invoice_service import InvoiceService


# Pydantic schemas
class InvoiceResponse(BaseModel):
    id: UUID
    custom_id: str
    number: str
    invoice_type: InvoiceType
    order_id: Optional[UUID] = None
    order_custom_id: Optional[str] = None
    service_id: Optional[UUID] = None
    service_custom_id: Optional[str] = None
    customer_id: UUID
    customer_custom_id: Optional[str] = None
    customer_name: str
    product_id: UUID
    product_custom_id: Optional[str] = None
    product_name: str
    total_amount: float
    status: InvoiceStatus
    share_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PublicInvoiceResponse(BaseModel):
    """What the customer sees on the shared invoice page."""
    number: str
    invoice_type: InvoiceType
    customer_name: str
    product_name: str
    total_amount: float
    status: InvoiceStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class ServiceInvoiceCreate(BaseModel):
    service_id: UUID
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Amount in INR")


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


# Routers
router = APIRouter(prefix="/invoices", tags=["invoices"])
public_router = APIRouter(prefix="/public/invoices", tags=["public"])


@router.get("", response_model=List[InvoiceResponse])
def list_invoices(
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_any_role),
):
    """List invoices, newest first."""
    technician_id = context.user_id if context.role == UserRole.TECHNICIAN else None
    return InvoiceService(db).list_invoices(technician_id=technician_id)


@router.post(
    "/service",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_service_invoice(
    payload: ServiceInvoiceCreate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_roles(UserRole.TECHNICIAN)),
):
    """
    Bill a completed service.

    Raises:
        400: service not COMPLETED
        403: caller is not the assigned technician
        409: service already invoiced
    """
    return InvoiceService(db).create_service_invoice(payload.service_id, payload.amount, context)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: UUID,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_any_role),
):
    return InvoiceService(db).get_invoice_for(invoice_id, context)


@router.patch(
    "/{invoice_id}/status",
    response_model=InvoiceResponse,
    dependencies=[Depends(require_office)],
)
def update_invoice_status(invoice_id: UUID, payload: InvoiceStatusUpdate, db: Session = Depends(get_db)):
    return InvoiceService(db).update_invoice_status(invoice_id, payload.status)


@router.post(
    "/{invoice_id}/share-url",
    response_model=InvoiceResponse,
    dependencies=[Depends(require_office)],
)
def refresh_share_url(invoice_id: UUID, db: Session = Depends(get_db)):
    """Rebuild the WhatsApp share link (fresh view token)."""
    return InvoiceService(db).refresh_share_url(invoice_id)


@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_invoice(invoice_id: UUID, db: Session = Depends(get_db)):
    InvoiceService(db).delete_invoice(invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@public_router.get("/{invoice_id}", response_model=PublicInvoiceResponse)
def view_public_invoice(
    invoice_id: UUID,
    token: str = Query("", description="Signed view token from the share link"),
    db: Session = Depends(get_db),
):
    return InvoiceService(db).verify_public_access(invoice_id, token)
