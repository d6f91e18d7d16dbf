"""
Services API routes.

Office users create and manage every visit. Technicians see the
AVAILABLE pool plus their own visits, claim visits from the pool and
move their own visits forward.
"""
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from purifier.api.dependencies import get_db, require_any_role, require_office
from purifier.api.middleware.error_handler import ForbiddenException
from purifier.lib.routes import UserRole
from purifier.lib.session_context import SessionContext
from purifier.models.services import ServiceStatus, ServiceType
from purifier.services.service_lifecycle import ServiceLifecycleService, grouped_by_status


# Pydantic schemas
class ServiceResponse(BaseModel):
    """Service visit."""
    id: UUID
    custom_id: str
    customer_id: UUID
    customer_custom_id: Optional[str] = None
    customer_name: str
    product_id: UUID
    product_custom_id: Optional[str] = None
    product_name: str
    order_id: Optional[UUID] = None
    order_custom_id: Optional[str] = None
    technician_id: Optional[UUID] = None
    technician_name: Optional[str] = None
    created_by: Optional[UUID] = None
    assigned_by: Optional[UUID] = None
    service_type: ServiceType
    status: ServiceStatus
    scheduled_date: date
    completed_date: Optional[datetime] = None
    notes: str = ""
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ServiceCreate(BaseModel):
    customer_id: UUID
    product_id: UUID
    scheduled_date: date
    service_type: ServiceType = ServiceType.MANUAL
    notes: str = Field("", max_length=2000)
    order_id: Optional[UUID] = Field(None, description="Order of the same customer")
    technician_id: Optional[UUID] = Field(None, description="Preselect a technician (starts ASSIGNED)")


class ServiceUpdate(BaseModel):
    status: Optional[ServiceStatus] = None
    technician_id: Optional[UUID] = None
    technician_name: Optional[str] = Field(None, max_length=255)
    scheduled_date: Optional[date] = None
    service_type: Optional[ServiceType] = None
    notes: Optional[str] = Field(None, max_length=2000)


# Router
router = APIRouter(prefix="/services", tags=["services"])


def _technician_scope(context: SessionContext) -> Optional[UUID]:
    return context.user_id if context.role == UserRole.TECHNICIAN else None


@router.get("", response_model=List[ServiceResponse])
def list_services(
    status_filter: Optional[ServiceStatus] = Query(None, alias="status", description="Filter by status"),
    technician_id: Optional[UUID] = Query(None, description="Filter by assigned technician"),
    customer_id: Optional[UUID] = Query(None),
    product_id: Optional[UUID] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_any_role),
):
    """
    List services ordered by scheduled date, latest first.

    Technicians only ever see the AVAILABLE pool and their own visits.
    """
    return ServiceLifecycleService(db).list_services(
        status=status_filter,
        technician_id=technician_id,
        customer_id=customer_id,
        product_id=product_id,
        visible_to=_technician_scope(context),
        limit=limit,
    )


@router.get("/grouped", response_model=Dict[ServiceStatus, List[ServiceResponse]])
def list_services_grouped(
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_any_role),
):
    """Visible services bucketed by status (every status key present)."""
    services = ServiceLifecycleService(db).list_services(visible_to=_technician_scope(context))
    return grouped_by_status(services)


@router.get("/{service_id}", response_model=ServiceResponse)
def get_service(
    service_id: UUID,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_any_role),
):
    service = ServiceLifecycleService(db).get_service(service_id)
    if (
        context.role == UserRole.TECHNICIAN
        and service.status != ServiceStatus.AVAILABLE
        and service.technician_id != context.user_id
    ):
        raise ForbiddenException(
            "This visit is assigned to another technician",
            details={"service_id": str(service_id)},
        )
    return service


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    payload: ServiceCreate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_office),
):
    """Create a manual or quarterly visit; AVAILABLE unless a technician is preselected."""
    return ServiceLifecycleService(db).create_service(actor=context, **payload.model_dump())


@router.patch("/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: UUID,
    payload: ServiceUpdate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_any_role),
):
    """
    Partial update. Status side effects:
    - COMPLETED stamps completed_date
    - AVAILABLE clears the technician and completed_date
    - ASSIGNED requires a technician
    """
    return ServiceLifecycleService(db).update_service(
        service_id,
        payload.model_dump(exclude_unset=True),
        actor=context,
    )
