"""
Staff Routes - account provisioning for STAFF and TECHNICIAN users.

Provides:
- GET/POST /staff, PATCH /staff/{id}: admin-only account management
- POST /staff/{id}/reset-password: issue a new generated password
- GET /technicians: technician availability (active assignment counts)

Generated passwords are returned once, in the create and reset responses.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from purifier.api.dependencies import get_db, require_admin, require_office
from purifier.lib.routes import UserRole
from purifier.services.staff_service import StaffService


# Response models
class StaffResponse(BaseModel):
    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class StaffCredentialsResponse(BaseModel):
    """Account plus the generated password, shown once."""
    staff: StaffResponse
    password: str = Field(description="Generated password; not retrievable later")


class TechnicianAvailability(BaseModel):
    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    is_active: bool
    active_assignments: int = Field(description="ASSIGNED + IN_PROGRESS visits")


# Request models
class StaffCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str
    phone: Optional[str] = Field(None, max_length=30)
    role: UserRole = Field(..., description="STAFF or TECHNICIAN")
    is_active: bool = True


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


router = APIRouter(prefix="/staff", tags=["staff"], dependencies=[Depends(require_admin)])
technicians_router = APIRouter(prefix="/technicians", tags=["staff"])


@router.get("", response_model=List[StaffResponse])
def list_staff(
    role: Optional[UserRole] = Query(None, description="STAFF or TECHNICIAN"),
    db: Session = Depends(get_db),
):
    """List staff and technicians ordered by name."""
    return StaffService(db).list_staff(role=role)


@router.post("", response_model=StaffCredentialsResponse, status_code=status.HTTP_201_CREATED)
def create_staff(payload: StaffCreate, db: Session = Depends(get_db)):
    """
    Provision an account.

    Raises:
        400: auth/invalid-email
        409: auth/email-already-in-use (any existing user, any role)
        422: role is not STAFF or TECHNICIAN
    """
    user, password = StaffService(db).create_staff(**payload.model_dump())
    return StaffCredentialsResponse(staff=StaffResponse.model_validate(user), password=password)


@router.patch("/{user_id}", response_model=StaffResponse)
def update_staff(user_id: UUID, payload: StaffUpdate, db: Session = Depends(get_db)):
    return StaffService(db).update_staff(user_id, payload.model_dump(exclude_unset=True))


@router.post("/{user_id}/reset-password", response_model=StaffCredentialsResponse)
def reset_staff_password(user_id: UUID, db: Session = Depends(get_db)):
    user, password = StaffService(db).reset_staff_password(user_id)
    return StaffCredentialsResponse(staff=StaffResponse.model_validate(user), password=password)


@technicians_router.get(
    "",
    response_model=List[TechnicianAvailability],
    dependencies=[Depends(require_office)],
)
def list_technicians(
    active_only: bool = Query(False, description="Only active technicians"),
    db: Session = Depends(get_db),
):
    """Technicians with their current workload, for assignment pickers."""
    return [
        TechnicianAvailability(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            is_active=user.is_active,
            active_assignments=count,
        )
        for user, count in StaffService(db).list_technicians(active_only=active_only)
    ]
