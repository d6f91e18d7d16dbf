"""
Service model - scheduled maintenance or installation visits.
"""
from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4
import enum

from sqlalchemy import String, Date, ForeignKey, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from purifier.lib.db import Base, UTCDateTime, utcnow


class ServiceStatus(str, enum.Enum):
    """Service status state machine."""
    AVAILABLE = "AVAILABLE"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ServiceType(str, enum.Enum):
    """Ad-hoc visit or part of a quarterly maintenance plan."""
    MANUAL = "MANUAL"
    QUARTERLY = "QUARTERLY"


class Service(Base):
    """
    Service entity.
    State machine: available → assigned → in_progress → completed, with a
    reset back to available that clears the technician and completion date.
    """
    __tablename__ = "services"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    custom_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)

    customer_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_custom_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)

    product_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    product_custom_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)

    order_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("orders.id", ondelete="SET NULL"),
        nullable=True,
    )
    order_custom_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    technician_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    technician_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # UIDs of the staff/admin users who created the visit and assigned the technician
    created_by: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)
    assigned_by: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)

    service_type: Mapped[ServiceType] = mapped_column(
        SQLEnum(ServiceType, name="service_type"),
        nullable=False,
        default=ServiceType.MANUAL,
    )
    status: Mapped[ServiceStatus] = mapped_column(
        SQLEnum(ServiceStatus, name="service_status"),
        nullable=False,
        default=ServiceStatus.AVAILABLE,
        index=True,
    )

    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    completed_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    notes: Mapped[str] = mapped_column(String(2000), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, status={self.status}, technician_id={self.technician_id})>"
