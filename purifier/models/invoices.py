"""
Invoice model - billing records for orders and completed services.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4
import enum

from sqlalchemy import String, Numeric, ForeignKey, Enum as SQLEnum, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from purifier.lib.db import Base, UTCDateTime, utcnow


class InvoiceType(str, enum.Enum):
    """What the invoice bills for."""
    ORDER = "ORDER"
    SERVICE = "SERVICE"


class InvoiceStatus(str, enum.Enum):
    """Invoice payment lifecycle."""
    PENDING = "PENDING"
    SENT = "SENT"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class Invoice(Base):
    """
    Invoice entity - linked to exactly one order or one service.
    The human-readable number doubles as the custom id.
    """
    __tablename__ = "invoices"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    custom_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    number: Mapped[str] = mapped_column(String(20), nullable=False)

    invoice_type: Mapped[InvoiceType] = mapped_column(
        SQLEnum(InvoiceType, name="invoice_type"),
        nullable=False,
        default=InvoiceType.ORDER,
    )

    order_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    order_custom_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    service_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("services.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    service_custom_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    customer_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    customer_custom_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    product_custom_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)

    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        SQLEnum(InvoiceStatus, name="invoice_status"),
        nullable=False,
        default=InvoiceStatus.PENDING,
        index=True,
    )
    share_url: Mapped[Optional[str]] = mapped_column(String(4000), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __table_args__ = (
        CheckConstraint(
            "(order_id IS NOT NULL AND service_id IS NULL) OR "
            "(order_id IS NULL AND service_id IS NOT NULL)",
            name="invoice_single_source",
        ),
        CheckConstraint("total_amount > 0", name="invoice_amount_positive"),
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number={self.number}, status={self.status})>"
