"""
Order model - a customer's purchase of a product.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4
import enum

from sqlalchemy import (
    String,
    Integer,
    Numeric,
    ForeignKey,
    Enum as SQLEnum,
    CheckConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from purifier.lib.db import Base, UTCDateTime, utcnow


class OrderStatus(str, enum.Enum):
    """Order status."""
    PENDING = "PENDING"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"


class Order(Base):
    """
    Order entity. total_amount = unit_price * quantity.
    Exactly one ORDER invoice is created together with the order; its
    id, number and status are mirrored onto the order row.
    """
    __tablename__ = "orders"

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

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus, name="order_status"),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )

    # UID of the staff/admin user who created the order
    created_by: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)

    invoice_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)
    invoice_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    invoice_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="order_quantity_positive"),
        CheckConstraint("unit_price > 0", name="order_unit_price_positive"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, status={self.status}, total={self.total_amount})>"
