"""
Product model - purifier models offered for sale and servicing.
"""
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4
import enum

from sqlalchemy import String, Numeric, Enum as SQLEnum, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from purifier.lib.db import Base, UTCDateTime, utcnow


class ProductStatus(str, enum.Enum):
    """Product catalogue status."""
    ACTIVE = "ACTIVE"
    COMING_SOON = "COMING_SOON"
    DISCONTINUED = "DISCONTINUED"


class Product(Base):
    """
    Product entity - price must stay positive.
    """
    __tablename__ = "products"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    custom_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(String(2000), nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[ProductStatus] = mapped_column(
        SQLEnum(ProductStatus, name="product_status"),
        nullable=False,
        default=ProductStatus.ACTIVE,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __table_args__ = (
        CheckConstraint("price > 0", name="product_price_positive"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name}, status={self.status})>"
