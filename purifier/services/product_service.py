"""Product catalogue management."""
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from purifier.api.middleware.error_handler import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from purifier.lib.custom_id import PRODUCT_PREFIX, allocate_custom_id
from purifier.lib.logging import get_logger
from purifier.lib.money import to_money
from purifier.models.orders import Order
from purifier.models.products import Product, ProductStatus
from purifier.models.services import Service


logger = get_logger(__name__)

EDITABLE_FIELDS = ("name", "model", "description", "price", "status")


def _check_price(price) -> Decimal:
    price = to_money(price)
    if price <= 0:
        raise ValidationException("Price must be greater than zero", errors={"price": "must be > 0"})
    return price


class ProductService:
    """CRUD over the products table."""

    def __init__(self, session: Session):
        self.session = session

    def list_products(self, status: Optional[ProductStatus] = None) -> List[Product]:
        stmt = select(Product)
        if status:
            stmt = stmt.where(Product.status == status)
        stmt = stmt.order_by(Product.created_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    def get_product(self, product_id: UUID) -> Product:
        product = self.session.get(Product, product_id)
        if product is None:
            raise NotFoundException("Product", str(product_id))
        return product

    def create_product(
        self,
        name: str,
        price,
        model: str = "",
        description: str = "",
        status: ProductStatus = ProductStatus.ACTIVE,
    ) -> Product:
        product = Product(
            custom_id=allocate_custom_id(self.session, Product, PRODUCT_PREFIX),
            name=name.strip(),
            model=model,
            description=description,
            price=_check_price(price),
            status=status,
        )
        self.session.add(product)
        self.session.commit()

        logger.info(
            "Product created",
            extra={"product_id": str(product.id), "custom_id": product.custom_id},
        )
        return product

    def update_product(self, product_id: UUID, updates: Dict[str, Any]) -> Product:
        product = self.get_product(product_id)

        for field, value in updates.items():
            if field not in EDITABLE_FIELDS:
                continue
            if field == "price":
                value = _check_price(value)
            setattr(product, field, value)

        self.session.commit()
        return product

    def delete_product(self, product_id: UUID) -> None:
        product = self.get_product(product_id)

        for model in (Order, Service):
            in_use = self.session.execute(
                select(model.id).where(model.product_id == product_id).limit(1)
            ).first()
            if in_use is not None:
                raise ConflictException(
                    "Product is referenced by existing orders or services; "
                    "mark it DISCONTINUED instead",
                    details={"product_id": str(product_id)},
                )

        self.session.delete(product)
        self.session.commit()
        logger.info("Product deleted", extra={"product_id": str(product_id)})
