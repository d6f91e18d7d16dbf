"""Customer records: listing, lookup, creation and edits."""
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from purifier.api.middleware.error_handler import BadRequestException, NotFoundException
from purifier.lib.custom_id import CUSTOMER_PREFIX, allocate_custom_id
from purifier.lib.logging import get_logger
from purifier.models.customers import Customer
from purifier.services.auth_service import is_valid_email


logger = get_logger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "address", "is_active")


def validate_email(email: str) -> str:
    """Basic shape check; returns the trimmed address."""
    email = (email or "").strip()
    if not is_valid_email(email):
        raise BadRequestException("Invalid email address", details={"field": "email"})
    return email


class CustomerService:
    """CRUD over the customers table (no delete; deactivate instead)."""

    def __init__(self, session: Session):
        self.session = session

    def list_customers(self, active_only: bool = False) -> List[Customer]:
        stmt = select(Customer)
        if active_only:
            stmt = stmt.where(Customer.is_active.is_(True))
        stmt = stmt.order_by(Customer.name.asc())
        return list(self.session.execute(stmt).scalars().all())

    def get_customer(self, customer_id: UUID) -> Customer:
        customer = self.session.get(Customer, customer_id)
        if customer is None:
            raise NotFoundException("Customer", str(customer_id))
        return customer

    def create_customer(
        self,
        name: str,
        email: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        is_active: bool = True,
    ) -> Customer:
        customer = Customer(
            custom_id=allocate_custom_id(self.session, Customer, CUSTOMER_PREFIX),
            name=name.strip(),
            email=validate_email(email),
            phone=phone,
            address=address,
            is_active=is_active,
        )
        self.session.add(customer)
        self.session.commit()

        logger.info(
            "Customer created",
            extra={"customer_id": str(customer.id), "custom_id": customer.custom_id},
        )
        return customer

    def update_customer(self, customer_id: UUID, updates: Dict[str, Any]) -> Customer:
        customer = self.get_customer(customer_id)

        for field, value in updates.items():
            if field not in EDITABLE_FIELDS:
                continue
            if field == "email":
                value = validate_email(value)
            setattr(customer, field, value)

        self.session.commit()
        return customer
