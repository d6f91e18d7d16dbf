"""
Service visit lifecycle.

Statuses: AVAILABLE -> ASSIGNED -> IN_PROGRESS -> COMPLETED, plus a reset to
AVAILABLE from anywhere. Any status may be written from any state; the
side effects below always apply:

- COMPLETED stamps completed_date with the current UTC time
- AVAILABLE clears technician_id, technician_name and completed_date
- ASSIGNED needs a TECHNICIAN user; technician_name defaults to theirs
- Setting a technician on an AVAILABLE visit without a status assigns it

Technicians may only claim AVAILABLE visits for themselves and move their
own visits to IN_PROGRESS, COMPLETED or back to AVAILABLE.
"""
from collections import OrderedDict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from purifier.api.middleware.error_handler import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from purifier.lib.custom_id import SERVICE_PREFIX, allocate_custom_id
from purifier.lib.db import utcnow
from purifier.lib.logging import get_logger
from purifier.lib.routes import UserRole
from purifier.lib.session_context import SessionContext, actor_id
from purifier.models.customers import Customer
from purifier.models.orders import Order
from purifier.models.products import Product
from purifier.models.services import Service, ServiceStatus, ServiceType
from purifier.models.users import User


logger = get_logger(__name__)

EDITABLE_FIELDS = (
    "status",
    "technician_id",
    "technician_name",
    "scheduled_date",
    "service_type",
    "notes",
)

TECHNICIAN_EDITABLE_FIELDS = ("status", "technician_id", "notes")

TECHNICIAN_OWN_STATUSES = (
    ServiceStatus.IN_PROGRESS,
    ServiceStatus.COMPLETED,
    ServiceStatus.AVAILABLE,
)


def grouped_by_status(services: Iterable[Service]) -> "OrderedDict[ServiceStatus, List[Service]]":
    """Bucket services by status; every status is present, in lifecycle order."""
    groups: "OrderedDict[ServiceStatus, List[Service]]" = OrderedDict(
        (status, []) for status in ServiceStatus
    )
    for service in services:
        groups[service.status].append(service)
    return groups


class ServiceLifecycleService:
    """Create, list and move service visits through their statuses."""

    def __init__(self, session: Session):
        self.session = session

    def list_services(
        self,
        status: Optional[ServiceStatus] = None,
        technician_id: Optional[UUID] = None,
        customer_id: Optional[UUID] = None,
        product_id: Optional[UUID] = None,
        visible_to: Optional[UUID] = None,
        limit: Optional[int] = None,
    ) -> List[Service]:
        """
        Services ordered by scheduled date, latest first.

        `visible_to` restricts the result to the AVAILABLE pool plus the
        visits assigned to that technician.
        """
        stmt = select(Service)
        if status:
            stmt = stmt.where(Service.status == status)
        if technician_id:
            stmt = stmt.where(Service.technician_id == technician_id)
        if customer_id:
            stmt = stmt.where(Service.customer_id == customer_id)
        if product_id:
            stmt = stmt.where(Service.product_id == product_id)
        if visible_to:
            stmt = stmt.where(
                or_(
                    Service.status == ServiceStatus.AVAILABLE,
                    Service.technician_id == visible_to,
                )
            )
        stmt = stmt.order_by(Service.scheduled_date.desc(), Service.created_at.desc())
        if limit:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def get_service(self, service_id: UUID) -> Service:
        service = self.session.get(Service, service_id)
        if service is None:
            raise NotFoundException("Service", str(service_id))
        return service

    def _get_technician(self, technician_id: UUID) -> User:
        technician = self.session.get(User, technician_id)
        if technician is None or technician.role != UserRole.TECHNICIAN:
            raise ValidationException(
                "Technician not found",
                errors={"technician_id": "must reference a technician"},
            )
        return technician

    def create_service(
        self,
        customer_id: UUID,
        product_id: UUID,
        scheduled_date: date,
        service_type: ServiceType = ServiceType.MANUAL,
        notes: str = "",
        order_id: Optional[UUID] = None,
        technician_id: Optional[UUID] = None,
        actor: Optional[SessionContext] = None,
    ) -> Service:
        """
        Create a service visit.

        Starts AVAILABLE, or ASSIGNED when a technician is preselected.

        Raises:
            NotFoundException: Customer, product or order does not exist
            BadRequestException: Order belongs to another customer
            ValidationException: technician_id is not a technician
        """
        customer = self.session.get(Customer, customer_id)
        if customer is None:
            raise NotFoundException("Customer", str(customer_id))
        product = self.session.get(Product, product_id)
        if product is None:
            raise NotFoundException("Product", str(product_id))

        order = None
        if order_id is not None:
            order = self.session.get(Order, order_id)
            if order is None:
                raise NotFoundException("Order", str(order_id))
            if order.customer_id != customer.id:
                raise BadRequestException(
                    "Order belongs to a different customer",
                    details={"order_id": str(order_id), "customer_id": str(customer_id)},
                )

        service = Service(
            custom_id=allocate_custom_id(self.session, Service, SERVICE_PREFIX),
            customer_id=customer.id,
            customer_custom_id=customer.custom_id,
            customer_name=customer.name,
            product_id=product.id,
            product_custom_id=product.custom_id,
            product_name=product.name,
            order_id=order.id if order else None,
            order_custom_id=order.custom_id if order else None,
            service_type=service_type,
            status=ServiceStatus.AVAILABLE,
            scheduled_date=scheduled_date,
            notes=notes or "",
            created_by=actor_id(actor),
        )

        if technician_id is not None:
            technician = self._get_technician(technician_id)
            service.status = ServiceStatus.ASSIGNED
            service.technician_id = technician.id
            service.technician_name = technician.name
            service.assigned_by = actor_id(actor)

        self.session.add(service)
        self.session.commit()

        logger.info(
            "Service created",
            extra={
                "service_id": str(service.id),
                "custom_id": service.custom_id,
                "status": service.status.value,
                "service_type": service.service_type.value,
            },
        )
        return service

    def _check_technician_update(
        self,
        service: Service,
        updates: Dict[str, Any],
        actor: SessionContext,
    ) -> Dict[str, Any]:
        """Restrict a technician's update to claiming or progressing their own visits."""
        updates = {k: v for k, v in updates.items() if k in TECHNICIAN_EDITABLE_FIELDS}

        requested_technician = updates.get("technician_id")
        if requested_technician is not None and requested_technician != actor.user_id:
            raise ForbiddenException("Technicians can only assign visits to themselves")

        status = updates.get("status")

        if service.technician_id == actor.user_id:
            if status is not None and status != service.status and status not in TECHNICIAN_OWN_STATUSES:
                raise ForbiddenException(
                    f"Technicians cannot move a visit to {status.value}",
                    details={"service_id": str(service.id)},
                )
            return updates

        if service.status == ServiceStatus.AVAILABLE and service.technician_id is None:
            if status != ServiceStatus.ASSIGNED:
                raise ForbiddenException(
                    "Claim the visit before updating it",
                    details={"service_id": str(service.id)},
                )
            updates["technician_id"] = actor.user_id
            return updates

        raise ForbiddenException(
            "This visit is assigned to another technician",
            details={"service_id": str(service.id)},
        )

    def update_service(
        self,
        service_id: UUID,
        updates: Dict[str, Any],
        actor: Optional[SessionContext] = None,
    ) -> Service:
        """
        Apply a partial update.

        Args:
            service_id: Service to update
            updates: Field -> value; unknown fields are ignored
            actor: Acting user; technicians get the restricted rules

        Returns:
            Updated service
        """
        service = self.get_service(service_id)

        if actor is not None and actor.role == UserRole.TECHNICIAN:
            updates = self._check_technician_update(service, updates, actor)

        updates = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}
        status = updates.pop("status", None)
        previous_status = service.status

        technician_id = updates.pop("technician_id", None)
        technician_name = updates.pop("technician_name", None)

        # Validate before touching the row
        technician = self._get_technician(technician_id) if technician_id is not None else None
        # A technician on a pool visit takes it out of the pool
        if technician is not None and status is None and service.status == ServiceStatus.AVAILABLE:
            status = ServiceStatus.ASSIGNED
        if status ==ServiceStatus.ASSIGNED and technician is None and service.technician_id is None:
            raise ValidationException(
                "A technician is required to assign a service",
                errors={"technician_id": "required when status is ASSIGNED"},
            )

        for field, value in updates.items():
            setattr(service, field, value)

        if technician is not None:
            service.technician_id = technician.id
            service.technician_name = technician_name or technician.name
            service.assigned_by = actor_id(actor)
        elif technician_name:
            service.technician_name = technician_name

        if status is not None:
            service.status = status

            if status == ServiceStatus.ASSIGNED:
                if not service.technician_name:
                    service.technician_name = self._get_technician(service.technician_id).name
            elif status == ServiceStatus.COMPLETED:
                service.completed_date = utcnow()
            elif status == ServiceStatus.AVAILABLE:
                service.technician_id = None
                service.technician_name = None
                service.completed_date = None

        self.session.commit()

        if status is not None and status != previous_status:
            logger.info(
                "Service status changed",
                extra={
                    "service_id": str(service.id),
                    "from_status": previous_status.value,
                    "to_status": status.value,
                    "actor_id": str(actor_id(actor)) if actor else None,
                },
            )
        return service
