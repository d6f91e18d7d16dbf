"""Invoice service for order and service billing.

Two ways an invoice comes into existence:
1. Automatically, inside the order-creation transaction (type ORDER)
2. Manually by the assigned technician once a service is COMPLETED (type SERVICE)

Every invoice gets a PREFIX-XXXXXX number and a WhatsApp share link.
"""
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from purifier.api.middleware.error_handler import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from purifier.lib.custom_id import INVOICE_PREFIX, allocate_custom_id
from purifier.lib.logging import get_logger
from purifier.lib.money import to_money
from purifier.lib.routes import UserRole
from purifier.lib.session_context import SessionContext
from purifier.lib.share_link import InvoiceShareLinkGenerator, get_share_link_generator
from purifier.models.invoices import Invoice, InvoiceStatus, InvoiceType
from purifier.models.orders import Order
from purifier.models.services import Service, ServiceStatus


logger = get_logger(__name__)


class InvoiceService:
    """Invoice creation, status changes and share links."""

    def __init__(
        self,
        session: Session,
        share_links: Optional[InvoiceShareLinkGenerator] = None,
    ):
        self.session = session
        self.share_links = share_links or get_share_link_generator()

    def list_invoices(self, technician_id: Optional[UUID] = None) -> List[Invoice]:
        """
        Newest first. With `technician_id`, only SERVICE invoices for
        services assigned to that technician.
        """
        stmt = select(Invoice)
        if technician_id is not None:
            technician_services = select(Service.id).where(Service.technician_id == technician_id)
            stmt = stmt.where(Invoice.service_id.in_(technician_services))
        stmt = stmt.order_by(Invoice.created_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    def get_invoice(self, invoice_id: UUID) -> Invoice:
        invoice = self.session.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundException("Invoice", str(invoice_id))
        return invoice

    def get_invoice_for(self, invoice_id: UUID, actor: SessionContext) -> Invoice:
        """Like get_invoice, but technicians only reach invoices of their own services."""
        invoice = self.get_invoice(invoice_id)
        if actor.role == UserRole.TECHNICIAN:
            service = self.session.get(Service, invoice.service_id) if invoice.service_id else None
            if service is None or service.technician_id != actor.user_id:
                raise ForbiddenException(
                    "Invoice belongs to another technician's service",
                    details={"invoice_id": str(invoice_id)},
                )
        return invoice

    def _new_invoice(self, **fields) -> Invoice:
        # Id is assigned up front so the share link can reference it
        number = allocate_custom_id(self.session, Invoice, INVOICE_PREFIX)
        invoice = Invoice(
            id=uuid4(),
            custom_id=number,
            number=number,
            status=InvoiceStatus.PENDING,
            **fields,
        )
        invoice.share_url = self._share_url(invoice)
        self.session.add(invoice)
        return invoice

    def _share_url(self, invoice: Invoice) -> str:
        return self.share_links.build_share_url(
            invoice_id=str(invoice.id),
            number=invoice.number,
            customer_name=invoice.customer_name,
            product_name=invoice.product_name,
            total_amount=invoice.total_amount,
        )

    def build_order_invoice(self, order: Order) -> Invoice:
        """
        Stage the ORDER invoice for `order` in the current transaction.
        The caller commits.
        """
        return self._new_invoice(
            invoice_type=InvoiceType.ORDER,
            order_id=order.id,
            order_custom_id=order.custom_id,
            customer_id=order.customer_id,
            customer_custom_id=order.customer_custom_id,
            customer_name=order.customer_name,
            product_id=order.product_id,
            product_custom_id=order.product_custom_id,
            product_name=order.product_name,
            total_amount=order.total_amount,
        )

    def create_service_invoice(
        self,
        service_id: UUID,
        amount,
        actor: SessionContext,
    ) -> Invoice:
        """
        Bill a completed service.

        Raises:
            ForbiddenException: actor is not the technician assigned to the service
            BadRequestException: service is not COMPLETED
            ValidationException: amount is not positive
            ConflictException: the service already has an invoice
        """
        service = self.session.get(Service, service_id)
        if service is None:
            raise NotFoundException("Service", str(service_id))

        if actor.role != UserRole.TECHNICIAN:
            raise ForbiddenException("Only technicians can invoice a service")
        if service.technician_id != actor.user_id:
            raise ForbiddenException(
                "Only the assigned technician can invoice this service",
                details={"service_id": str(service_id)},
            )
        if service.status != ServiceStatus.COMPLETED:
            raise BadRequestException(
                "Service must be COMPLETED before it can be invoiced",
                details={"service_id": str(service_id), "status": service.status.value},
            )

        amount = to_money(amount)
        if amount <= 0:
            raise ValidationException("Amount must be greater than zero", errors={"amount": "must be > 0"})

        existing = self.session.execute(
            select(Invoice.id).where(Invoice.service_id == service_id)
        ).first()
        if existing is not None:
            raise ConflictException(
                "Service already has an invoice",
                details={"service_id": str(service_id), "invoice_id": str(existing[0])},
            )

        invoice = self._new_invoice(
            invoice_type=InvoiceType.SERVICE,
            service_id=service.id,
            service_custom_id=service.custom_id,
            customer_id=service.customer_id,
            customer_custom_id=service.customer_custom_id,
            customer_name=service.customer_name,
            product_id=service.product_id,
            product_custom_id=service.product_custom_id,
            product_name=service.product_name,
            total_amount=amount,
        )
        self.session.commit()

        logger.info(
            "Service invoice created",
            extra={
                "invoice_id": str(invoice.id),
                "service_id": str(service_id),
                "technician_id": str(actor.user_id),
            },
        )
        return invoice

    def update_invoice_status(self, invoice_id: UUID, status: InvoiceStatus) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        invoice.status = status

        # Keep the mirrored status on the order in step
        if invoice.order_id is not None:
            order = self.session.get(Order, invoice.order_id)
            if order is not None and order.invoice_id == invoice.id:
                order.invoice_status = status.value

        self.session.commit()
        return invoice

    def refresh_share_url(self, invoice_id: UUID) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        invoice.share_url = self._share_url(invoice)
        self.session.commit()
        return invoice

    def delete_invoice(self, invoice_id: UUID) -> None:
        invoice = self.get_invoice(invoice_id)

        if invoice.order_id is not None:
            order = self.session.get(Order, invoice.order_id)
            if order is not None and order.invoice_id == invoice.id:
                order.invoice_id = None
                order.invoice_number = None
                order.invoice_status = None

        self.session.delete(invoice)
        self.session.commit()
        logger.info("Invoice deleted", extra={"invoice_id": str(invoice_id)})

    def verify_public_access(self, invoice_id: UUID, token: str) -> Invoice:
        """Invoice for the public view page, gated by its signed share token."""
        if not token or not self.share_links.verify_view_token(token, str(invoice_id)):
            raise ForbiddenException("Invalid or expired invoice link")
        return self.get_invoice(invoice_id)
