"""
Order service.

Creating an order also creates its ORDER invoice. Both rows and the
invoice back-reference on the order are written in a single transaction.
"""
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from purifier.api.middleware.error_handler import NotFoundException, ValidationException
from purifier.lib.custom_id import ORDER_PREFIX, allocate_custom_id
from purifier.lib.logging import get_logger
from purifier.lib.money import to_money
from purifier.models.customers import Customer
from purifier.models.invoices import Invoice
from purifier.models.orders import Order, OrderStatus
from purifier.models.products import Product
from purifier.models.services import Service
from purifier.services.invoice_service import InvoiceService


logger = get_logger(__name__)


class OrderService:
    """Order creation and lifecycle."""

    def __init__(self, session: Session, invoices: Optional[InvoiceService] = None):
        self.session = session
        self.invoices = invoices or InvoiceService(session)

    def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        created_by: Optional[UUID] = None,
    ) -> List[Order]:
        stmt = select(Order)
        if status:
            stmt = stmt.where(Order.status == status)
        if created_by:
            stmt = stmt.where(Order.created_by == created_by)
        stmt = stmt.order_by(Order.created_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    def get_order(self, order_id: UUID) -> Order:
        order = self.session.get(Order, order_id)
        if order is None:
            raise NotFoundException("Order", str(order_id))
        return order

    def create_order(
        self,
        customer_id: UUID,
        product_id: UUID,
        quantity: int,
        unit_price=None,
        created_by: Optional[UUID] = None,
    ) -> Order:
        """
        Create an order and its invoice.

        Args:
            customer_id: Customer placing the order
            product_id: Product being ordered
            quantity: Units, at least 1
            unit_price: Price per unit; defaults to the product's list price
            created_by: Acting staff/admin user id

        Returns:
            The order, already patched with invoice id, number and status

        Raises:
            NotFoundException: Customer or product does not exist
            ValidationException: Quantity or price out of range
        """
        customer = self.session.get(Customer, customer_id)
        if customer is None:
            raise NotFoundException("Customer", str(customer_id))
        product = self.session.get(Product, product_id)
        if product is None:
            raise NotFoundException("Product", str(product_id))

        if quantity < 1:
            raise ValidationException("Quantity must be at least 1", errors={"quantity": "must be >= 1"})
        price = to_money(unit_price if unit_price is not None else product.price)
        if price <= 0:
            raise ValidationException("Unit price must be greater than zero", errors={"unit_price": "must be > 0"})

        try:
            order = Order(
                id=uuid4(),
                custom_id=allocate_custom_id(self.session, Order, ORDER_PREFIX),
                customer_id=customer.id,
                customer_custom_id=customer.custom_id,
                customer_name=customer.name,
                product_id=product.id,
                product_custom_id=product.custom_id,
                product_name=product.name,
                quantity=quantity,
                unit_price=price,
                total_amount=to_money(price * quantity),
                status=OrderStatus.PENDING,
                created_by=created_by,
            )
            self.session.add(order)
            self.session.flush()

            invoice = self.invoices.build_order_invoice(order)

            order.invoice_id = invoice.id
            order.invoice_number = invoice.number
            order.invoice_status = invoice.status.value

            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.error(
                "Order creation rolled back",
                extra={"customer_id": str(customer_id), "product_id": str(product_id)},
                exc_info=True,
            )
            raise

        logger.info(
            "Order created",
            extra={
                "order_id": str(order.id),
                "custom_id": order.custom_id,
                "invoice_id": str(order.invoice_id),
                "total_amount": str(order.total_amount),
            },
        )
        return order

    def update_order_status(self, order_id: UUID, status: OrderStatus) -> Order:
        order = self.get_order(order_id)
        order.status = status
        self.session.commit()
        return order

    def delete_order(self, order_id: UUID) -> None:
        """Delete an order with its ORDER invoice; linked services are kept."""
        order = self.get_order(order_id)

        invoices = self.session.execute(
            select(Invoice).where(Invoice.order_id == order_id)
        ).scalars().all()
        for invoice in invoices:
            self.session.delete(invoice)

        self.session.execute(
            update(Service)
            .where(Service.order_id == order_id)
            .values(order_id=None, order_custom_id=None)
        )

        self.session.delete(order)
        self.session.commit()
        logger.info("Order deleted", extra={"order_id": str(order_id)})
