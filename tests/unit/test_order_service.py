"""Tests for order creation and its invoice transaction."""
import re
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from purifier.api.middleware.error_handler import NotFoundException, ValidationException
from purifier.lib.share_link import WHATSAPP_SHARE_URL
from purifier.models.invoices import Invoice, InvoiceStatus, InvoiceType
from purifier.models.orders import Order, OrderStatus
from purifier.models.services import Service
from purifier.services.order_service import OrderService
from purifier.services.service_lifecycle import ServiceLifecycleService


@pytest.fixture
def order_service(db_session):
    return OrderService(db_session)


@pytest.mark.unit
class TestCreateOrder:
    def test_total_is_price_times_quantity(self, order_service, customer, product, staff_user):
        order = order_service.create_order(customer.id, product.id, quantity=2, created_by=staff_user.id)

        assert re.fullmatch(r"ORD-\d{6}", order.custom_id)
        assert order.unit_price == Decimal("1000.00")
        assert order.total_amount == Decimal("2000.00")
        assert order.status == OrderStatus.PENDING
        assert order.created_by == staff_user.id
        assert order.customer_name == "Ravi Kumar"
        assert order.product_name == "AquaPure RO 500"

    def test_explicit_unit_price_overrides_list_price(self, order_service, customer, product):
        order = order_service.create_order(customer.id, product.id, quantity=3, unit_price="850.50")

        assert order.total_amount == Decimal("2551.50")

    def test_sub_paisa_price_rounded_before_total(self, order_service, customer, product):
        order = order_service.create_order(customer.id, product.id, quantity=3, unit_price="333.335")

        assert order.unit_price == Decimal("333.34")
        assert order.total_amount == Decimal("1000.02")
        assert order.total_amount == order.unit_price * order.quantity
        assert order.total_amount.as_tuple().exponent == -2

    def test_order_invoice_created_and_linked(self, order_service, db_session, customer, product):
        order = order_service.create_order(customer.id, product.id, quantity=2)

        invoices = db_session.query(Invoice).all()
        assert len(invoices) == 1
        invoice = invoices[0]

        assert invoice.invoice_type == InvoiceType.ORDER
        assert invoice.order_id == order.id
        assert invoice.service_id is None
        assert invoice.total_amount == Decimal("2000.00")
        assert invoice.status == InvoiceStatus.PENDING
        assert re.fullmatch(r"INV-\d{6}", invoice.number)
        assert invoice.custom_id == invoice.number
        assert invoice.share_url.startswith(WHATSAPP_SHARE_URL)

        assert order.invoice_id == invoice.id
        assert order.invoice_number == invoice.number
        assert order.invoice_status == "PENDING"

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, order_service, db_session, customer, product, quantity):
        with pytest.raises(ValidationException):
            order_service.create_order(customer.id, product.id, quantity=quantity)

        assert db_session.query(Order).count() == 0

    def test_unit_price_must_be_positive(self, order_service, customer, product):
        with pytest.raises(ValidationException):
            order_service.create_order(customer.id, product.id, quantity=1, unit_price=0)

    def test_unknown_customer(self, order_service, product):
        with pytest.raises(NotFoundException):
            order_service.create_order(uuid4(), product.id, quantity=1)

    def test_unknown_product(self, order_service, customer):
        with pytest.raises(NotFoundException):
            order_service.create_order(customer.id, uuid4(), quantity=1)

    def test_invoice_failure_rolls_back_order(self, db_session, customer, product):
        """Test a failing invoice leaves neither an order nor an invoice behind."""
        invoices = MagicMock()
        invoices.build_order_invoice.side_effect = RuntimeError("invoice store unavailable")
        order_service = OrderService(db_session, invoices=invoices)

        with pytest.raises(RuntimeError, match="invoice store unavailable"):
            order_service.create_order(customer.id, product.id, quantity=1)

        assert db_session.query(Order).count() == 0
        assert db_session.query(Invoice).count() == 0


@pytest.mark.unit
class TestOrderLifecycle:
    def test_list_filters(self, order_service, customer, product, staff_user, admin):
        mine = order_service.create_order(customer.id, product.id, 1, created_by=staff_user.id)
        order_service.create_order(customer.id, product.id, 1, created_by=admin.id)

        assert [o.id for o in order_service.list_orders(created_by=staff_user.id)] == [mine.id]
        assert len(order_service.list_orders(status=OrderStatus.PENDING)) == 2
        assert order_service.list_orders(status=OrderStatus.FULFILLED) == []

    def test_update_status(self, order_service, customer, product):
        order = order_service.create_order(customer.id, product.id, 1)

        updated = order_service.update_order_status(order.id, OrderStatus.FULFILLED)

        assert updated.status == OrderStatus.FULFILLED

    def test_delete_removes_invoice_and_unlinks_services(
        self, order_service, db_session, customer, product, today
    ):
        order = order_service.create_order(customer.id, product.id, 1)
        service = ServiceLifecycleService(db_session).create_service(
            customer.id, product.id, today, order_id=order.id
        )

        order_service.delete_order(order.id)
        db_session.expire_all()

        assert db_session.get(Order, order.id) is None
        assert db_session.query(Invoice).count() == 0
        kept = db_session.get(Service, service.id)
        assert kept is not None
        assert kept.order_id is None
        assert kept.order_custom_id is None

    def test_get_missing_order(self, order_service):
        with pytest.raises(NotFoundException):
            order_service.get_order(uuid4())
