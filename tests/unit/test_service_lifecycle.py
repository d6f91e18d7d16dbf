"""Tests for service visit creation and status transitions."""
import re
from datetime import timedelta
from uuid import uuid4

import pytest

from purifier.api.middleware.error_handler import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from purifier.lib.db import utcnow
from purifier.lib.session_context import SessionContext
from purifier.models.services import ServiceStatus, ServiceType
from purifier.services.customer_service import CustomerService
from purifier.services.order_service import OrderService
from purifier.services.service_lifecycle import ServiceLifecycleService, grouped_by_status


@pytest.fixture
def lifecycle(db_session):
    return ServiceLifecycleService(db_session)


@pytest.fixture
def available_service(lifecycle, customer, product, today, staff_context):
    return lifecycle.create_service(customer.id, product.id, today, actor=staff_context)


@pytest.fixture
def assigned_service(lifecycle, customer, product, today, technician, staff_context):
    return lifecycle.create_service(
        customer.id, product.id, today, technician_id=technician.id, actor=staff_context
    )


@pytest.mark.unit
class TestCreateService:
    def test_starts_available(self, available_service, staff_user):
        assert re.fullmatch(r"SRV-\d{6}", available_service.custom_id)
        assert available_service.status == ServiceStatus.AVAILABLE
        assert available_service.service_type == ServiceType.MANUAL
        assert available_service.technician_id is None
        assert available_service.created_by == staff_user.id
        assert available_service.customer_name == "Ravi Kumar"

    def test_preselected_technician_assigns(self, assigned_service, technician, staff_user):
        assert assigned_service.status == ServiceStatus.ASSIGNED
        assert assigned_service.technician_id == technician.id
        assert assigned_service.technician_name == "Tara Tech"
        assert assigned_service.assigned_by == staff_user.id

    def test_technician_must_have_technician_role(self, lifecycle, customer, product, today, staff_user):
        with pytest.raises(ValidationException):
            lifecycle.create_service(customer.id, product.id, today, technician_id=staff_user.id)

    def test_links_order_of_same_customer(self, lifecycle, db_session, customer, product, today):
        order = OrderService(db_session).create_order(customer.id, product.id, 1)

        service = lifecycle.create_service(
            customer.id, product.id, today, service_type=ServiceType.QUARTERLY, order_id=order.id
        )

        assert service.order_id == order.id
        assert service.order_custom_id == order.custom_id
        assert service.service_type == ServiceType.QUARTERLY

    def test_rejects_order_of_other_customer(self, lifecycle, db_session, customer, product, today):
        other = CustomerService(db_session).create_customer(name="Meena Iyer", email="meena@example.com")
        order = OrderService(db_session).create_order(other.id, product.id, 1)

        with pytest.raises(BadRequestException):
            lifecycle.create_service(customer.id, product.id, today, order_id=order.id)

    def test_unknown_customer(self, lifecycle, product, today):
        with pytest.raises(NotFoundException):
            lifecycle.create_service(uuid4(), product.id, today)


@pytest.mark.unit
class TestStatusSideEffects:
    def test_assign_sets_technician_name(self, lifecycle, available_service, technician, staff_context):
        service = lifecycle.update_service(
            available_service.id,
            {"status": ServiceStatus.ASSIGNED, "technician_id": technician.id},
            actor=staff_context,
        )

        assert service.status == ServiceStatus.ASSIGNED
        assert service.technician_name == "Tara Tech"

    def test_assign_without_technician_rejected(self, lifecycle, available_service):
        with pytest.raises(ValidationException):
            lifecycle.update_service(available_service.id, {"status": ServiceStatus.ASSIGNED})

        assert available_service.status == ServiceStatus.AVAILABLE

    def test_completed_stamps_completed_date(self, lifecycle, assigned_service):
        service = lifecycle.update_service(assigned_service.id, {"status": ServiceStatus.COMPLETED})

        assert service.status == ServiceStatus.COMPLETED
        assert service.completed_date is not None

    def test_in_progress_then_completed_stamps_current_time(self, lifecycle, assigned_service):
        service = lifecycle.update_service(assigned_service.id, {"status": ServiceStatus.IN_PROGRESS})
        assert service.completed_date is None

        before = utcnow()
        service = lifecycle.update_service(service.id, {"status": ServiceStatus.COMPLETED})
        after = utcnow()

        assert service.status == ServiceStatus.COMPLETED
        assert before <= service.completed_date <= after
        assert service.created_at <= service.completed_date

    def test_technician_without_status_assigns_pool_visit(
        self, lifecycle, available_service, technician, staff_context
    ):
        service = lifecycle.update_service(
            available_service.id, {"technician_id": technician.id}, actor=staff_context
        )

        assert service.status == ServiceStatus.ASSIGNED
        assert service.technician_id == technician.id
        assert service.technician_name == "Tara Tech"
        assert service.assigned_by == staff_context.user_id

    def test_technician_change_keeps_progress_status(
        self, lifecycle, assigned_service, other_technician
    ):
        lifecycle.update_service(assigned_service.id, {"status": ServiceStatus.IN_PROGRESS})

        service = lifecycle.update_service(assigned_service.id, {"technician_id": other_technician.id})

        assert service.status == ServiceStatus.IN_PROGRESS
        assert service.technician_id == other_technician.id

    def test_reset_to_available_clears_assignment(self, lifecycle, assigned_service):
        lifecycle.update_service(assigned_service.id, {"status": ServiceStatus.COMPLETED})

        service = lifecycle.update_service(assigned_service.id, {"status": ServiceStatus.AVAILABLE})

        assert service.status == ServiceStatus.AVAILABLE
        assert service.technician_id is None
        assert service.technician_name is None
        assert service.completed_date is None

    def test_any_status_may_follow_any_status(self, lifecycle, assigned_service):
        service = lifecycle.update_service(assigned_service.id, {"status": ServiceStatus.COMPLETED})
        service = lifecycle.update_service(service.id, {"status": ServiceStatus.IN_PROGRESS})

        assert service.status == ServiceStatus.IN_PROGRESS

    def test_unknown_fields_ignored(self, lifecycle, available_service):
        service = lifecycle.update_service(
            available_service.id, {"notes": "Bring spare filter", "customer_name": "Someone else"}
        )

        assert service.notes == "Bring spare filter"
        assert service.customer_name == "Ravi Kumar"


@pytest.mark.unit
class TestTechnicianRules:
    def test_claim_available_visit(self, lifecycle, available_service, technician, technician_context):
        service = lifecycle.update_service(
            available_service.id, {"status": ServiceStatus.ASSIGNED}, actor=technician_context
        )

        assert service.technician_id == technician.id
        assert service.technician_name == "Tara Tech"

    def test_cannot_claim_for_someone_else(
        self, lifecycle, available_service, other_technician, technician_context
    ):
        with pytest.raises(ForbiddenException):
            lifecycle.update_service(
                available_service.id,
                {"status": ServiceStatus.ASSIGNED, "technician_id": other_technician.id},
                actor=technician_context,
            )

    def test_must_claim_before_progressing(self, lifecycle, available_service, technician_context):
        with pytest.raises(ForbiddenException):
            lifecycle.update_service(
                available_service.id, {"status": ServiceStatus.IN_PROGRESS}, actor=technician_context
            )

    def test_progress_own_visit(self, lifecycle, assigned_service, technician_context):
        service = lifecycle.update_service(
            assigned_service.id, {"status": ServiceStatus.IN_PROGRESS}, actor=technician_context
        )
        service = lifecycle.update_service(
            service.id, {"status": ServiceStatus.COMPLETED, "notes": "Replaced membrane"},
            actor=technician_context,
        )

        assert service.status == ServiceStatus.COMPLETED
        assert service.notes == "Replaced membrane"

    def test_release_own_visit(self, lifecycle, assigned_service, technician_context):
        service = lifecycle.update_service(
            assigned_service.id, {"status": ServiceStatus.AVAILABLE}, actor=technician_context
        )

        assert service.technician_id is None

    def test_cannot_touch_another_technicians_visit(
        self, lifecycle, assigned_service, other_technician
    ):
        with pytest.raises(ForbiddenException):
            lifecycle.update_service(
                assigned_service.id,
                {"status": ServiceStatus.IN_PROGRESS},
                actor=SessionContext.from_user(other_technician),
            )

    def test_cannot_edit_schedule(self, lifecycle, assigned_service, technician_context, today):
        service = lifecycle.update_service(
            assigned_service.id,
            {"scheduled_date": today + timedelta(days=3), "notes": "Gate code 1234"},
            actor=technician_context,
        )

        assert service.scheduled_date == today
        assert service.notes == "Gate code 1234"


@pytest.mark.unit
class TestListing:
    def test_visible_to_technician(
        self, lifecycle, available_service, assigned_service, customer, product, today,
        technician, other_technician,
    ):
        lifecycle.create_service(customer.id, product.id, today, technician_id=other_technician.id)

        visible = lifecycle.list_services(visible_to=technician.id)

        assert {s.id for s in visible} == {available_service.id, assigned_service.id}

    def test_ordered_by_scheduled_date_desc(self, lifecycle, customer, product, today):
        earlier = lifecycle.create_service(customer.id, product.id, today - timedelta(days=2))
        later = lifecycle.create_service(customer.id, product.id, today + timedelta(days=2))

        assert [s.id for s in lifecycle.list_services()] == [later.id, earlier.id]

    def test_grouped_by_status_has_every_status(self, lifecycle, available_service, assigned_service):
        groups = grouped_by_status(lifecycle.list_services())

        assert list(groups) == list(ServiceStatus)
        assert [s.id for s in groups[ServiceStatus.AVAILABLE]] == [available_service.id]
        assert [s.id for s in groups[ServiceStatus.ASSIGNED]] == [assigned_service.id]
        assert groups[ServiceStatus.COMPLETED] == []

    def test_filter_by_status(self, lifecycle, available_service, assigned_service):
        assert [s.id for s in lifecycle.list_services(status=ServiceStatus.ASSIGNED)] == [
            assigned_service.id
        ]
