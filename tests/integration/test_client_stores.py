"""Integration tests for the HTTP client and its entity stores, run against the app."""
from unittest.mock import MagicMock

import httpx
import pytest

from purifier.client.api_client import ApiError, PurifierClient
from purifier.client.stores import (
    CustomerStore,
    InvoiceStore,
    OrderStore,
    ServiceStore,
    StaffStore,
)


pytestmark = pytest.mark.integration


@pytest.fixture
def api(client):
    return PurifierClient(client)


@pytest.fixture
def staff_api(api, staff_user, user_password):
    api.login("staff@example.com", user_password)
    return api


@pytest.fixture
def admin_api(api, admin, user_password):
    api.login("admin@example.com", user_password)
    return api


def test_login_keeps_token(api, staff_user, user_password):
    session = api.login("staff@example.com", user_password)

    assert api.token == session["token"]
    assert api.get("/auth/me")["email"] == "staff@example.com"

    api.logout()
    with pytest.raises(ApiError) as exc_info:
        api.get("/auth/me")
    assert exc_info.value.status_code == 401


def test_login_error_carries_code(api, staff_user):
    with pytest.raises(ApiError) as exc_info:
        api.login("staff@example.com", "wrong-password")

    assert exc_info.value.code == "auth/wrong-password"
    assert exc_info.value.message == "Incorrect password. Try again."
    assert api.token is None


def test_customer_store_appends_created(staff_api, customer):
    store = CustomerStore(staff_api)

    assert [c["name"] for c in store.get_items()] == ["Ravi Kumar"]
    assert not store.stale

    store.create({"name": "Zoya Khan", "email": "zoya@example.com"})

    assert [c["name"] for c in store.items] == ["Ravi Kumar", "Zoya Khan"]
    assert store.saving is False


def test_order_store_prepends_and_invalidates(staff_api, customer, product):
    orders = OrderStore(staff_api)
    invoices = InvoiceStore(staff_api)
    orders.get_items()
    assert invoices.get_items() == []

    created = orders.create(
        {"customer_id": str(customer.id), "product_id": str(product.id), "quantity": 2}
    )
    invoices.invalidate()

    assert orders.items[0]["id"] == created["id"]
    assert [i["id"] for i in invoices.get_items()] == [created["invoice_id"]]


def test_invoice_store_updates_status(staff_api, customer, product):
    order = staff_api.post(
        "/orders", {"customer_id": str(customer.id), "product_id": str(product.id), "quantity": 1}
    )
    store = InvoiceStore(staff_api)
    store.get_items()

    store.update(order["invoice_id"], {"status": "PAID"})

    assert store.find(order["invoice_id"])["status"] == "PAID"


def test_service_store_groups(staff_api, customer, product, technician, today):
    store = ServiceStore(staff_api)
    for technician_id in (None, str(technician.id)):
        payload = {
            "customer_id": str(customer.id),
            "product_id": str(product.id),
            "scheduled_date": today.isoformat(),
        }
        if technician_id:
            payload["technician_id"] = technician_id
        store.create(payload)
    store.invalidate()

    groups = store.grouped_by_status()

    assert list(groups) == ["AVAILABLE", "ASSIGNED", "IN_PROGRESS", "COMPLETED"]
    assert len(groups["AVAILABLE"]) == 1
    assert len(groups["ASSIGNED"]) == 1


def test_service_store_update_replaces_item(staff_api, customer, product, today):
    store = ServiceStore(staff_api)
    created = store.create(
        {
            "customer_id": str(customer.id),
            "product_id": str(product.id),
            "scheduled_date": today.isoformat(),
        }
    )

    store.update(created["id"], {"notes": "Call before visiting"})

    assert len(store.items) == 1
    assert store.find(created["id"])["notes"] == "Call before visiting"


def test_staff_store_keeps_account_not_password(admin_api):
    store = StaffStore(admin_api)
    store.get_items()

    response = store.create({"name": "Kiran Das", "email": "kiran@example.com", "role": "STAFF"})

    assert response["password"]
    assert store.items == [response["staff"]]


def test_create_error_propagates(staff_api):
    store = StaffStore(staff_api)

    with pytest.raises(ApiError) as exc_info:
        store.create({"name": "Nope", "email": "nope@example.com", "role": "STAFF"})

    assert exc_info.value.status_code == 403
    assert store.items == []


def test_refresh_failure_sets_error():
    http = MagicMock()
    http.request.side_effect = httpx.ConnectError("connection refused")
    store = CustomerStore(PurifierClient(http, token="t"))

    assert store.refresh() == []
    assert store.error == "Failed to load customers. Please try again."
    assert store.loading is False


def test_refresh_forbidden_sets_error(api, technician, user_password):
    api.login("tech@example.com", user_password)
    store = CustomerStore(api)

    store.refresh()

    assert store.error == "Failed to load customers. Please try again."
