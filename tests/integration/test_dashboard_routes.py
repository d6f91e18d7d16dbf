"""Integration tests for the role dashboards."""
import pytest


pytestmark = pytest.mark.integration


@pytest.fixture
def seeded(client, staff_headers, technician, customer, product, today):
    """One order and one assigned visit, both created by the staff user."""
    client.post(
        "/orders",
        json={"customer_id": str(customer.id), "product_id": str(product.id), "quantity": 2},
        headers=staff_headers,
    )
    client.post(
        "/services",
        json={
            "customer_id": str(customer.id),
            "product_id": str(product.id),
            "scheduled_date": today.isoformat(),
            "technician_id": str(technician.id),
        },
        headers=staff_headers,
    )


def test_admin_dashboard(client, admin_headers, seeded):
    response = client.get("/dashboard/admin", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["totals"]["open_orders"] == 1
    assert data["totals"]["services_30d"] == 1
    assert data["totals"]["technician_utilization"] == 100
    assert data["totals"]["monthly_revenue"] == 2000.0
    assert data["totals"]["monthly_revenue_formatted"] == "₹2,000"
    assert data["counts"] == {"customers": 1, "staff": 1, "technicians": 1}
    assert len(data["latest_services"]) == 1


def test_staff_dashboard(client, staff_headers, seeded):
    data = client.get("/dashboard/staff", headers=staff_headers).json()

    assert data["totals"]["orders_created_7d"] == 1
    assert data["totals"]["services_assigned"] == 1
    assert data["totals"]["pending_follow_ups"] == 1
    assert data["invoice_actions"]["ready_to_share"] == 1
    assert len(data["active_orders"]) == 1


def test_admin_may_open_staff_dashboard(client, admin_headers, seeded):
    response = client.get("/dashboard/staff", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["totals"]["orders_created_7d"] == 1


def test_technician_dashboard(client, technician_headers, seeded):
    data = client.get("/dashboard/technician", headers=technician_headers).json()

    assert data["totals"] == {"assigned_today": 1, "completed_this_week": 0, "invoices_pending": 0}
    assert len(data["today_schedule"]) == 1
    assert data["today_schedule"][0]["technician_name"] == "Tara Tech"


@pytest.mark.parametrize(
    "path,headers_fixture,redirect",
    [
        ("/dashboard/admin", "staff_headers", "/staff/dashboard"),
        ("/dashboard/admin", "technician_headers", "/technician/dashboard"),
        ("/dashboard/technician", "staff_headers", "/staff/dashboard"),
        ("/dashboard/staff", "technician_headers", "/technician/dashboard"),
    ],
)
def test_wrong_role_redirected(client, request, path, headers_fixture, redirect):
    headers = request.getfixturevalue(headers_fixture)

    response = client.get(path, headers=headers)

    assert response.status_code == 403
    assert response.json()["details"]["redirect"] == redirect
