"""
Dashboard Routes - home page metrics per role.

Provides:
- GET /dashboard/admin: company-wide totals, funnel and revenue
- GET /dashboard/staff: the caller's work queue (admins get the office-wide view)
- GET /dashboard/technician: the caller's schedule and completions
"""
from datetime import date, datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from purifier.api.dependencies import get_db, require_admin, require_roles
from purifier.lib.logging import get_logger
from purifier.lib.routes import UserRole
from purifier.lib.session_context import SessionContext
from purifier.services.dashboard_service import DashboardService


logger = get_logger(__name__)
router = APIRouter(prefix="/dashboard", tags=["dashboard"])


# Response models
class ServiceSnapshot(BaseModel):
    id: str
    custom_id: Optional[str] = None
    customer_name: str
    product_name: str
    technician_name: Optional[str] = None
    status: str
    scheduled_date: date
    completed_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class OrderSnapshot(BaseModel):
    id: str
    custom_id: Optional[str] = None
    customer_name: str
    product_name: str
    status: str
    created_at: Optional[datetime] = None


class AdminTotals(BaseModel):
    services_30d: int
    open_orders: int
    technician_utilization: int = Field(description="Percent, capped at 100")
    monthly_revenue: float
    monthly_revenue_formatted: str


class AdminCounts(BaseModel):
    customers: int
    staff: int
    technicians: int


class OrderFunnel(BaseModel):
    new_orders_7d: int
    services_created_7d: int
    invoices_generated_7d: int


class AdminDashboardResponse(BaseModel):
    totals: AdminTotals
    service_status_counts: Dict[str, int]
    latest_services: List[ServiceSnapshot]
    counts: AdminCounts
    order_funnel: OrderFunnel
    invoice_status_counts: Dict[str, int]
    generated_at: datetime


class StaffTotals(BaseModel):
    orders_created_7d: int
    services_assigned: int
    pending_follow_ups: int
    invoices_awaiting_share: int


class InvoiceActions(BaseModel):
    ready_to_share: int
    pending_payments: int
    reminders_sent_today: int


class StaffDashboardResponse(BaseModel):
    totals: StaffTotals
    upcoming_follow_ups: List[ServiceSnapshot]
    active_orders: List[OrderSnapshot]
    invoice_actions: InvoiceActions
    generated_at: datetime


class TechnicianTotals(BaseModel):
    assigned_today: int
    completed_this_week: int
    invoices_pending: int


class TechnicianStatusCounts(BaseModel):
    available: int
    in_progress: int
    completed_awaiting_invoice: int


class TechnicianDashboardResponse(BaseModel):
    totals: TechnicianTotals
    today_schedule: List[ServiceSnapshot]
    recent_completions: List[ServiceSnapshot]
    service_status_counts: TechnicianStatusCounts
    generated_at: datetime


@router.get("/admin", response_model=AdminDashboardResponse)
def admin_dashboard(
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_admin),
):
    logger.info("GET /dashboard/admin", extra={"user_id": str(context.user_id)})
    return DashboardService(db).admin_metrics()


@router.get("/staff", response_model=StaffDashboardResponse)
def staff_dashboard(
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_roles(UserRole.STAFF, UserRole.ADMIN)),
):
    """Per-user queue for STAFF; admins see every order, service and invoice."""
    staff_id = None if context.role == UserRole.ADMIN else context.user_id
    return DashboardService(db).staff_metrics(staff_id=staff_id)


@router.get("/technician", response_model=TechnicianDashboardResponse)
def technician_dashboard(
    db: Session = Depends(get_db),
    context: SessionContext = Depends(require_roles(UserRole.TECHNICIAN)),
):
    return DashboardService(db).technician_metrics(context.user_id)
