"""
Dashboard metrics for the admin, staff and technician home pages.

All windows are computed in UTC:
- "7d" / "30d": rolling windows ending now
- "this month": from the first of the current calendar month
- "today": from 00:00 of the current date
"""
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from purifier.lib.db import utcnow
from purifier.lib.logging import get_logger
from purifier.lib.routes import UserRole
from purifier.lib.share_link import format_currency
from purifier.models.customers import Customer
from purifier.models.invoices import Invoice, InvoiceStatus
from purifier.models.orders import Order, OrderStatus
from purifier.models.services import Service, ServiceStatus
from purifier.models.users import User


logger = get_logger(__name__)

LATEST_SERVICES_LIMIT = 5
UPCOMING_FOLLOW_UPS_LIMIT = 5
ACTIVE_ORDERS_LIMIT = 10
TODAY_SCHEDULE_LIMIT = 10
RECENT_COMPLETIONS_LIMIT = 5

SHAREABLE_INVOICE_STATUSES = (InvoiceStatus.PENDING, InvoiceStatus.SENT)
ACTIVE_SERVICE_STATUSES = (ServiceStatus.ASSIGNED, ServiceStatus.IN_PROGRESS)


def technician_utilization(active_assignments: int, technicians: int) -> int:
    """Active assignments per technician as a percentage, capped at 100."""
    base = technicians or 1
    return min(100, round(active_assignments / base * 100))


def service_snapshot(service: Service) -> Dict[str, Any]:
    return {
        "id": str(service.id),
        "custom_id": service.custom_id,
        "customer_name": service.customer_name,
        "product_name": service.product_name,
        "technician_name": service.technician_name,
        "status": service.status.value,
        "scheduled_date": service.scheduled_date.isoformat(),
        "completed_date": service.completed_date.isoformat() if service.completed_date else None,
        "created_at": service.created_at.isoformat() if service.created_at else None,
    }


def order_snapshot(order: Order) -> Dict[str, Any]:
    return {
        "id": str(order.id),
        "custom_id": order.custom_id,
        "customer_name": order.customer_name,
        "product_name": order.product_name,
        "status": order.status.value,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }


class DashboardService:
    """Read-only aggregates over orders, services and invoices."""

    def __init__(self, session: Session, now: Optional[datetime] = None):
        self.session = session
        self.now = now or utcnow()

    @property
    def start_of_today(self) -> datetime:
        return self.now.replace(hour=0, minute=0, second=0, microsecond=0)

    @property
    def today(self) -> date:
        return self.now.date()

    def _count(self, model, *criteria) -> int:
        stmt = select(func.count()).select_from(model)
        if criteria:
            stmt = stmt.where(*criteria)
        return self.session.execute(stmt).scalar_one()

    def _status_counts(self, model, status_enum, *criteria) -> Dict[str, int]:
        stmt = select(model.status, func.count()).group_by(model.status)
        if criteria:
            stmt = stmt.where(*criteria)
        counts = {status.value: 0 for status in status_enum}
        for status, count in self.session.execute(stmt).all():
            counts[status.value] = count
        return counts

    def admin_metrics(self) -> Dict[str, Any]:
        """Company-wide totals for the admin dashboard."""
        thirty_days_ago = self.now - timedelta(days=30)
        seven_days_ago = self.now - timedelta(days=7)
        start_of_month = self.start_of_today.replace(day=1)

        service_status_counts = self._status_counts(Service, ServiceStatus)
        technicians = self._count(User, User.role == UserRole.TECHNICIAN)
        active_assignments = sum(service_status_counts[s.value] for s in ACTIVE_SERVICE_STATUSES)

        monthly_revenue = Decimal("0")
        invoice_status_counts = {status.value: 0 for status in InvoiceStatus}
        month_invoices = self.session.execute(
            select(Invoice.status, Invoice.total_amount).where(Invoice.created_at >= start_of_month)
        ).all()
        for status, total_amount in month_invoices:
            invoice_status_counts[status.value] += 1
            if status != InvoiceStatus.CANCELLED:
                monthly_revenue += Decimal(str(total_amount))

        latest_services = self.session.execute(
            select(Service).order_by(Service.created_at.desc()).limit(LATEST_SERVICES_LIMIT)
        ).scalars().all()

        return {
            "totals": {
                "services_30d": self._count(Service, Service.created_at >= thirty_days_ago),
                "open_orders": self._count(Order, Order.status == OrderStatus.PENDING),
                "technician_utilization": technician_utilization(active_assignments, technicians),
                "monthly_revenue": monthly_revenue,
                "monthly_revenue_formatted": format_currency(monthly_revenue, decimals=0),
            },
            "service_status_counts": service_status_counts,
            "latest_services": [service_snapshot(s) for s in latest_services],
            "counts": {
                "customers": self._count(Customer),
                "staff": self._count(User, User.role == UserRole.STAFF),
                "technicians": technicians,
            },
            "order_funnel": {
                "new_orders_7d": self._count(Order, Order.created_at >= seven_days_ago),
                "services_created_7d": self._count(Service, Service.created_at >= seven_days_ago),
                "invoices_generated_7d": self._count(Invoice, Invoice.created_at >= seven_days_ago),
            },
            "invoice_status_counts": invoice_status_counts,
            "generated_at": self.now.isoformat(),
        }

    def staff_metrics(self, staff_id: Optional[UUID] = None) -> Dict[str, Any]:
        """
        Work queue for one staff member, or the whole office when
        `staff_id` is None (admin view).
        """
        seven_days_ago = self.now - timedelta(days=7)

        order_criteria = [Order.created_at >= seven_days_ago]
        service_owner = []
        if staff_id is not None:
            order_criteria.append(Order.created_by == staff_id)
            service_owner.append(
                or_(Service.created_by == staff_id, Service.assigned_by == staff_id)
            )

        if staff_id is not None:
            services_assigned = self._count(
                Service, Service.status != ServiceStatus.COMPLETED, *service_owner
            )
        else:
            services_assigned = self._count(Service, Service.status.in_(ACTIVE_SERVICE_STATUSES))

        upcoming = self.session.execute(
            select(Service)
            .where(
                Service.status != ServiceStatus.COMPLETED,
                Service.scheduled_date >= self.today,
                *service_owner,
            )
            .order_by(Service.scheduled_date.asc(), Service.created_at.asc())
            .limit(UPCOMING_FOLLOW_UPS_LIMIT)
        ).scalars().all()

        active_orders_stmt = select(Order).where(Order.status == OrderStatus.PENDING)
        if staff_id is not None:
            active_orders_stmt = active_orders_stmt.where(Order.created_by == staff_id)
        active_orders = self.session.execute(
            active_orders_stmt.order_by(Order.created_at.desc()).limit(ACTIVE_ORDERS_LIMIT)
        ).scalars().all()

        invoice_scope = []
        if staff_id is not None:
            invoice_scope.append(
                Invoice.order_id.in_(select(Order.id).where(Order.created_by == staff_id))
            )

        ready_to_share = self._count(
            Invoice, Invoice.status.in_(SHAREABLE_INVOICE_STATUSES), *invoice_scope
        )
        pending_payments = self._count(Invoice, Invoice.status == InvoiceStatus.SENT, *invoice_scope)
        reminders_sent_today = self._count(
            Invoice,
            Invoice.status == InvoiceStatus.SENT,
            Invoice.updated_at >= self.start_of_today,
            *invoice_scope,
        )

        return {
            "totals": {
                "orders_created_7d": self._count(Order, *order_criteria),
                "services_assigned": services_assigned,
                "pending_follow_ups": len(upcoming),
                "invoices_awaiting_share": ready_to_share,
            },
            "upcoming_follow_ups": [service_snapshot(s) for s in upcoming],
            "active_orders": [order_snapshot(o) for o in active_orders],
            "invoice_actions": {
                "ready_to_share": ready_to_share,
                "pending_payments": pending_payments,
                "reminders_sent_today": reminders_sent_today,
            },
            "generated_at": self.now.isoformat(),
        }

    def technician_metrics(self, technician_id: UUID) -> Dict[str, Any]:
        """Schedule and completion figures for one technician."""
        week_ago = self.now - timedelta(days=7)
        own = Service.technician_id == technician_id

        schedule = self.session.execute(
            select(Service)
            .where(
                own,
                Service.status.in_(ACTIVE_SERVICE_STATUSES),
                Service.scheduled_date >= self.today,
            )
            .order_by(Service.scheduled_date.asc(), Service.created_at.asc())
        ).scalars().all()

        completions = self.session.execute(
            select(Service)
            .where(
                own,
                Service.status == ServiceStatus.COMPLETED,
                Service.completed_date >= week_ago,
            )
            .order_by(Service.completed_date.desc())
        ).scalars().all()

        own_service_ids = select(Service.id).where(own)
        invoices_pending = self._count(
            Invoice,
            Invoice.status.in_(SHAREABLE_INVOICE_STATUSES),
            Invoice.service_id.in_(own_service_ids),
        )

        invoiced_service_ids = select(Invoice.service_id).where(Invoice.service_id.is_not(None))
        completed_awaiting_invoice = self._count(
            Service,
            own,
            Service.status == ServiceStatus.COMPLETED,
            Service.id.not_in(invoiced_service_ids),
        )

        return {
            "totals": {
                "assigned_today": len(schedule),
                "completed_this_week": len(completions),
                "invoices_pending": invoices_pending,
            },
            "today_schedule": [service_snapshot(s) for s in schedule[:TODAY_SCHEDULE_LIMIT]],
            "recent_completions": [service_snapshot(s) for s in completions[:RECENT_COMPLETIONS_LIMIT]],
            "service_status_counts": {
                "available": self._count(Service, Service.status == ServiceStatus.AVAILABLE),
                "in_progress": self._count(Service, own, Service.status == ServiceStatus.IN_PROGRESS),
                "completed_awaiting_invoice": completed_awaiting_invoice,
            },
            "generated_at": self.now.isoformat(),
        }
