"""
Staff and technician accounts.

Admins provision STAFF and TECHNICIAN users. Each account gets a generated
password which is returned exactly once; only its hash is stored.
"""
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from purifier.api.middleware.error_handler import NotFoundException, ValidationException
from purifier.lib.logging import get_logger
from purifier.lib.passwords import generate_password, hash_password
from purifier.lib.routes import UserRole
from purifier.models.services import Service, ServiceStatus
from purifier.models.users import STAFF_ROLES, User
from purifier.services.auth_service import (
    EMAIL_ALREADY_IN_USE,
    INVALID_EMAIL,
    auth_error,
    is_valid_email,
    normalize_email,
)


logger = get_logger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "role", "is_active")

ACTIVE_ASSIGNMENT_STATUSES = (ServiceStatus.ASSIGNED, ServiceStatus.IN_PROGRESS)


def _check_role(role: UserRole) -> UserRole:
    if role not in STAFF_ROLES:
        raise ValidationException(
            "Role must be STAFF or TECHNICIAN",
            errors={"role": "must be STAFF or TECHNICIAN"},
        )
    return role


class StaffService:
    """Provisioning and maintenance of staff accounts."""

    def __init__(self, session: Session):
        self.session = session

    def _email_taken(self, email: str, exclude_id: Optional[UUID] = None) -> bool:
        stmt = select(User.id).where(func.lower(User.email) == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    def _checked_email(self, email: str, exclude_id: Optional[UUID] = None) -> str:
        email = normalize_email(email)
        if not is_valid_email(email):
            raise auth_error(INVALID_EMAIL, status_code=400)
        # Any role counts, admins included
        if self._email_taken(email, exclude_id):
            raise auth_error(EMAIL_ALREADY_IN_USE, status_code=409)
        return email

    def list_staff(self, role: Optional[UserRole] = None) -> List[User]:
        stmt = select(User).where(User.role.in_(STAFF_ROLES))
        if role:
            stmt = stmt.where(User.role == role)
        stmt = stmt.order_by(User.name.asc())
        return list(self.session.execute(stmt).scalars().all())

    def get_staff(self, user_id: UUID) -> User:
        user = self.session.get(User, user_id)
        if user is None or user.role not in STAFF_ROLES:
            raise NotFoundException("Staff", str(user_id))
        return user

    def create_staff(
        self,
        name: str,
        email: str,
        role: UserRole,
        phone: Optional[str] = None,
        is_active: bool = True,
    ) -> Tuple[User, str]:
        """
        Provision a staff or technician account.

        Returns:
            (user, generated_password) - the password is not recoverable later

        Raises:
            AuthException: auth/invalid-email or auth/email-already-in-use
            ValidationException: role is not STAFF or TECHNICIAN
        """
        role = _check_role(role)
        email = self._checked_email(email)
        password = generate_password()

        user = User(
            name=name.strip(),
            email=email,
            phone=phone,
            role=role,
            is_active=is_active,
            password_hash=hash_password(password),
        )
        self.session.add(user)
        self.session.commit()

        logger.info("Staff account created", extra={"user_id": str(user.id), "role": role.value})
        return user, password

    def update_staff(self, user_id: UUID, updates: Dict[str, Any]) -> User:
        user = self.get_staff(user_id)

        for field, value in updates.items():
            if field not in EDITABLE_FIELDS:
                continue
            if field == "email":
                value = self._checked_email(value, exclude_id=user.id)
            elif field == "role":
                value = _check_role(value)
            setattr(user, field, value)

        self.session.commit()
        return user

    def reset_staff_password(self, user_id: UUID) -> Tuple[User, str]:
        user = self.get_staff(user_id)
        password = generate_password()
        user.password_hash = hash_password(password)
        self.session.commit()

        logger.info("Staff password reset", extra={"user_id": str(user.id)})
        return user, password

    def list_technicians(self, active_only: bool = False) -> List[Tuple[User, int]]:
        """Technicians with their count of ASSIGNED + IN_PROGRESS visits."""
        active_count = (
            select(Service.technician_id, func.count(Service.id).label("active_count"))
            .where(Service.status.in_(ACTIVE_ASSIGNMENT_STATUSES))
            .group_by(Service.technician_id)
            .subquery()
        )
        stmt = (
            select(User, func.coalesce(active_count.c.active_count, 0))
            .outerjoin(active_count, active_count.c.technician_id == User.id)
            .where(User.role == UserRole.TECHNICIAN)
        )
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        stmt = stmt.order_by(User.name.asc())
        return [(user, int(count)) for user, count in self.session.execute(stmt).all()]
