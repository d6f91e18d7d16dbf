"""
Per-request session context.

Built from the bearer token by the API layer and passed explicitly to the
services that need to know who is acting.
"""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from purifier.lib.routes import UserRole, get_dashboard_path


@dataclass(frozen=True)
class SessionContext:
    user_id: UUID
    role: UserRole
    name: str
    email: str
    is_active: bool = True

    @property
    def dashboard_path(self) -> str:
        return get_dashboard_path(self.role)

    @classmethod
    def from_user(cls, user) -> "SessionContext":
        return cls(
            user_id=user.id,
            role=user.role,
            name=user.name,
            email=user.email,
            is_active=user.is_active,
        )


def actor_id(context: Optional[SessionContext]) -> Optional[UUID]:
    return context.user_id if context else None
