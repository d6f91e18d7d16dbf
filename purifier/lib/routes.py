"""
Role-based route areas and the access decision shared by the API guard
and the client package.

Decision order for a protected area:
1. auth state still loading   -> WAIT
2. unauthenticated or no role -> redirect /login
3. inactive profile           -> redirect /login?inactive=1
4. role not allowed           -> redirect to the role's dashboard
5. otherwise                  -> ALLOW
"""
import enum
from dataclasses import dataclass
from typing import Iterable, Optional


LOGIN_PATH = "/login"
INACTIVE_LOGIN_PATH = "/login?inactive=1"


class UserRole(str, enum.Enum):
    """Roles a user profile can carry."""
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    TECHNICIAN = "TECHNICIAN"


class AuthStatus(str, enum.Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class AccessAction(str, enum.Enum):
    WAIT = "wait"
    ALLOW = "allow"
    REDIRECT = "redirect"


# Route groups and the roles allowed into each
AREA_ROLES = {
    "admin": (UserRole.ADMIN,),
    "staff": (UserRole.STAFF,),
    "technician": (UserRole.TECHNICIAN,),
}


@dataclass(frozen=True)
class RouteDecision:
    action: AccessAction
    location: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.action is AccessAction.ALLOW


def get_dashboard_path(role: Optional[UserRole]) -> str:
    """Home dashboard for a role; unknown roles go to the login page."""
    return {
        UserRole.ADMIN: "/admin/dashboard",
        UserRole.STAFF: "/staff/dashboard",
        UserRole.TECHNICIAN: "/technician/dashboard",
    }.get(role, LOGIN_PATH)


def evaluate_route_access(
    status: AuthStatus,
    role: Optional[UserRole],
    is_active: bool,
    allowed: Iterable[UserRole],
) -> RouteDecision:
    """Decide what a protected area should do for the current session."""
    if status is AuthStatus.LOADING:
        return RouteDecision(AccessAction.WAIT)
    if status is not AuthStatus.AUTHENTICATED or role is None:
        return RouteDecision(AccessAction.REDIRECT, LOGIN_PATH)
    if not is_active:
        return RouteDecision(AccessAction.REDIRECT, INACTIVE_LOGIN_PATH)
    if role not in set(allowed):
        return RouteDecision(AccessAction.REDIRECT, get_dashboard_path(role))
    return RouteDecision(AccessAction.ALLOW)
