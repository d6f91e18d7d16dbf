"""
API dependencies for FastAPI dependency injection.

Provides the database session, the per-request SessionContext built from
the bearer token, and the role guard used by every protected router.
"""
from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jwt.exceptions import InvalidTokenError
from sqlalchemy.orm import Session

from purifier.api.middleware.error_handler import ForbiddenException, UnauthorizedException
from purifier.lib.db import get_db as get_db_session
from purifier.lib.jwt import get_user_from_token
from purifier.lib.logging import get_logger
from purifier.lib.routes import (
    LOGIN_PATH,
    AccessAction,
    AuthStatus,
    UserRole,
    evaluate_route_access,
)
from purifier.lib.session_context import SessionContext
from purifier.models.users import User


logger = get_logger(__name__)

# Re-export get_db for convenience
get_db = get_db_session

# HTTP Bearer token security scheme; missing tokens are reported as 401 below
security = HTTPBearer(auto_error=False)


def get_session_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> SessionContext:
    """
    Dependency to resolve the caller's SessionContext from the JWT.

    The role and active flag come from the stored profile, not the token,
    so role changes and deactivation apply immediately.

    Raises:
        UnauthorizedException: Missing or invalid token, or unknown user
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated", details={"redirect": LOGIN_PATH})

    try:
        user_id, _ = get_user_from_token(credentials.credentials)
        user = db.get(User, UUID(user_id))
    except (InvalidTokenError, ValueError) as e:
        logger.warning("Rejected bearer token", extra={"reason": str(e)})
        raise UnauthorizedException(
            "Invalid authentication token",
            details={"redirect": LOGIN_PATH},
        )

    if user is None:
        raise UnauthorizedException("User not found", details={"redirect": LOGIN_PATH})

    return SessionContext.from_user(user)


def require_roles(*allowed: UserRole) -> Callable[..., SessionContext]:
    """
    Build a dependency that admits only the given roles.

    Applies the same decision as the client-side route guard: login
    redirects (including inactive accounts) become 401, redirects to
    another dashboard become 403. Both carry `details.redirect`.

    Example:
        @router.get("", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """

    def guard(context: SessionContext = Depends(get_session_context)) -> SessionContext:
        decision = evaluate_route_access(
            AuthStatus.AUTHENTICATED,
            context.role,
            context.is_active,
            allowed,
        )
        if decision.action is AccessAction.ALLOW:
            return context

        details = {"redirect": decision.location}
        if decision.location.startswith(LOGIN_PATH):
            raise UnauthorizedException("Account is inactive", details=details)
        raise ForbiddenException(
            f"Role {context.role.value} cannot access this resource",
            details=details,
        )

    return guard


require_admin = require_roles(UserRole.ADMIN)
require_office = require_roles(UserRole.ADMIN, UserRole.STAFF)
require_any_role = require_roles(UserRole.ADMIN, UserRole.STAFF, UserRole.TECHNICIAN)
