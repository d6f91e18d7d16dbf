"""Authentication routes.

Provides email/password authentication endpoints:
- POST /auth/login: Verify credentials and get JWT token
- GET /auth/me: Current profile and dashboard path
- GET /auth/access: Evaluate a role area (admin, staff, technician) for the caller
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from purifier.api.dependencies import get_db, get_session_context
from purifier.api.middleware.error_handler import BadRequestException
from purifier.lib.routes import AREA_ROLES, AuthStatus, evaluate_route_access
from purifier.lib.session_context import SessionContext
from purifier.services.auth_service import AuthService


router = APIRouter(prefix="/auth", tags=["Authentication"])


# Request/Response Models
class LoginRequest(BaseModel):
    """Login payload."""
    email: str = Field(..., description="Email address", examples=["staff@example.com"])
    password: str = Field(..., description="Account password")


class LoginResponse(BaseModel):
    """Login response with JWT token."""
    token: str = Field(..., description="JWT access token")
    user_id: str = Field(..., description="User UUID")
    email: str
    name: str
    role: str = Field(..., description="ADMIN, STAFF or TECHNICIAN")
    is_active: bool
    dashboard_path: str = Field(..., description="Home dashboard for the role")


class ProfileResponse(BaseModel):
    user_id: str
    email: str
    name: str
    role: str
    is_active: bool
    dashboard_path: str


class AccessResponse(BaseModel):
    area: str
    action: str = Field(..., description="allow or redirect")
    location: Optional[str] = Field(None, description="Redirect target when not allowed")
    allowed: bool


# Dependency to get AuthService
def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Get AuthService instance with database session."""
    return AuthService(db)


# Routes
@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in",
    description="Verify email and password and receive a JWT access token",
)
def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Log in with email and password.

    Raises:
        400: auth/invalid-email
        401: auth/user-not-found, auth/wrong-password
        403: auth/user-disabled
    """
    return LoginResponse(**auth_service.login(request.email, request.password))


@router.get("/me", response_model=ProfileResponse, summary="Current profile")
def me(context: SessionContext = Depends(get_session_context)):
    return ProfileResponse(
        user_id=str(context.user_id),
        email=context.email,
        name=context.name,
        role=context.role.value,
        is_active=context.is_active,
        dashboard_path=context.dashboard_path,
    )


@router.get("/access", response_model=AccessResponse, summary="Check access to a role area")
def access(
    area: str = Query(..., description="admin, staff or technician"),
    context: SessionContext = Depends(get_session_context),
):
    """Route-guard decision for the caller entering `area`."""
    allowed_roles = AREA_ROLES.get(area)
    if allowed_roles is None:
        raise BadRequestException(
            f"Unknown area '{area}'",
            details={"areas": sorted(AREA_ROLES)},
        )

    decision = evaluate_route_access(
        AuthStatus.AUTHENTICATED,
        context.role,
        context.is_active,
        allowed_roles,
    )
    return AccessResponse(
        area=area,
        action=decision.action.value,
        location=decision.location,
        allowed=decision.allowed,
    )
