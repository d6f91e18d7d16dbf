"""Authentication service for email/password login.

Handles:
1. Login: case-insensitive email lookup, password check, JWT issue
2. Error codes: stable "auth/..." codes mapped to user-facing messages
"""
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from purifier.api.middleware.error_handler import AuthException
from purifier.lib.db import utcnow
from purifier.lib.jwt import create_access_token
from purifier.lib.logging import get_logger
from purifier.lib.passwords import verify_password
from purifier.lib.routes import get_dashboard_path
from purifier.models.users import User


logger = get_logger(__name__)

USER_NOT_FOUND = "auth/user-not-found"
WRONG_PASSWORD = "auth/wrong-password"
INVALID_EMAIL = "auth/invalid-email"
USER_DISABLED = "auth/user-disabled"
TOO_MANY_REQUESTS = "auth/too-many-requests"
NETWORK_REQUEST_FAILED = "auth/network-request-failed"
EMAIL_ALREADY_IN_USE = "auth/email-already-in-use"
WEAK_PASSWORD = "auth/weak-password"

AUTH_ERROR_MESSAGES = {
    USER_NOT_FOUND: "No user found with those credentials.",
    WRONG_PASSWORD: "Incorrect password. Try again.",
    INVALID_EMAIL: "Invalid email address.",
    USER_DISABLED: "This account has been disabled. Contact an administrator.",
    TOO_MANY_REQUESTS: "Too many failed attempts. Please wait and try again.",
    NETWORK_REQUEST_FAILED: "Network error. Please check your connection and try again.",
    EMAIL_ALREADY_IN_USE: "An account with this email already exists.",
    WEAK_PASSWORD: "Password is too weak. Use at least 8 characters.",
}

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


def map_auth_error(code: Optional[str]) -> str:
    """User-facing message for an auth error code.

    Example:
        >>> map_auth_error("auth/wrong-password")
        'Incorrect password. Try again.'
    """
    if not code:
        return GENERIC_ERROR_MESSAGE
    message = AUTH_ERROR_MESSAGES.get(code)
    if message is None:
        return f"Login failed: {code}. Please try again."
    return message


def auth_error(code: str, status_code: int = 401) -> AuthException:
    return AuthException(code, map_auth_error(code), status_code=status_code)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    if "@" not in email:
        return False
    local, _, domain = email.partition("@")
    return bool(local) and "." in domain


class AuthService:
    """Authentication service for staff, technician and admin login."""

    def __init__(self, session: Session):
        """Initialize auth service with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def find_user_by_email(self, email: str) -> Optional[User]:
        return self.session.execute(
            select(User).where(func.lower(User.email) == normalize_email(email))
        ).scalar_one_or_none()

    def login(self, email: str, password: str) -> dict:
        """Verify credentials and issue a JWT.

        Args:
            email: Login email, any case
            password: Plain password

        Returns:
            Dict with token, user profile fields and dashboard_path

        Raises:
            AuthException: With one of the auth/... codes
        """
        email = normalize_email(email)
        if not is_valid_email(email):
            raise auth_error(INVALID_EMAIL, status_code=400)

        user = self.find_user_by_email(email)
        if user is None:
            logger.warning("Login failed: unknown email")
            raise auth_error(USER_NOT_FOUND)

        if not verify_password(password or "", user.password_hash):
            logger.warning("Login failed: wrong password", extra={"user_id": str(user.id)})
            raise auth_error(WRONG_PASSWORD)

        if not user.is_active:
            logger.warning("Login refused: account disabled", extra={"user_id": str(user.id)})
            raise auth_error(USER_DISABLED, status_code=403)

        user.last_login_at = utcnow()
        self.session.commit()

        token = create_access_token(str(user.id), user.role.value)
        logger.info("User logged in", extra={"user_id": str(user.id), "role": user.role.value})

        return {
            "token": token,
            "user_id": str(user.id),
            "email": user.email,
            "name": user.name,
            "role": user.role.value,
            "is_active": user.is_active,
            "dashboard_path": get_dashboard_path(user.role),
        }
