"""
Password generation and hashing for staff accounts.

Hashes are bcrypt via passlib; the work factor comes from settings.
"""
import secrets

from passlib.context import CryptContext

from purifier.lib.settings import settings


PASSWORD_LENGTH = 12
PASSWORD_CHARSET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz23456789!@#$%"
MIN_PASSWORD_LENGTH = 8

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """Random password drawn from an unambiguous charset (no 0/O, 1/l/I)."""
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a password against a stored hash. Unrecognised hashes never match."""
    try:
        return pwd_context.verify(password, hashed_password)
    except (ValueError, TypeError):
        return False
