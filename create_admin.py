"""
Bootstrap the first ADMIN account.

Admins provision every other account through /staff, so a fresh database
needs one admin created out of band.

Usage:
    python create_admin.py admin@example.com "Asha Admin" [password]

When no password is given a random one is generated and printed once.
"""
import sys

from sqlalchemy import func, select

from purifier.lib.db import get_db_context
from purifier.lib.passwords import MIN_PASSWORD_LENGTH, generate_password, hash_password
from purifier.lib.routes import UserRole
from purifier.models.users import User


def create_admin(email: str, name: str, password: str = None) -> str:
    """Create or re-activate an ADMIN user and return the password in effect."""
    email = email.strip().lower()
    password = password or generate_password()
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    with get_db_context() as db:
        user = db.execute(
            select(User).where(func.lower(User.email) == email)
        ).scalar_one_or_none()

        if user is None:
            db.add(User(
                email=email,
                name=name,
                role=UserRole.ADMIN,
                is_active=True,
                password_hash=hash_password(password),
            ))
            print(f"Created admin {email}")
        else:
            user.role = UserRole.ADMIN
            user.is_active = True
            user.password_hash = hash_password(password)
            print(f"Updated existing user {email} to ADMIN")

    return password


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)

    password = create_admin(sys.argv[1], sys.argv[2], sys.argv[3] if len(sys.argv) > 3 else None)
    print(f"Password: {password}")
