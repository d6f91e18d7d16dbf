"""
Shared fixtures: an in-memory SQLite database per test, a TestClient wired
to it, and users of each role with ready-made auth headers.
"""
import os

# Must be set before purifier.lib.settings is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SHARE_LINK_SECRET", "test-share-link-secret")
os.environ.setdefault("APP_BASE_URL", "https://app.example.com")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
# Lowest bcrypt work factor keeps the suite fast
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import purifier.models  # noqa: E402,F401
from purifier.api.app import app  # noqa: E402
from purifier.api.dependencies import get_db  # noqa: E402
from purifier.lib.db import Base, utcnow  # noqa: E402
from purifier.lib.jwt import create_access_token  # noqa: E402
from purifier.lib.passwords import hash_password  # noqa: E402
from purifier.lib.routes import UserRole  # noqa: E402
from purifier.lib.session_context import SessionContext  # noqa: E402
from purifier.models.users import User  # noqa: E402
from purifier.services.customer_service import CustomerService  # noqa: E402
from purifier.services.product_service import ProductService  # noqa: E402


TEST_PASSWORD = "Test-pass-123"


@pytest.fixture
def db_engine():
    """Fresh in-memory database with the full schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """TestClient whose requests use the test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory for users of any role; the password is TEST_PASSWORD."""

    def _make_user(role=UserRole.STAFF, email=None, name=None, is_active=True):
        count = db_session.query(User).count() + 1
        user = User(
            email=email or f"{role.value.lower()}{count}@example.com",
            name=name or f"{role.value.title()} {count}",
            role=role,
            is_active=is_active,
            password_hash=hash_password(TEST_PASSWORD),
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def user_password():
    """Plain password of every user built by make_user."""
    return TEST_PASSWORD


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, email="admin@example.com", name="Asha Admin")


@pytest.fixture
def staff_user(make_user):
    return make_user(UserRole.STAFF, email="staff@example.com", name="Sam Staff")


@pytest.fixture
def technician(make_user):
    return make_user(UserRole.TECHNICIAN, email="tech@example.com", name="Tara Tech")


@pytest.fixture
def other_technician(make_user):
    return make_user(UserRole.TECHNICIAN, email="tech2@example.com", name="Tom Tech")


def headers_for(user) -> dict:
    token = create_access_token(str(user.id), user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Bearer headers for any user: auth_headers(user)."""
    return headers_for


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def staff_headers(staff_user):
    return headers_for(staff_user)


@pytest.fixture
def technician_headers(technician):
    return headers_for(technician)


@pytest.fixture
def staff_context(staff_user):
    return SessionContext.from_user(staff_user)


@pytest.fixture
def technician_context(technician):
    return SessionContext.from_user(technician)


@pytest.fixture
def customer(db_session):
    return CustomerService(db_session).create_customer(
        name="Ravi Kumar",
        email="ravi@example.com",
        phone="+91 98765 43210",
        address="12 MG Road, Pune",
    )


@pytest.fixture
def product(db_session):
    return ProductService(db_session).create_product(
        name="AquaPure RO 500",
        model="RO-500",
        price=Decimal("1000.00"),
    )


@pytest.fixture
def today():
    """Current UTC date, the calendar the dashboards use."""
    return utcnow().date()
