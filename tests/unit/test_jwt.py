"""Tests for JWT utilities."""
from datetime import timedelta

import jwt
import pytest
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from purifier.lib.jwt import create_access_token, get_user_from_token, verify_token
from purifier.lib.settings import settings


USER_ID = "123e4567-e89b-12d3-a456-426614174000"


@pytest.mark.unit
def test_create_and_verify_token():
    """Test creating and verifying a valid token."""
    token = create_access_token(USER_ID, "STAFF")

    assert isinstance(token, str)
    assert len(token) > 0

    payload = verify_token(token)
    assert payload["sub"] == USER_ID
    assert payload["role"] == "STAFF"
    assert "iat" in payload
    assert "exp" in payload


@pytest.mark.unit
def test_get_user_from_token():
    """Test extracting user id and role from token."""
    token = create_access_token(USER_ID, "TECHNICIAN")

    extracted_id, extracted_role = get_user_from_token(token)
    assert extracted_id == USER_ID
    assert extracted_role == "TECHNICIAN"


@pytest.mark.unit
def test_expired_token():
    """Test that expired tokens are rejected."""
    token = create_access_token(USER_ID, "ADMIN", expires_delta=timedelta(seconds=-10))

    with pytest.raises(ExpiredSignatureError):
        verify_token(token)


@pytest.mark.unit
def test_invalid_token():
    """Test that malformed tokens are rejected."""
    with pytest.raises(InvalidTokenError):
        verify_token("not.a.valid.token")


@pytest.mark.unit
def test_tampered_token():
    """Test that tokens signed with another secret are rejected."""
    forged = jwt.encode({"sub": USER_ID, "role": "ADMIN"}, "some-other-secret", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        verify_token(forged)


@pytest.mark.unit
def test_missing_role_claim_rejected():
    """Test that a validly signed token without a role is rejected."""
    token = jwt.encode({"sub": USER_ID}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    with pytest.raises(InvalidTokenError, match="role"):
        get_user_from_token(token)


@pytest.mark.unit
def test_custom_expiry():
    """Test creating token with custom expiration time."""
    token = create_access_token(USER_ID, "STAFF", expires_delta=timedelta(hours=1))

    payload = verify_token(token)
    diff = payload["exp"] - payload["iat"]

    # Should be close to 3600 seconds (1 hour)
    assert 3590 < diff < 3610
