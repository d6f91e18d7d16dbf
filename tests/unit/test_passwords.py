"""Tests for staff password generation and hashing."""
import pytest

from purifier.lib.passwords import (
    PASSWORD_CHARSET,
    PASSWORD_LENGTH,
    generate_password,
    hash_password,
    pwd_context,
    verify_password,
)
from purifier.lib.settings import settings


@pytest.mark.unit
def test_generated_password_uses_charset():
    password = generate_password()

    assert len(password) == PASSWORD_LENGTH == 12
    assert set(password) <= set(PASSWORD_CHARSET)


@pytest.mark.unit
def test_charset_has_no_ambiguous_characters():
    for ambiguous in "0O1lI":
        assert ambiguous not in PASSWORD_CHARSET


@pytest.mark.unit
def test_generated_passwords_differ():
    assert len({generate_password() for _ in range(20)}) == 20


@pytest.mark.unit
def test_hash_round_trip():
    encoded = hash_password("Kx7!pQ2mRt9#")

    assert pwd_context.identify(encoded) == "bcrypt"
    assert "Kx7!pQ2mRt9#" not in encoded
    assert verify_password("Kx7!pQ2mRt9#", encoded)
    assert not verify_password("kx7!pQ2mRt9#", encoded)


@pytest.mark.unit
def test_hash_uses_configured_rounds():
    encoded = hash_password("Kx7!pQ2mRt9#")

    assert encoded.startswith(f"$2b${settings.password_hash_rounds:02d}$")


@pytest.mark.unit
def test_same_password_gets_different_salts():
    assert hash_password("same-password") != hash_password("same-password")


@pytest.mark.unit
@pytest.mark.parametrize("encoded", ["", "plaintext", "md5$1$aa$bb", "$2b$04$short", None])
def test_malformed_hash_never_matches(encoded):
    assert verify_password("anything", encoded) is False
