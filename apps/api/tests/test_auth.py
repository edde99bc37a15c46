"""
Tests for bearer credential verification.
"""

from datetime import timedelta

import pytest
from jose import jwt

from toggles.core.errors import UnauthenticatedError
from toggles.services.auth import AuthService


SECRET = "test-secret"


@pytest.fixture
def auth() -> AuthService:
    return AuthService(secret_key=SECRET, algorithm="HS256")


def test_token_round_trip(auth):
    token = auth.create_access_token("ops@example.com")

    identity = auth.verify(f"Bearer {token}")

    assert identity.user_email == "ops@example.com"


@pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer"])
def test_missing_or_malformed_header(auth, header):
    with pytest.raises(UnauthenticatedError):
        auth.verify(header)


def test_wrong_signature(auth):
    token = AuthService(secret_key="other-secret").create_access_token("ops@example.com")

    with pytest.raises(UnauthenticatedError):
        auth.verify(f"Bearer {token}")


def test_expired_token(auth):
    token = auth.create_access_token("ops@example.com", expires_in=timedelta(seconds=-5))

    with pytest.raises(UnauthenticatedError):
        auth.verify(f"Bearer {token}")


def test_token_without_user_claim(auth):
    token = jwt.encode({"sub": "ops@example.com"}, SECRET, algorithm="HS256")

    with pytest.raises(UnauthenticatedError) as exc_info:
        auth.verify(f"Bearer {token}")

    assert "User not found" in exc_info.value.message


def test_token_without_email(auth):
    token = jwt.encode({"user": {"name": "ops"}}, SECRET, algorithm="HS256")

    with pytest.raises(UnauthenticatedError):
        auth.verify(f"Bearer {token}")
