from datetime import datetime, timedelta, timezone

import jwt
import pytest

from salon_admin.config import settings
from salon_admin.security.token_inspection import (
    ExpiredTokenError,
    InvalidTokenError,
    validate_access_token,
)


def make_token(claims: dict, secret: str | None = None) -> str:
    return jwt.encode(claims, secret or settings.secret_key, algorithm=settings.algorithm)


def test_valid_token_returns_payload():
    """A valid token returns its claims."""
    token = make_token({"sub": "42", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)})
    assert validate_access_token(token)["sub"] == "42"


def test_id_claim_is_accepted_as_subject():
    token = make_token({"id": 42})
    assert validate_access_token(token)["id"] == 42


def test_integer_subject_is_accepted():
    """Platform tokens carry integer user ids in sub."""
    token = make_token({"sub": 42})
    assert validate_access_token(token)["sub"] == 42


def test_expired_token():
    """Expired tokens raise ExpiredTokenError."""
    token = make_token({"sub": "42", "exp": datetime.now(timezone.utc) - timedelta(minutes=5)})
    with pytest.raises(ExpiredTokenError):
        validate_access_token(token)


def test_wrong_signature():
    """Tokens signed with another key are rejected."""
    token = make_token({"sub": "42"}, secret="another-secret-key-with-enough-length-too")
    with pytest.raises(InvalidTokenError):
        validate_access_token(token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", None])
def test_malformed_token(token):
    with pytest.raises(InvalidTokenError):
        validate_access_token(token)


@pytest.mark.parametrize("claims", [{}, {"id": True}, {"id": 1.5}])
def test_missing_or_invalid_subject(claims):
    """A subject must be a str or int, not a bool or float."""
    with pytest.raises(InvalidTokenError):
        validate_access_token(make_token(claims))
