from typing import Any, Dict

import jwt

from ..config import settings


class InvalidTokenError(Exception):
    """Raised when a token cannot be parsed or is malformed."""


class ExpiredTokenError(Exception):
    """Raised when a token has expired."""


def _parse_token_payload(token: str) -> Dict[str, Any]:
    try:
        # Integer subjects are checked in validate_access_token
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"verify_sub": False},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredTokenError from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError from exc


def validate_access_token(token: str) -> Dict[str, Any]:
    """Decode a platform session token, requiring a subject claim.

    The platform issues integer user ids, so the subject may be a string or
    an int.
    """
    if not token or not isinstance(token, str):
        raise InvalidTokenError()

    payload = _parse_token_payload(token)

    subject = payload.get("sub", payload.get("id"))
    if isinstance(subject, bool) or not isinstance(subject, (str, int)):
        raise InvalidTokenError()

    return payload
