"""
DevConnector Backend - Access Tokens
=====================================

What:  Encoding and verification of the HS256 access tokens carried by
       authenticated requests.
How:   PyJWT with the shared secret from settings. The payload shape is
       {"user": {"id": "<uuid>"}, "iat": ..., "exp": ...}, the same shape the
       token issuer has always produced, so existing tokens keep working.

Account registration and login live in a separate service; this module only
mints tokens for tooling and tests and verifies them on every request.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import jwt

from devconnector.config import settings
from devconnector.exceptions import AuthenticationError


def create_access_token(
    user_id: Union[str, uuid.UUID],
    expires_in: Optional[int] = None,
) -> str:
    """Signs a token for `user_id` that expires after `expires_in` seconds."""
    now = datetime.now(timezone.utc)
    lifetime = settings.jwt_expires_seconds if expires_in is None else expires_in
    payload = {
        "user": {"id": str(user_id)},
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Verifies `token` and returns the user id it was issued for.

    Raises:
        AuthenticationError: bad signature, expired, malformed, or a payload
            without a usable user id
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(context={"reason": "expired"})
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(context={"reason": type(e).__name__})

    user = payload.get("user")
    raw_id = user.get("id") if isinstance(user, dict) else None
    try:
        return uuid.UUID(str(raw_id))
    except ValueError:
        raise AuthenticationError(context={"reason": "bad_subject"})
