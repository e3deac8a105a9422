"""
DevConnector Backend - Auth Gate
=================================

FastAPI dependencies that turn the request's token into the acting user id.

The token is read from `Authorization: Bearer <token>` and, for clients that
predate it, from the `x-auth-token` header. Failures raise
AuthenticationError, which the global handler renders as 401.
"""

import logging
import uuid
from typing import Optional

from fastapi import Header

from devconnector.auth.tokens import decode_access_token
from devconnector.exceptions import AuthenticationError

logger = logging.getLogger("devconnector.auth")


def _extract_token(authorization: Optional[str], x_auth_token: Optional[str]) -> Optional[str]:
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    if x_auth_token and x_auth_token.strip():
        return x_auth_token.strip()
    return None


async def get_current_user_id(
    authorization: Optional[str] = Header(None),
    x_auth_token: Optional[str] = Header(None, alias="x-auth-token"),
) -> uuid.UUID:
    """
    Resolves the acting user for a protected route.

    The user record is not loaded here; services that need the name or
    avatar fetch it themselves.

    Raises:
        AuthenticationError: "No token, authorization denied" when no token
            was sent, "Token is not valid" when it fails verification
    """
    token = _extract_token(authorization, x_auth_token)
    if token is None:
        raise AuthenticationError("No token, authorization denied")

    try:
        return decode_access_token(token)
    except AuthenticationError as e:
        logger.info("Rejected token: %s", e.context.get("reason"))
        raise
