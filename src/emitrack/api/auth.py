"""Bearer-token gate for API routes.

Tokens are issued elsewhere; this module only verifies them. The ``sub``
claim is the id of the user every request acts as.
"""

import os
from typing import Optional

import jwt
from jwt import InvalidTokenError
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from emitrack.domain.errors import UnauthorizedError

ALGORITHM = "HS256"
DEFAULT_SECRET_KEY = "emitrack-development-secret-change-me"

bearer_scheme = HTTPBearer(auto_error=False)


def get_secret_key() -> str:
    """Secret used to verify tokens (EMITRACK_SECRET_KEY)."""
    return os.getenv("EMITRACK_SECRET_KEY", DEFAULT_SECRET_KEY)


def decode_user_id(token: str, secret_key: str) -> str:
    """Verify a token and return its subject.

    Raises:
        UnauthorizedError: If the token is invalid, expired or has no subject
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except InvalidTokenError:
        raise UnauthorizedError("Not authorized, token failed")
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Not authorized, token failed")
    return str(user_id)


def protect(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Resolve the authenticated user id, rejecting unauthenticated calls."""
    if credentials is None:
        raise UnauthorizedError("Not authorized, no token")
    return decode_user_id(credentials.credentials, request.app.state.secret_key)
