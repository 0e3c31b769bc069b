"""
FastAPI dependencies for authentication.

Provides ``get_auth_service`` and ``get_current_user_id``; the service
is built at startup and stored on ``app.state``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.errors import UnauthorizedError
from auth.service import AuthService

_bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> str:
    """
    Extract and verify the Bearer token, returning the authenticated
    user id (UUID string).
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Missing bearer token.")
    return auth.tokens.verify_token(credentials.credentials)
