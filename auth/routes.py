"""
Auth API routes: register, login, Google Sign-In and the current user.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_auth_service, get_current_user_id
from auth.models import (
    AuthResponse,
    CredentialsRequest,
    GoogleSignInRequest,
    MeResponse,
    UserProfile,
)
from auth.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    req: Optional[CredentialsRequest] = None,
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register a new user. No token is issued; the client logs in next."""
    req = req or CredentialsRequest()
    logger.debug("Register request for %r", req.username)
    await auth.register(req.username, req.password)
    return AuthResponse(message="User registered successfully!")


@router.post("/login", response_model=AuthResponse)
async def login(
    req: Optional[CredentialsRequest] = None,
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login with username + password."""
    req = req or CredentialsRequest()
    token = await auth.login(req.username, req.password)
    return AuthResponse(message="Login successful!", token=token)


@router.post("/google-signin", response_model=AuthResponse)
async def google_signin(
    req: Optional[GoogleSignInRequest] = None,
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    req = req or GoogleSignInRequest()
    token = await auth.google_sign_in(req.id_token)
    return AuthResponse(message="Google Sign-In successful!", token=token)


@router.get("/me", response_model=MeResponse)
async def me(
    user_id: str = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
) -> MeResponse:
    user = await auth.get_user(user_id)
    return MeResponse(user=UserProfile(id=str(user.id), username=user.username, name=user.name))
