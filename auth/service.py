"""
Register / login / Google Sign-In flows.

``AuthService`` composes the user store, bcrypt and the token service.
It knows nothing about HTTP: every failure is raised as an ``AuthError``
subclass and rendered by the route layer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from auth.errors import (
    ConflictError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from auth.firebase import IdentityVerifier
from auth.password import hash_password, verify_password
from auth.tokens import TokenService
from database.models import User
from database.users import UsernameTakenError, UserStore, UserStoreError

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        *,
        users: UserStore,
        tokens: TokenService,
        verifier: IdentityVerifier,
        bcrypt_rounds: int = 10,
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.verifier = verifier
        self.bcrypt_rounds = bcrypt_rounds

    # --------- Core operations ----------
    async def register(self, username: Optional[str], password: Optional[str]) -> User:
        if not username or not password:
            raise ValidationError()

        try:
            if await self.users.get_by_username(username) is not None:
                raise ConflictError()
            password_hash = await asyncio.to_thread(hash_password, password, self.bcrypt_rounds)
            user = await self.users.create(username, password_hash=password_hash)
        except UsernameTakenError as exc:
            raise ConflictError() from exc
        except UserStoreError as exc:
            raise InternalError() from exc

        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    async def login(self, username: Optional[str], password: Optional[str]) -> str:
        """Check the password and return a signed token for the user."""
        if not username or not password:
            raise ValidationError()

        try:
            user = await self.users.get_by_username(username)
        except UserStoreError as exc:
            raise InternalError() from exc
        if user is None:
            raise NotFoundError()

        matches = await asyncio.to_thread(verify_password, password, user.password_hash)
        if not matches:
            logger.warning("Invalid credentials for %s", username)
            raise InvalidCredentialsError()

        logger.info("Login: %s (%s)", user.username, user.id)
        return self.tokens.create_token(str(user.id))

    async def google_sign_in(self, id_token: Optional[str]) -> str:
        """
        Verify a Google ID token and return a signed token for the matching
        user, creating a password-less account on first sign-in.
        """
        identity = await self.verifier.verify(id_token)

        try:
            user = await self.users.get_by_username(identity.email)
            if user is None:
                user = await self._provision(identity.email, identity.name)
        except UserStoreError as exc:
            raise InternalError() from exc

        logger.info("Google Sign-In: %s (%s)", user.username, user.id)
        return self.tokens.create_token(str(user.id))

    async def get_user(self, user_id: str) -> User:
        try:
            user = await self.users.get_by_id(user_id)
        except UserStoreError as exc:
            raise InternalError() from exc
        if user is None:
            raise NotFoundError()
        return user

    # --------- Helpers ----------
    async def _provision(self, email: str, name: Optional[str]) -> User:
        try:
            user = await self.users.create(email, password_hash=None, name=name)
        except UsernameTakenError:
            # a concurrent sign-in for the same email won the insert
            user = await self.users.get_by_username(email)
            if user is None:
                raise
            return user
        logger.info("Provisioned Google account %s (%s)", user.username, user.id)
        return user
