"""
Firebase ID token verification for Google Sign-In.

Uses the Firebase Admin SDK. Credentials are resolved from (in order)
a service account file, the individual ``FIREBASE_*`` variables, or
Google application-default credentials.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions

from auth.errors import InvalidTokenError
from config.settings import Settings

logger = logging.getLogger(__name__)

_APP_NAME = "login-backend"


@dataclass(frozen=True)
class FederatedIdentity:
    """Verified claims extracted from an ID token."""

    email: str
    name: Optional[str] = None


class IdentityVerifier(Protocol):
    async def verify(self, id_token: Optional[str]) -> FederatedIdentity: ...


def load_credentials(settings: Settings) -> credentials.Base:
    if settings.firebase_credentials_file:
        logger.info("Firebase credentials from %s", settings.firebase_credentials_file)
        return credentials.Certificate(settings.firebase_credentials_file)

    service_account = settings.firebase_service_account()
    if service_account is not None:
        logger.info("Firebase credentials from environment (project %s)", service_account["project_id"])
        return credentials.Certificate(service_account)

    logger.warning("No Firebase service account configured; using application default credentials")
    return credentials.ApplicationDefault()


class FirebaseVerifier:
    """Verifies Firebase ID tokens against Google's public keys."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._app: Optional[firebase_admin.App] = None

    def initialize(self) -> None:
        if self._app is not None:
            return
        try:
            self._app = firebase_admin.get_app(_APP_NAME)
        except ValueError:
            options: Dict[str, Any] = {}
            if self._settings.firebase_project_id:
                options["projectId"] = self._settings.firebase_project_id
            self._app = firebase_admin.initialize_app(
                load_credentials(self._settings),
                options=options or None,
                name=_APP_NAME,
            )
        logger.info("Firebase Admin initialised (app=%s)", self._app.name)

    async def verify(self, id_token: Optional[str]) -> FederatedIdentity:
        """
        Verify ``id_token`` once and return its ``email`` and ``name``.

        Raises ``InvalidTokenError`` when the token is missing, malformed,
        expired, revoked, issued for another project, or carries no email.
        """
        if self._app is None:
            self.initialize()
        if not id_token or not isinstance(id_token, str):
            raise InvalidTokenError()

        try:
            claims = await asyncio.to_thread(firebase_auth.verify_id_token, id_token, app=self._app)
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            logger.warning("Google ID token rejected: %s", exc)
            raise InvalidTokenError() from exc

        email = claims.get("email")
        if not email:
            logger.warning("Google ID token for uid %s has no email claim", claims.get("uid"))
            raise InvalidTokenError()
        return FederatedIdentity(email=email, name=claims.get("name"))
