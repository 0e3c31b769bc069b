"""
JWT creation and verification.

Tokens carry the user id in the ``id`` claim plus ``iat``/``exp``.
Secret, algorithm and lifetime come from configuration
(``JWT_SECRET``, ``JWT_ALGORITHM``, ``JWT_EXPIRY_SECONDS``).
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import jwt

from auth.errors import UnauthorizedError


class TokenService:
    def __init__(self, secret: str, *, algorithm: str = "HS256", expiry_seconds: int = 3600) -> None:
        if not secret:
            raise ValueError("TokenService requires a non-empty secret")
        self._secret = secret
        self._algorithm = algorithm
        self.expiry_seconds = expiry_seconds

    def create_token(self, user_id: str, *, now: Optional[int] = None) -> str:
        """Create a signed token for ``user_id`` expiring after ``expiry_seconds``."""
        issued_at = int(time.time()) if now is None else now
        payload: Dict[str, Any] = {
            "id": user_id,
            "iat": issued_at,
            "exp": issued_at + self.expiry_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            options={"require": ["exp", "id"]},
        )

    def verify_token(self, token: str) -> str:
        """
        Verify token and return the user id.

        Raises ``UnauthorizedError`` on invalid or expired tokens.
        """
        try:
            payload = self.decode(token)
        except jwt.InvalidTokenError as exc:
            raise UnauthorizedError() from exc
        return str(payload["id"])
