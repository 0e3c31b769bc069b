"""
Domain errors for the auth flows and their translation to JSON responses.

Every error carries the HTTP status and the client-facing message; the
exception handler renders them as ``{"success": false, "message": ...}``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AuthError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error."

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Username and password are required!"


class ConflictError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists!"


class NotFoundError(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found!"


class InvalidCredentialsError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid credentials!"


class InvalidTokenError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid Google ID token."


class UnauthorizedError(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token."


class InternalError(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error."


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Render domain errors, malformed bodies and unexpected failures as
    ``success: false`` JSON.
    """

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
        logger.warning("Rejected body for %s %s: %s", request.method, request.url.path, fields)
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body.")

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, InternalError.message)
