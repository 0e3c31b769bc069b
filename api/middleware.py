"""
Global middleware.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config.settings import Settings

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]


def register_middleware(app: FastAPI, settings: Settings) -> None:
    """Attach CORS, cross-origin isolation headers and the request timer."""
    allowed_origins = settings.allowed_origins()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    isolation_headers = {
        "Cross-Origin-Opener-Policy": settings.cross_origin_opener_policy,
        "Cross-Origin-Embedder-Policy": settings.cross_origin_embedder_policy,
    }
    isolation_headers = {k: v for k, v in isolation_headers.items() if v}

    @app.middleware("http")
    async def cross_origin_isolation(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and origin not in allowed_origins:
            logger.error("Blocked by CORS policy: %s", origin)
        response = await call_next(request)
        for name, value in isolation_headers.items():
            response.headers[name] = value
        return response

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s %s — %.3fs", request.method, request.url.path, response.status_code, elapsed)
        return response
