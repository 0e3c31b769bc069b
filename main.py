"""
Login backend — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from api.middleware import register_middleware
from auth.errors import register_exception_handlers
from auth.firebase import FirebaseVerifier, IdentityVerifier
from auth.routes import router as auth_router
from auth.service import AuthService
from auth.tokens import TokenService
from config.settings import Settings, config
from database.session import Database
from database.users import UserStore

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3", "google.auth", "cachecontrol"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    verifier: Optional[IdentityVerifier] = None,
) -> FastAPI:
    settings = settings or config
    database = database or Database(settings.database_url, pool_size=settings.database_pool_size)
    verifier = verifier or FirebaseVerifier(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.connect()
        if isinstance(verifier, FirebaseVerifier):
            verifier.initialize()
        app.state.auth_service = AuthService(
            users=UserStore(database),
            tokens=TokenService(
                settings.jwt_secret,
                algorithm=settings.jwt_algorithm,
                expiry_seconds=settings.jwt_expiry_seconds,
            ),
            verifier=verifier,
            bcrypt_rounds=settings.bcrypt_rounds,
        )
        logger.info("Application ready to accept requests.")
        yield
        await database.disconnect()

    app = FastAPI(
        title="Login Backend",
        version="1.0.0",
        description="Username/password and Google Sign-In authentication.",
        lifespan=lifespan,
    )

    register_middleware(app, settings)
    register_exception_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    async def health() -> str:
        return "Login Backend is running!"

    app.include_router(auth_router)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
