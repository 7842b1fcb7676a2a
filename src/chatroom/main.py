"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The password hasher and token issuer are built here, once,
from settings and parked on app.state; request dependencies read them
from there. Lifespan only logs startup and disposes the engine.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatroom import __version__
from chatroom.api import api_router
from chatroom.auth.jwt import TokenIssuer
from chatroom.auth.password import PasswordHasher
from chatroom.config import Settings, settings as default_settings
from chatroom.middleware.request_id import RequestIdMiddleware
from chatroom.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    cfg: Settings = app.state.settings
    logger.info(
        "chatroom.starting",
        version=__version__,
        environment=cfg.environment,
        port=cfg.port,
    )

    yield

    logger.info("chatroom.shutdown")

    from chatroom.db.engine import engine
    await engine.dispose()


def create_app(cfg: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    cfg = cfg or default_settings

    app = FastAPI(
        title="Chatroom",
        description="Chat backend — accounts, rooms, and messages",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.password_hasher = PasswordHasher(
        iterations=cfg.password_hash_iterations
    )
    app.state.token_issuer = TokenIssuer(
        secret=cfg.jwt_secret,
        ttl_seconds=cfg.token_ttl_seconds,
        algorithm=cfg.jwt_algorithm,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: chatroom.main:app)
app = create_app()
