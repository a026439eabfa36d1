from __future__ import annotations

"""
Entry point for the Product Catalog HTTP API.

This module creates the FastAPI application, wires up persistence, security
and middleware, and mounts the routers under the configured API prefix.

Intended usage:
    uvicorn catalog_http_api.main:app --host 0.0.0.0 --port 8080
"""

import os
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_http_api import __version__
from catalog_http_api.config import AppEnv, Settings, get_settings
from catalog_http_api.db.models import Base
from catalog_http_api.db.seed import seed_demo_data
from catalog_http_api.db.session import build_engine, build_session_factory, db_session
from catalog_http_api.errors import register_exception_handlers
from catalog_http_api.logging import get_logger
from catalog_http_api.logging.config import configure_logging
from catalog_http_api.logging.middleware import REQUEST_ID_HEADER, RequestContextMiddleware
from catalog_http_api.routers import auth, products
from catalog_http_api.security.access_filter import AccessFilterMiddleware
from catalog_http_api.security.passwords import PasswordHasher
from catalog_http_api.security.policy import AuthorizationPolicy
from catalog_http_api.security.tokens import TokenCodec

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Create tables (and optionally demo data) on startup, dispose of the
    engine on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "app_startup",
        app_name=settings.APP_NAME,
        env=settings.APP_ENV.value,
        version=__version__,
        api_root=settings.api_root,
    )

    Base.metadata.create_all(app.state.engine)
    if settings.SEED_DEMO_DATA:
        with db_session(app.state.session_factory) as session:
            seed_demo_data(session, settings, app.state.password_hasher)

    yield

    logger.info("app_shutdown")
    app.state.engine.dispose()


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    ``settings`` defaults to the process-wide instance from ``get_settings``;
    tests pass their own.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    if settings.APP_ENV == AppEnv.PRODUCTION and settings.uses_default_secret:
        raise RuntimeError("JWT_SECRET must be set to a non-default value in production")
    if settings.uses_default_secret:
        logger.warning("default_jwt_secret_in_use", env=settings.APP_ENV.value)

    docs_enabled = settings.DOCS_ENABLED
    app = FastAPI(
        title="Product Catalog API",
        version=__version__,
        description="Product catalog with JWT authentication and role-based access.",
        openapi_url="/openapi.json" if docs_enabled else None,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        lifespan=lifespan,
    )

    # Process-wide resources, read-only after startup.
    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_codec = TokenCodec(
        settings.JWT_SECRET,
        lifetime=timedelta(seconds=settings.JWT_EXPIRATION_SECONDS),
        algorithm=settings.JWT_ALGORITHM,
    )
    app.state.password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.policy = AuthorizationPolicy()

    register_exception_handlers(app)

    # Added innermost first: CORS wraps everything so preflights and error
    # responses carry CORS headers.
    app.add_middleware(
        AccessFilterMiddleware,
        codec=app.state.token_codec,
        policy=app.state.policy,
        api_root=settings.api_root,
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.cors_methods,
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=settings.CORS_MAX_AGE,
    )

    # Simple health check
    @app.get("/health", tags=["system"])
    async def health() -> dict:
        return {
            "status": "ok",
            "version": __version__,
            "api_root": settings.api_root,
        }

    app.include_router(auth.router, prefix=settings.api_root)
    app.include_router(products.router, prefix=settings.api_root)

    return app


# Default application instance
app = create_app()


# ---------------------------------------------------------------------------
# Local development entry point
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    host = os.getenv("CATALOG_HTTP_API_HOST", "0.0.0.0")
    port_str = os.getenv("CATALOG_HTTP_API_PORT", "8080")

    try:
        port = int(port_str)
    except ValueError:
        raise SystemExit(
            f"Invalid CATALOG_HTTP_API_PORT value {port_str!r}; must be an integer."
        ) from None

    import uvicorn

    uvicorn.run(
        "catalog_http_api.main:app",
        host=host,
        port=port,
        reload=os.getenv("CATALOG_HTTP_API_RELOAD", "false").lower() == "true",
    )
