"""
FastAPI application for the admin portal.

This is the HTTP API the portal frontend talks to. `create_app()` builds a
fresh application; tests pass their own settings, provider and store.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal import __version__
from portal.api import admin, companies, invitations, setup, shortcuts, users
from portal.api.middleware import RequestLoggingMiddleware
from portal.api.responses import install_error_handlers
from portal.auth.providers import AuthProvider, create_auth_provider
from portal.auth.routes import router as auth_router
from portal.config import Settings, configure_logging, get_settings
from portal.core.utils import utc_now
from portal.integrations.sentry import init_sentry
from portal.storage import DataStore, create_data_store

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
SERVICE_NAME = "multi-tenant-admin-portal"


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings: Settings = app.state.settings

    init_sentry(settings)
    logger.info(
        f"Admin portal starting in {settings.environment} mode "
        f"(auth={settings.auth_provider}, db={settings.db_provider})"
    )

    yield

    await app.state.store.close()
    await app.state.auth_provider.close()
    logger.info("Admin portal shutting down")


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    auth_provider: AuthProvider | None = None,
    store: DataStore | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Admin Portal API",
        description="Multi-tenant admin portal: companies, users, invitations and browser setup",
        version=__version__,
        lifespan=lifespan,
    )

    # Handles live on app.state so they exist with or without the lifespan
    app.state.settings = settings
    app.state.auth_provider = auth_provider or create_auth_provider(settings)
    app.state.store = store or create_data_store(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    install_error_handlers(app)

    app.include_router(auth_router, prefix=API_PREFIX)
    for module in (companies, users, invitations, shortcuts, setup, admin):
        app.include_router(module.router, prefix=API_PREFIX)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "timestamp": utc_now(), "service": SERVICE_NAME}

    return app
