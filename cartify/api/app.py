"""
FastAPI application for Cartify.

`create_app()` wires the access-control core, the routers and the
static files. `app` is the default instance for:

    uvicorn cartify.api.app:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Iterable

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from cartify import __version__
from cartify.auth import (
    AccessControlMiddleware,
    CredentialStore,
    InMemoryCredentialStore,
    Rule,
    Security,
    auth_router,
    load_rules,
)
from cartify.api.pages import router as pages_router
from cartify.catalog import CategoryService, categories_router
from cartify.config import Settings, configure_logging, get_settings
from cartify.integrations.sentry import init_sentry
from cartify.templating import STATIC_DIR

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings: Settings = app.state.settings

    configure_logging(settings)
    init_sentry(settings)

    logger.info("Cartify starting in %s mode", settings.environment)

    yield

    logger.info("Cartify shutting down")


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    store: CredentialStore | None = None,
    rules: Iterable[Rule] | None = None,
) -> FastAPI:
    """
    Build a Cartify application.

    Args:
        settings: Defaults to the cached environment settings
        store: Where principals are looked up (in-memory if omitted)
        rules: URL table; falls back to `security_rules_file`, then the
            built-in table
    """
    settings = settings or get_settings()
    store = store if store is not None else InMemoryCredentialStore()
    if rules is None and settings.security_rules_file:
        rules = load_rules(settings.security_rules_file)

    security = Security(store, settings.security_config(), rules)

    app = FastAPI(
        title="Cartify",
        description="Storefront and back-office with role-based access control",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.security = security
    app.state.categories = CategoryService()

    app.add_middleware(AccessControlMiddleware, security=security)

    app.include_router(auth_router)
    app.include_router(pages_router)
    app.include_router(categories_router)

    for folder in ("css", "js", "images"):
        directory = STATIC_DIR / folder
        if directory.is_dir():
            app.mount(f"/{folder}", StaticFiles(directory=str(directory)), name=folder)

    return app


app = create_app()
