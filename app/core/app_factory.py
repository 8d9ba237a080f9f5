"""Application factory for FastAPI app.

Centralizes app construction (metadata, collaborators, middleware, handlers,
routers) so tests can build isolated apps with in-memory adapters.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI

from app.adapters.auth.base import AbstractAuthProvider
from app.adapters.auth.factory import create_auth_provider
from app.adapters.membership.base import AbstractMembershipStore
from app.adapters.membership.factory import create_membership_store
from app.api.routes import access_router, bookings_router, health_router, rate_limit_router
from app.core.config import settings
from app.core.errors import ConfigurationAppError
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.route_guard import route_guard_middleware
from app.services.admin_status import AdminStatusResolver

logger = logging.getLogger(__name__)


def _attach_collaborators(
    app: FastAPI,
    auth_provider: AbstractAuthProvider | None,
    membership_store: AbstractMembershipStore | None,
    admin_clock: Callable[[], float] | None,
) -> None:
    """Build the auth provider, membership store and admin resolver on ``app.state``.

    Missing credentials don't abort startup: the error is kept on
    ``app.state.configuration_error`` and the route guard answers 500.
    """
    app.state.configuration_error = None
    app.state.auth_provider = None
    app.state.admin_resolver = None
    app.state.membership_store = None

    try:
        if auth_provider is None:
            auth_provider = create_auth_provider()
        if membership_store is None:
            membership_store = create_membership_store()
    except ConfigurationAppError as exc:
        app.state.configuration_error = exc
        return

    resolver_kwargs = {}
    if admin_clock is not None:
        resolver_kwargs["clock"] = admin_clock

    app.state.auth_provider = auth_provider
    app.state.admin_resolver = AdminStatusResolver(
        membership_store,
        ttl_seconds=settings.app.admin_cache_ttl_seconds,
        sweep_threshold=settings.app.admin_cache_sweep_threshold,
        **resolver_kwargs,
    )
    app.state.membership_store = membership_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.configuration_error is None:
        logger.info(
            "app.startup",
            extra={
                "env": settings.app_env,
                "admin_cache_ttl_s": settings.app.admin_cache_ttl_seconds,
            },
        )
    yield

    # Close HTTP connection pools held by the adapters
    for collaborator in (
        getattr(app.state, "auth_provider", None),
        getattr(app.state, "membership_store", None),
    ):
        aclose = getattr(collaborator, "aclose", None)
        if aclose is not None:
            await aclose()


def create_app(
    *,
    auth_provider: AbstractAuthProvider | None = None,
    membership_store: AbstractMembershipStore | None = None,
    admin_clock: Callable[[], float] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        auth_provider: Override for the session -> subject lookup.
        membership_store: Override for the admin membership store.
        admin_clock: Override for the admin cache clock.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Study Portal Access API",
        description=(
            "Request-time access policies for the research study portal: "
            "role-based route guarding backed by a cached admin status lookup, "
            "fixed-window rate limits for registration, login and email resend, "
            "and the 24-hour booking cancellation window."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    _attach_collaborators(app, auth_provider, membership_store, admin_clock)

    # Middleware: the last one registered runs first
    app.middleware("http")(route_guard_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(access_router)
    app.include_router(rate_limit_router)
    app.include_router(bookings_router)

    # OpenAPI customizations (security scheme, tags, exemptions)
    apply_openapi_customizations(app)

    return app
