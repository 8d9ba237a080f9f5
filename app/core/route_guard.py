"""HTTP middleware enforcing role-based routing on page navigations.

Every request except health and docs is refused with 500 while the
auth/membership configuration is missing (logged once per process, not once
per request). Otherwise, for every page navigation the middleware:
- Identifies the session subject through the auth provider
- Resolves admin status through the cached resolver
- Redirects (307) or forwards according to ``decide_route``

API routes (``/api/...``) skip the routing decision; they authenticate
through dependencies instead.

Usage:
    app.middleware("http")(route_guard_middleware)
"""

from __future__ import annotations

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from app.core.auth import identify_subject
from app.core.logging import get_request_id, hash_identifier
from app.services.route_guard import decide_route

logger = logging.getLogger(__name__)

# Served even without store configuration
ALWAYS_OPEN_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico"})
ALWAYS_OPEN_PREFIXES = ("/docs/", "/static/")

API_PREFIX = "/api"

_config_error_logged = False


def is_always_open(pathname: str) -> bool:
    return pathname in ALWAYS_OPEN_PATHS or pathname.startswith(ALWAYS_OPEN_PREFIXES)


def is_api_path(pathname: str) -> bool:
    return pathname == API_PREFIX or pathname.startswith(API_PREFIX + "/")


def _redirect_target(request: Request, path: str) -> str:
    # Query string survives the redirect (e.g. /dashboard?next=x -> /login?next=x)
    query = request.url.query
    return f"{path}?{query}" if query else path


def _configuration_error_response(request: Request) -> JSONResponse:
    global _config_error_logged

    if not _config_error_logged:
        error = request.app.state.configuration_error
        logger.error(
            "route_guard.configuration_missing",
            extra={
                "error_code": error.code,
                "missing": (error.details or {}).get("missing"),
                "hint": "Set SUPABASE_URL and SUPABASE_ANON_KEY and restart the server",
            },
        )
        _config_error_logged = True

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "server_configuration_error",
                "message": "Server configuration error",
                "request_id": get_request_id(),
            }
        },
    )


async def route_guard_middleware(request: Request, call_next) -> Response:
    """Apply the route guard to one request.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: 500 on missing configuration, 307 redirect, or the
            downstream response.

    Side Effects:
        Sets ``request.state.subject_id`` and ``request.state.is_admin`` for
        requests that are allowed through.
    """

    pathname = request.url.path
    if is_always_open(pathname):
        return await call_next(request)

    state = request.app.state
    if getattr(state, "configuration_error", None) is not None:
        return _configuration_error_response(request)

    if is_api_path(pathname):
        return await call_next(request)

    subject_id = await identify_subject(state.auth_provider, request)
    is_admin = await state.admin_resolver.resolve(subject_id) if subject_id else False

    decision = decide_route(
        authenticated=subject_id is not None,
        is_admin=is_admin,
        pathname=pathname,
    )

    if not decision.allowed:
        logger.info(
            "route_guard.redirect",
            extra={
                "path": pathname,
                "redirect_to": decision.redirect_to,
                "subject_hash": hash_identifier(subject_id) if subject_id else None,
                "is_admin": is_admin,
            },
        )
        return RedirectResponse(
            url=_redirect_target(request, decision.redirect_to),
            status_code=307,
        )

    request.state.subject_id = subject_id
    request.state.is_admin = is_admin
    return await call_next(request)
