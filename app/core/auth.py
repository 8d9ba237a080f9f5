"""Session authentication helpers.

Sessions are issued by the external auth provider. This module only finds
the access token on a request and asks the provider which subject it
belongs to.

Token lookup order:
- ``Authorization: Bearer <token>`` header
- ``sb-access-token`` cookie
"""

from __future__ import annotations

import logging

from fastapi import Request

from app.adapters.auth.base import AbstractAuthProvider
from app.core.errors import AuthenticationAppError, AuthProviderError, ConfigurationAppError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "sb-access-token"


def extract_access_token(request: Request) -> str | None:
    """Return the session access token carried by ``request``, if any.

    Examples:
        Authorization: Bearer abc  -> "abc"
        Cookie: sb-access-token=abc -> "abc"
        (neither)                   -> None
    """
    authorization = request.headers.get("authorization")
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()

    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if cookie_token:
        return cookie_token
    return None


async def identify_subject(provider: AbstractAuthProvider, request: Request) -> str | None:
    """Resolve the subject id for the request's session.

    Provider outages are logged and treated as "no session", so guarded
    pages fall back to the login redirect.
    """
    token = extract_access_token(request)
    if not token:
        return None

    try:
        return await provider.get_subject_id(token)
    except AuthProviderError as exc:
        logger.warning(
            "auth.provider_error",
            extra={"error_code": exc.code, "fallback": "anonymous"},
        )
        return None


async def require_subject(request: Request) -> str:
    """FastAPI dependency returning the authenticated subject id.

    Reuses the subject found by the route guard middleware when present.

    Raises:
        ConfigurationAppError: If the auth provider is not configured.
        AuthenticationAppError: Without a valid session (401).
    """
    subject_id = getattr(request.state, "subject_id", None)
    if subject_id:
        return subject_id

    provider: AbstractAuthProvider | None = getattr(request.app.state, "auth_provider", None)
    if provider is None:
        raise ConfigurationAppError(
            code="server_configuration_error",
            message="Server configuration error",
        )

    subject_id = await identify_subject(provider, request)
    if not subject_id:
        logger.info("auth.missing_session", extra={"path": request.url.path})
        raise AuthenticationAppError(
            code="not_authenticated",
            message="Authentication required",
        )

    request.state.subject_id = subject_id
    return subject_id
