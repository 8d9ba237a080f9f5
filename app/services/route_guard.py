"""Role-based routing decisions for page navigations.

``decide_route`` is a pure function of (authenticated, is_admin, pathname).
It owns no state; admin status comes from ``AdminStatusResolver``.
"""

from __future__ import annotations

from dataclasses import dataclass

LOGIN_PATH = "/login"
ADMIN_HOME = "/admin"
PARTICIPANT_HOME = "/dashboard"

# Exact-match public paths
PUBLIC_PATHS = frozenset({"/"})
# Public sections, matched together with their sub-paths
PUBLIC_PREFIXES = ("/login", "/register", "/auth/callback")

PARTICIPANT_PATHS = frozenset({"/events"})
PARTICIPANT_PREFIXES = ("/dashboard",)

ADMIN_PREFIXES = ("/admin",)


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of a route guard check.

    Attributes:
        redirect_to: Target path, or None when the request may proceed.
    """

    redirect_to: str | None = None

    @property
    def allowed(self) -> bool:
        return self.redirect_to is None

    @classmethod
    def allow(cls) -> RouteDecision:
        return cls()

    @classmethod
    def redirect(cls, target: str) -> RouteDecision:
        return cls(redirect_to=target)


def _normalize(pathname: str) -> str:
    if len(pathname) > 1:
        pathname = pathname.rstrip("/") or "/"
    return pathname or "/"


def _under(pathname: str, prefixes: tuple[str, ...]) -> bool:
    """Segment-aware prefix check: ``/admin`` covers ``/admin/x`` but not ``/administrator``."""
    return any(pathname == p or pathname.startswith(p + "/") for p in prefixes)


def is_public_path(pathname: str) -> bool:
    pathname = _normalize(pathname)
    return pathname in PUBLIC_PATHS or _under(pathname, PUBLIC_PREFIXES)


def is_admin_area(pathname: str) -> bool:
    return _under(_normalize(pathname), ADMIN_PREFIXES)


def is_participant_area(pathname: str) -> bool:
    pathname = _normalize(pathname)
    return pathname in PARTICIPANT_PATHS or _under(pathname, PARTICIPANT_PREFIXES)


def decide_route(*, authenticated: bool, is_admin: bool, pathname: str) -> RouteDecision:
    """Decide whether a navigation proceeds or is redirected.

    Rules, first match wins:
        1. Anonymous request outside the public paths -> login.
        2. Admin inside the participant area (and not the admin area) -> admin home.
        3. Non-admin inside the admin area -> participant dashboard.
        4. Anything else proceeds.

    Args:
        authenticated: Whether the request carries a valid session.
        is_admin: Resolved admin flag (ignored for anonymous requests).
        pathname: Request path without query string.

    Returns:
        RouteDecision: allow, or redirect with the target path.
    """
    if not authenticated:
        if is_public_path(pathname):
            return RouteDecision.allow()
        return RouteDecision.redirect(LOGIN_PATH)

    admin_area = is_admin_area(pathname)

    if is_admin and is_participant_area(pathname) and not admin_area:
        return RouteDecision.redirect(ADMIN_HOME)

    if not is_admin and admin_area:
        return RouteDecision.redirect(PARTICIPANT_HOME)

    return RouteDecision.allow()
