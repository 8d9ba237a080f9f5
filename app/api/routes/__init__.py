from __future__ import annotations

from app.api.routes.access import router as access_router
from app.api.routes.bookings import router as bookings_router
from app.api.routes.health import router as health_router
from app.api.routes.rate_limit import router as rate_limit_router

__all__ = ["access_router", "bookings_router", "health_router", "rate_limit_router"]
