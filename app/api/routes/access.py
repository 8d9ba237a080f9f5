from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.core.auth import require_subject
from app.core.errors import ConfigurationAppError
from app.core.rate_limit import enforce_api_rate_limit, get_client_ip
from app.schemas.access import AdminStatusResponse, ClientIPResponse
from app.services.admin_status import AdminStatusResolver

router = APIRouter(prefix="/api", tags=["Access"], dependencies=[Depends(enforce_api_rate_limit)])


def get_admin_resolver(request: Request) -> AdminStatusResolver:
    """Return the application's admin status resolver.

    Raises:
        ConfigurationAppError: If the membership store is not configured.
    """
    resolver: AdminStatusResolver | None = getattr(request.app.state, "admin_resolver", None)
    if resolver is None:
        raise ConfigurationAppError(
            code="server_configuration_error",
            message="Server configuration error",
        )
    return resolver


@router.get("/get-ip", response_model=ClientIPResponse)
async def get_ip(request: Request) -> ClientIPResponse:
    """Return the client address the server keys rate limits by."""
    return ClientIPResponse(ip=get_client_ip(request))


@router.get("/me/admin-status", response_model=AdminStatusResponse)
async def admin_status(
    subject_id: str = Depends(require_subject),
    resolver: AdminStatusResolver = Depends(get_admin_resolver),
) -> AdminStatusResponse:
    """Report whether the current session belongs to an administrator.

    Served from the admin status cache; a store outage answers False.
    """
    is_admin = await resolver.resolve(subject_id)
    return AdminStatusResponse(subject_id=subject_id, is_admin=is_admin)
