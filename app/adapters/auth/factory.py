"""Factory for the auth provider client."""

from app.adapters.auth.base import AbstractAuthProvider
from app.adapters.auth.supabase_client import SupabaseAuthProvider
from app.adapters.membership.factory import missing_supabase_settings
from app.core.config import SupabaseSettings, settings
from app.core.errors import ConfigurationAppError


def create_auth_provider(cfg: SupabaseSettings | None = None) -> AbstractAuthProvider:
    """Instantiate the auth provider from configuration.

    Raises:
        ConfigurationAppError: If the project URL or anon key is missing.
    """
    cfg = cfg or settings.supabase

    missing = missing_supabase_settings(cfg)
    if missing:
        raise ConfigurationAppError(
            code="server_configuration_error",
            message="Auth provider credentials are not configured",
            details={"missing": missing},
        )

    return SupabaseAuthProvider(
        url=cfg.url,
        anon_key=cfg.anon_key,
        timeout_seconds=cfg.timeout_seconds,
    )
