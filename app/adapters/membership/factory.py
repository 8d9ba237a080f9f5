"""Factory for the membership store used by the admin status resolver."""

from app.adapters.membership.base import AbstractMembershipStore
from app.adapters.membership.supabase_client import SupabaseMembershipStore
from app.core.config import SupabaseSettings, settings
from app.core.errors import ConfigurationAppError


def missing_supabase_settings(cfg: SupabaseSettings) -> list[str]:
    """Names of the required environment variables that are not set."""
    missing = []
    if not cfg.url:
        missing.append("SUPABASE_URL")
    if not cfg.anon_key:
        missing.append("SUPABASE_ANON_KEY")
    return missing


def create_membership_store(cfg: SupabaseSettings | None = None) -> AbstractMembershipStore:
    """Instantiate the membership store from configuration.

    Returns:
        AbstractMembershipStore: Configured store client.

    Raises:
        ConfigurationAppError: If the project URL or anon key is missing.
    """
    cfg = cfg or settings.supabase

    missing = missing_supabase_settings(cfg)
    if missing:
        raise ConfigurationAppError(
            code="server_configuration_error",
            message="Membership store credentials are not configured",
            details={"missing": missing},
        )

    return SupabaseMembershipStore(
        url=cfg.url,
        anon_key=cfg.anon_key,
        timeout_seconds=cfg.timeout_seconds,
    )
