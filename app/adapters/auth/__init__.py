"""Auth provider adapters - identify the subject behind a session token."""

from app.adapters.auth.base import AbstractAuthProvider
from app.adapters.auth.factory import create_auth_provider
from app.adapters.auth.static import StaticAuthProvider
from app.adapters.auth.supabase_client import SupabaseAuthProvider

__all__ = [
    "AbstractAuthProvider",
    "StaticAuthProvider",
    "SupabaseAuthProvider",
    "create_auth_provider",
]
