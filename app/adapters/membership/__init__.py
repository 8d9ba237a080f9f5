"""Membership store adapters - authoritative source of admin status."""

from app.adapters.membership.base import AbstractMembershipStore
from app.adapters.membership.factory import create_membership_store
from app.adapters.membership.in_memory import InMemoryMembershipStore
from app.adapters.membership.supabase_client import SupabaseMembershipStore

__all__ = [
    "AbstractMembershipStore",
    "InMemoryMembershipStore",
    "SupabaseMembershipStore",
    "create_membership_store",
]
