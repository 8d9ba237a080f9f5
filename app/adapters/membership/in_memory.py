"""Membership store backed by a set of admin ids.

Test double injected through ``create_app(membership_store=...)``; the
factory never selects it. ``fail_with`` turns the store into a
stand-in for an outage: every lookup raises the given error.
"""

from __future__ import annotations

from typing import Iterable

from app.adapters.membership.base import AbstractMembershipStore
from app.core.errors import MembershipStoreError


class InMemoryMembershipStore(AbstractMembershipStore):
    def __init__(self, admin_ids: Iterable[str] = ()) -> None:
        self.admin_ids: set[str] = set(admin_ids)
        self.fail_with: MembershipStoreError | None = None
        self.calls: list[str] = []

    async def is_admin(self, subject_id: str) -> bool:
        self.calls.append(subject_id)
        if self.fail_with is not None:
            raise self.fail_with
        return subject_id in self.admin_ids

    def grant(self, subject_id: str) -> None:
        self.admin_ids.add(subject_id)

    def revoke(self, subject_id: str) -> None:
        self.admin_ids.discard(subject_id)
