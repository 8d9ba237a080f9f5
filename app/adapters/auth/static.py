"""Auth provider backed by a fixed token -> subject mapping.

Test double injected through ``create_app(auth_provider=...)``; the factory
never selects it. ``fail_with`` simulates a provider outage.
"""

from __future__ import annotations

from typing import Mapping

from app.adapters.auth.base import AbstractAuthProvider
from app.core.errors import AuthProviderError


class StaticAuthProvider(AbstractAuthProvider):
    def __init__(self, sessions: Mapping[str, str] | None = None) -> None:
        self.sessions: dict[str, str] = dict(sessions or {})
        self.fail_with: AuthProviderError | None = None

    async def get_subject_id(self, access_token: str) -> str | None:
        if self.fail_with is not None:
            raise self.fail_with
        return self.sessions.get(access_token)
