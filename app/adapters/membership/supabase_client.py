"""Supabase (PostgREST) membership store adapter."""

from __future__ import annotations

import time
from typing import Any

import httpx

from app.adapters.membership.base import AbstractMembershipStore
from app.core.errors import MembershipStoreError
from app.core.observability import log_store_operation

ADMIN_TABLE = "admin_users"


class SupabaseMembershipStore(AbstractMembershipStore):
    """Checks the ``admin_users`` table through the PostgREST endpoint.

    The request is made with the project's anon key. Row-level security on
    the table decides what the key may read; an empty result is "not admin".
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout_seconds: float = 5.0,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the membership store client.

        Args:
            url: Project base URL.
            anon_key: Public API key sent as ``apikey`` and bearer token.
            timeout_seconds: Timeout for each lookup in seconds.
            client: Optional pre-built client (tests inject a mock transport).
        """
        self.base_url = url.rstrip("/")
        self.client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={
                "apikey": anon_key,
                "Authorization": f"Bearer {anon_key}",
                "Accept": "application/json",
            },
        )

    async def is_admin(self, subject_id: str) -> bool:
        """Return True when an ``admin_users`` row exists for the subject.

        Raises:
            MembershipStoreError: On transport errors, non-2xx answers or a
                body that is not a JSON list.
        """
        params = {
            "select": "user_id",
            "user_id": f"eq.{subject_id}",
            "limit": "1",
        }
        start = time.perf_counter()

        try:
            response = await self.client.get(f"{self.base_url}/rest/v1/{ADMIN_TABLE}", params=params)
            response.raise_for_status()
            rows: Any = response.json()
        except httpx.HTTPStatusError as exc:
            raise MembershipStoreError(
                code="membership_store_error",
                message=f"Membership store returned HTTP {exc.response.status_code}",
                details={"http_status": exc.response.status_code},
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise MembershipStoreError(
                code="membership_store_unreachable",
                message=f"Membership store request failed: {exc}",
            ) from exc

        if not isinstance(rows, list):
            raise MembershipStoreError(
                code="membership_store_bad_response",
                message="Membership store returned an unexpected payload",
            )

        log_store_operation(
            operation="select",
            table=ADMIN_TABLE,
            subject_id=subject_id,
            duration_ms=(time.perf_counter() - start) * 1000,
            result_count=len(rows),
        )
        return len(rows) > 0

    async def aclose(self) -> None:
        await self.client.aclose()
