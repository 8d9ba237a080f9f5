"""Supabase Auth (GoTrue) adapter."""

from __future__ import annotations

import time

import httpx

from app.adapters.auth.base import AbstractAuthProvider
from app.core.errors import AuthProviderError
from app.core.observability import log_store_operation


class SupabaseAuthProvider(AbstractAuthProvider):
    """Resolves access tokens through ``GET /auth/v1/user``.

    Session issuance, refresh and email verification stay with the provider;
    this adapter only asks who a token belongs to.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout_seconds: float = 5.0,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = url.rstrip("/")
        self.anon_key = anon_key
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def get_subject_id(self, access_token: str) -> str | None:
        """Return the user id for a valid token, None for a rejected one.

        Raises:
            AuthProviderError: On transport errors, 5xx answers or a body
                without an ``id``.
        """
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token}",
        }
        start = time.perf_counter()

        try:
            response = await self.client.get(f"{self.base_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as exc:
            error = AuthProviderError(
                code="auth_provider_unreachable",
                message=f"Auth provider request failed: {exc}",
            )
            log_store_operation(
                operation="get_user",
                table="auth.users",
                error=error,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            raise error from exc

        # Expired, revoked or malformed tokens
        if response.status_code in (400, 401, 403, 404):
            return None

        if response.is_error:
            error = AuthProviderError(
                code="auth_provider_error",
                message=f"Auth provider returned HTTP {response.status_code}",
                details={"http_status": response.status_code},
            )
            log_store_operation(
                operation="get_user",
                table="auth.users",
                error=error,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            raise error

        try:
            subject_id = response.json().get("id")
        except (ValueError, AttributeError) as exc:
            raise AuthProviderError(
                code="auth_provider_bad_response",
                message="Auth provider returned an unexpected payload",
            ) from exc

        if not subject_id:
            raise AuthProviderError(
                code="auth_provider_bad_response",
                message="Auth provider returned a user without an id",
            )
        return str(subject_id)

    async def aclose(self) -> None:
        await self.client.aclose()
