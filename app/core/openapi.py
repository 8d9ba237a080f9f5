"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with:
- Tags metadata
- Bearer session security scheme with per-path overrides

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

# Paths that work without a session
PUBLIC_OPERATIONS = ("/health", "/api/get-ip", "/api/rate-limit/check")


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and security.

    - Injects components.securitySchemes for the provider-issued access token
    - Marks all operations as requiring a session by default, then exempts
      public operations by setting ``security: []``
    - Adds tags metadata if not present
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "SessionToken",
            {
                "type": "http",
                "scheme": "bearer",
                "description": (
                    "Access token issued by the auth provider. The sb-access-token "
                    "cookie is accepted as well."
                ),
            },
        )

        schema.setdefault("security", [{"SessionToken": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Access", "description": "Client identity and admin status."},
            {"name": "Rate limit", "description": "Attempt counting for sensitive actions."},
            {"name": "Bookings", "description": "Booking policy checks."},
            {"name": "Health", "description": "Liveness checks."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if path in PUBLIC_OPERATIONS:
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
