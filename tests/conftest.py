"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets TESTING so the .env file is never loaded and clears store
credentials so every test builds its collaborators explicitly.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_ANON_KEY", None)
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.adapters.auth.static import StaticAuthProvider
from app.adapters.membership.in_memory import InMemoryMembershipStore
from app.core import rate_limit
from app.core.app_factory import create_app

ADMIN_ID = "admin-0001"
PARTICIPANT_ID = "participant-0001"
ADMIN_TOKEN = "admin-token"
PARTICIPANT_TOKEN = "participant-token"


class FakeClock:
    """Deterministic clock used to test expiration logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture(autouse=True)
def _fresh_rate_limiter():
    """Each test starts with an empty process-wide limiter."""
    rate_limit.reset_rate_limiter()
    yield
    rate_limit.reset_rate_limiter()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def membership_store() -> InMemoryMembershipStore:
    return InMemoryMembershipStore(admin_ids={ADMIN_ID})


@pytest.fixture
def auth_provider() -> StaticAuthProvider:
    return StaticAuthProvider({ADMIN_TOKEN: ADMIN_ID, PARTICIPANT_TOKEN: PARTICIPANT_ID})


@pytest.fixture
def app(auth_provider, membership_store, clock) -> FastAPI:
    return create_app(
        auth_provider=auth_provider,
        membership_store=membership_store,
        admin_clock=clock,
    )


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def participant_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {PARTICIPANT_TOKEN}"}


@pytest.fixture
def admin_id() -> str:
    return ADMIN_ID


@pytest.fixture
def participant_id() -> str:
    return PARTICIPANT_ID
