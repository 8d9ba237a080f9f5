"""Unit tests for the cached admin status resolver."""

import logging

import pytest

from app.adapters.membership.base import AbstractMembershipStore
from app.adapters.membership.in_memory import InMemoryMembershipStore
from app.core.errors import MembershipStoreError
from app.services.admin_status import AdminStatusResolver


class ExplodingStore(AbstractMembershipStore):
    """Fails the test if the resolver reaches the store."""

    async def is_admin(self, subject_id: str) -> bool:
        raise AssertionError(f"store queried for {subject_id}")


def _outage() -> MembershipStoreError:
    return MembershipStoreError(code="membership_store_unreachable", message="connection refused")


@pytest.mark.asyncio
async def test_miss_queries_store_once_and_caches_with_ttl(clock) -> None:
    store = InMemoryMembershipStore(admin_ids={"u1"})
    resolver = AdminStatusResolver(store, ttl_seconds=300, clock=clock)

    assert await resolver.resolve("u1") is True

    assert store.calls == ["u1"]
    entry = resolver._entries["u1"]
    assert entry.is_admin is True
    assert entry.expires_at == clock.current + 300


@pytest.mark.asyncio
async def test_live_entry_is_served_without_store(clock) -> None:
    store = InMemoryMembershipStore(admin_ids={"u1"})
    resolver = AdminStatusResolver(store, ttl_seconds=300, clock=clock)
    await resolver.resolve("u1")
    await resolver.resolve("u2")

    resolver._store = ExplodingStore()
    clock.advance(299)

    assert await resolver.resolve("u1") is True
    assert await resolver.resolve("u2") is False


@pytest.mark.asyncio
async def test_repeated_resolves_within_ttl_are_identical(clock) -> None:
    store = InMemoryMembershipStore(admin_ids={"u1"})
    resolver = AdminStatusResolver(store, ttl_seconds=300, clock=clock)

    results = []
    for _ in range(5):
        results.append(await resolver.resolve("u1"))
        clock.advance(10)

    assert results == [True] * 5
    assert store.calls == ["u1"]
    assert resolver.stats()["hits"] == 4


@pytest.mark.asyncio
async def test_entry_valid_at_exact_expiry_and_refreshed_after(clock) -> None:
    store = InMemoryMembershipStore(admin_ids={"u1"})
    resolver = AdminStatusResolver(store, ttl_seconds=300, clock=clock)
    await resolver.resolve("u1")

    clock.advance(300)
    await resolver.resolve("u1")
    assert store.calls == ["u1"]

    clock.advance(0.001)
    await resolver.resolve("u1")
    assert store.calls == ["u1", "u1"]


@pytest.mark.asyncio
async def test_revocation_propagates_after_ttl(clock) -> None:
    store = InMemoryMembershipStore(admin_ids={"u1"})
    resolver = AdminStatusResolver(store, ttl_seconds=300, clock=clock)
    assert await resolver.resolve("u1") is True

    store.revoke("u1")
    clock.advance(120)
    assert await resolver.resolve("u1") is True

    clock.advance(181)
    assert await resolver.resolve("u1") is False


@pytest.mark.asyncio
async def test_store_failure_fails_secure_without_caching(clock, caplog) -> None:
    store = InMemoryMembershipStore(admin_ids={"u1"})
    store.fail_with = _outage()
    resolver = AdminStatusResolver(store, clock=clock)

    with caplog.at_level(logging.WARNING):
        assert await resolver.resolve("u1") is False

    assert "u1" not in resolver._entries
    assert resolver.stats()["store_errors"] == 1
    assert any(r.getMessage() == "admin_status.store_error" for r in caplog.records)
    assert any(r.getMessage() == "store.operation_failed" for r in caplog.records)

    # Next call goes back to the store and recovers as soon as it is reachable
    store.fail_with = None
    assert await resolver.resolve("u1") is True
    assert store.calls == ["u1", "u1"]


@pytest.mark.asyncio
async def test_store_failure_does_not_touch_existing_expired_entry(clock) -> None:
    store = InMemoryMembershipStore(admin_ids={"u1"})
    resolver = AdminStatusResolver(store, ttl_seconds=60, clock=clock)
    await resolver.resolve("u1")

    clock.advance(61)
    store.fail_with = _outage()

    assert await resolver.resolve("u1") is False
    assert await resolver.resolve("u1") is False
    assert len(store.calls) == 3


@pytest.mark.asyncio
async def test_unexpected_store_exceptions_propagate(clock) -> None:
    resolver = AdminStatusResolver(ExplodingStore(), clock=clock)

    with pytest.raises(AssertionError):
        await resolver.resolve("u1")


@pytest.mark.asyncio
async def test_sweep_removes_expired_entries_above_threshold(clock) -> None:
    store = InMemoryMembershipStore()
    resolver = AdminStatusResolver(store, ttl_seconds=10, sweep_threshold=3, clock=clock)

    for subject in ("a", "b", "c"):
        await resolver.resolve(subject)

    clock.advance(11)
    await resolver.resolve("d")

    assert set(resolver._entries) == {"d"}


@pytest.mark.asyncio
async def test_sweep_keeps_live_entries(clock) -> None:
    store = InMemoryMembershipStore()
    resolver = AdminStatusResolver(store, ttl_seconds=10, sweep_threshold=2, clock=clock)

    await resolver.resolve("a")
    clock.advance(11)
    await resolver.resolve("b")
    await resolver.resolve("c")

    assert set(resolver._entries) == {"b", "c"}


@pytest.mark.asyncio
async def test_invalidate_forces_store_lookup(clock) -> None:
    store = InMemoryMembershipStore(admin_ids={"u1"})
    resolver = AdminStatusResolver(store, clock=clock)
    await resolver.resolve("u1")

    store.revoke("u1")
    resolver.invalidate("u1")

    assert await resolver.resolve("u1") is False


@pytest.mark.asyncio
async def test_clear_resets_state(clock) -> None:
    resolver = AdminStatusResolver(InMemoryMembershipStore(admin_ids={"u1"}), clock=clock)
    await resolver.resolve("u1")
    await resolver.resolve("u1")

    resolver.clear()

    stats = resolver.stats()
    assert stats["entries"] == 0
    assert stats["hits"] == 0
    assert stats["misses"] == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"ttl_seconds": 0},
        {"sweep_threshold": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        AdminStatusResolver(InMemoryMembershipStore(), **kwargs)
