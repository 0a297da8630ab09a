"""Tests for the in-memory notification ledger."""
from datetime import timedelta

import pytest

from conftest import NOW
from notification_engine.models import NotificationContent
from notification_server.store import InMemoryNotificationStore, ledger


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = NOW

    def __call__(self):
        return self.now


@pytest.mark.asyncio
async def test_fired_entries_leave_the_ledger() -> None:
    clock = FakeClock()
    store = InMemoryNotificationStore(clock=clock)
    await store.schedule("soon", NotificationContent("t", "b"), NOW + timedelta(seconds=1))
    await store.schedule("later", NotificationContent("t", "b"), NOW + timedelta(hours=1))

    clock.now = NOW + timedelta(seconds=5)

    assert [n.identifier for n in await store.list_scheduled()] == ["later"]
    assert [n.identifier for n in store.delivered] == ["soon"]


@pytest.mark.asyncio
async def test_delivered_history_is_bounded() -> None:
    """A long-running ledger only keeps the most recent fired entries."""
    clock = FakeClock()
    store = InMemoryNotificationStore(clock=clock, history=10)
    for i in range(1000):
        await store.schedule(f"n{i:04d}", NotificationContent("t", "b"), NOW + timedelta(seconds=1))

    clock.now = NOW + timedelta(seconds=5)

    assert await store.list_scheduled() == []
    assert len(store.delivered) == 10
    assert store.delivered[-1].identifier == "n0999"


@pytest.mark.asyncio
async def test_service_ledger_does_not_record_calls() -> None:
    await ledger.cancel("missing")

    assert ledger.calls == []
