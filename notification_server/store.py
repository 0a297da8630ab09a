# -*- coding: utf-8 -*-
"""
In-memory scheduled-notification ledger.

Implements the notification transport protocol. It backs the notification
service and doubles as the transport in tests. When constructed with a clock,
entries whose fire time has passed move to ``delivered`` the next time the
ledger is read, the way an OS notification store forgets fired notifications.
Only the most recent ``history`` fired entries are kept.
"""
from __future__ import annotations

import typing as t
from collections import deque
from datetime import datetime

from notification_engine import config
from notification_engine.interfaces import Clock
from notification_engine.models import (
    NotificationChannel,
    NotificationContent,
    ScheduledNotification,
)


class InMemoryNotificationStore:
    """Ledger of scheduled notifications keyed by identifier."""

    def __init__(
        self,
        clock: t.Optional[Clock] = None,
        history: int = config.DELIVERED_HISTORY,
        record_calls: bool = True,
    ) -> None:
        self._scheduled: dict[str, ScheduledNotification] = {}
        self._clock = clock
        self._record_calls = record_calls
        self.delivered: deque[ScheduledNotification] = deque(maxlen=history)
        self.channels: dict[str, NotificationChannel] = {}
        # (operation, identifier) in call order
        self.calls: list[tuple[str, str]] = []

    def _record(self, call: tuple[str, str]) -> None:
        if self._record_calls:
            self.calls.append(call)

    def _deliver_due(self) -> None:
        if self._clock is None:
            return
        now = self._clock()
        for ident in [i for i, n in self._scheduled.items() if n.fire_time <= now]:
            self.delivered.append(self._scheduled.pop(ident))

    async def schedule(
        self,
        identifier: str,
        content: NotificationContent,
        fire_time: datetime,
        channel: str = "default",
    ) -> None:
        """Adds a notification, replacing any entry with the same identifier."""
        self._record(("schedule", identifier))
        self._scheduled[identifier] = ScheduledNotification(
            identifier=identifier,
            content=content,
            fire_time=fire_time,
            channel=channel,
        )

    async def cancel(self, identifier: str) -> None:
        """Removes a notification. Unknown identifiers are ignored."""
        self._record(("cancel", identifier))
        self._scheduled.pop(identifier, None)

    async def list_scheduled(self) -> list[ScheduledNotification]:
        """Lists pending notifications ordered by fire time."""
        self._deliver_due()
        return sorted(self._scheduled.values(), key=lambda n: (n.fire_time, n.identifier))

    async def cancel_all(self) -> None:
        self._record(("cancel_all", "*"))
        self._scheduled.clear()

    async def register_channels(self, channels: list[NotificationChannel]) -> None:
        for channel in channels:
            self.channels[channel.id] = channel

    def get(self, identifier: str) -> t.Optional[ScheduledNotification]:
        return self._scheduled.get(identifier)

    def __len__(self) -> int:
        return len(self._scheduled)


# Ledger used by the notification service.
# In a real deployment this is the device's notification store.
ledger = InMemoryNotificationStore(clock=datetime.now, record_calls=False)
