"""
Collaborator interfaces consumed by the notification engine.

The engine never owns delivery, assignment storage or settings persistence;
it is handed implementations of these protocols instead.
"""
from __future__ import annotations

import typing as t
from datetime import datetime

from notification_engine.models import (
    Assignment,
    NotificationChannel,
    NotificationContent,
    NotificationSettings,
    ScheduledNotification,
)


class TransportError(RuntimeError):
    """Raised by a transport when a ledger operation cannot be completed."""


class NotificationTransport(t.Protocol):
    """The external scheduled-notification ledger."""

    async def schedule(
        self,
        identifier: str,
        content: NotificationContent,
        fire_time: datetime,
        channel: str,
    ) -> None: ...

    async def cancel(self, identifier: str) -> None: ...

    async def list_scheduled(self) -> list[ScheduledNotification]: ...

    async def cancel_all(self) -> None: ...

    async def register_channels(self, channels: list[NotificationChannel]) -> None: ...


class AssignmentSource(t.Protocol):
    """Read-only snapshot access to the user's assignments."""

    async def get_assignments(self) -> list[Assignment]: ...


class SettingsStore(t.Protocol):
    """Persistence of the notification settings."""

    async def get_notification_settings(self) -> NotificationSettings: ...

    async def save_notification_settings(self, settings: NotificationSettings) -> None: ...


Clock = t.Callable[[], datetime]
