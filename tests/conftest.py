"""Shared fixtures for the notification engine tests."""
import typing as t
from datetime import datetime, timedelta

import pytest

from notification_engine.models import Assignment, AssignmentType, NotificationSettings
from notification_server.store import InMemoryNotificationStore

# Monday morning
NOW = datetime(2025, 3, 10, 9, 0)


def make_assignment(
    assignment_id: str = "a1",
    due: t.Optional[datetime] = None,
    assignment_type: AssignmentType = AssignmentType.HOMEWORK,
    **kwargs: t.Any,
) -> Assignment:
    """Build an assignment due in 3 days unless told otherwise."""
    defaults = {
        "title": f"Assignment {assignment_id}",
        "course_code": "CS101",
        "course_name": "Intro to Programming",
    }
    defaults.update(kwargs)
    return Assignment(
        id=assignment_id,
        due_date=due or NOW + timedelta(days=3),
        assignment_type=assignment_type,
        **defaults,
    )


class MemorySettingsStore:
    """Settings store keeping one settings object in memory."""

    def __init__(self, settings: t.Optional[NotificationSettings] = None) -> None:
        self.settings = settings or NotificationSettings()
        self.saved = 0

    async def get_notification_settings(self) -> NotificationSettings:
        return self.settings

    async def save_notification_settings(self, settings: NotificationSettings) -> None:
        self.settings = settings
        self.saved += 1


class BrokenSettingsStore:
    """Settings store whose reads always fail."""

    async def get_notification_settings(self) -> NotificationSettings:
        raise OSError("storage unavailable")

    async def save_notification_settings(self, settings: NotificationSettings) -> None:
        raise OSError("storage unavailable")


class MemoryAssignmentSource:
    """Assignment source returning a mutable list."""

    def __init__(self, assignments: t.Optional[list[Assignment]] = None) -> None:
        self.assignments = list(assignments or [])

    async def get_assignments(self) -> list[Assignment]:
        return list(self.assignments)


class FlakyNotificationStore(InMemoryNotificationStore):
    """In-memory ledger whose operations fail for selected identifiers."""

    def __init__(self, fail_on: t.Callable[[str], bool] = lambda ident: False) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.fail_listing = False
        self.fail_channels = False

    async def schedule(self, identifier, content, fire_time, channel="default") -> None:
        if self.fail_on(identifier):
            raise RuntimeError(f"schedule failed for {identifier}")
        await super().schedule(identifier, content, fire_time, channel)

    async def list_scheduled(self):
        if self.fail_listing:
            raise RuntimeError("listing failed")
        return await super().list_scheduled()

    async def register_channels(self, channels) -> None:
        if self.fail_channels:
            raise PermissionError("notification permission denied")
        await super().register_channels(channels)


@pytest.fixture
def store() -> InMemoryNotificationStore:
    return InMemoryNotificationStore()


@pytest.fixture
def settings() -> NotificationSettings:
    return NotificationSettings()


@pytest.fixture
def settings_store() -> MemorySettingsStore:
    return MemorySettingsStore()
