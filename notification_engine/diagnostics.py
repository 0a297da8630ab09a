"""Helpers for checking that notifications reach the user."""
from __future__ import annotations

import logging
import typing as t
from datetime import datetime, timedelta

from notification_engine.digest import format_time
from notification_engine.interfaces import NotificationTransport
from notification_engine.models import (
    AssignmentType,
    NotificationContent,
    NotificationSettings,
)
from notification_engine.scheduler import DEFAULT_CHANNEL
from notification_engine.triggers import next_occurrence

logger = logging.getLogger(__name__)


def remaining_time_text(due: datetime, now: t.Optional[datetime] = None) -> str:
    """Describe how long until *due*, e.g. 'in 3 days' or 'Overdue'."""
    now = now or datetime.now()
    if due < now:
        return "Overdue"

    minutes = int((due - now).total_seconds() // 60)
    if minutes < 1:
        return "in less than a minute"
    if minutes < 60:
        return f"in {minutes} minute{'s' if minutes != 1 else ''}"
    hours = minutes // 60
    if hours < 24:
        return f"in about {hours} hour{'s' if hours != 1 else ''}"
    days = hours // 24
    return f"in {days} day{'s' if days != 1 else ''}"


async def send_test_notification(
    transport: NotificationTransport,
    assignment_type: AssignmentType = AssignmentType.TEST,
    now: t.Optional[datetime] = None,
) -> str:
    """Fire a notification right away about a fake priority assignment due in 2 hours.

    :return: The identifier of the test notification.
    """
    now = now or datetime.now()
    ident = f"test-{int(now.timestamp() * 1000)}"
    await transport.schedule(
        ident,
        NotificationContent(
            title=f"Test: {assignment_type.value} Due Soon",
            body="Test Assignment for TEST101 - Notification Testing is due in 2 hours.",
            data={"is_test": True},
        ),
        now,
        DEFAULT_CHANNEL.id,
    )
    logger.info("Test notification sent")
    return ident


async def schedule_timing_check(
    transport: NotificationTransport,
    settings: NotificationSettings,
    now: t.Optional[datetime] = None,
) -> list[str]:
    """Schedule three test notifications: now, in 30 seconds and at the configured time.

    :return: The identifiers of the scheduled test notifications.
    """
    now = now or datetime.now()
    configured = next_occurrence(settings.notification_time, now)
    plan = [
        ("test-timing-immediate", "Immediate Test Notification",
         "This notification appears immediately.", now),
        ("test-timing-delayed", "Delayed Test Notification",
         "This notification appears 30 seconds after the test began.", now + timedelta(seconds=30)),
        ("test-timing-scheduled", "Scheduled Test Notification",
         f"This notification appears at your configured time ({format_time(configured)}).", configured),
    ]
    for ident, title, body, fire_time in plan:
        await transport.cancel(ident)
        await transport.schedule(
            ident,
            NotificationContent(title=title, body=body, data={"is_test": True}),
            fire_time,
            DEFAULT_CHANNEL.id,
        )
    logger.info("Notification timing test initiated")
    return [ident for ident, *_ in plan]
