"""Tests for the notification MCP server formatting."""
from datetime import datetime

from notification_engine.models import NotificationContent, ScheduledNotification
from notification_server.server import format_scheduled


def test_format_empty() -> None:
    assert format_scheduled([]) == "🔕 No scheduled notifications."


def test_format_table() -> None:
    entries = [
        ScheduledNotification(
            identifier="assignment:a1:due",
            content=NotificationContent(title="Quiz Due Soon", body="Quiz 1 is due in 1 hour."),
            fire_time=datetime(2025, 3, 10, 14, 30),
            channel="assignments",
        ),
        ScheduledNotification(
            identifier="daily-digest-notification",
            content=NotificationContent(title="📚 Your Daily Assignment Summary", body="..."),
            fire_time=datetime(2025, 3, 10, 20, 0),
            channel="daily-digest",
        ),
    ]

    output = format_scheduled(entries)

    assert "Mon 3/10 2:30 PM" in output
    assert "assignment:a1:due" in output
    assert output.endswith("Total: 2 notification(s)")
