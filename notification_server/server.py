# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import asdict
from datetime import datetime

from fastmcp import FastMCP

from notification_engine import config
from notification_engine.digest import build_digest
from notification_engine.lifecycle import AssignmentNotifications
from notification_engine.models import ScheduledNotification
from notification_server.storage import JsonAssignmentStore, JsonSettingsStore
from services.notification_service.client import HttpNotificationTransport

mcp = FastMCP("NotificationServer")

transport = HttpNotificationTransport(config.NOTIFICATION_SERVICE_URL)
assignment_store = JsonAssignmentStore(config.ASSIGNMENTS_PATH)
settings_store = JsonSettingsStore(config.NOTIFICATION_SETTINGS_PATH)
notifications = AssignmentNotifications(transport, assignment_store, settings_store)


@mcp.tool()
async def reconcile_notifications() -> dict:
    """Brings the scheduled notifications in line with the stored assignments.

    Only missing notifications are scheduled; the daily digest is rebuilt.

    :return: Identifiers that were scheduled, cancelled or failed.
    """
    report = await notifications.reconcile()
    if report is None:
        return {"error": "Assignments could not be read."}
    return asdict(report)


@mcp.tool()
async def preview_digest() -> dict:
    """Renders the daily digest for the stored assignments without scheduling it.

    :return: The digest title, body and fire time, or an empty dict.
    """
    assignments = await assignment_store.get_assignments()
    settings = await settings_store.get_notification_settings()
    digest = build_digest(assignments, settings, datetime.now())
    if digest is None:
        return {}
    return {
        "title": digest.title,
        "body": digest.body,
        "fire_time": digest.fire_time.isoformat(),
    }


@mcp.tool()
async def list_scheduled_notifications() -> list[dict]:
    """Lists all pending notifications.

    :return: A list of scheduled notification dictionaries.
    """
    entries = await transport.list_scheduled()
    return [
        {**asdict(entry), "fire_time": entry.fire_time.isoformat()}
        for entry in entries
    ]


def _format_datetime(moment: datetime) -> str:
    """Formats a datetime as 'Mon 1/15 2:30 PM'."""
    return moment.strftime("%a %-m/%-d %-I:%M %p")


def format_scheduled(entries: list[ScheduledNotification]) -> str:
    """Internal function to format scheduled notifications as a clean table.

    :return: Formatted table string of all scheduled notifications.
    """
    if not entries:
        return "🔕 No scheduled notifications."

    lines = []
    lines.append("🔔 SCHEDULED NOTIFICATIONS")
    lines.append("=" * 100)
    lines.append(f"{'#':<4} {'Title':<35} {'Fires':<18} {'Identifier':<40}")
    lines.append("-" * 100)

    for idx, entry in enumerate(entries, 1):
        title = entry.content.title[:34] if len(entry.content.title) > 34 else entry.content.title
        ident = entry.identifier[:39] if len(entry.identifier) > 39 else entry.identifier
        lines.append(f"{idx:<4} {title:<35} {_format_datetime(entry.fire_time):<18} {ident:<40}")

    lines.append("=" * 100)
    lines.append(f"Total: {len(entries)} notification(s)")
    return "\n".join(lines)


@mcp.tool()
async def show_scheduled_notifications() -> str:
    """Displays all scheduled notifications in a formatted table.

    :return: Formatted string of all scheduled notifications, or a message if none exist.
    """
    return format_scheduled(await transport.list_scheduled())


if __name__ == "__main__":
    mcp.run()
