# -*- coding: utf-8 -*-
import asyncio
import typing as t
from dataclasses import asdict, dataclass, fields
from datetime import datetime, time

import click
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from notification_engine import config, diagnostics
from notification_engine.digest import build_digest
from notification_engine.interfaces import (
    AssignmentSource,
    NotificationTransport,
    SettingsStore,
    TransportError,
)
from notification_engine.lifecycle import AssignmentNotifications
from notification_engine.models import AssignmentType, NotificationSettings, ScheduledNotification
from notification_server.storage import JsonAssignmentStore, JsonSettingsStore
from planner_cli.utils import configure_logging, console, truncate_title
from services.notification_service.client import HttpNotificationTransport

_LEAD_FIELDS = {
    "exam": "exam_reminder_days",
    "test": "test_reminder_days",
    "quiz": "quiz_reminder_days",
    "project": "project_reminder_days",
    "homework": "homework_reminder_days",
    "other": "other_reminder_days",
}
_DAILY_FIELDS = {
    "exam": "daily_reminders_for_exams",
    "test": "daily_reminders_for_tests",
    "quiz": "daily_reminders_for_quizzes",
}


@dataclass
class CliContext:
    """Collaborators shared by all commands."""
    transport: NotificationTransport
    assignments: AssignmentSource
    settings: SettingsStore
    clock: t.Callable[[], datetime] = datetime.now

    @property
    def notifications(self) -> AssignmentNotifications:
        return AssignmentNotifications(self.transport, self.assignments, self.settings, self.clock)


def format_datetime_human(moment: datetime) -> str:
    """Format a datetime as MM/DD HH:MM."""
    return moment.strftime("%m/%d %H:%M")


def create_scheduled_table(entries: list[ScheduledNotification]) -> Table:
    """Create a table of the scheduled notification ledger."""
    table = Table(title="🔔 Scheduled Notifications", show_header=True, header_style="bold magenta")
    table.add_column("Fires", style="yellow")
    table.add_column("Title", style="white")
    table.add_column("Channel", style="cyan")
    table.add_column("Identifier", style="dim")

    for entry in entries:
        table.add_row(
            format_datetime_human(entry.fire_time),
            truncate_title(entry.content.title),
            entry.channel,
            entry.identifier,
        )
    return table


def run_with_service(coro: t.Coroutine[t.Any, t.Any, t.Any]) -> t.Any:
    """Run *coro*, exiting with an error message when the notification service fails."""
    try:
        return asyncio.run(coro)
    except TransportError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


def _parse_pairs(values: tuple[str, ...], allowed: dict[str, str]) -> dict[str, str]:
    """Parse CATEGORY=VALUE options into {settings_field: VALUE}."""
    parsed = {}
    for value in values:
        key, sep, raw = value.partition("=")
        key = key.strip().lower()
        if not sep or key not in allowed:
            raise click.BadParameter(
                f"'{value}' must look like CATEGORY=VALUE with CATEGORY in {', '.join(allowed)}"
            )
        parsed[allowed[key]] = raw.strip()
    return parsed


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--service-url", default=config.NOTIFICATION_SERVICE_URL, show_default=True,
              help="Base URL of the notification service.")
@click.option("--assignments", "assignments_path", default=config.ASSIGNMENTS_PATH, show_default=True,
              type=click.Path(dir_okay=False), help="Assignment storage file.")
@click.option("--settings", "settings_path", default=config.NOTIFICATION_SETTINGS_PATH, show_default=True,
              type=click.Path(dir_okay=False), help="Settings storage file.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, service_url: str, assignments_path: str, settings_path: str, verbose: bool) -> None:
    """Schedule assignment reminder notifications and the daily digest."""
    configure_logging("DEBUG" if verbose else config.LOG_LEVEL)
    if ctx.obj is None:
        ctx.obj = CliContext(
            transport=HttpNotificationTransport(service_url),
            assignments=JsonAssignmentStore(assignments_path),
            settings=JsonSettingsStore(settings_path),
        )


@main.command()
@click.pass_obj
def reconcile(obj: CliContext) -> None:
    """Schedule missing notifications and refresh the daily digest."""
    report = asyncio.run(obj.notifications.reconcile())
    if report is None:
        console.print("[red]Error:[/red] Assignments could not be read.")
        raise SystemExit(1)

    if report.disabled:
        console.print("[yellow]Notifications are disabled; all scheduled notifications were cancelled.[/yellow]")
        return

    stats_text = Text()
    stats_text.append("Scheduled: ", style="white")
    stats_text.append(f"{len(report.scheduled)}", style="bold green")
    stats_text.append("\nCancelled: ", style="white")
    stats_text.append(f"{len(report.cancelled)}", style="bold yellow")
    stats_text.append("\nFailed: ", style="white")
    stats_text.append(f"{len(report.failed)}", style="bold red" if report.failed else "bold green")
    stats_text.append("\nDaily digest: ", style="white")
    stats_text.append("scheduled" if report.digest_scheduled else "none", style="bold cyan")
    console.print(Panel(stats_text, title="📊 Reconciliation", border_style="green"))


@main.command()
@click.option("--now", "send_now", is_flag=True, help="Send the digest in a few seconds.")
@click.option("--preview", is_flag=True, help="Only render the digest, do not schedule it.")
@click.pass_obj
def digest(obj: CliContext, send_now: bool, preview: bool) -> None:
    """Build the daily digest of upcoming assignments."""
    async def _run():
        assignments = await obj.assignments.get_assignments()
        settings = await obj.settings.get_notification_settings()
        if preview:
            return build_digest(assignments, settings, obj.clock(), send_immediately=send_now)
        return await obj.notifications.digest_builder.build_and_schedule_digest(
            assignments, settings, send_immediately=send_now, now=obj.clock()
        )

    result = asyncio.run(_run())
    if result is None:
        console.print("No upcoming assignments to notify about.")
        return

    verb = "Preview for" if preview else "Scheduled for"
    console.print(Panel(
        result.body,
        title=result.title,
        subtitle=f"{verb} {format_datetime_human(result.fire_time)}",
        border_style="blue",
    ))


@main.command()
@click.pass_obj
def scheduled(obj: CliContext) -> None:
    """List the scheduled notifications."""
    entries = run_with_service(obj.transport.list_scheduled())
    if not entries:
        console.print("🔕 No scheduled notifications.")
        return
    console.print(create_scheduled_table(entries))


@main.command()
@click.option("--enable/--disable", "enabled", default=None, help="Turn notifications on or off.")
@click.option("--time", "notification_time", default=None, help="Daily notification time, HH:MM.")
@click.option("--lead", multiple=True, help="Lead days per category, e.g. exam=7.")
@click.option("--daily", multiple=True, help="Daily reminders per category, e.g. quiz=off.")
@click.pass_obj
def settings(
    obj: CliContext,
    enabled: t.Optional[bool],
    notification_time: t.Optional[str],
    lead: tuple[str, ...],
    daily: tuple[str, ...],
) -> None:
    """Show or update the notification settings."""
    updates: dict[str, t.Any] = {}
    if enabled is not None:
        updates["enabled"] = enabled
    if notification_time is not None:
        try:
            updates["notification_time"] = time.fromisoformat(notification_time)
        except ValueError:
            raise click.BadParameter(f"'{notification_time}' is not a HH:MM time", param_hint="--time")
    for field_name, raw in _parse_pairs(lead, _LEAD_FIELDS).items():
        if not raw.isdigit():
            raise click.BadParameter(f"lead days must be a whole number >= 0, got '{raw}'", param_hint="--lead")
        updates[field_name] = int(raw)
    for field_name, raw in _parse_pairs(daily, _DAILY_FIELDS).items():
        if raw.lower() not in ("on", "off", "true", "false"):
            raise click.BadParameter(f"expected on/off, got '{raw}'", param_hint="--daily")
        updates[field_name] = raw.lower() in ("on", "true")

    async def _run() -> NotificationSettings:
        current = await obj.settings.get_notification_settings()
        if updates:
            current = NotificationSettings(**{**asdict(current), **updates})
            await obj.settings.save_notification_settings(current)
        return current

    current = asyncio.run(_run())

    table = Table(title="⚙️ Notification Settings", show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    for field in fields(NotificationSettings):
        value = getattr(current, field.name)
        if isinstance(value, time):
            value = value.strftime("%H:%M")
        table.add_row(field.name, str(value))
    console.print(table)


@main.command("test")
@click.option("--type", "assignment_type", default=AssignmentType.TEST.value, show_default=True,
              type=click.Choice([a.value for a in AssignmentType], case_sensitive=False))
@click.pass_obj
def send_test(obj: CliContext, assignment_type: str) -> None:
    """Send a test notification right away."""
    matched = next(a for a in AssignmentType if a.value.lower() == assignment_type.lower())
    ident = run_with_service(diagnostics.send_test_notification(obj.transport, matched, now=obj.clock()))
    console.print(f"[bold green]✅ Test notification sent[/bold green] ({ident})")


@main.command()
@click.pass_obj
def timing(obj: CliContext) -> None:
    """Schedule three test notifications: now, in 30 seconds and at the configured time."""
    async def _run() -> list[str]:
        current = await obj.settings.get_notification_settings()
        return await diagnostics.schedule_timing_check(obj.transport, current, now=obj.clock())

    for ident in run_with_service(_run()):
        console.print(f"   ✓ {ident}")


if __name__ == "__main__":
    main()
