"""
Trigger time calculation for individual assignment notifications.

Everything here is pure date arithmetic. Candidates whose fire time has
already passed are still returned; callers decide what is schedulable.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta

from notification_engine import config
from notification_engine.models import (
    Assignment,
    AssignmentType,
    CandidateNotification,
    NotificationKind,
    NotificationSettings,
)
from notification_engine.policy import daily_enabled, lead_days


def start_of_day(moment: datetime) -> datetime:
    """Local midnight of the day *moment* falls on."""
    return datetime.combine(moment.date(), time())


def is_same_day(first: datetime, second: datetime) -> bool:
    return start_of_day(first) == start_of_day(second)


def days_until(due: datetime, now: datetime) -> int:
    """Whole days between *now* and *due*, truncated toward zero."""
    seconds = (due - now).total_seconds()
    return int(seconds / 86400)


def at_time_of_day(day: date, time_of_day: time) -> datetime:
    return datetime.combine(day, time_of_day.replace(second=0, microsecond=0))


def next_occurrence(time_of_day: time, now: datetime) -> datetime:
    """The next future instant at *time_of_day*: today if not yet passed, else tomorrow."""
    candidate = at_time_of_day(now.date(), time_of_day)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def compute_candidates(
    assignment: Assignment,
    settings: NotificationSettings,
    now: datetime,
) -> list[CandidateNotification]:
    """Compute every notification one assignment is entitled to right now.

    :param assignment: The assignment to compute notifications for.
    :param settings: Snapshot of the notification settings.
    :param now: Reference instant for the day-exact and window rules.
    :return: Candidates in the order due, reminder, early-reminder, daily,
        priority-reminder (absent kinds are skipped).
    :raises ValueError: If the assignment's category is unknown.
    """
    category = AssignmentType(assignment.assignment_type)
    due = assignment.due_date
    label = category.value
    course_info = assignment.course_info
    reminder_days = lead_days(category, settings)
    candidates: list[CandidateNotification] = []

    due_soon = due - timedelta(hours=config.DUE_SOON_HOURS)
    candidates.append(CandidateNotification(
        kind=NotificationKind.DUE,
        fire_time=due_soon,
        title=f"{label} Due Soon",
        body=f"{assignment.title} for {course_info} is due in 1 hour.",
    ))

    candidates.append(CandidateNotification(
        kind=NotificationKind.REMINDER,
        fire_time=due - timedelta(hours=config.DAY_BEFORE_HOURS),
        title=f"{label} Due Tomorrow",
        body=f"{assignment.title} for {course_info} is due tomorrow.",
    ))

    # Only on the exact calendar day the lead window opens.
    early = due - timedelta(days=reminder_days)
    if is_same_day(early, now):
        candidates.append(CandidateNotification(
            kind=NotificationKind.EARLY_REMINDER,
            fire_time=early,
            title=f"{label} Coming Up",
            body=f"{assignment.title} for {course_info} is due in {reminder_days} days.",
        ))

    remaining = days_until(due, now)
    if daily_enabled(category, settings) and 1 < remaining <= reminder_days:
        candidates.append(CandidateNotification(
            kind=NotificationKind.DAILY,
            fire_time=at_time_of_day(now.date(), settings.notification_time),
            title=f"{label} Reminder",
            body=f"{assignment.title} for {course_info} is due in {remaining} days.",
        ))

    if assignment.is_priority:
        candidates.append(CandidateNotification(
            kind=NotificationKind.PRIORITY_REMINDER,
            fire_time=due_soon,
            title=f"PRIORITY: {label} Due Very Soon",
            body=f"{assignment.title} for {course_info} is due in 1 hour.",
        ))

    return candidates


def future_candidates(
    assignment: Assignment,
    settings: NotificationSettings,
    now: datetime,
) -> list[CandidateNotification]:
    """Candidates that can still fire, or none for completed/overdue assignments."""
    if assignment.is_completed or assignment.is_overdue(now):
        return []
    return [c for c in compute_candidates(assignment, settings, now) if c.fire_time > now]
