"""Category to reminder policy lookups."""
from __future__ import annotations

import typing as t

from notification_engine.models import AssignmentType, NotificationSettings

DEFAULT_SETTINGS = NotificationSettings()

# Every category must appear here; lookups never fall through to a default.
_LEAD_DAYS_FIELD: dict[AssignmentType, str] = {
    AssignmentType.EXAM: "exam_reminder_days",
    AssignmentType.TEST: "test_reminder_days",
    AssignmentType.QUIZ: "quiz_reminder_days",
    AssignmentType.PROJECT: "project_reminder_days",
    AssignmentType.HOMEWORK: "homework_reminder_days",
    AssignmentType.LAB: "other_reminder_days",
    AssignmentType.ESSAY: "other_reminder_days",
    AssignmentType.PRESENTATION: "other_reminder_days",
    AssignmentType.OTHER: "other_reminder_days",
}

# None means the category has no daily mode.
_DAILY_FIELD: dict[AssignmentType, t.Optional[str]] = {
    AssignmentType.EXAM: "daily_reminders_for_exams",
    AssignmentType.TEST: "daily_reminders_for_tests",
    AssignmentType.QUIZ: "daily_reminders_for_quizzes",
    AssignmentType.PROJECT: None,
    AssignmentType.HOMEWORK: None,
    AssignmentType.LAB: None,
    AssignmentType.ESSAY: None,
    AssignmentType.PRESENTATION: None,
    AssignmentType.OTHER: None,
}

assert set(_LEAD_DAYS_FIELD) == set(AssignmentType)
assert set(_DAILY_FIELD) == set(AssignmentType)


def lead_days(
    category: t.Union[AssignmentType, str],
    settings: t.Optional[NotificationSettings] = None,
) -> int:
    """Return how many days before the due date reminders for *category* start.

    :raises ValueError: If *category* is not a known assignment type.
    """
    settings = settings or DEFAULT_SETTINGS
    return getattr(settings, _LEAD_DAYS_FIELD[AssignmentType(category)])


def daily_enabled(
    category: t.Union[AssignmentType, str],
    settings: t.Optional[NotificationSettings] = None,
) -> bool:
    """Return whether daily reminders are switched on for *category*."""
    settings = settings or DEFAULT_SETTINGS
    field_name = _DAILY_FIELD[AssignmentType(category)]
    if field_name is None:
        return False
    return getattr(settings, field_name)
