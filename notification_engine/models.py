"""
Data models for the notification engine.

This module contains the dataclasses used to represent assignments,
notification settings, computed candidates and entries of the scheduled
notification ledger.
"""
from __future__ import annotations

import typing as t
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum


class AssignmentType(str, Enum):
    """Category of an assignment."""
    HOMEWORK = "Homework"
    TEST = "Test"
    EXAM = "Exam"
    PROJECT = "Project"
    QUIZ = "Quiz"
    LAB = "Lab"
    ESSAY = "Essay"
    PRESENTATION = "Presentation"
    OTHER = "Other"


class NotificationKind(str, Enum):
    """The five per-assignment notification slots."""
    DUE = "due"
    REMINDER = "reminder"
    EARLY_REMINDER = "early-reminder"
    DAILY = "daily"
    PRIORITY_REMINDER = "priority-reminder"


@dataclass
class Assignment:
    """A gradable task tracked by the user."""
    id: str
    title: str
    due_date: datetime  # local time
    assignment_type: AssignmentType = AssignmentType.HOMEWORK
    description: str = ""
    course_code: str = ""
    course_name: str = ""
    is_completed: bool = False
    is_priority: bool = False

    def __post_init__(self) -> None:
        # Zoned due dates are compared against naive local clocks.
        if self.due_date.tzinfo is not None:
            self.due_date = self.due_date.astimezone().replace(tzinfo=None)

    @property
    def course_info(self) -> str:
        """Course label shown in notification bodies."""
        if self.course_code:
            return f"{self.course_code} - {self.course_name}"
        return self.course_name

    def is_overdue(self, now: datetime) -> bool:
        return self.due_date <= now


@dataclass
class NotificationSettings:
    """User-configurable reminder policy."""
    enabled: bool = True
    notification_time: time = time(20, 0)
    exam_reminder_days: int = 7
    test_reminder_days: int = 5
    quiz_reminder_days: int = 3
    project_reminder_days: int = 5
    homework_reminder_days: int = 2
    other_reminder_days: int = 1
    daily_reminders_for_exams: bool = True
    daily_reminders_for_tests: bool = True
    daily_reminders_for_quizzes: bool = True


@dataclass
class CandidateNotification:
    """A computed notification that has not been handed to the transport."""
    kind: NotificationKind
    fire_time: datetime
    title: str
    body: str


@dataclass
class NotificationContent:
    """What the user sees, plus the payload that makes the ledger self-describing."""
    title: str
    body: str
    data: dict[str, t.Any] = field(default_factory=dict)
    sound: bool = True


@dataclass
class ScheduledNotification:
    """One entry of the external notification ledger."""
    identifier: str
    content: NotificationContent
    fire_time: datetime
    channel: str = "default"

    @property
    def assignment_id(self) -> t.Optional[str]:
        return self.content.data.get("assignment_id")

    @property
    def kind(self) -> t.Optional[str]:
        return self.content.data.get("kind")


@dataclass
class NotificationChannel:
    """A delivery channel and its importance."""
    id: str
    name: str
    description: str = ""
    importance: str = "high"  # min / low / default / high / max


@dataclass
class DigestItem:
    """One assignment line of the daily digest."""
    assignment_id: str
    title: str
    course_info: str
    assignment_type: AssignmentType
    due_date: datetime


@dataclass
class DigestBucket:
    """Assignments due on one calendar day of the digest horizon."""
    day: date
    day_title: str
    items: list[DigestItem] = field(default_factory=list)


@dataclass
class Digest:
    """A rendered daily digest ready to be scheduled."""
    title: str
    body: str
    fire_time: datetime
    buckets: list[DigestBucket] = field(default_factory=list)


@dataclass
class ReconcileReport:
    """Summary of the operations performed by one reconciliation pass."""
    scheduled: list[str] = field(default_factory=list)
    cancelled: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    digest_scheduled: bool = False
    disabled: bool = False
