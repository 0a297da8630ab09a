"""
Shared Pydantic models for REST API serialization and JSON storage.

This module contains Pydantic equivalents of the dataclass models used by the
notification engine, ensuring consistent JSON serialization between the
notification service, its HTTP client and the local JSON stores.
"""
from __future__ import annotations

import typing as t
from datetime import datetime, time

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from notification_engine.models import AssignmentType


Importance = t.Literal["min", "low", "default", "high", "max"]


class NotificationChannel(BaseModel):
    """A delivery channel and its importance."""
    id: str
    name: str
    description: str = ""
    importance: Importance = "high"


class NotificationContent(BaseModel):
    """Title, body and self-describing payload of a notification."""
    title: str
    body: str
    data: dict[str, t.Any] = Field(default_factory=dict)
    sound: bool = True


class ScheduledNotification(BaseModel):
    """One entry of the scheduled-notification ledger."""
    identifier: str
    content: NotificationContent
    fire_time: datetime
    channel: str = "default"


# Notification Service Request/Response Models
class ScheduleNotificationRequest(BaseModel):
    """Request model for scheduling a notification."""
    identifier: str = Field(min_length=1)
    content: NotificationContent
    fire_time: datetime
    channel: str = "default"


class RegisterChannelsRequest(BaseModel):
    """Request model for registering delivery channels."""
    channels: list[NotificationChannel]


class CancelResponse(BaseModel):
    """Response model for cancellations."""
    cancelled: int


# Storage models. Keys are camelCase on disk.
class StoredAssignment(BaseModel):
    """An assignment record as kept by the assignment store."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    description: str = ""
    course_code: str = ""
    course_name: str = ""
    due_date: datetime
    is_completed: bool = False
    is_priority: bool = False
    # Records written before categories existed have none.
    assignment_type: AssignmentType = AssignmentType.HOMEWORK

    @field_validator("assignment_type", mode="before")
    @classmethod
    def _default_missing_type(cls, value: t.Any) -> t.Any:
        return value or AssignmentType.HOMEWORK


class StoredNotificationSettings(BaseModel):
    """The notification settings blob; missing fields take their defaults."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool = True
    notification_time: time = time(20, 0)
    exam_reminder_days: int = Field(default=7, ge=0)
    test_reminder_days: int = Field(default=5, ge=0)
    quiz_reminder_days: int = Field(default=3, ge=0)
    project_reminder_days: int = Field(default=5, ge=0)
    homework_reminder_days: int = Field(default=2, ge=0)
    other_reminder_days: int = Field(default=1, ge=0)
    daily_reminders_for_exams: bool = True
    daily_reminders_for_tests: bool = True
    daily_reminders_for_quizzes: bool = True

    @field_validator("notification_time", mode="before")
    @classmethod
    def _accept_datetime(cls, value: t.Any) -> t.Any:
        # Older blobs store a full ISO datetime; only its time of day matters.
        if isinstance(value, str) and "T" in value:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
            if moment.tzinfo is not None:
                moment = moment.astimezone().replace(tzinfo=None)
            return moment.time()
        return value
