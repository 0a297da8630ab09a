# -*- coding: utf-8 -*-
"""
JSON file storage for assignments and notification settings.

Both stores sit on one key-value file where every value is an opaque JSON
string, mirroring the device storage the application persists into.
"""
from __future__ import annotations

import asyncio
import json
import logging
import typing as t
from dataclasses import asdict
from pathlib import Path

from pydantic import ValidationError

from notification_engine.models import Assignment, NotificationSettings
from services.shared.models import StoredAssignment, StoredNotificationSettings

logger = logging.getLogger(__name__)

NOTIFICATION_SETTINGS_KEY = "@planner_notification_settings"
ASSIGNMENTS_KEY = "assignments"


class JsonKeyValueFile:
    """A JSON object on disk mapping keys to string values."""

    def __init__(self, path: t.Union[str, Path]) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.path}")
        return data

    def _write_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    async def get_item(self, key: str) -> t.Optional[str]:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write_item, key, value)


def stored_to_assignment(record: StoredAssignment) -> Assignment:
    return Assignment(
        id=record.id,
        title=record.title,
        description=record.description,
        course_code=record.course_code,
        course_name=record.course_name,
        due_date=record.due_date,
        is_completed=record.is_completed,
        is_priority=record.is_priority,
        assignment_type=record.assignment_type,
    )


def settings_from_blob(blob: str) -> NotificationSettings:
    stored = StoredNotificationSettings.model_validate_json(blob)
    return NotificationSettings(**stored.model_dump())


def settings_to_blob(settings: NotificationSettings) -> str:
    return StoredNotificationSettings(**asdict(settings)).model_dump_json(by_alias=True)


class JsonSettingsStore:
    """Settings store backed by a :class:`JsonKeyValueFile`."""

    def __init__(self, path: t.Union[str, Path]) -> None:
        self._file = JsonKeyValueFile(path)

    async def get_notification_settings(self) -> NotificationSettings:
        """Load the settings, writing the defaults on first read.

        Unreadable or invalid storage yields the defaults.
        """
        try:
            blob = await self._file.get_item(NOTIFICATION_SETTINGS_KEY)
        except (OSError, ValueError) as e:
            logger.error("Error getting notification settings: %s", e)
            return NotificationSettings()

        if blob is None:
            settings = NotificationSettings()
            try:
                await self.save_notification_settings(settings)
            except OSError as e:
                logger.error("Error saving default notification settings: %s", e)
            return settings

        try:
            return settings_from_blob(blob)
        except ValidationError as e:
            logger.error("Invalid notification settings, using defaults: %s", e)
            return NotificationSettings()

    async def save_notification_settings(self, settings: NotificationSettings) -> None:
        await self._file.set_item(NOTIFICATION_SETTINGS_KEY, settings_to_blob(settings))
        logger.info("Notification settings saved")


class JsonAssignmentStore:
    """Assignment source backed by a :class:`JsonKeyValueFile`."""

    def __init__(self, path: t.Union[str, Path]) -> None:
        self._file = JsonKeyValueFile(path)

    async def get_assignments(self) -> list[Assignment]:
        """Load all assignments. Records that fail validation are skipped."""
        try:
            blob = await self._file.get_item(ASSIGNMENTS_KEY)
            records = json.loads(blob) if blob else []
        except (OSError, ValueError) as e:
            logger.error("Error getting assignments: %s", e)
            return []

        assignments = []
        for record in records:
            try:
                assignments.append(stored_to_assignment(StoredAssignment.model_validate(record)))
            except ValidationError as e:
                logger.warning("Skipping invalid assignment record: %s", e)
        return assignments

    async def save_assignments(self, assignments: list[Assignment]) -> None:
        records = [
            StoredAssignment(**asdict(a)).model_dump(mode="json", by_alias=True)
            for a in assignments
        ]
        await self._file.set_item(ASSIGNMENTS_KEY, json.dumps(records))
