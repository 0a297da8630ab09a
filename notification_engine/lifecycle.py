"""
Notification hooks for assignment edits.

The host application calls these when a single assignment is created,
edited, completed, reopened or deleted. Each hook is best effort: failures
are logged and never reach the caller.
"""
from __future__ import annotations

import logging
import typing as t
from datetime import datetime

from notification_engine.digest import DigestBuilder
from notification_engine.interfaces import (
    AssignmentSource,
    Clock,
    NotificationTransport,
    SettingsStore,
)
from notification_engine.models import Assignment, NotificationSettings
from notification_engine.reconciler import Reconciler
from notification_engine.scheduler import CHANNELS, NotificationScheduler

logger = logging.getLogger(__name__)


class AssignmentNotifications:
    """Entry point used by the host application."""

    def __init__(
        self,
        transport: NotificationTransport,
        assignment_source: AssignmentSource,
        settings_store: SettingsStore,
        clock: Clock = datetime.now,
    ) -> None:
        self._transport = transport
        self._assignments = assignment_source
        self._clock = clock
        self.reconciler = Reconciler(transport, settings_store, clock)
        self.scheduler: NotificationScheduler = self.reconciler.scheduler
        self.digest_builder: DigestBuilder = self.reconciler.digest_builder

    async def initialize(self) -> bool:
        """Register delivery channels.

        A registration failure only means notifications will not show up;
        everything else keeps working.
        """
        try:
            await self._transport.register_channels(CHANNELS)
        except Exception as e:
            logger.warning("Notification channel registration failed: %s", e)
            return False
        settings = await self.reconciler.load_settings()
        logger.info(
            "Notification system initialized with settings: %s",
            "enabled" if settings.enabled else "disabled",
        )
        return True

    async def reconcile(self, assignments: t.Optional[list[Assignment]] = None):
        """Reconcile against *assignments*, or the assignment source when omitted."""
        if assignments is None:
            assignments = await self._load_assignments()
            if assignments is None:
                return None
        return await self.reconciler.reconcile(assignments, now=self._clock())

    async def on_assignment_created(self, assignment: Assignment) -> None:
        settings = await self.reconciler.load_settings()
        if not settings.enabled or assignment.is_completed:
            return
        await self.scheduler.schedule_for_assignment(assignment, settings, now=self._clock())
        await self.refresh_digest(settings)

    async def on_completion_changed(self, assignment: Assignment, was_completed: bool) -> None:
        """Handle a completion toggle; *was_completed* is the state before the toggle."""
        if not was_completed:
            await self.scheduler.cancel_for_assignment(assignment.id)
            await self.refresh_digest()
        else:
            await self.on_assignment_created(assignment)

    async def on_assignment_updated(self, assignment: Assignment) -> None:
        await self.scheduler.cancel_for_assignment(assignment.id)
        settings = await self.reconciler.load_settings()
        if settings.enabled and not assignment.is_completed:
            await self.scheduler.schedule_for_assignment(assignment, settings, now=self._clock())
        await self.refresh_digest(settings)

    async def on_assignment_deleted(self, assignment_id: str) -> None:
        await self.scheduler.cancel_for_assignment(assignment_id)
        await self.refresh_digest(exclude_id=assignment_id)
        logger.info("Cancelled notifications for assignment: %s", assignment_id)

    async def refresh_digest(
        self,
        settings: t.Optional[NotificationSettings] = None,
        exclude_id: t.Optional[str] = None,
    ) -> None:
        """Rebuild the digest from the assignment source."""
        assignments = await self._load_assignments()
        if assignments is None:
            return
        if exclude_id is not None:
            assignments = [a for a in assignments if a.id != exclude_id]
        settings = settings or await self.reconciler.load_settings()
        await self.digest_builder.build_and_schedule_digest(assignments, settings, now=self._clock())

    async def _load_assignments(self) -> t.Optional[list[Assignment]]:
        try:
            return await self._assignments.get_assignments()
        except Exception as e:
            logger.error("Error reading assignments from storage: %s", e)
            return None
