"""
Scheduling of individual assignment notifications.

Every write is cancel-then-schedule on a deterministic identifier, so calling
this repeatedly converges instead of duplicating. Transport failures are
logged and skipped one notification at a time.
"""
from __future__ import annotations

import logging
import typing as t
from datetime import datetime

from notification_engine import config
from notification_engine.identifiers import identifier, identifiers_for
from notification_engine.interfaces import Clock, NotificationTransport
from notification_engine.models import (
    Assignment,
    CandidateNotification,
    NotificationChannel,
    NotificationContent,
    NotificationKind,
    NotificationSettings,
)
from notification_engine.triggers import compute_candidates

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = NotificationChannel(
    id="default",
    name="default",
    importance="max",
)
ASSIGNMENTS_CHANNEL = NotificationChannel(
    id="assignments",
    name="Assignments",
    description="Notifications for assignment due dates and reminders",
    importance="high",
)
DIGEST_CHANNEL = NotificationChannel(
    id="daily-digest",
    name="Daily Assignment Digest",
    description="Daily summary of upcoming assignments",
    importance="high",
)
CHANNELS = [DEFAULT_CHANNEL, ASSIGNMENTS_CHANNEL, DIGEST_CHANNEL]


def truncate(text: str, max_length: int) -> str:
    """Truncate text to max_length characters, adding ellipsis if needed."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def channel_for(kind: NotificationKind) -> str:
    """Priority reminders go out on the max-importance channel."""
    if kind == NotificationKind.PRIORITY_REMINDER:
        return DEFAULT_CHANNEL.id
    return ASSIGNMENTS_CHANNEL.id


def build_content(assignment: Assignment, candidate: CandidateNotification) -> NotificationContent:
    return NotificationContent(
        title=truncate(candidate.title, config.TITLE_MAX_LENGTH),
        body=truncate(candidate.body, config.BODY_MAX_LENGTH),
        data={"assignment_id": assignment.id, "kind": candidate.kind.value},
    )


class NotificationScheduler:
    """Turns candidates into cancel/schedule calls against a transport."""

    def __init__(self, transport: NotificationTransport, clock: Clock = datetime.now) -> None:
        self._transport = transport
        self._clock = clock

    async def schedule_candidate(
        self,
        assignment: Assignment,
        candidate: CandidateNotification,
        now: t.Optional[datetime] = None,
    ) -> bool:
        """Replace one notification slot with *candidate*.

        :return: True if the notification was handed to the transport.
        """
        now = now or self._clock()
        ident = identifier(assignment.id, candidate.kind)
        if candidate.fire_time <= now:
            logger.debug("Skipped past notification: %s for %s", ident, candidate.fire_time.isoformat())
            return False

        try:
            await self._transport.cancel(ident)
            await self._transport.schedule(
                ident,
                build_content(assignment, candidate),
                candidate.fire_time,
                channel_for(candidate.kind),
            )
        except Exception as e:
            logger.error("Error scheduling notification %s: %s", ident, e)
            return False

        logger.info("Scheduled notification: %s for %s", ident, candidate.fire_time.isoformat())
        return True

    async def schedule_for_assignment(
        self,
        assignment: Assignment,
        settings: NotificationSettings,
        now: t.Optional[datetime] = None,
    ) -> list[str]:
        """Schedule every future notification of one assignment.

        Completed and overdue assignments have all their slots cancelled
        instead.

        :return: Identifiers that were scheduled.
        """
        now = now or self._clock()
        if assignment.is_completed or assignment.is_overdue(now):
            await self.cancel_for_assignment(assignment.id)
            return []

        try:
            candidates = compute_candidates(assignment, settings, now)
        except (KeyError, ValueError) as e:
            logger.error("Could not compute notifications for assignment %s: %s", assignment.id, e)
            return []

        scheduled = []
        for candidate in candidates:
            if await self.schedule_candidate(assignment, candidate, now):
                scheduled.append(identifier(assignment.id, candidate.kind))
        return scheduled

    async def cancel_for_assignment(self, assignment_id: str) -> list[str]:
        """Cancel all five notification slots of an assignment.

        :return: Identifiers whose cancellation succeeded.
        """
        cancelled = []
        for ident in identifiers_for(assignment_id):
            if await self.cancel(ident):
                cancelled.append(ident)
        return cancelled

    async def cancel(self, ident: str) -> bool:
        try:
            await self._transport.cancel(ident)
        except Exception as e:
            logger.error("Error cancelling notification %s: %s", ident, e)
            return False
        logger.debug("Cancelled notification: %s", ident)
        return True
