"""
Reconciliation of the scheduled-notification ledger.

Run at start-up and after bulk assignment changes. The ledger is read back,
indexed by (assignment id, kind), and only the missing notifications are
scheduled. Cancelling and rescheduling everything on every start would churn
the OS scheduler and could drop a notification that was about to fire.
"""
from __future__ import annotations

import logging
import typing as t
from datetime import datetime

from notification_engine.digest import DigestBuilder
from notification_engine.identifiers import identifier, parse_identifier
from notification_engine.interfaces import Clock, NotificationTransport, SettingsStore
from notification_engine.models import (
    Assignment,
    NotificationSettings,
    ReconcileReport,
    ScheduledNotification,
)
from notification_engine.scheduler import NotificationScheduler
from notification_engine.triggers import future_candidates

logger = logging.getLogger(__name__)

LedgerIndex = dict[tuple[str, str], list[str]]


def index_ledger(entries: t.Iterable[ScheduledNotification]) -> LedgerIndex:
    """Map ``(assignment_id, kind)`` to the identifiers holding that slot.

    The payload is authoritative; entries without one are recognised by
    their identifier. A slot can be held by more than one entry, e.g. a
    legacy identifier next to the canonical one. Entries that belong to no
    assignment (the digest, test notifications) are left out.
    """
    index: LedgerIndex = {}
    for entry in entries:
        assignment_id, kind = entry.assignment_id, entry.kind
        if not assignment_id or not kind:
            parsed = parse_identifier(entry.identifier)
            if parsed is None:
                continue
            assignment_id, kind = parsed[0], parsed[1].value
        index.setdefault((assignment_id, kind), []).append(entry.identifier)
    return index


class Reconciler:
    """Converges the ledger onto what the current assignments require."""

    def __init__(
        self,
        transport: NotificationTransport,
        settings_store: SettingsStore,
        clock: Clock = datetime.now,
    ) -> None:
        self._transport = transport
        self._settings_store = settings_store
        self._clock = clock
        self.scheduler = NotificationScheduler(transport, clock)
        self.digest_builder = DigestBuilder(transport, clock)

    async def load_settings(self) -> NotificationSettings:
        try:
            return await self._settings_store.get_notification_settings()
        except Exception as e:
            logger.error("Error getting notification settings, using defaults: %s", e)
            return NotificationSettings()

    async def _read_ledger(self) -> LedgerIndex:
        try:
            entries = await self._transport.list_scheduled()
        except Exception as e:
            logger.error("Error listing scheduled notifications: %s", e)
            return {}
        return index_ledger(entries)

    async def reconcile(
        self,
        assignments: t.Iterable[Assignment],
        now: t.Optional[datetime] = None,
    ) -> ReconcileReport:
        """Schedule missing notifications, cancel dead ones, refresh the digest.

        :param assignments: Current assignment snapshot.
        :param now: Reference instant; defaults to the clock.
        :return: What was scheduled, cancelled or failed.
        """
        now = now or self._clock()
        report = ReconcileReport()
        settings = await self.load_settings()

        if not settings.enabled:
            try:
                await self._transport.cancel_all()
                logger.info("Notifications are disabled, cancelled all scheduled notifications")
            except Exception as e:
                logger.error("Error cancelling all notifications: %s", e)
            report.disabled = True
            return report

        index = await self._read_ledger()
        active = {
            assignment.id: assignment
            for assignment in assignments
            if not assignment.is_completed and not assignment.is_overdue(now)
        }

        # Completed, overdue and deleted assignments keep nothing.
        for (assignment_id, _kind), idents in index.items():
            if assignment_id in active:
                continue
            for ident in idents:
                if await self.scheduler.cancel(ident):
                    report.cancelled.append(ident)

        for assignment in active.values():
            try:
                candidates = future_candidates(assignment, settings, now)
            except (KeyError, ValueError) as e:
                logger.error("Could not compute notifications for assignment %s: %s", assignment.id, e)
                report.failed.append(assignment.id)
                continue

            for candidate in candidates:
                if (assignment.id, candidate.kind.value) in index:
                    continue
                ident = identifier(assignment.id, candidate.kind)
                if await self.scheduler.schedule_candidate(assignment, candidate, now):
                    report.scheduled.append(ident)
                else:
                    report.failed.append(ident)

        digest = await self.digest_builder.build_and_schedule_digest(
            list(active.values()), settings, now=now
        )
        report.digest_scheduled = digest is not None

        logger.info(
            "Reconciled %d assignments: %d scheduled, %d cancelled, %d failed",
            len(active), len(report.scheduled), len(report.cancelled), len(report.failed),
        )
        return report
