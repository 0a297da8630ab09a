"""
Daily digest construction.

The digest scans a rolling horizon of calendar days, keeps only assignments
already inside their own reminder window, and renders them into a single
bounded-length notification. At most one digest is ever scheduled.
"""
from __future__ import annotations

import logging
import typing as t
from collections import Counter
from datetime import date, datetime, timedelta

from notification_engine import config
from notification_engine.identifiers import DIGEST_IDENTIFIER
from notification_engine.interfaces import Clock, NotificationTransport
from notification_engine.models import (
    Assignment,
    AssignmentType,
    Digest,
    DigestBucket,
    DigestItem,
    NotificationContent,
    NotificationSettings,
)
from notification_engine.policy import lead_days
from notification_engine.scheduler import DIGEST_CHANNEL, truncate
from notification_engine.triggers import days_until, next_occurrence

logger = logging.getLogger(__name__)

SUMMARY_TITLE = "📚 Your Daily Assignment Summary"

_PLURALS = {
    AssignmentType.HOMEWORK: "Homework",
    AssignmentType.QUIZ: "Quizzes",
}


def plural(assignment_type: AssignmentType, count: int) -> str:
    if count == 1:
        return assignment_type.value
    return _PLURALS.get(assignment_type, f"{assignment_type.value}s")


def format_time(moment: datetime) -> str:
    """Format a time of day as 'h:mm AM'."""
    return moment.strftime("%I:%M %p").lstrip("0")


def day_title(day: date, now: datetime) -> str:
    if day == now.date():
        return "Today"
    if day == now.date() + timedelta(days=1):
        return "Tomorrow"
    # e.g. "Monday, Jan 15"
    return f"{day:%A, %b} {day.day}"


def collect_buckets(
    assignments: t.Iterable[Assignment],
    settings: NotificationSettings,
    now: datetime,
) -> list[DigestBucket]:
    """Group pending assignments by due day over the digest horizon.

    An assignment is only included once it is inside its own reminder window.
    A failing policy lookup drops that assignment, never the digest.
    """
    pending = sorted(
        (a for a in assignments if not a.is_completed and not a.is_overdue(now)),
        key=lambda a: a.due_date,
    )
    buckets = []
    for offset in range(config.DIGEST_HORIZON_DAYS):
        day = now.date() + timedelta(days=offset)
        items = []
        for assignment in pending:
            if assignment.due_date.date() != day:
                continue
            try:
                window = lead_days(assignment.assignment_type, settings)
            except (KeyError, ValueError, AttributeError) as e:
                logger.warning("Excluding assignment %s from digest: %s", assignment.id, e)
                continue
            if days_until(assignment.due_date, now) <= window:
                items.append(DigestItem(
                    assignment_id=assignment.id,
                    title=assignment.title,
                    course_info=assignment.course_info,
                    assignment_type=assignment.assignment_type,
                    due_date=assignment.due_date,
                ))
        if items:
            buckets.append(DigestBucket(day=day, day_title=day_title(day, now), items=items))
    return buckets


def _group_by_type(items: list[DigestItem]) -> dict[AssignmentType, list[DigestItem]]:
    groups: dict[AssignmentType, list[DigestItem]] = {}
    for item in items:
        groups.setdefault(item.assignment_type, []).append(item)
    return groups


def render_items(items: list[DigestItem], max_per_category: int = config.DIGEST_MAX_ITEMS_PER_CATEGORY) -> str:
    """Render one day's assignments grouped by category."""
    if not items:
        return "No assignments due soon."

    sections = []
    for assignment_type, group in _group_by_type(items).items():
        lines = [f"📌 {plural(assignment_type, len(group))}:"]
        for item in group[:max_per_category]:
            course = f" ({item.course_info})" if item.course_info else ""
            lines.append(f"  • {item.title}{course} @ {format_time(item.due_date)}")
        if len(group) > max_per_category:
            lines.append(f"  +{len(group) - max_per_category} more")
        sections.append("\n".join(lines))
    return "\n\n".join(sections)


def summarize_items(items: list[DigestItem]) -> str:
    """One-line count of a day's assignments, e.g. '3 assignments: 2 Exams, 1 Quiz'."""
    counts = Counter(item.assignment_type for item in items)
    parts = [f"{count} {plural(kind, count)}" for kind, count in counts.items()]
    noun = "assignment" if len(items) == 1 else "assignments"
    return f"{len(items)} {noun}: {', '.join(parts)}"


def render_digest(buckets: list[DigestBucket]) -> tuple[str, str]:
    """Render buckets into a notification ``(title, body)``.

    The body never exceeds ``DIGEST_BODY_MAX_LENGTH`` characters.
    """
    if len(buckets) == 1:
        bucket = buckets[0]
        title = f"📚 Assignments for {bucket.day_title}"
        body = render_items(bucket.items)
    else:
        title = SUMMARY_TITLE
        sections = []
        for index, bucket in enumerate(buckets):
            if index < config.DIGEST_DETAILED_DAYS:
                sections.append(f"📅 {bucket.day_title}:\n{render_items(bucket.items)}")
            else:
                sections.append(f"📅 {bucket.day_title}: {summarize_items(bucket.items)}")
        body = "\n\n".join(sections)
    return title, truncate(body, config.DIGEST_BODY_MAX_LENGTH)


def digest_fire_time(settings: NotificationSettings, now: datetime, send_immediately: bool = False) -> datetime:
    if send_immediately:
        return now + timedelta(seconds=config.SEND_IMMEDIATELY_DELAY_SECONDS)
    return next_occurrence(settings.notification_time, now)


def build_digest(
    assignments: t.Iterable[Assignment],
    settings: NotificationSettings,
    now: datetime,
    send_immediately: bool = False,
) -> t.Optional[Digest]:
    """Build the digest without touching any transport.

    :return: The rendered digest, or None when nothing is inside the horizon.
    """
    buckets = collect_buckets(assignments, settings, now)
    if not buckets:
        return None
    title, body = render_digest(buckets)
    return Digest(
        title=title,
        body=body,
        fire_time=digest_fire_time(settings, now, send_immediately),
        buckets=buckets,
    )


def digest_payload(digest: Digest) -> dict[str, t.Any]:
    return {
        "kind": "digest",
        "days": [bucket.day.isoformat() for bucket in digest.buckets],
        "assignment_ids": [item.assignment_id for bucket in digest.buckets for item in bucket.items],
    }


class DigestBuilder:
    """Builds the digest and keeps exactly one of it in the ledger."""

    def __init__(self, transport: NotificationTransport, clock: Clock = datetime.now) -> None:
        self._transport = transport
        self._clock = clock

    async def build_and_schedule_digest(
        self,
        assignments: t.Iterable[Assignment],
        settings: NotificationSettings,
        send_immediately: bool = False,
        now: t.Optional[datetime] = None,
    ) -> t.Optional[Digest]:
        """Replace the scheduled digest with a fresh one.

        The previous digest is always cancelled; a new one is scheduled only
        when notifications are enabled and the horizon is not empty.

        :param assignments: Current assignment snapshot.
        :param settings: Snapshot of the notification settings.
        :param send_immediately: Fire in a few seconds instead of at the
            configured notification time.
        :return: The scheduled digest, or None.
        """
        now = now or self._clock()
        digest = build_digest(assignments, settings, now, send_immediately) if settings.enabled else None

        try:
            await self._transport.cancel(DIGEST_IDENTIFIER)
        except Exception as e:
            logger.error("Error cancelling daily digest: %s", e)

        if digest is None:
            logger.info("No upcoming assignments to notify about")
            return None

        try:
            await self._transport.schedule(
                DIGEST_IDENTIFIER,
                NotificationContent(title=digest.title, body=digest.body, data=digest_payload(digest)),
                digest.fire_time,
                DIGEST_CHANNEL.id,
            )
        except Exception as e:
            logger.error("Error scheduling daily digest: %s", e)
            return None

        logger.info("Scheduled daily digest notification for %s", digest.fire_time.isoformat())
        return digest
