"""
Deterministic identifiers for scheduled notifications.

An identifier names one (assignment, kind) slot. The assignment id is
percent-encoded so the ``:`` separators can never appear inside it, which
keeps the mapping injective and reversible.
"""
from __future__ import annotations

import typing as t
from urllib.parse import quote, unquote

from notification_engine.models import NotificationKind

DIGEST_IDENTIFIER = "daily-digest-notification"

_PREFIX = "assignment"


def identifier(assignment_id: str, kind: t.Union[NotificationKind, str]) -> str:
    """Build the identifier of one notification slot."""
    kind = NotificationKind(kind)
    return f"{_PREFIX}:{quote(assignment_id, safe='')}:{kind.value}"


def parse_identifier(value: str) -> t.Optional[tuple[str, NotificationKind]]:
    """Recover ``(assignment_id, kind)`` from an identifier.

    Returns None for identifiers that were not produced by :func:`identifier`,
    such as the digest identifier.
    """
    parts = value.split(":")
    if len(parts) != 3 or parts[0] != _PREFIX:
        return None
    try:
        kind = NotificationKind(parts[2])
    except ValueError:
        return None
    return unquote(parts[1]), kind


def identifiers_for(assignment_id: str) -> list[str]:
    """All identifiers an assignment can own."""
    return [identifier(assignment_id, kind) for kind in NotificationKind]
