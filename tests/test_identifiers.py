"""Tests for the notification identifier scheme."""
import itertools

from notification_engine.identifiers import (
    DIGEST_IDENTIFIER,
    identifier,
    identifiers_for,
    parse_identifier,
)
from notification_engine.models import NotificationKind


def test_identifier_is_deterministic() -> None:
    assert identifier("a1", NotificationKind.DUE) == identifier("a1", "due")
    assert identifier("a1", NotificationKind.DUE) == "assignment:a1:due"


def test_identifiers_never_collide() -> None:
    """Ids that contain kind names or separators still map to distinct strings."""
    ids = ["x", "x-early", "x:due", "x%3Adue", "assignment", ""]
    generated = [identifier(i, kind) for i, kind in itertools.product(ids, NotificationKind)]
    assert len(set(generated)) == len(generated)
    assert DIGEST_IDENTIFIER not in generated


def test_dash_separated_ids_do_not_alias_kinds() -> None:
    assert identifier("x-early", "reminder") != identifier("x", "early-reminder")


def test_parse_recovers_assignment_and_kind() -> None:
    for assignment_id in ("a1", "a:b/c d", "100%", "ünïcode"):
        for kind in NotificationKind:
            assert parse_identifier(identifier(assignment_id, kind)) == (assignment_id, kind)


def test_parse_rejects_foreign_identifiers() -> None:
    assert parse_identifier(DIGEST_IDENTIFIER) is None
    assert parse_identifier("test-1700000000000") is None
    assert parse_identifier("assignment:a1:bogus") is None


def test_identifiers_for_covers_all_kinds() -> None:
    idents = identifiers_for("a1")
    assert len(idents) == len(NotificationKind)
    assert {parse_identifier(i)[1] for i in idents} == set(NotificationKind)
