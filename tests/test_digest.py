"""Tests for the daily digest builder."""
from datetime import datetime, timedelta

import pytest

from conftest import NOW, make_assignment
from notification_engine.digest import (
    SUMMARY_TITLE,
    DigestBuilder,
    build_digest,
    collect_buckets,
    day_title,
    render_items,
)
from notification_engine.identifiers import DIGEST_IDENTIFIER
from notification_engine.models import AssignmentType, NotificationContent, NotificationSettings


def test_single_day_digest_lists_each_assignment() -> None:
    essay = make_assignment(
        "e1",
        due=datetime(2025, 3, 11, 23, 59),
        title="Essay draft",
        course_code="ENG101",
        course_name="English",
    )

    digest = build_digest([essay], NotificationSettings(), NOW)

    assert digest.title == "📚 Assignments for Tomorrow"
    assert digest.body == "📌 Homework:\n  • Essay draft (ENG101 - English) @ 11:59 PM"


def test_multi_day_digest_details_only_the_first_two_days() -> None:
    assignments = [
        make_assignment("exam", due=datetime(2025, 3, 10, 15, 0), assignment_type=AssignmentType.EXAM,
                        title="Midterm"),
        make_assignment("quiz", due=datetime(2025, 3, 11, 10, 0), assignment_type=AssignmentType.QUIZ,
                        title="Quiz 4"),
        make_assignment("test", due=datetime(2025, 3, 13, 10, 0), assignment_type=AssignmentType.TEST,
                        title="Unit Test"),
        make_assignment("final", due=datetime(2025, 3, 14, 10, 0), assignment_type=AssignmentType.EXAM,
                        title="Lab Practical"),
    ]

    digest = build_digest(assignments, NotificationSettings(), NOW)

    assert digest.title == SUMMARY_TITLE
    assert [bucket.day_title for bucket in digest.buckets] == [
        "Today", "Tomorrow", "Thursday, Mar 13", "Friday, Mar 14",
    ]
    assert digest.body.startswith("📅 Today:\n📌 Exam:\n  • Midterm (CS101 - Intro to Programming) @ 3:00 PM")
    assert "📅 Tomorrow:\n📌 Quiz:\n  • Quiz 4" in digest.body
    assert "📅 Thursday, Mar 13: 1 assignment: 1 Test" in digest.body
    assert "📅 Friday, Mar 14: 1 assignment: 1 Exam" in digest.body
    assert "Unit Test" not in digest.body


def test_categories_are_capped_with_a_more_suffix() -> None:
    quizzes = [
        make_assignment(f"q{i}", due=datetime(2025, 3, 11, 10, i), assignment_type=AssignmentType.QUIZ)
        for i in range(7)
    ]

    body = build_digest(quizzes, NotificationSettings(), NOW).body

    assert body.startswith("📌 Quizzes:")
    assert body.count("  • ") == 5
    assert body.endswith("  +2 more")


def test_body_never_exceeds_the_ceiling() -> None:
    assignments = [
        make_assignment(
            f"a{i}",
            due=NOW + timedelta(hours=2 + i * 1.5),
            assignment_type=list(AssignmentType)[i % len(AssignmentType)],
            title=f"A rather long assignment title number {i}",
        )
        for i in range(200)
    ]
    settings = NotificationSettings(
        exam_reminder_days=14, test_reminder_days=14, quiz_reminder_days=14,
        project_reminder_days=14, homework_reminder_days=14, other_reminder_days=14,
    )

    digest = build_digest(assignments, settings, NOW)

    assert len(digest.buckets) > 2
    assert len(digest.body) <= 700


def test_only_assignments_inside_their_window_are_collected() -> None:
    assignments = [
        make_assignment("far-exam", due=NOW + timedelta(days=10), assignment_type=AssignmentType.EXAM),
        make_assignment("far-homework", due=NOW + timedelta(days=5)),
        make_assignment("beyond", due=NOW + timedelta(days=20), assignment_type=AssignmentType.EXAM),
        make_assignment("done", due=NOW + timedelta(days=1), is_completed=True),
        make_assignment("late", due=NOW - timedelta(hours=2)),
    ]
    settings = NotificationSettings(exam_reminder_days=7)

    assert collect_buckets(assignments, settings, NOW) == []
    assert build_digest(assignments, settings, NOW) is None


def test_unknown_category_is_excluded_not_fatal() -> None:
    broken = make_assignment("broken", due=NOW + timedelta(days=1), assignment_type="Bogus")
    valid = make_assignment("valid", due=NOW + timedelta(days=1), title="Worksheet")

    buckets = collect_buckets([broken, valid], NotificationSettings(), NOW)

    assert [item.assignment_id for bucket in buckets for item in bucket.items] == ["valid"]


def test_fire_time_is_the_next_notification_time() -> None:
    assignment = make_assignment(due=NOW + timedelta(days=1))
    settings = NotificationSettings()

    assert build_digest([assignment], settings, NOW).fire_time == datetime(2025, 3, 10, 20, 0)
    evening = datetime(2025, 3, 10, 21, 0)
    assert build_digest([assignment], settings, evening).fire_time == datetime(2025, 3, 11, 20, 0)
    immediate = build_digest([assignment], settings, NOW, send_immediately=True)
    assert immediate.fire_time == NOW + timedelta(seconds=5)


def test_day_titles() -> None:
    assert day_title(NOW.date(), NOW) == "Today"
    assert day_title((NOW + timedelta(days=1)).date(), NOW) == "Tomorrow"
    assert day_title((NOW + timedelta(days=6)).date(), NOW) == "Sunday, Mar 16"


def test_render_items_without_items() -> None:
    assert render_items([]) == "No assignments due soon."


@pytest.mark.asyncio
async def test_empty_horizon_schedules_nothing_and_cancels_previous_digest(store) -> None:
    await store.schedule(DIGEST_IDENTIFIER, NotificationContent("old", "old"), NOW + timedelta(hours=3), "daily-digest")
    builder = DigestBuilder(store)

    digest = await builder.build_and_schedule_digest(
        [make_assignment(due=NOW + timedelta(days=9))], NotificationSettings(), now=NOW
    )

    assert digest is None
    assert await store.list_scheduled() == []


@pytest.mark.asyncio
async def test_only_one_digest_is_ever_scheduled(store) -> None:
    builder = DigestBuilder(store)
    assignments = [make_assignment(due=NOW + timedelta(days=1))]

    await builder.build_and_schedule_digest(assignments, NotificationSettings(), now=NOW)
    await builder.build_and_schedule_digest(assignments, NotificationSettings(), send_immediately=True, now=NOW)

    entries = await store.list_scheduled()
    assert [entry.identifier for entry in entries] == [DIGEST_IDENTIFIER]
    assert entries[0].fire_time == NOW + timedelta(seconds=5)
    assert entries[0].channel == "daily-digest"
    assert entries[0].content.data["kind"] == "digest"
    assert entries[0].content.data["assignment_ids"] == ["a1"]


@pytest.mark.asyncio
async def test_disabled_notifications_cancel_the_digest(store) -> None:
    builder = DigestBuilder(store)
    assignments = [make_assignment(due=NOW + timedelta(days=1))]
    await builder.build_and_schedule_digest(assignments, NotificationSettings(), now=NOW)

    result = await builder.build_and_schedule_digest(assignments, NotificationSettings(enabled=False), now=NOW)

    assert result is None
    assert len(store) == 0
