"""Enrollment coordinator tests.

Verifies:
1. Enrollment writes course membership and a progress entry
2. Re-enrolling is an idempotent success and backfills progress
3. Group enrollment creates a group once and reuses it by name
4. Validation happens before any write
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from progress_service.core.errors import InvalidArgument, NotFound
from progress_service.repos.repositories import repositories
from progress_service.services.enrollment import (
    ALREADY_COMPLETED,
    ALREADY_ENROLLED,
    ENROLLED,
    EnrollRequest,
    enrollment,
)
from tests.conftest import seed_course, seed_learner


def _enroll(learner_id: str, **kwargs) -> str:
    kwargs.setdefault("course_id", "CS101")
    return asyncio.run(enrollment.enroll(learner_id, EnrollRequest(**kwargs)))


def test_enroll_adds_student_and_creates_progress() -> None:
    seed_learner("U1")
    seed_course()

    assert _enroll("U1") == ENROLLED

    course = asyncio.run(repositories.courses.require("CS101"))
    learner = asyncio.run(repositories.learners.require("U1"))
    assert course.enrolled_students == {"U1"}
    entry = learner.progress_for("CS101")
    assert entry is not None
    assert entry.completed is False


def test_enroll_twice_is_idempotent() -> None:
    seed_learner("U1")
    seed_course()

    _enroll("U1")
    assert _enroll("U1") == ALREADY_ENROLLED

    learner = asyncio.run(repositories.learners.require("U1"))
    course = asyncio.run(repositories.courses.require("CS101"))
    assert len(learner.courses_progress) == 1
    assert course.enrolled_students == {"U1"}


def test_already_enrolled_backfills_missing_progress_entry() -> None:
    seed_learner("U1")
    seed_course(enrolled=("U1",))

    assert _enroll("U1") == ALREADY_ENROLLED

    learner = asyncio.run(repositories.learners.require("U1"))
    assert learner.progress_for("CS101") is not None


def test_completed_learner_is_not_moved_back_to_enrolled() -> None:
    seed_learner("U1")
    seed_course(completed=("U1",))

    assert _enroll("U1") == ALREADY_COMPLETED

    course = asyncio.run(repositories.courses.require("CS101"))
    assert "U1" not in course.enrolled_students
    assert course.completed_students == {"U1"}


def test_missing_course_id_is_rejected_before_any_write() -> None:
    seed_learner("U1")
    with pytest.raises(InvalidArgument, match="Course ID is required"):
        _enroll("U1", course_id=None)


def test_group_without_name_is_rejected() -> None:
    seed_learner("U1")
    seed_course()
    with pytest.raises(InvalidArgument, match="Company name"):
        _enroll("U1", is_group=True, group_name="  ")

    course = asyncio.run(repositories.courses.require("CS101"))
    assert course.enrolled_students == frozenset()


def test_unknown_learner_or_course_is_not_found() -> None:
    seed_course()
    with pytest.raises(NotFound, match="User not found"):
        _enroll("ghost")

    seed_learner("U1")
    with pytest.raises(NotFound, match="Course not found"):
        _enroll("U1", course_id="nope")


def test_group_enrollment_creates_then_reuses_group_by_name() -> None:
    seed_learner("lead")
    seed_learner("U2")
    seed_course()

    _enroll("lead", is_group=True, group_name="Acme", is_leader=True)
    _enroll("U2", is_group=True, group_name="Acme")

    groups = asyncio.run(repositories.groups.find("title", "Acme"))
    assert len(groups) == 1
    group = groups[0]
    assert group.leaders == {"lead"}
    assert group.students == {"U2"}
    assert group.course_ids == {"CS101"}

    course = asyncio.run(repositories.courses.require("CS101"))
    assert course.enrolled_groups == {group.id}
    assert course.enrolled_students == {"lead", "U2"}


def test_group_enrollment_adds_new_course_to_existing_group() -> None:
    seed_learner("lead")
    seed_course("CS101")
    seed_course("CS102", lessons=("M1",))

    _enroll("lead", is_group=True, group_name="Acme", is_leader=True)
    _enroll("lead", course_id="CS102", is_group=True, group_name="Acme", is_leader=True)

    group = asyncio.run(repositories.groups.find_one("title", "Acme"))
    assert group is not None
    assert group.course_ids == {"CS101", "CS102"}
    assert group.leaders == {"lead"}


def test_group_enrollment_for_already_enrolled_learner_still_joins_group() -> None:
    seed_learner("U1")
    seed_course(enrolled=("U1",))

    assert _enroll("U1", is_group=True, group_name="Acme") == ALREADY_ENROLLED

    group = asyncio.run(repositories.groups.find_one("title", "Acme"))
    assert group is not None
    assert "U1" in group.students


def test_enroll_on_behalf_of_another_user() -> None:
    seed_learner("admin")
    seed_learner("U1")
    seed_course()

    _enroll("admin", on_behalf_of_user_id="U1")

    course = asyncio.run(repositories.courses.require("CS101"))
    assert course.enrolled_students == {"U1"}
    admin = asyncio.run(repositories.learners.require("admin"))
    assert admin.courses_progress == ()


def test_enroll_invalidates_cached_progress() -> None:
    from progress_service.services.cache import cache_service

    seed_learner("U1")
    seed_course()
    asyncio.run(cache_service.set("progress:U1", "{}", 300))

    _enroll("U1")

    assert asyncio.run(cache_service.get("progress:U1")) is None


def test_enroll_keeps_existing_progress_untouched() -> None:
    from progress_service.domain import ledger

    learner = seed_learner("U1")
    seed_course(enrolled=("U1",))
    entry = ledger.mark_lesson_complete(ledger.get_or_create((), "CS101")[0], "L1", 5)
    asyncio.run(
        repositories.learners.mutate(
            "U1", lambda _: replace(learner, courses_progress=(entry,))
        )
    )

    _enroll("U1")

    stored = asyncio.run(repositories.learners.require("U1"))
    assert stored.courses_progress == (entry,)
