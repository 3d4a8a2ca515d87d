from __future__ import annotations

from progress_service.domain import ledger
from progress_service.models.learner import CourseProgress


def test_get_or_create_returns_fresh_entry_with_minus_one() -> None:
    entry, index = ledger.get_or_create((), "CS101")
    assert index == -1
    assert entry == CourseProgress(course_id="CS101")
    assert entry.completed is False


def test_get_or_create_finds_existing_entry() -> None:
    progress = (CourseProgress("A"), CourseProgress("B"))
    entry, index = ledger.get_or_create(progress, "B")
    assert index == 1
    assert entry is progress[1]


def test_put_entry_appends_then_replaces() -> None:
    progress = ledger.put_entry((), CourseProgress("A"))
    assert len(progress) == 1

    updated = ledger.mark_lesson_complete(progress[0], "L1", 10)
    progress = ledger.put_entry(progress, updated)
    assert len(progress) == 1
    assert progress[0].has_lesson("L1")


def test_mark_lesson_complete_is_idempotent() -> None:
    entry = ledger.mark_lesson_complete(CourseProgress("A"), "L1", 10)
    again = ledger.mark_lesson_complete(entry, "L1", 99)
    assert again == entry
    assert again.completed_lessons[0].completed_at == 10


def test_upsert_quiz_result_replaces_even_a_lower_score() -> None:
    entry = ledger.upsert_quiz_result(CourseProgress("A"), "Q1", 90.0, 10)
    entry = ledger.upsert_quiz_result(entry, "Q1", 40.0, 20)
    assert len(entry.completed_quizzes) == 1
    assert entry.quiz_result("Q1").score == 40.0  # type: ignore[union-attr]
    assert entry.quiz_result("Q1").completed_at == 20  # type: ignore[union-attr]


def test_upsert_quiz_result_keeps_other_quizzes() -> None:
    entry = ledger.upsert_quiz_result(CourseProgress("A"), "Q1", 90.0, 10)
    entry = ledger.upsert_quiz_result(entry, "Q2", 50.0, 11)
    entry = ledger.upsert_quiz_result(entry, "Q1", 100.0, 12)
    assert [q.quiz_id for q in entry.completed_quizzes] == ["Q1", "Q2"]


def test_mark_course_complete_stamps_once() -> None:
    entry = ledger.mark_course_complete(CourseProgress("A"), 100)
    assert entry.completed is True
    assert entry.completed_at == 100
    assert ledger.mark_course_complete(entry, 200).completed_at == 100


def test_quiz_status_reports_pass_against_threshold() -> None:
    entry = ledger.upsert_quiz_result(CourseProgress("A"), "Q1", 60.0, 10)
    assert ledger.quiz_status(entry, "Q1", 50) == {
        "isCompleted": True,
        "passed": True,
        "score": 60.0,
        "completedAt": 10,
    }
    assert ledger.quiz_status(entry, "Q1", 70)["passed"] is False
    assert ledger.quiz_status(entry, "Q1", None)["passed"] is None


def test_quiz_status_for_unattempted_quiz() -> None:
    assert ledger.quiz_status(None, "Q1", 50)["isCompleted"] is False
    assert ledger.quiz_status(CourseProgress("A"), "Q1", 50)["score"] is None
