"""Progress ledger: pure operations over a learner's ``courses_progress``.

Nothing here touches storage.  Each function returns a new immutable
value; the orchestrators run these inside a compare-and-swap loop and
persist the result.

Quiz re-submission policy is REPLACE: the latest submission overwrites
the stored score and timestamp, whether it is higher or lower.
"""

from __future__ import annotations

from dataclasses import replace

from progress_service.models.learner import CompletedLesson, CompletedQuiz, CourseProgress


def get_or_create(
    progress: tuple[CourseProgress, ...], course_id: str
) -> tuple[CourseProgress, int]:
    """Return the entry for ``course_id`` and its index.

    A missing entry is returned freshly initialized with index ``-1``;
    the caller persists it with ``put_entry``.
    """
    for index, entry in enumerate(progress):
        if entry.course_id == course_id:
            return entry, index
    return CourseProgress.new(course_id), -1


def put_entry(
    progress: tuple[CourseProgress, ...], entry: CourseProgress
) -> tuple[CourseProgress, ...]:
    """Write ``entry`` back into the collection, replacing by course id."""
    _, index = get_or_create(progress, entry.course_id)
    if index == -1:
        return (*progress, entry)
    return progress[:index] + (entry,) + progress[index + 1 :]


def mark_lesson_complete(
    entry: CourseProgress, lesson_id: str, at: int
) -> CourseProgress:
    """Record a completed lesson.  No-op when it is already recorded."""
    if entry.has_lesson(lesson_id):
        return entry
    return replace(
        entry,
        completed_lessons=(
            *entry.completed_lessons,
            CompletedLesson(lesson_id=lesson_id, completed_at=at),
        ),
    )


def upsert_quiz_result(
    entry: CourseProgress, quiz_id: str, score: float, at: int
) -> CourseProgress:
    """Insert the quiz result, or replace the existing one for ``quiz_id``."""
    result = CompletedQuiz(quiz_id=quiz_id, score=score, completed_at=at)
    quizzes = entry.completed_quizzes
    for index, existing in enumerate(quizzes):
        if existing.quiz_id == quiz_id:
            return replace(
                entry,
                completed_quizzes=quizzes[:index] + (result,) + quizzes[index + 1 :],
            )
    return replace(entry, completed_quizzes=(*quizzes, result))


def mark_course_complete(entry: CourseProgress, at: int) -> CourseProgress:
    """Flip ``completed`` to True and stamp ``completed_at`` once."""
    if entry.completed:
        return entry
    return replace(entry, completed=True, completed_at=at)


def quiz_status(
    entry: CourseProgress | None, quiz_id: str, minimum_score: float | None
) -> dict[str, object]:
    """Completion details for one quiz, as shown to a learner.

    ``passed`` is None when the pass threshold is unknown.
    """
    result = entry.quiz_result(quiz_id) if entry is not None else None
    if result is None:
        return {"isCompleted": False, "passed": None, "score": None, "completedAt": None}
    return {
        "isCompleted": True,
        "passed": None if minimum_score is None else result.score >= minimum_score,
        "score": result.score,
        "completedAt": result.completed_at,
    }
