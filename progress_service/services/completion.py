"""Course-completion orchestrator.

Every entry point has the same shape::

  validate -> load -> mutate the learner via the ledger (CAS loop)
           -> evaluate the cascade -> persist -> downstream effects

Completing a course touches two aggregates with no transaction between
them, so it runs as ordered idempotent steps:

  1. Course: move the learner from enrolled_students to completed_students
  2. Learner: flip the ledger entry to completed (stamps completed_at once)
  3. Certificate trigger, only when step 2 was the false -> true edge

A crash between steps leaves the learner not yet completed in their own
ledger, and re-running the same request converges.  Lesson completion
never cascades into course completion; only a quiz submission by an
enrolled learner or an explicit ``complete_course`` does.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from progress_service.core.errors import Conflict, InvalidArgument, NotFound
from progress_service.core.metrics import (
    COURSE_COMPLETIONS,
    LESSON_COMPLETIONS,
    QUIZ_SUBMISSIONS,
)
from progress_service.domain import cascade, grader, ledger
from progress_service.models.course import Course
from progress_service.models.learner import Learner
from progress_service.repos.repositories import Repositories, repositories
from progress_service.services.cache import CacheService, cache_service, progress_cache_key
from progress_service.services.certificates import CertificateTrigger, certificate_trigger
from progress_service.services.outline import lesson_for_quiz, load_outline

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


@dataclass(frozen=True, slots=True)
class QuizOutcome:
    score: float
    passed: bool
    message: str
    course_completed: bool = False


class CompletionOrchestrator:
    def __init__(
        self,
        repos: Repositories,
        trigger: CertificateTrigger,
        cache: CacheService,
    ) -> None:
        self._repos = repos
        self._trigger = trigger
        self._cache = cache

    # ------------------------------------------------------------------
    # completeLesson
    # ------------------------------------------------------------------

    async def complete_lesson(self, learner_id: str, course_id: str, lesson_id: str) -> str:
        """Record a lesson as completed.  Returns the user-facing message."""
        if not course_id or not lesson_id:
            raise InvalidArgument("Course ID and Lesson ID are required.")

        at = _now()

        def record(learner: Learner) -> Learner:
            entry, _ = ledger.get_or_create(learner.courses_progress, course_id)
            entry = ledger.mark_lesson_complete(entry, lesson_id, at)
            return replace(
                learner, courses_progress=ledger.put_entry(learner.courses_progress, entry)
            )

        change = await self._repos.learners.mutate(learner_id, record)
        await self._invalidate(learner_id)

        before = change.before.progress_for(course_id)
        if before is not None and before.has_lesson(lesson_id):
            LESSON_COMPLETIONS.labels(outcome="duplicate").inc()
            logger.info(
                "Lesson %s already completed by learner=%s", lesson_id, learner_id
            )
            return "Lesson already completed."

        LESSON_COMPLETIONS.labels(outcome="recorded").inc()
        logger.info(
            "Learner=%s completed lesson=%s in course=%s", learner_id, lesson_id, course_id
        )
        return "Successfully completed lesson."

    # ------------------------------------------------------------------
    # submitQuiz
    # ------------------------------------------------------------------

    async def submit_quiz(
        self,
        learner_id: str,
        course_id: str,
        quiz_id: str,
        answers: Mapping[str, Any] | None,
    ) -> QuizOutcome:
        if not course_id or not quiz_id or answers is None:
            raise InvalidArgument("Course ID, Quiz ID, and answers are required.")

        quiz = await self._repos.quizzes.require(quiz_id)
        course = await self._repos.courses.require(course_id)
        await self._repos.learners.require(learner_id)

        outline = await load_outline(self._repos, course)
        lesson_id = lesson_for_quiz(outline, quiz.id)
        if lesson_id is None and quiz.lesson_id is not None:
            lesson, _ = outline.find(quiz.lesson_id)
            lesson_id = lesson.lesson_id if lesson is not None else None
        if lesson_id is None:
            logger.warning("Quiz %s is not part of course %s", quiz.id, course_id)
            raise NotFound("Quiz not found in this course.")

        result = grader.grade(quiz, answers)
        at = _now()

        def record(learner: Learner) -> Learner:
            entry, _ = ledger.get_or_create(learner.courses_progress, course_id)
            entry = ledger.upsert_quiz_result(entry, quiz.id, result.score, at)
            if result.passed:
                entry = ledger.mark_lesson_complete(entry, lesson_id, at)
            return replace(
                learner, courses_progress=ledger.put_entry(learner.courses_progress, entry)
            )

        change = await self._repos.learners.mutate(learner_id, record)
        await self._invalidate(learner_id)

        QUIZ_SUBMISSIONS.labels(result="passed" if result.passed else "failed").inc()
        logger.info(
            "Learner=%s scored %.2f on quiz=%s (minimum %.2f, %s)",
            learner_id,
            result.score,
            quiz.id,
            quiz.minimum_score,
            "passed" if result.passed else "failed",
            extra={"learner_id": learner_id, "course_id": course_id, "quiz_id": quiz.id},
        )

        # The grade is always recorded; only an enrolled learner moves to
        # Completed.  A course-side completion without the ledger flip is
        # an interrupted earlier attempt and is resumed.
        entry = change.after.progress_for(course_id)
        may_complete = course.is_enrolled(learner_id) or course.has_completed(learner_id)
        completed_now = False
        if (
            may_complete
            and entry is not None
            and not entry.completed
            and cascade.is_course_complete(entry, outline)
        ):
            completed_now = await self._finish_course(learner_id, course, path="quiz")

        if result.passed:
            message = "Quiz passed. Course completed." if completed_now else "Quiz passed."
        elif completed_now:
            message = "Quiz submitted. Course completed."
        else:
            message = "Quiz submitted. You did not reach the minimum score; try again."
        return QuizOutcome(
            score=result.score,
            passed=result.passed,
            message=message,
            course_completed=completed_now,
        )

    # ------------------------------------------------------------------
    # completeCourse
    # ------------------------------------------------------------------

    async def complete_course(self, learner_id: str, course_id: str) -> str:
        """Explicit completion for courses without quiz gating.

        Enrollment is checked against ``course.enrolled_students``.  A
        learner already migrated on the course whose ledger entry is not
        yet completed (an interrupted earlier attempt) is allowed through
        so the retry converges; completed on both sides is a Conflict.
        """
        if not course_id:
            raise InvalidArgument("Course ID is required.")

        learner = await self._repos.learners.require(learner_id)
        course = await self._repos.courses.require(course_id)

        entry = learner.progress_for(course_id)
        ledger_completed = entry is not None and entry.completed

        if course.has_completed(learner_id) and ledger_completed:
            logger.warning("Learner=%s already completed course=%s", learner_id, course_id)
            raise Conflict("You have already completed this course.")
        if not course.is_enrolled(learner_id) and not course.has_completed(learner_id):
            logger.warning("Learner=%s not enrolled in course=%s", learner_id, course_id)
            raise Conflict("You are not enrolled in this course.")

        await self._finish_course(learner_id, course, path="explicit")
        return "Successfully completed course."

    # ------------------------------------------------------------------
    # Shared completion edge
    # ------------------------------------------------------------------

    async def _finish_course(self, learner_id: str, course: Course, *, path: str) -> bool:
        """Run the completion steps.  True when this call flipped the ledger."""

        def migrate(c: Course) -> Course:
            return replace(
                c,
                enrolled_students=c.enrolled_students - {learner_id},
                completed_students=c.completed_students | {learner_id},
            )

        await self._repos.courses.mutate(course.id, migrate)

        at = _now()

        def flip(learner: Learner) -> Learner:
            entry, _ = ledger.get_or_create(learner.courses_progress, course.id)
            entry = ledger.mark_course_complete(entry, at)
            return replace(
                learner, courses_progress=ledger.put_entry(learner.courses_progress, entry)
            )

        change = await self._repos.learners.mutate(learner_id, flip)
        await self._invalidate(learner_id)

        before = change.before.progress_for(course.id)
        if before is not None and before.completed:
            return False

        COURSE_COMPLETIONS.labels(path=path).inc()
        logger.info(
            "Learner=%s completed course=%s via %s",
            learner_id,
            course.id,
            path,
            extra={"learner_id": learner_id, "course_id": course.id},
        )
        await self._trigger.maybe_issue_certificate(learner_id, course.id)
        return True

    async def _invalidate(self, learner_id: str) -> None:
        await self._cache.delete(progress_cache_key(learner_id))


completion = CompletionOrchestrator(repositories, certificate_trigger, cache_service)
