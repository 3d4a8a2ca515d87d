from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True, slots=True)
class CompletedLesson:
    lesson_id: str
    completed_at: int


@dataclass(frozen=True, slots=True)
class CompletedQuiz:
    quiz_id: str
    score: float
    completed_at: int


@dataclass(frozen=True, slots=True)
class CourseProgress:
    """One learner's ledger entry for one course.

    ``completed`` only ever moves False -> True and ``completed_at`` is
    stamped on that transition.  Lessons and quizzes are keyed by id;
    the ledger functions in ``progress_service.domain.ledger`` keep them
    unique.
    """

    course_id: str
    completed: bool = False
    completed_at: int | None = None
    completed_lessons: tuple[CompletedLesson, ...] = ()
    completed_quizzes: tuple[CompletedQuiz, ...] = ()

    @staticmethod
    def new(course_id: str) -> CourseProgress:
        return CourseProgress(course_id=course_id)

    def has_lesson(self, lesson_id: str) -> bool:
        return any(cl.lesson_id == lesson_id for cl in self.completed_lessons)

    def quiz_result(self, quiz_id: str) -> CompletedQuiz | None:
        for cq in self.completed_quizzes:
            if cq.quiz_id == quiz_id:
                return cq
        return None


@dataclass(frozen=True, slots=True)
class Learner:
    id: str
    email: str
    name: str = ""
    roles: tuple[str, ...] = ()
    courses_progress: tuple[CourseProgress, ...] = ()

    @staticmethod
    def new(*, email: str, name: str = "", roles: tuple[str, ...] = ()) -> Learner:
        return Learner(id=str(uuid4()), email=email, name=name, roles=roles)

    def progress_for(self, course_id: str) -> CourseProgress | None:
        for entry in self.courses_progress:
            if entry.course_id == course_id:
                return entry
        return None
