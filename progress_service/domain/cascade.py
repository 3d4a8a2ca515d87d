"""Completion cascade: lesson and quiz state rolled up into course state.

Pure decision functions over a ``CourseOutline``: the course's ordered
syllabus with each lesson's quiz pass thresholds already resolved.  The
orchestrators build the outline from Course, Lesson and Quiz documents;
nothing in here performs I/O.

Per (learner, course) the lifecycle is

    NotEnrolled -> Enrolled -> (lesson/quiz mutations)* -> Completed

and Completed is terminal.  These functions only answer questions; the
transition itself is applied by ``ledger.mark_course_complete``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from progress_service.models.course import NavigationMode
from progress_service.models.learner import CourseProgress


@dataclass(frozen=True, slots=True)
class OutlineLesson:
    lesson_id: str
    is_optional: bool = False
    # quiz id -> minimum score required to pass
    quiz_thresholds: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CourseOutline:
    course_id: str
    navigation_mode: NavigationMode = "linear"
    lessons: tuple[OutlineLesson, ...] = ()

    def find(self, lesson_id: str) -> tuple[OutlineLesson | None, int]:
        for index, lesson in enumerate(self.lessons):
            if lesson.lesson_id == lesson_id:
                return lesson, index
        return None, -1

    def required_lessons(self) -> tuple[OutlineLesson, ...]:
        return tuple(lesson for lesson in self.lessons if not lesson.is_optional)


def quizzes_passed(entry: CourseProgress, lesson: OutlineLesson) -> bool:
    """Every quiz attached to the lesson meets its threshold.

    Vacuously true for a lesson without quizzes.
    """
    for quiz_id, minimum_score in lesson.quiz_thresholds.items():
        result = entry.quiz_result(quiz_id)
        if result is None or result.score < minimum_score:
            return False
    return True


def is_lesson_complete(entry: CourseProgress | None, lesson: OutlineLesson) -> bool:
    if entry is None:
        return False
    return entry.has_lesson(lesson.lesson_id) and quizzes_passed(entry, lesson)


def is_previous_lesson_complete(
    entry: CourseProgress | None, outline: CourseOutline, lesson_id: str
) -> bool:
    """Linear-navigation gate for ``lesson_id``.

    True when the course navigates freely, when the lesson is first in the
    syllabus, or when the lesson is not part of the syllabus at all.
    Otherwise the immediately preceding lesson must be complete.
    """
    if outline.navigation_mode == "free":
        return True

    _, index = outline.find(lesson_id)
    if index <= 0:
        return True

    return is_lesson_complete(entry, outline.lessons[index - 1])


def is_course_complete(entry: CourseProgress | None, outline: CourseOutline) -> bool:
    """Every non-optional lesson in the syllabus is complete."""
    if entry is None:
        return False
    return all(is_lesson_complete(entry, lesson) for lesson in outline.required_lessons())


def completion_percentage(entry: CourseProgress | None, outline: CourseOutline) -> int:
    """Completed required lessons as a rounded percentage (half rounds up).

    A course with no required lessons reports 100 once completed, else 0.
    """
    required = outline.required_lessons()
    if not required:
        return 100 if entry is not None and entry.completed else 0
    if entry is None:
        return 0

    done = sum(1 for lesson in required if is_lesson_complete(entry, lesson))
    total = len(required)
    # Integer half-up rounding of done * 100 / total
    return (done * 200 + total) // (total * 2)
