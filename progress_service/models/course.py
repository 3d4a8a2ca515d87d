from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import uuid4

NavigationMode = Literal["linear", "free"]


@dataclass(frozen=True, slots=True)
class SyllabusEntry:
    lesson_id: str
    is_optional: bool = False


@dataclass(frozen=True, slots=True)
class Course:
    """Course aggregate.

    ``enrolled_students`` and ``completed_students`` are disjoint: a
    learner moves from the first to the second on completion and never
    back.  ``enrolled_students`` is the source of truth for enrollment.
    """

    id: str
    slug: str
    title: str
    syllabus: tuple[SyllabusEntry, ...] = ()
    navigation_mode: NavigationMode = "linear"
    certificate_id: str | None = None
    enrolled_students: frozenset[str] = frozenset()
    completed_students: frozenset[str] = frozenset()
    enrolled_groups: frozenset[str] = frozenset()

    @staticmethod
    def new(
        *,
        slug: str,
        title: str,
        syllabus: tuple[SyllabusEntry, ...] = (),
        navigation_mode: NavigationMode = "linear",
        certificate_id: str | None = None,
    ) -> Course:
        return Course(
            id=str(uuid4()),
            slug=slug,
            title=title,
            syllabus=syllabus,
            navigation_mode=navigation_mode,
            certificate_id=certificate_id,
        )

    def is_enrolled(self, learner_id: str) -> bool:
        return learner_id in self.enrolled_students

    def has_completed(self, learner_id: str) -> bool:
        return learner_id in self.completed_students


@dataclass(frozen=True, slots=True)
class Lesson:
    id: str
    title: str
    course_id: str | None = None
    quiz_ids: tuple[str, ...] = ()

    @staticmethod
    def new(
        *, title: str, course_id: str | None = None, quiz_ids: tuple[str, ...] = ()
    ) -> Lesson:
        return Lesson(id=str(uuid4()), title=title, course_id=course_id, quiz_ids=quiz_ids)
