"""Build a CourseOutline from stored Course, Lesson and Quiz documents.

The cascade functions are pure and need each lesson's quiz thresholds
up front; this is the one place that reads them.  A quiz belongs to a
lesson when the lesson lists it or when the quiz points back at the
lesson.
"""

from __future__ import annotations

import logging

from progress_service.domain.cascade import CourseOutline, OutlineLesson
from progress_service.models.course import Course
from progress_service.repos.repositories import Repositories

logger = logging.getLogger(__name__)


async def load_outline(repos: Repositories, course: Course) -> CourseOutline:
    lessons: list[OutlineLesson] = []
    for entry in course.syllabus:
        quiz_ids: list[str] = []
        lesson = await repos.lessons.get(entry.lesson_id)
        if lesson is None:
            logger.warning(
                "Course %s lists missing lesson %s", course.id, entry.lesson_id
            )
        else:
            quiz_ids.extend(lesson.quiz_ids)

        for quiz in await repos.quizzes.find("lesson", entry.lesson_id):
            if quiz.id not in quiz_ids:
                quiz_ids.append(quiz.id)

        thresholds: dict[str, float] = {}
        for quiz_id in quiz_ids:
            quiz = await repos.quizzes.get(quiz_id)
            if quiz is None:
                logger.warning("Lesson %s lists missing quiz %s", entry.lesson_id, quiz_id)
                continue
            thresholds[quiz.id] = quiz.minimum_score

        lessons.append(
            OutlineLesson(
                lesson_id=entry.lesson_id,
                is_optional=entry.is_optional,
                quiz_thresholds=thresholds,
            )
        )

    return CourseOutline(
        course_id=course.id,
        navigation_mode=course.navigation_mode,
        lessons=tuple(lessons),
    )


def lesson_for_quiz(outline: CourseOutline, quiz_id: str) -> str | None:
    """Id of the syllabus lesson that gates on ``quiz_id``, if any."""
    for lesson in outline.lessons:
        if quiz_id in lesson.quiz_thresholds:
            return lesson.lesson_id
    return None
