"""Learner-facing progress views.

``fetch_progress`` is read-through cached per learner under
``progress:<learner_id>``; every write path that changes a learner's
ledger or enrollment deletes that key.  Enrolled and completed course
lists come from the course membership sets, which are the source of
truth for enrollment.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from progress_service.core.config import SETTINGS
from progress_service.core.errors import NotFound
from progress_service.core.metrics import CACHE_OPERATIONS
from progress_service.domain import cascade, ledger
from progress_service.repos import codecs
from progress_service.repos.repositories import Repositories, repositories
from progress_service.services.cache import CacheService, cache_service, progress_cache_key
from progress_service.services.outline import load_outline

logger = logging.getLogger(__name__)


async def fetch_progress(
    learner_id: str,
    *,
    repos: Repositories = repositories,
    cache: CacheService = cache_service,
) -> dict[str, Any]:
    key = progress_cache_key(learner_id)
    cached = await cache.get(key)
    if cached is not None:
        CACHE_OPERATIONS.labels(operation="hit").inc()
        return json.loads(cached)
    CACHE_OPERATIONS.labels(operation="miss").inc()

    learner = await repos.learners.require(learner_id)

    courses_progress: list[dict[str, Any]] = []
    for entry in learner.courses_progress:
        course = await repos.courses.get(entry.course_id)
        if course is None:
            logger.warning(
                "Learner %s has progress for missing course %s", learner_id, entry.course_id
            )
            percentage = 100 if entry.completed else 0
        else:
            outline = await load_outline(repos, course)
            percentage = cascade.completion_percentage(entry, outline)
        body = codecs.progress_to_doc(entry)
        body["completionPercentage"] = percentage
        courses_progress.append(body)

    enrolled = await repos.courses.find("enrolledStudents", learner_id)
    completed = await repos.courses.find("courseCompletedStudents", learner_id)

    report = {
        "coursesProgress": courses_progress,
        "enrolledCourses": [c.id for c in enrolled],
        "completedCourses": [c.id for c in completed],
    }
    await cache.set(key, json.dumps(report), SETTINGS.progress_cache_ttl)
    return report


async def lesson_access(
    learner_id: str,
    course_id: str,
    lesson_id: str,
    *,
    repos: Repositories = repositories,
) -> dict[str, Any]:
    """Whether the learner may open ``lesson_id`` under the course's navigation mode."""
    learner = await repos.learners.require(learner_id)
    course = await repos.courses.require(course_id)
    outline = await load_outline(repos, course)

    lesson, _ = outline.find(lesson_id)
    if lesson is None:
        raise NotFound("Lesson not found.")

    entry = learner.progress_for(course_id)
    return {
        "unlocked": cascade.is_previous_lesson_complete(entry, outline, lesson_id),
        "completed": cascade.is_lesson_complete(entry, lesson),
        "navigationMode": outline.navigation_mode,
    }


async def quiz_status(
    learner_id: str,
    course_id: str,
    quiz_id: str,
    *,
    repos: Repositories = repositories,
) -> dict[str, object]:
    learner = await repos.learners.require(learner_id)
    quiz = await repos.quizzes.require(quiz_id)
    return ledger.quiz_status(learner.progress_for(course_id), quiz.id, quiz.minimum_score)
