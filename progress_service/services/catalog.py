"""Demo catalog for local development.

Seeded on startup when APP_ENV=dev so the endpoints can be exercised
without the schema layer: one learner, one admin, a linear three-lesson
course whose last lesson is gated by a quiz, and a certificate.
Idempotent: ids are fixed and existing documents are left alone.
"""

from __future__ import annotations

import logging

from progress_service.models.certificate import Certificate
from progress_service.models.course import Course, Lesson, SyllabusEntry
from progress_service.models.learner import Learner
from progress_service.models.quiz import Choice, Question, Quiz
from progress_service.repos.document_store import DocumentExists
from progress_service.repos.repositories import Repositories

logger = logging.getLogger(__name__)

DEMO_LEARNER_ID = "demo-learner"
DEMO_ADMIN_ID = "demo-admin"
DEMO_COURSE_ID = "intro-python"


def _demo_documents() -> list[tuple[str, object]]:
    certificate = Certificate(
        id="intro-python-certificate", title="Introduction to Python", issuer="Demo Academy"
    )
    quiz = Quiz(
        id="intro-python-quiz",
        title="Python basics check",
        minimum_score=50.0,
        lesson_id="intro-python-3",
        questions=(
            Question(
                id="q1",
                question_type="trueFalse",
                prompt="Python lists are mutable.",
                correct_answer="true",
            ),
            Question(
                id="q2",
                question_type="singleChoice",
                prompt="Which keyword defines a function?",
                choices=(
                    Choice(id="a", label="func"),
                    Choice(id="b", label="def", is_correct=True),
                    Choice(id="c", label="lambda"),
                ),
            ),
        ),
    )
    lessons = [
        Lesson(id="intro-python-1", title="Installing Python", course_id=DEMO_COURSE_ID),
        Lesson(id="intro-python-2", title="Variables and types", course_id=DEMO_COURSE_ID),
        Lesson(
            id="intro-python-3",
            title="Functions",
            course_id=DEMO_COURSE_ID,
            quiz_ids=(quiz.id,),
        ),
    ]
    course = Course(
        id=DEMO_COURSE_ID,
        slug="intro-python",
        title="Introduction to Python",
        syllabus=(
            SyllabusEntry("intro-python-1"),
            SyllabusEntry("intro-python-2", is_optional=True),
            SyllabusEntry("intro-python-3"),
        ),
        navigation_mode="linear",
        certificate_id=certificate.id,
    )
    return [
        ("learners", Learner(id=DEMO_LEARNER_ID, email="learner@example.com", name="Demo Learner")),
        (
            "learners",
            Learner(id=DEMO_ADMIN_ID, email="admin@example.com", name="Demo Admin", roles=("admin",)),
        ),
        ("certificates", certificate),
        ("quizzes", quiz),
        *(("lessons", lesson) for lesson in lessons),
        ("courses", course),
    ]


async def seed_demo_catalog(repos: Repositories) -> int:
    """Insert the demo documents that are missing.  Returns how many were added."""
    added = 0
    for repo_name, obj in _demo_documents():
        repo = getattr(repos, repo_name)
        try:
            await repo.add(obj)
        except DocumentExists:
            continue
        added += 1
    logger.info("Demo catalog seeded (%d new documents)", added)
    return added
