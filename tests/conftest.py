from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from progress_service.main import app
from progress_service.models.course import Course, Lesson, SyllabusEntry
from progress_service.models.learner import Learner
from progress_service.models.quiz import Choice, Question, Quiz
from progress_service.repos.repositories import document_store, repositories
from progress_service.services import token_service
from progress_service.services.cache import cache_service
from progress_service.services.task_queue import task_queue

# Ensure repo root is on sys.path so `import progress_service` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_document_store() -> None:
    """Clear every aggregate between tests."""
    if hasattr(document_store, "_docs"):
        document_store._docs.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_task_queue() -> None:
    """Clear task queues between tests."""
    if hasattr(task_queue, "_queues"):
        task_queue._queues.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth_headers(username: str = "test-user", roles: list[str] | None = None) -> dict:
    return {"Authorization": f"Bearer {mint_token(username, roles)}"}


@pytest.fixture
def token() -> str:
    """Token with default role (user)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["admin"])


# ---------------------------------------------------------------------------
# Catalog helpers: write aggregates straight into the in-memory store
# ---------------------------------------------------------------------------


def seed_learner(learner_id: str = "test-user", *, roles: tuple[str, ...] = ()) -> Learner:
    learner = Learner(id=learner_id, email=f"{learner_id}@example.com", name=learner_id, roles=roles)
    return asyncio.run(repositories.learners.add(learner))


def seed_course(
    course_id: str = "CS101",
    lessons: tuple[str, ...] = ("L1", "L2"),
    *,
    optional: tuple[str, ...] = (),
    navigation_mode: str = "linear",
    certificate_id: str | None = None,
    enrolled: tuple[str, ...] = (),
    completed: tuple[str, ...] = (),
) -> Course:
    async def _seed() -> Course:
        for lesson_id in lessons:
            await repositories.lessons.add(
                Lesson(id=lesson_id, title=lesson_id, course_id=course_id)
            )
        return await repositories.courses.add(
            Course(
                id=course_id,
                slug=course_id.lower(),
                title=f"Course {course_id}",
                syllabus=tuple(
                    SyllabusEntry(lesson_id, is_optional=lesson_id in optional)
                    for lesson_id in lessons
                ),
                navigation_mode=navigation_mode,  # type: ignore[arg-type]
                certificate_id=certificate_id,
                enrolled_students=frozenset(enrolled),
                completed_students=frozenset(completed),
            )
        )

    return asyncio.run(_seed())


def seed_quiz(
    quiz_id: str = "Q1",
    *,
    lesson_id: str | None = "L2",
    minimum_score: float = 50.0,
) -> Quiz:
    """Two questions: q1 is true/false (answer "true"), q2 single choice (answer "b")."""
    quiz = Quiz(
        id=quiz_id,
        title=f"Quiz {quiz_id}",
        minimum_score=minimum_score,
        lesson_id=lesson_id,
        questions=(
            Question(id="q1", question_type="trueFalse", correct_answer="true"),
            Question(
                id="q2",
                question_type="singleChoice",
                choices=(
                    Choice(id="a", label="A"),
                    Choice(id="b", label="B", is_correct=True),
                ),
            ),
        ),
    )
    return asyncio.run(repositories.quizzes.add(quiz))
