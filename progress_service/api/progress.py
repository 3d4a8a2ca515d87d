"""Progress endpoints: lesson completion, quiz submission, course completion.

  POST /v1/progress/complete-lesson   ledger only, no cascade
  POST /v1/progress/submit-quiz       grade -> ledger -> cascade -> certificate
  POST /v1/progress/complete-course   explicit completion (409 when already done)
  GET  /v1/progress                   read-through cached summary
  GET  /v1/progress/courses/{course_id}/lessons/{lesson_id}/access
  GET  /v1/progress/courses/{course_id}/quizzes/{quiz_id}

A failed quiz is a normal 200 response with ``passed: false``.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from progress_service.api.dependencies import acting_for, require_user
from progress_service.api.schemas import (
    CompleteCourseIn,
    CompleteLessonIn,
    LessonAccessOut,
    MessageOut,
    QuizStatusOut,
    SubmitQuizIn,
    SubmitQuizOut,
)
from progress_service.models.principal import Principal
from progress_service.services import progress_report
from progress_service.services.completion import completion

router = APIRouter(prefix="/v1/progress", tags=["progress"])


@router.get("")
async def fetch_progress(
    principal: Annotated[Principal, Depends(require_user)],
) -> dict[str, Any]:
    return await progress_report.fetch_progress(principal.user_id)


@router.post("/complete-lesson", response_model=MessageOut)
async def complete_lesson(
    body: CompleteLessonIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> MessageOut:
    message = await completion.complete_lesson(
        principal.user_id, body.course_id or "", body.lesson_id or ""
    )
    return MessageOut(message=message)


@router.post("/submit-quiz", response_model=SubmitQuizOut)
async def submit_quiz(
    body: SubmitQuizIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> SubmitQuizOut:
    outcome = await completion.submit_quiz(
        principal.user_id, body.course_id or "", body.quiz_id or "", body.answers
    )
    return SubmitQuizOut(
        score=outcome.score,
        passed=outcome.passed,
        message=outcome.message,
        course_completed=outcome.course_completed,
    )


@router.post("/complete-course", response_model=MessageOut)
async def complete_course(
    body: CompleteCourseIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> MessageOut:
    learner_id = acting_for(principal, body.user_id)
    message = await completion.complete_course(learner_id, body.course_id or "")
    return MessageOut(message=message)


@router.get(
    "/courses/{course_id}/lessons/{lesson_id}/access", response_model=LessonAccessOut
)
async def lesson_access(
    course_id: str,
    lesson_id: str,
    principal: Annotated[Principal, Depends(require_user)],
) -> LessonAccessOut:
    """Whether the caller may open a lesson under linear navigation."""
    access = await progress_report.lesson_access(principal.user_id, course_id, lesson_id)
    return LessonAccessOut(
        unlocked=access["unlocked"],
        completed=access["completed"],
        navigation_mode=access["navigationMode"],
    )


@router.get("/courses/{course_id}/quizzes/{quiz_id}", response_model=QuizStatusOut)
async def quiz_status(
    course_id: str,
    quiz_id: str,
    principal: Annotated[Principal, Depends(require_user)],
) -> QuizStatusOut:
    status = await progress_report.quiz_status(principal.user_id, course_id, quiz_id)
    return QuizStatusOut.model_validate(status)
