"""Request and response bodies for the HTTP contract.

Field names are camelCase on the wire.  Required-looking fields are
declared optional so that a missing one reaches the service layer and is
reported as a 400 with the service's own message.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageOut(CamelModel):
    success: bool = True
    message: str


class EnrollIn(CamelModel):
    course_id: str | None = None
    is_group: bool = False
    company_name: str | None = None
    is_leader: bool = False
    user_id: str | None = None


class CompleteLessonIn(CamelModel):
    course_id: str | None = None
    lesson_id: str | None = None


class CompleteCourseIn(CamelModel):
    course_id: str | None = None
    user_id: str | None = None


class SubmitQuizIn(CamelModel):
    course_id: str | None = None
    quiz_id: str | None = None
    answers: dict[str, Any] | None = None


class SubmitQuizOut(CamelModel):
    success: bool = True
    score: float
    passed: bool
    message: str
    course_completed: bool = False


class AddUserToGroupIn(CamelModel):
    group_id: str | None = None
    user_id: str | None = None
    role: str | None = None


class LessonAccessOut(CamelModel):
    unlocked: bool
    completed: bool
    navigation_mode: str


class QuizStatusOut(CamelModel):
    is_completed: bool
    passed: bool | None = None
    score: float | None = None
    completed_at: int | None = None


class IssuedCertificateOut(CamelModel):
    id: str
    learner_id: str
    course_id: str
    certificate_id: str
    issued_at: int
    learner_name: str
    course_title: str
    certificate_title: str
    issuer: str
    status: str
