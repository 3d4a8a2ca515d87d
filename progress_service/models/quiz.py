from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import uuid4

QuestionType = Literal[
    "multipleChoice",
    "singleChoice",
    "trueFalse",
    "sorting",
    "fillInBlank",
    "assessment",
    "essay",
    "freeChoice",
]

QUESTION_TYPES: frozenset[str] = frozenset(
    {
        "multipleChoice",
        "singleChoice",
        "trueFalse",
        "sorting",
        "fillInBlank",
        "assessment",
        "essay",
        "freeChoice",
    }
)

# "both" accepts either answer.
TrueFalseAnswer = Literal["true", "false", "both"]


@dataclass(frozen=True, slots=True)
class Choice:
    id: str
    label: str
    is_correct: bool = False


@dataclass(frozen=True, slots=True)
class Question:
    id: str
    question_type: QuestionType
    prompt: str = ""
    choices: tuple[Choice, ...] = ()
    correct_answer: TrueFalseAnswer | None = None

    def correct_choice_id(self) -> str | None:
        for choice in self.choices:
            if choice.is_correct:
                return choice.id
        return None


@dataclass(frozen=True, slots=True)
class Quiz:
    id: str
    title: str
    questions: tuple[Question, ...] = ()
    minimum_score: float = 100.0  # percent
    lesson_id: str | None = None

    @staticmethod
    def new(
        *,
        title: str,
        questions: tuple[Question, ...] = (),
        minimum_score: float = 100.0,
        lesson_id: str | None = None,
    ) -> Quiz:
        return Quiz(
            id=str(uuid4()),
            title=title,
            questions=questions,
            minimum_score=minimum_score,
            lesson_id=lesson_id,
        )
