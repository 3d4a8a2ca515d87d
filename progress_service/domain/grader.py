"""Quiz grading.

Stateless: (quiz, answers) -> GradeResult.  Scoring rules per type:

  trueFalse               correct when the submitted value equals
                          ``correct_answer``; ``"both"`` accepts true or false
  multipleChoice,         correct when the submitted value is the id of the
  singleChoice            choice flagged ``is_correct``
  everything else         no automatic rule: scores 0 but still counts
                          toward the total

Score is ``correct * 100 / total`` (0 for an empty quiz), no partial
credit.  A submission passes when ``score >= quiz.minimum_score``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from progress_service.core.errors import InvalidArgument
from progress_service.models.quiz import Question, Quiz

CHOICE_TYPES = frozenset({"multipleChoice", "singleChoice"})
AUTO_GRADED_TYPES = CHOICE_TYPES | {"trueFalse"}


@dataclass(frozen=True, slots=True)
class GradeResult:
    score: float
    correct_count: int
    total: int
    passed: bool


def _normalize_bool_answer(value: Any) -> str | None:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered
    return None


def is_correct(question: Question, submitted: Any) -> bool:
    if submitted is None:
        return False

    if question.question_type == "trueFalse":
        answer = _normalize_bool_answer(submitted)
        if answer is None or question.correct_answer is None:
            return False
        if question.correct_answer == "both":
            return True
        return answer == question.correct_answer

    if question.question_type in CHOICE_TYPES:
        correct_id = question.correct_choice_id()
        return correct_id is not None and submitted == correct_id

    return False


def grade(quiz: Quiz, answers: Mapping[str, Any] | None) -> GradeResult:
    """Grade a submission.  ``answers`` maps question id to submitted value."""
    if answers is None:
        raise InvalidArgument("Answers are required.")

    total = len(quiz.questions)
    correct = sum(1 for q in quiz.questions if is_correct(q, answers.get(q.id)))
    score = correct * 100 / total if total > 0 else 0.0

    return GradeResult(
        score=score,
        correct_count=correct,
        total=total,
        passed=score >= quiz.minimum_score,
    )
