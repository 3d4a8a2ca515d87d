"""Conversion between stored document bodies and domain dataclasses.

Document bodies use the camelCase field names of the HTTP contract, so
documents written by other clients of the same store (admin tooling,
the schema layer) decode here.  Such clients may store a reference
either as a bare id or as a populated object (``{"id": ..., ...}``);
``resolve_id`` normalizes both on read, so business logic only ever sees
string ids.
"""

from __future__ import annotations

import logging
from typing import Any

from progress_service.models.certificate import Certificate, IssuedCertificate
from progress_service.models.course import Course, Lesson, SyllabusEntry
from progress_service.models.group import Group
from progress_service.models.learner import (
    CompletedLesson,
    CompletedQuiz,
    CourseProgress,
    Learner,
)
from progress_service.models.quiz import QUESTION_TYPES, Choice, Question, Quiz

logger = logging.getLogger(__name__)


def resolve_id(ref: Any) -> str | None:
    """Return the id of a reference stored as an id or a populated object."""
    if ref is None:
        return None
    if isinstance(ref, dict):
        inner = ref.get("id")
        return None if inner is None else str(inner)
    return str(ref)


def _id_set(refs: Any) -> frozenset[str]:
    return frozenset(rid for rid in (resolve_id(r) for r in refs or ()) if rid)


def _sorted(ids: frozenset[str]) -> list[str]:
    return sorted(ids)


# --- Learner ---------------------------------------------------------------


def progress_to_doc(entry: CourseProgress) -> dict[str, Any]:
    return {
        "course": entry.course_id,
        "completed": entry.completed,
        "completedAt": entry.completed_at,
        "completedLessons": [
            {"lesson": cl.lesson_id, "completedAt": cl.completed_at}
            for cl in entry.completed_lessons
        ],
        "completedQuizzes": [
            {"quiz": cq.quiz_id, "score": cq.score, "completedAt": cq.completed_at}
            for cq in entry.completed_quizzes
        ],
    }


def progress_from_doc(body: dict[str, Any]) -> CourseProgress:
    return CourseProgress(
        course_id=resolve_id(body.get("course")) or "",
        completed=bool(body.get("completed", False)),
        completed_at=body.get("completedAt"),
        completed_lessons=tuple(
            CompletedLesson(
                lesson_id=resolve_id(cl.get("lesson")) or "",
                completed_at=cl.get("completedAt") or 0,
            )
            for cl in body.get("completedLessons") or ()
        ),
        completed_quizzes=tuple(
            CompletedQuiz(
                quiz_id=resolve_id(cq.get("quiz")) or "",
                score=float(cq.get("score") or 0),
                completed_at=cq.get("completedAt") or 0,
            )
            for cq in body.get("completedQuizzes") or ()
        ),
    )


def learner_to_doc(learner: Learner) -> dict[str, Any]:
    return {
        "id": learner.id,
        "email": learner.email,
        "name": learner.name,
        "roles": list(learner.roles),
        "coursesProgress": [progress_to_doc(e) for e in learner.courses_progress],
    }


def learner_from_doc(body: dict[str, Any]) -> Learner:
    return Learner(
        id=str(body["id"]),
        email=body.get("email", ""),
        name=body.get("name", ""),
        roles=tuple(body.get("roles") or ()),
        courses_progress=tuple(
            progress_from_doc(e) for e in body.get("coursesProgress") or ()
        ),
    )


# --- Course / Lesson -------------------------------------------------------


def course_to_doc(course: Course) -> dict[str, Any]:
    return {
        "id": course.id,
        "slug": course.slug,
        "title": course.title,
        "lessons": [
            {"lesson": entry.lesson_id, "isOptional": entry.is_optional}
            for entry in course.syllabus
        ],
        "navigationMode": course.navigation_mode,
        "certificate": course.certificate_id,
        "enrolledStudents": _sorted(course.enrolled_students),
        "courseCompletedStudents": _sorted(course.completed_students),
        "enrolledGroups": _sorted(course.enrolled_groups),
    }


def course_from_doc(body: dict[str, Any]) -> Course:
    navigation_mode = body.get("navigationMode") or "linear"
    return Course(
        id=str(body["id"]),
        slug=body.get("slug", ""),
        title=body.get("title", ""),
        syllabus=tuple(
            SyllabusEntry(
                lesson_id=resolve_id(entry.get("lesson")) or "",
                is_optional=bool(entry.get("isOptional", False)),
            )
            for entry in body.get("lessons") or ()
        ),
        navigation_mode="free" if navigation_mode == "free" else "linear",
        certificate_id=resolve_id(body.get("certificate")),
        enrolled_students=_id_set(body.get("enrolledStudents")),
        completed_students=_id_set(body.get("courseCompletedStudents")),
        enrolled_groups=_id_set(body.get("enrolledGroups")),
    )


def lesson_to_doc(lesson: Lesson) -> dict[str, Any]:
    return {
        "id": lesson.id,
        "title": lesson.title,
        "course": lesson.course_id,
        "quizzes": list(lesson.quiz_ids),
    }


def lesson_from_doc(body: dict[str, Any]) -> Lesson:
    return Lesson(
        id=str(body["id"]),
        title=body.get("title", ""),
        course_id=resolve_id(body.get("course")),
        quiz_ids=tuple(
            qid for qid in (resolve_id(q) for q in body.get("quizzes") or ()) if qid
        ),
    )


# --- Group -----------------------------------------------------------------


def group_to_doc(group: Group) -> dict[str, Any]:
    return {
        "id": group.id,
        "title": group.name,
        "leaders": _sorted(group.leaders),
        "students": _sorted(group.students),
        "courses": _sorted(group.course_ids),
    }


def group_from_doc(body: dict[str, Any]) -> Group:
    # Older group documents keep students under "users".
    students = body.get("students")
    if students is None:
        students = body.get("users")
    return Group(
        id=str(body["id"]),
        name=body.get("title", ""),
        leaders=_id_set(body.get("leaders")),
        students=_id_set(students),
        course_ids=_id_set(body.get("courses")),
    )


# --- Quiz ------------------------------------------------------------------


def quiz_to_doc(quiz: Quiz) -> dict[str, Any]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "minimumScore": quiz.minimum_score,
        "lesson": quiz.lesson_id,
        "questions": [
            {
                "id": q.id,
                "questionType": q.question_type,
                "question": q.prompt,
                "choices": [
                    {"id": c.id, "label": c.label, "isCorrect": c.is_correct}
                    for c in q.choices
                ],
                "correctAnswer": q.correct_answer,
            }
            for q in quiz.questions
        ],
    }


def _true_false(value: Any) -> str | None:
    # Stored as a JSON boolean by some writers, as "true"/"false"/"both" by others.
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).lower()


def _question_from_doc(body: dict[str, Any]) -> Question:
    question_type = body.get("questionType") or "multipleChoice"
    if question_type not in QUESTION_TYPES:
        # Kept as stored; the grader has no rule for it, so it scores 0.
        logger.warning(
            "Question %s has unknown questionType %r", body.get("id"), question_type
        )
    correct_answer = body.get("correctAnswer")
    return Question(
        id=str(body["id"]),
        question_type=question_type,
        prompt=body.get("question", ""),
        choices=tuple(
            Choice(
                id=str(c["id"]),
                label=c.get("label", ""),
                is_correct=bool(c.get("isCorrect", False)),
            )
            for c in body.get("choices") or ()
        ),
        correct_answer=_true_false(correct_answer),
    )


def quiz_from_doc(body: dict[str, Any]) -> Quiz:
    minimum_score = body.get("minimumScore")
    return Quiz(
        id=str(body["id"]),
        title=body.get("title", ""),
        questions=tuple(_question_from_doc(q) for q in body.get("questions") or ()),
        minimum_score=100.0 if minimum_score is None else float(minimum_score),
        lesson_id=resolve_id(body.get("lesson")),
    )


# --- Certificates ----------------------------------------------------------


def certificate_to_doc(cert: Certificate) -> dict[str, Any]:
    return {
        "id": cert.id,
        "title": cert.title,
        "issuer": cert.issuer,
        "status": cert.status,
    }


def certificate_from_doc(body: dict[str, Any]) -> Certificate:
    return Certificate(
        id=str(body["id"]),
        title=body.get("title", ""),
        issuer=body.get("issuer", ""),
        status=body.get("status", "active"),
    )


def issued_certificate_to_doc(issued: IssuedCertificate) -> dict[str, Any]:
    return {
        "id": issued.id,
        "learner": issued.learner_id,
        "course": issued.course_id,
        "certificate": issued.certificate_id,
        "issuedAt": issued.issued_at,
        "learnerName": issued.learner_name,
        "courseTitle": issued.course_title,
        "certificateTitle": issued.certificate_title,
        "issuer": issued.issuer,
        "status": issued.status,
    }


def issued_certificate_from_doc(body: dict[str, Any]) -> IssuedCertificate:
    return IssuedCertificate(
        id=str(body["id"]),
        learner_id=resolve_id(body.get("learner")) or "",
        course_id=resolve_id(body.get("course")) or "",
        certificate_id=resolve_id(body.get("certificate")) or "",
        issued_at=int(body.get("issuedAt") or 0),
        learner_name=body.get("learnerName", ""),
        course_title=body.get("courseTitle", ""),
        certificate_title=body.get("certificateTitle", ""),
        issuer=body.get("issuer", ""),
        status=body.get("status", "issued"),
    )
