from __future__ import annotations

from progress_service.repos import codecs


def test_resolve_id_accepts_ids_and_populated_objects() -> None:
    assert codecs.resolve_id("abc") == "abc"
    assert codecs.resolve_id(42) == "42"
    assert codecs.resolve_id({"id": "abc", "title": "Course"}) == "abc"
    assert codecs.resolve_id(None) is None


def test_course_decodes_populated_references() -> None:
    course = codecs.course_from_doc(
        {
            "id": "c1",
            "title": "Course",
            "lessons": [
                {"lesson": {"id": "L1", "title": "One"}, "isOptional": False},
                {"lesson": "L2", "isOptional": True},
            ],
            "enrolledStudents": [{"id": "U1", "email": "u1@example.com"}, "U2"],
            "certificate": {"id": "CERT"},
        }
    )
    assert [e.lesson_id for e in course.syllabus] == ["L1", "L2"]
    assert course.syllabus[1].is_optional is True
    assert course.enrolled_students == {"U1", "U2"}
    assert course.certificate_id == "CERT"
    assert course.navigation_mode == "linear"


def test_group_reads_legacy_users_field() -> None:
    group = codecs.group_from_doc({"id": "g", "title": "Acme", "users": ["U1"]})
    assert group.students == {"U1"}
    assert group.name == "Acme"


def test_quiz_true_false_answer_from_json_boolean() -> None:
    quiz = codecs.quiz_from_doc(
        {
            "id": "q",
            "questions": [{"id": "q1", "questionType": "trueFalse", "correctAnswer": True}],
        }
    )
    assert quiz.questions[0].correct_answer == "true"
    assert quiz.minimum_score == 100.0


def test_learner_progress_survives_encoding() -> None:
    body = {
        "id": "U1",
        "email": "u1@example.com",
        "coursesProgress": [
            {
                "course": {"id": "CS101"},
                "completed": True,
                "completedAt": 10,
                "completedLessons": [{"lesson": "L1", "completedAt": 5}],
                "completedQuizzes": [{"quiz": "Q1", "score": 75, "completedAt": 6}],
            }
        ],
    }
    learner = codecs.learner_from_doc(body)
    entry = learner.progress_for("CS101")
    assert entry is not None
    assert entry.completed is True
    assert entry.quiz_result("Q1").score == 75.0  # type: ignore[union-attr]
    assert codecs.learner_from_doc(codecs.learner_to_doc(learner)) == learner


def test_unknown_question_type_decodes_and_grades_as_wrong() -> None:
    from progress_service.domain import grader

    quiz = codecs.quiz_from_doc(
        {
            "id": "Q",
            "minimumScore": 50,
            "questions": [
                {"id": "q1", "questionType": "trueFalse", "correctAnswer": "true"},
                {"id": "q2", "questionType": "hotspot"},
            ],
        }
    )

    assert quiz.questions[1].question_type == "hotspot"
    result = grader.grade(quiz, {"q1": "true", "q2": "anything"})
    assert result.total == 2
    assert result.score == 50
