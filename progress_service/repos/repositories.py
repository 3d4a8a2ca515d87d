"""Repository bundle and the process-wide document store.

Same conditional pattern as the database engine: with DATABASE_URL set
the aggregates live in PostgreSQL, otherwise in an in-memory store.
"""

from __future__ import annotations

from dataclasses import dataclass

from progress_service.core.config import SETTINGS
from progress_service.db.engine import async_session_factory
from progress_service.models.certificate import Certificate, IssuedCertificate
from progress_service.models.course import Course, Lesson
from progress_service.models.group import Group
from progress_service.models.learner import Learner
from progress_service.models.quiz import Quiz
from progress_service.repos import codecs
from progress_service.repos.aggregate_repo import AggregateRepo
from progress_service.repos.document_store import DocumentStore, InMemoryDocumentStore
from progress_service.repos.pg_document_store import PgDocumentStore

# Collection names match the schema layer's slugs.
LEARNERS = "users"
COURSES = "courses"
LESSONS = "lessons"
QUIZZES = "quizzes"
GROUPS = "groups"
CERTIFICATES = "certificates"
ISSUED_CERTIFICATES = "issued-certificates"


@dataclass(frozen=True)
class Repositories:
    learners: AggregateRepo[Learner]
    courses: AggregateRepo[Course]
    lessons: AggregateRepo[Lesson]
    quizzes: AggregateRepo[Quiz]
    groups: AggregateRepo[Group]
    certificates: AggregateRepo[Certificate]
    issued_certificates: AggregateRepo[IssuedCertificate]

    @staticmethod
    def over(store: DocumentStore, *, max_retries: int = 5) -> Repositories:
        return Repositories(
            learners=AggregateRepo(
                store,
                LEARNERS,
                label="User",
                encode=codecs.learner_to_doc,
                decode=codecs.learner_from_doc,
                id_of=lambda o: o.id,
                max_retries=max_retries,
            ),
            courses=AggregateRepo(
                store,
                COURSES,
                label="Course",
                encode=codecs.course_to_doc,
                decode=codecs.course_from_doc,
                id_of=lambda o: o.id,
                max_retries=max_retries,
            ),
            lessons=AggregateRepo(
                store,
                LESSONS,
                label="Lesson",
                encode=codecs.lesson_to_doc,
                decode=codecs.lesson_from_doc,
                id_of=lambda o: o.id,
                max_retries=max_retries,
            ),
            quizzes=AggregateRepo(
                store,
                QUIZZES,
                label="Quiz",
                encode=codecs.quiz_to_doc,
                decode=codecs.quiz_from_doc,
                id_of=lambda o: o.id,
                max_retries=max_retries,
            ),
            groups=AggregateRepo(
                store,
                GROUPS,
                label="Group",
                encode=codecs.group_to_doc,
                decode=codecs.group_from_doc,
                id_of=lambda o: o.id,
                max_retries=max_retries,
            ),
            certificates=AggregateRepo(
                store,
                CERTIFICATES,
                label="Certificate",
                encode=codecs.certificate_to_doc,
                decode=codecs.certificate_from_doc,
                id_of=lambda o: o.id,
                max_retries=max_retries,
            ),
            issued_certificates=AggregateRepo(
                store,
                ISSUED_CERTIFICATES,
                label="Issued certificate",
                encode=codecs.issued_certificate_to_doc,
                decode=codecs.issued_certificate_from_doc,
                id_of=lambda o: o.id,
                max_retries=max_retries,
            ),
        )


# ---------------------------------------------------------------------------
# Module-level singletons
# ---------------------------------------------------------------------------

if async_session_factory is not None:
    document_store: DocumentStore = PgDocumentStore(async_session_factory)
else:
    document_store = InMemoryDocumentStore()

repositories = Repositories.over(document_store, max_retries=SETTINGS.cas_max_retries)
