from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True, slots=True)
class Certificate:
    """Certificate definition a course awards on completion."""

    id: str
    title: str
    issuer: str
    status: str = "active"  # active|expired|revoked

    @staticmethod
    def new(*, title: str, issuer: str) -> Certificate:
        return Certificate(id=str(uuid4()), title=title, issuer=issuer)


@dataclass(frozen=True, slots=True)
class IssuedCertificate:
    """Certificate awarded to one learner for one course.

    The id is derived from ``(learner, course, certificate)`` so issuing
    the same certificate twice collides on insert instead of duplicating.
    The name/title fields are the data payload handed to the renderer.
    """

    id: str
    learner_id: str
    course_id: str
    certificate_id: str
    issued_at: int
    learner_name: str = ""
    course_title: str = ""
    certificate_title: str = ""
    issuer: str = ""
    status: str = "issued"  # issued|revoked

    @staticmethod
    def key(learner_id: str, course_id: str, certificate_id: str) -> str:
        return f"{learner_id}:{course_id}:{certificate_id}"
