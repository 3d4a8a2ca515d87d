"""Certificate trigger and issuance.

Two halves, split by the task queue::

  completion edge -> maybe_issue_certificate -> enqueue certificate_issuance
  worker          -> issue_certificate       -> insert IssuedCertificate

Both halves dedupe on ``IssuedCertificate.key(learner, course, certificate)``.
The trigger skips the enqueue when the record already exists; the worker
inserts under that key, so a duplicate task collides on insert and is
dropped.  Rendering the certificate document is out of scope: the record
carries the data a renderer needs.
"""

from __future__ import annotations

import datetime
import logging

from progress_service.core.errors import Conflict, NotFound
from progress_service.core.metrics import CERTIFICATE_REQUESTS
from progress_service.models.certificate import IssuedCertificate
from progress_service.repos.document_store import DocumentExists
from progress_service.repos.repositories import Repositories, repositories
from progress_service.services.task_queue import (
    CERTIFICATE_ISSUANCE,
    TaskQueue,
    task_queue,
)

logger = logging.getLogger(__name__)


class CertificateTrigger:
    def __init__(self, repos: Repositories, queue: TaskQueue) -> None:
        self._repos = repos
        self._queue = queue

    async def maybe_issue_certificate(self, learner_id: str, course_id: str) -> bool:
        """Request issuance for a newly completed course.

        Returns True when a task was queued.  Never raises: the course
        completion that called this stands whatever happens here.
        """
        try:
            course = await self._repos.courses.get(course_id)
            if course is None or course.certificate_id is None:
                logger.info("Course %s has no certificate configured", course_id)
                CERTIFICATE_REQUESTS.labels(outcome="no_certificate").inc()
                return False

            key = IssuedCertificate.key(learner_id, course_id, course.certificate_id)
            if await self._repos.issued_certificates.get(key) is not None:
                logger.info("Certificate %s already issued", key)
                CERTIFICATE_REQUESTS.labels(outcome="duplicate").inc()
                return False

            task = await self._queue.enqueue(
                CERTIFICATE_ISSUANCE,
                {
                    "learner_id": learner_id,
                    "course_id": course_id,
                    "certificate_id": course.certificate_id,
                },
            )
        except Exception:
            logger.exception(
                "Failed to request certificate for learner=%s course=%s",
                learner_id,
                course_id,
            )
            CERTIFICATE_REQUESTS.labels(outcome="failed").inc()
            return False

        logger.info(
            "Queued certificate issuance task=%s learner=%s course=%s",
            task.id,
            learner_id,
            course_id,
        )
        CERTIFICATE_REQUESTS.labels(outcome="queued").inc()
        return True


async def issue_certificate(
    repos: Repositories, learner_id: str, course_id: str, certificate_id: str
) -> IssuedCertificate | None:
    """Worker side: write the issued certificate.  None when already issued."""
    learner = await repos.learners.require(learner_id)
    course = await repos.courses.require(course_id)
    certificate = await repos.certificates.require(certificate_id)

    issued = IssuedCertificate(
        id=IssuedCertificate.key(learner_id, course_id, certificate_id),
        learner_id=learner_id,
        course_id=course_id,
        certificate_id=certificate_id,
        issued_at=int(datetime.datetime.now(datetime.UTC).timestamp()),
        learner_name=learner.name or learner.email,
        course_title=course.title,
        certificate_title=certificate.title,
        issuer=certificate.issuer,
    )
    try:
        stored = await repos.issued_certificates.add(issued)
    except DocumentExists:
        logger.info("Certificate %s already issued, skipping", issued.id)
        return None

    logger.info(
        "Issued certificate=%s learner=%s course=%s",
        certificate_id,
        learner_id,
        course_id,
    )
    return stored


async def list_certificates(
    learner_id: str, *, repos: Repositories = repositories
) -> list[IssuedCertificate]:
    return await repos.issued_certificates.find("learner", learner_id)


async def verify_certificate(
    issued_id: str, *, repos: Repositories = repositories
) -> IssuedCertificate:
    """Public verification: the record must exist and not be revoked."""
    issued = await repos.issued_certificates.get(issued_id)
    if issued is None:
        raise NotFound("Certificate not found.")
    if issued.status != "issued":
        raise Conflict("This certificate has been revoked.")
    return issued


certificate_trigger = CertificateTrigger(repositories, task_queue)
