"""Enrollment coordinator: individual and group (company) enrollment.

One enrollment writes up to three aggregates, in this order:

  1. Group   found by exact name (created on first use); caller joins as
             leader or student, course joins the group's courses
  2. Course  group id into enrolled_groups, learner into enrolled_students
  3. Learner a CourseProgress entry for the course

Each step is an idempotent set-union applied through the repository's
compare-and-swap loop, so a request that fails part way is retried in
full.  The learner's own record is written last: a crash leaves them
not yet enrolled, never enrolled without a course-side record.

Re-enrolling is a success with an informational message, and still runs
every step so a missing progress entry gets backfilled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from progress_service.core.errors import InvalidArgument
from progress_service.core.metrics import ENROLLMENTS
from progress_service.domain import ledger
from progress_service.models.course import Course
from progress_service.models.group import Group
from progress_service.models.learner import Learner
from progress_service.repos.repositories import Repositories, repositories
from progress_service.services.cache import CacheService, cache_service, progress_cache_key

logger = logging.getLogger(__name__)

ENROLLED = "Successfully enrolled in course."
ALREADY_ENROLLED = "You are already enrolled in this course."
ALREADY_COMPLETED = "You have already completed this course."


@dataclass(frozen=True, slots=True)
class EnrollRequest:
    course_id: str | None
    is_group: bool = False
    group_name: str | None = None
    is_leader: bool = False
    on_behalf_of_user_id: str | None = None


class EnrollmentCoordinator:
    def __init__(self, repos: Repositories, cache: CacheService) -> None:
        self._repos = repos
        self._cache = cache

    async def enroll(self, caller_id: str, request: EnrollRequest) -> str:
        """Enroll the caller (or ``on_behalf_of_user_id``).  Returns the message."""
        course_id = request.course_id
        if not course_id:
            raise InvalidArgument("Course ID is required.")
        group_name = (request.group_name or "").strip()
        if request.is_group and not group_name:
            raise InvalidArgument("Company name is required for group enrollment.")

        learner_id = request.on_behalf_of_user_id or caller_id
        await self._repos.learners.require(learner_id)
        course = await self._repos.courses.require(course_id)

        if course.has_completed(learner_id):
            message = ALREADY_COMPLETED
        elif course.is_enrolled(learner_id):
            message = ALREADY_ENROLLED
        else:
            message = ENROLLED

        group: Group | None = None
        if request.is_group:
            group = await self._join_group(
                group_name, learner_id, as_leader=request.is_leader, course_id=course_id
            )

        await self._add_to_course(course_id, learner_id, group)
        await self._ensure_progress(learner_id, course_id)
        await self._cache.delete(progress_cache_key(learner_id))

        kind = "group" if request.is_group else "individual"
        outcome = "enrolled" if message == ENROLLED else "already_enrolled"
        ENROLLMENTS.labels(kind=kind, outcome=outcome).inc()
        logger.info(
            "Enrollment learner=%s course=%s kind=%s outcome=%s",
            learner_id,
            course_id,
            kind,
            outcome,
            extra={"learner_id": learner_id, "course_id": course_id},
        )
        return message

    async def _join_group(
        self, name: str, member_id: str, *, as_leader: bool, course_id: str
    ) -> Group:
        def join(g: Group) -> Group:
            if as_leader:
                g = replace(g, leaders=g.leaders | {member_id})
            else:
                g = replace(g, students=g.students | {member_id})
            return replace(g, course_ids=g.course_ids | {course_id})

        existing = await self._repos.groups.find_one("title", name)
        if existing is not None:
            change = await self._repos.groups.mutate(existing.id, join)
            return change.after

        created = Group.new(
            name=name, member_id=member_id, as_leader=as_leader, course_id=course_id
        )
        group = await self._repos.groups.add(created)
        logger.info("Created group=%s name=%r for course=%s", group.id, name, course_id)
        return group

    async def _add_to_course(
        self, course_id: str, learner_id: str, group: Group | None
    ) -> None:
        def enroll(c: Course) -> Course:
            if group is not None:
                c = replace(c, enrolled_groups=c.enrolled_groups | {group.id})
            # Completed is terminal: never move a learner back.
            if not c.has_completed(learner_id):
                c = replace(c, enrolled_students=c.enrolled_students | {learner_id})
            return c

        await self._repos.courses.mutate(course_id, enroll)

    async def _ensure_progress(self, learner_id: str, course_id: str) -> None:
        def bootstrap(learner: Learner) -> Learner:
            entry, index = ledger.get_or_create(learner.courses_progress, course_id)
            if index != -1:
                return learner
            return replace(
                learner, courses_progress=ledger.put_entry(learner.courses_progress, entry)
            )

        change = await self._repos.learners.mutate(learner_id, bootstrap)
        if change.changed:
            logger.info("Created progress entry learner=%s course=%s", learner_id, course_id)


enrollment = EnrollmentCoordinator(repositories, cache_service)
