from __future__ import annotations

import logging
from dataclasses import replace

from progress_service.core.errors import Conflict, InvalidArgument, Unauthorized
from progress_service.models.group import Group
from progress_service.models.principal import Principal
from progress_service.repos.repositories import Repositories, repositories

logger = logging.getLogger(__name__)

ROLES = ("leader", "student")


async def add_user_to_group(
    principal: Principal,
    group_id: str | None,
    user_id: str | None,
    role: str | None,
    *,
    repos: Repositories = repositories,
) -> str:
    """Add ``user_id`` to a group as leader or student.

    Only platform admins and leaders of that group may do this.  Adding
    someone already holding the role is a Conflict.
    """
    if not group_id or not user_id or not role:
        raise InvalidArgument("Group ID, User ID, and role are required.")
    if role not in ROLES:
        raise InvalidArgument('Role must be either "leader" or "student".')

    await repos.learners.require(user_id)
    group = await repos.groups.require(group_id)

    if not principal.is_platform_admin() and not group.is_leader(principal.user_id):
        logger.warning(
            "Access denied: user=%s is not a leader of group=%s",
            principal.user_id,
            group_id,
        )
        raise Unauthorized("You are not authorized to add users to this group.")

    def add(g: Group) -> Group:
        if role == "leader":
            return replace(g, leaders=g.leaders | {user_id})
        return replace(g, students=g.students | {user_id})

    change = await repos.groups.mutate(group_id, add)
    if not change.changed:
        raise Conflict(f"User is already a {role} in this group.")

    logger.info(
        "User %s added to group %s as %s",
        user_id,
        group_id,
        role,
        extra={"group_id": group_id},
    )
    return f"Successfully added user to group as {role}."
