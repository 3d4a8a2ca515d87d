from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from progress_service.api.dependencies import require_user
from progress_service.api.schemas import AddUserToGroupIn, MessageOut
from progress_service.models.principal import Principal
from progress_service.services.groups import add_user_to_group

router = APIRouter(prefix="/v1/groups", tags=["groups"])


@router.post("/add-user", response_model=MessageOut)
async def add_user(
    body: AddUserToGroupIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> MessageOut:
    """Add a user to a group as leader or student (group leaders and admins only)."""
    message = await add_user_to_group(principal, body.group_id, body.user_id, body.role)
    return MessageOut(message=message)
