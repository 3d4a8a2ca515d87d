from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from progress_service.api.dependencies import acting_for, require_user
from progress_service.api.schemas import EnrollIn, MessageOut
from progress_service.models.principal import Principal
from progress_service.services.enrollment import EnrollRequest, enrollment

router = APIRouter(prefix="/v1", tags=["enrollment"])


@router.post("/enroll", response_model=MessageOut)
async def enroll(
    body: EnrollIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> MessageOut:
    """Enroll in a course, individually or as part of a company group.

    Already enrolled or already completed is still a success; the
    message says which.
    """
    message = await enrollment.enroll(
        principal.user_id,
        EnrollRequest(
            course_id=body.course_id,
            is_group=body.is_group,
            group_name=body.company_name,
            is_leader=body.is_leader,
            on_behalf_of_user_id=acting_for(principal, body.user_id),
        ),
    )
    return MessageOut(message=message)
