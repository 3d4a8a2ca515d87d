from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from progress_service.api.dependencies import require_user
from progress_service.api.schemas import IssuedCertificateOut
from progress_service.models.certificate import IssuedCertificate
from progress_service.models.principal import Principal
from progress_service.services.certificates import list_certificates, verify_certificate

router = APIRouter(prefix="/v1/certificates", tags=["certificates"])


def _to_out(issued: IssuedCertificate) -> IssuedCertificateOut:
    return IssuedCertificateOut(
        id=issued.id,
        learner_id=issued.learner_id,
        course_id=issued.course_id,
        certificate_id=issued.certificate_id,
        issued_at=issued.issued_at,
        learner_name=issued.learner_name,
        course_title=issued.course_title,
        certificate_title=issued.certificate_title,
        issuer=issued.issuer,
        status=issued.status,
    )


@router.get("", response_model=list[IssuedCertificateOut])
async def my_certificates(
    principal: Annotated[Principal, Depends(require_user)],
) -> list[IssuedCertificateOut]:
    return [_to_out(c) for c in await list_certificates(principal.user_id)]


@router.get("/{certificate_id}/verify", response_model=IssuedCertificateOut)
async def verify(certificate_id: str) -> IssuedCertificateOut:
    """Public: anyone holding a certificate id can check it is genuine."""
    return _to_out(await verify_certificate(certificate_id))
