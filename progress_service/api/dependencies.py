from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from progress_service.core.errors import Unauthenticated, Unauthorized
from progress_service.models.principal import Principal
from progress_service.services import token_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing token is reported through the service's own
# error envelope rather than FastAPI's default 401 body.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token", auto_error=False)


def require_user(
    raw_token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal.

    Used as a FastAPI dependency on any protected endpoint.
    """
    if not raw_token:
        raise Unauthenticated("You must be logged in.")

    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise Unauthenticated("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise Unauthenticated("Invalid token") from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug(
        "Token validated for user=%s roles=%s",
        principal.user_id,
        principal.roles,
    )
    return principal


def acting_for(principal: Principal, user_id: str | None) -> str:
    """Resolve the learner a request acts on.

    Callers act on themselves; naming another user requires the admin role.
    """
    if not user_id or user_id == principal.user_id:
        return principal.user_id
    if not principal.is_platform_admin():
        logger.warning(
            "Access denied: user=%s tried to act for user=%s",
            principal.user_id,
            user_id,
        )
        raise Unauthorized("You may only act on your own progress.")
    return user_id
