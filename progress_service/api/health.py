"""Health and readiness endpoints.

  /health (liveness):  "Is this process alive?"  Always 200; the body
                       reports per-dependency status.
  /ready (readiness):  "Can this instance serve traffic?"  503 when the
                       document store is configured but unreachable.

Redis is never critical: the progress cache falls through to the store,
and the certificate trigger logs enqueue failures without failing the
completion that called it.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from sqlalchemy import text

from progress_service.db.engine import engine
from progress_service.db.redis import redis_pool

router = APIRouter(tags=["health"])


async def _check_database() -> str:
    if engine is None:
        return "not_configured"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        return "degraded"
    return "ok"


async def _check_redis() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception:
        return "degraded"
    return "ok"


@router.get("/health")
async def health() -> dict:
    """Liveness probe + dependency status.

    Returns 200 even when degraded; a 200 with status=degraded means
    "alive but impaired".
    """
    checks = {
        "database": await _check_database(),
        "redis": await _check_redis(),
    }
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    """Readiness probe: 503 when the document store cannot be reached."""
    if await _check_database() == "degraded":
        return Response(status_code=503)
    return Response(status_code=200)
