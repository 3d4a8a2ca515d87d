"""Prometheus metrics endpoint.

Scraped by Prometheus every N seconds.  Returns the text exposition
format, not JSON::

  # HELP course_completions_total Courses flipped to completed, by the path that completed them
  # TYPE course_completions_total counter
  course_completions_total{path="quiz"} 12.0

Restrict access in production (internal port or scraper allow-list);
completion and enrollment rates are business data.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose all Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
