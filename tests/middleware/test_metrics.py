"""Tests for the Prometheus metrics middleware and domain counters.

prometheus-client uses a global default registry and counters only go
up, so every assertion is on the delta across the action under test.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import auth_headers, seed_course, seed_learner


def _get_sample(name: str, labels: dict | None = None) -> float:
    """Read a metric sample's current value from the global registry."""
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    after = _get_sample("http_requests_total", labels)
    assert after - before >= 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    after = _get_sample("http_request_duration_seconds_count", labels)
    assert after - before >= 1


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before


def test_lesson_completion_counter(client: TestClient) -> None:
    seed_learner("test-user")
    seed_course()
    recorded = {"outcome": "recorded"}
    duplicate = {"outcome": "duplicate"}
    before_recorded = _get_sample("lesson_completions_total", recorded)
    before_duplicate = _get_sample("lesson_completions_total", duplicate)

    for _ in range(2):
        client.post(
            "/v1/progress/complete-lesson",
            json={"courseId": "CS101", "lessonId": "L1"},
            headers=auth_headers(),
        )

    assert _get_sample("lesson_completions_total", recorded) - before_recorded == 1
    assert _get_sample("lesson_completions_total", duplicate) - before_duplicate == 1


def test_course_completion_counter_counts_the_edge_once(client: TestClient) -> None:
    seed_learner("test-user")
    seed_course(enrolled=("test-user",))
    labels = {"path": "explicit"}
    before = _get_sample("course_completions_total", labels)

    client.post("/v1/progress/complete-course", json={"courseId": "CS101"}, headers=auth_headers())
    client.post("/v1/progress/complete-course", json={"courseId": "CS101"}, headers=auth_headers())

    assert _get_sample("course_completions_total", labels) - before == 1
