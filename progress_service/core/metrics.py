"""Application metrics using the Prometheus client library.

Single inventory of everything the service measures.  HTTP metrics are
populated by MetricsMiddleware; the domain counters are incremented by
the services that own the behavior.

Counters only go up (rate() them in PromQL), gauges go up and down,
histograms bucket observations so Prometheus can compute percentiles.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Progress engine metrics
# ---------------------------------------------------------------------------

ENROLLMENTS = Counter(
    "enrollments_total",
    "Enrollment requests by kind and outcome",
    ["kind", "outcome"],  # kind: individual|group, outcome: enrolled|already_enrolled
)

LESSON_COMPLETIONS = Counter(
    "lesson_completions_total",
    "Lesson completion requests by outcome",
    ["outcome"],  # recorded|duplicate
)

QUIZ_SUBMISSIONS = Counter(
    "quiz_submissions_total",
    "Graded quiz submissions by result",
    ["result"],  # passed|failed
)

COURSE_COMPLETIONS = Counter(
    "course_completions_total",
    "Courses flipped to completed, by the path that completed them",
    ["path"],  # quiz|explicit
)

CERTIFICATE_REQUESTS = Counter(
    "certificate_requests_total",
    "Certificate trigger decisions by outcome",
    ["outcome"],  # queued|duplicate|no_certificate|failed
)

CAS_CONFLICTS = Counter(
    "document_cas_conflicts_total",
    "Optimistic-concurrency conflicts retried, per collection",
    ["collection"],
)

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache get operations by result",
    ["operation"],  # hit|miss
)

QUEUE_DEPTH = Gauge(
    "task_queue_depth",
    "Number of tasks waiting in a queue",
    ["queue_name"],
)
