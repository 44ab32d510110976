"""Prometheus metrics definitions."""

import os
from pathlib import Path

from prometheus_client import Counter, Gauge, Histogram

# Log scale with SLO boundaries (200ms, 1s, 5s)
_BUCKETS_HTTP = (
    0.005, 0.01, 0.02, 0.05, 0.1,
    0.2, 0.5, 1, 2, 5,
    10,
)

# AI evaluations routinely take 20-90s
_BUCKETS_SLOW = (
    0.5, 1, 2, 5, 10,
    20, 30, 60, 90, 120,
    180,
)

_multiproc_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR", "/tmp/prometheus_metrics")
Path(_multiproc_dir).mkdir(parents=True, exist_ok=True)
os.environ["PROMETHEUS_MULTIPROC_DIR"] = _multiproc_dir

# =============================================================================
# HTTP
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "ctrlaltvibe_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

HTTP_REQUEST_DURATION = Histogram(
    "ctrlaltvibe_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
    buckets=_BUCKETS_HTTP,
)

# =============================================================================
# Community
# =============================================================================

NOTIFICATIONS_CREATED_TOTAL = Counter(
    "ctrlaltvibe_notifications_created_total",
    "Notifications created",
    ["type"],
)

NOTIFICATIONS_PUBLISHED_TOTAL = Counter(
    "ctrlaltvibe_notifications_published_total",
    "Notifications pushed over Redis PUB/SUB",
    ["result"],  # success, error
)

PROJECT_VIEWS_TOTAL = Counter(
    "ctrlaltvibe_project_views_total",
    "Project detail reads",
)

# =============================================================================
# Vibe check
# =============================================================================

VIBE_CHECKS_CREATED_TOTAL = Counter(
    "ctrlaltvibe_vibe_checks_created_total",
    "Vibe checks created",
)

AI_REQUEST_DURATION = Histogram(
    "ctrlaltvibe_ai_request_duration_seconds",
    "Chat completion call duration",
    buckets=_BUCKETS_SLOW,
)

EXTERNAL_CALL_ERRORS_TOTAL = Counter(
    "ctrlaltvibe_external_call_errors_total",
    "External call errors by service",
    ["service"],  # openai, recaptcha
)

# =============================================================================
# Cache
# =============================================================================

CACHE_REQUESTS_TOTAL = Counter(
    "ctrlaltvibe_cache_requests_total",
    "Cached getter lookups",
    ["cache", "result"],  # hit, miss
)

# =============================================================================
# SSE
# =============================================================================

SSE_ACTIVE_CONNECTIONS = Gauge(
    "ctrlaltvibe_sse_active_connections",
    "Currently open notification streams",
    multiprocess_mode="livesum",
)

SSE_MESSAGES_TOTAL = Counter(
    "ctrlaltvibe_sse_messages_total",
    "SSE messages sent",
    ["event_type"],  # connected, notification, heartbeat
)


def _init_metrics() -> None:
    """Initialize labeled metrics so they report 0 instead of nodata."""
    for service in ("openai", "recaptcha"):
        EXTERNAL_CALL_ERRORS_TOTAL.labels(service=service)
    for result in ("success", "error"):
        NOTIFICATIONS_PUBLISHED_TOTAL.labels(result=result)
    for event_type in ("connected", "notification", "heartbeat"):
        SSE_MESSAGES_TOTAL.labels(event_type=event_type)


_init_metrics()
