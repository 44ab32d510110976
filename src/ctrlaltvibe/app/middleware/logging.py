"""Per-request logging, tracing and HTTP metrics."""

import logging
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.app.logging import clear_trace_context, set_trace_id
from ctrlaltvibe.app.metrics.collector import HTTP_REQUEST_DURATION, HTTP_REQUESTS_TOTAL
from ctrlaltvibe.core.logging_schema import LogEvent

logger = logging.getLogger(__name__)
_logging_config = get_settings().logging

_ID = r"[0-9A-Za-z]{26}"

# Dynamic path segments -> placeholders
_PATH_PATTERNS = [
    (re.compile(rf"^/api/projects/{_ID}"), "/api/projects/:id"),
    (re.compile(rf"^/api/comments/{_ID}"), "/api/comments/:id"),
    (re.compile(rf"^/api/replies/{_ID}"), "/api/replies/:id"),
    (re.compile(rf"^/api/notifications/{_ID}$"), "/api/notifications/:id"),
    (re.compile(rf"^/api/vibe-check/{_ID}"), "/api/vibe-check/:id"),
    (re.compile(r"^/api/vibe-check/share/[0-9a-f]+$"), "/api/vibe-check/share/:share_id"),
    (re.compile(r"^/api/blog/posts/slug/[^/]+$"), "/api/blog/posts/slug/:slug"),
    (re.compile(rf"^/api/blog/(posts|categories|tags)/{_ID}$"), r"/api/blog/\1/:id"),
    (re.compile(r"^/api/users/[^/]+$"), "/api/users/:username"),
    (re.compile(rf"^/api/admin/(users|projects|comments)/{_ID}"), r"/api/admin/\1/:id"),
]

# Label values allowed on HTTP metrics
_KNOWN_ENDPOINTS = frozenset({
    # Auth
    "/api/register",
    "/api/login",
    "/api/logout",
    "/api/user",
    # Projects
    "/api/projects",
    "/api/projects/featured",
    "/api/projects/trending",
    "/api/projects/:id",
    "/api/projects/:id/like",
    "/api/projects/:id/bookmark",
    "/api/projects/:id/share",
    "/api/projects/:id/comments",
    "/api/projects/:id/evaluation",
    "/api/comments/:id/replies",
    "/api/comments/:id/like",
    "/api/replies/:id/like",
    # Notifications
    "/api/notifications",
    "/api/notifications/count",
    "/api/notifications/stream",
    "/api/notifications/:id",
    # Tags
    "/api/tags",
    "/api/tags/popular",
    "/api/coding-tools",
    "/api/coding-tools/popular",
    # Blog
    "/api/blog/posts",
    "/api/blog/posts/:id",
    "/api/blog/posts/slug/:slug",
    "/api/blog/categories",
    "/api/blog/categories/:id",
    "/api/blog/tags",
    "/api/blog/tags/:id",
    # Vibe check
    "/api/vibe-check",
    "/api/vibe-check/:id",
    "/api/vibe-check/:id/share",
    "/api/vibe-check/:id/convert-to-project",
    "/api/vibe-check/:id/convert-to-project-evaluation",
    "/api/vibe-check/share/:share_id",
    "/api/vibe-check-count",
    # Profiles
    "/api/profile",
    "/api/profile/skills",
    "/api/profile/skill-categories",
    "/api/profile/activity",
    "/api/profile/liked",
    "/api/profiles",
    "/api/users/:username",
    # Admin
    "/api/admin/users",
    "/api/admin/users/:id",
    "/api/admin/users/:id/role",
    "/api/admin/projects",
    "/api/admin/projects/:id",
    "/api/admin/projects/:id/feature",
    "/api/admin/comments",
    "/api/admin/comments/:id",
})

_UNMETERED = ("/health", "/metrics")


def _normalize_path(path: str) -> str:
    """Collapse ids into placeholders; anything not whitelisted becomes "other"."""
    for pattern, replacement in _PATH_PATTERNS:
        path = pattern.sub(replacement, path)
    return path if path in _KNOWN_ENDPOINTS else "other"


def _observe(method: str, path: str, status: int, seconds: float) -> None:
    endpoint = _normalize_path(path)
    HTTP_REQUESTS_TOTAL.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    HTTP_REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(seconds)


class LoggingMiddleware(BaseHTTPMiddleware):
    """One canonical log line and one metrics sample per request.

    The trace id is taken from `X-Trace-ID` when the caller sends one and
    echoed back on the response.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        trace_id = set_trace_id(request.headers.get("x-trace-id"))
        method, path = request.method, request.url.path
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                "Request failed",
                extra={
                    "event": LogEvent.REQUEST_FAILED,
                    "method": method,
                    "path": path,
                    "duration_ms": (time.perf_counter() - started) * 1000,
                },
            )
            raise
        finally:
            clear_trace_context()

        elapsed = time.perf_counter() - started
        response.headers["X-Trace-ID"] = trace_id
        if path in _UNMETERED:
            return response

        _observe(method, path, response.status_code, elapsed)

        fields = {
            "method": method,
            "path": path,
            "status": response.status_code,
            "duration_ms": round(elapsed * 1000, 2),
            "trace_id": trace_id,
        }
        logger.info("Request completed", extra={"event": LogEvent.REQUEST_COMPLETE, **fields})

        threshold = _logging_config.slow_threshold_ms
        if fields["duration_ms"] > threshold:
            logger.warning(
                "Slow request detected",
                extra={"event": LogEvent.REQUEST_SLOW, "threshold_ms": threshold, **fields},
            )
        return response
