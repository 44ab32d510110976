"""Structured JSON logging for the API process.

Every line carries the request's trace id (and the signed-in user, once
known) so a single request can be followed across services.
"""

import logging
import sys
import time
from collections import deque
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pythonjsonlogger.json import JsonFormatter

from ctrlaltvibe.app.config import get_settings

trace_id_ctx: ContextVar[str | None] = ContextVar("trace_id", default=None)
user_id_ctx: ContextVar[str | None] = ContextVar("user_id", default=None)

_WINDOW_SECONDS = 60.0

# LogRecord attribute -> output key
_RECORD_FIELDS = (
    ("levelname", "level"),
    ("name", "logger"),
    ("process", "pid"),
    ("filename", "filename"),
    ("lineno", "lineno"),
    ("funcName", "funcName"),
)

_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def get_trace_id() -> str | None:
    return trace_id_ctx.get()


def set_trace_id(trace_id: str | None = None) -> str:
    """Bind a trace id to the current request, minting a UUID4 if absent."""
    value = trace_id or str(uuid4())
    trace_id_ctx.set(value)
    return value


def set_user_id(user_id: str | None) -> None:
    user_id_ctx.set(user_id)


def clear_trace_context() -> None:
    for ctx in (trace_id_ctx, user_id_ctx):
        ctx.set(None)


class RateLimitFilter(logging.Filter):
    """Drop repeats of the same log call once it exceeds N lines per minute.

    The first line over the limit is let through with a ``[RATE LIMITED]``
    prefix so the suppression is visible. The marker is re-armed once the
    call site falls back under half the limit. ERROR and above are never
    dropped.
    """

    def __init__(self, rate_per_minute: int = 100) -> None:
        super().__init__()
        self.rate_per_minute = rate_per_minute
        self._seen: dict[tuple[str, int, str], deque[float]] = {}
        self._muted: set[tuple[str, int, str]] = set()

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.ERROR:
            return True

        key = (record.name, record.lineno, str(record.msg))
        now = time.monotonic()
        stamps = self._seen.setdefault(key, deque())
        while stamps and now - stamps[0] >= _WINDOW_SECONDS:
            stamps.popleft()

        if len(stamps) < self.rate_per_minute:
            if len(stamps) < self.rate_per_minute // 2:
                self._muted.discard(key)
            stamps.append(now)
            return True

        if key in self._muted:
            return False

        self._muted.add(key)
        stamps.append(now)
        record.msg = f"[RATE LIMITED] {record.msg} (max {self.rate_per_minute}/min)"
        return True


class VibeJsonFormatter(JsonFormatter):
    """JSON formatter adding timestamp, source location, service and request context."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        log_config = get_settings().logging
        self._static = {
            "schema_version": log_config.schema_version,
            "service": log_config.service_name,
        }

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        for attr, key in _RECORD_FIELDS:
            log_record[key] = getattr(record, attr)
        log_record.update(self._static)

        for key, ctx in (("trace_id", trace_id_ctx), ("user_id", user_id_ctx)):
            value = ctx.get()
            if value:
                log_record.setdefault(key, value)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        # uvicorn duplicates the message with ANSI codes
        log_record.pop("color_message", None)


def setup_logging(level: int | None = None) -> None:
    """Route root and uvicorn loggers through one JSON stdout handler."""
    log_config = get_settings().logging
    if level is None:
        level = logging.getLevelName(log_config.level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(VibeJsonFormatter())
    handler.addFilter(RateLimitFilter(log_config.rate_limit_per_minute))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers[:] = [handler]
        uvicorn_logger.propagate = False

    # Request lines come from LoggingMiddleware instead
    logging.getLogger("uvicorn.access").disabled = True

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
