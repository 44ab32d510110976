"""Logging field schema - v1.0

Standard fields (added to all logs):
- schema_version: Log schema version
- service: Service name (ctrlaltvibe-api)
- event: Event type (request_complete, project_created, etc.)
- trace_id: Request trace ID (X-Trace-ID)
- duration_ms: Duration in milliseconds

High cardinality fields (OK in logs, NOT in metric labels):
- user_id, project_id, post_id, vibe_check_id
"""

from enum import StrEnum


class LogEvent(StrEnum):
    """Standard log event types.

    Use these event types in the 'event' extra field for consistent
    log filtering and analysis.
    """

    # Lifecycle events
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"
    DB_CONNECTED = "db_connected"
    DB_ERROR = "db_error"
    REDIS_CONNECTED = "redis_connected"
    REDIS_ERROR = "redis_error"

    # API events
    REQUEST_COMPLETE = "request_complete"
    REQUEST_FAILED = "request_failed"
    REQUEST_SLOW = "request_slow"
    UNHANDLED_ERROR = "unhandled_error"

    # Auth events
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    ACCOUNT_LOCKED = "account_locked"
    USER_REGISTERED = "user_registered"

    # Admin events
    USER_DELETED = "user_deleted"
    USER_ROLE_CHANGED = "user_role_changed"

    # Domain events
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    PROJECT_DELETED = "project_deleted"
    PROJECT_FEATURED = "project_featured"
    COMMENT_CREATED = "comment_created"
    NOTIFICATION_CREATED = "notification_created"
    NOTIFICATION_PUBLISHED = "notification_published"
    BLOG_POST_CREATED = "blog_post_created"
    VIBE_CHECK_CREATED = "vibe_check_created"
    VIBE_CHECK_CONVERTED = "vibe_check_converted"
    RECAPTCHA_FAILED = "recaptcha_failed"
    AI_REQUEST_FAILED = "ai_request_failed"

    # Cache events
    CACHE_INVALIDATED = "cache_invalidated"

    # SSE events
    SSE_CONNECTED = "sse_connected"
    SSE_DISCONNECTED = "sse_disconnected"
