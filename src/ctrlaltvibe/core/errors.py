"""Application errors and the JSON envelope they render to.

Every handled failure leaves the API as
`{"error": {"code": "<ErrorCode>", "message": "..."}}` with the
exception's status code; see the VibeError handler in app.main.
"""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    COMMENT_NOT_FOUND = "COMMENT_NOT_FOUND"
    REPLY_NOT_FOUND = "REPLY_NOT_FOUND"
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"
    BLOG_POST_NOT_FOUND = "BLOG_POST_NOT_FOUND"
    VIBE_CHECK_NOT_FOUND = "VIBE_CHECK_NOT_FOUND"
    CONFLICT = "CONFLICT"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    RECAPTCHA_FAILED = "RECAPTCHA_FAILED"
    AI_SERVICE_UNAVAILABLE = "AI_SERVICE_UNAVAILABLE"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """Error detail containing code and message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error response format."""

    error: ErrorDetail


class VibeError(Exception):
    """Raised by services; rendered by the app-level exception handler."""

    def __init__(self, code: ErrorCode, message: str, status_code: int) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(code=self.code.value, message=self.message)
        )


class BadRequestError(VibeError):
    """400 Bad Request - Input rejected by business rules."""

    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(ErrorCode.BAD_REQUEST, message, 400)


class UnauthorizedError(VibeError):
    """401 Unauthorized - Authentication required."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(ErrorCode.UNAUTHORIZED, message, 401)


class ForbiddenError(VibeError):
    """403 Forbidden - Permission denied."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(ErrorCode.FORBIDDEN, message, 403)


class NotFoundError(VibeError):
    """404 Not Found - Generic resource."""

    def __init__(
        self, message: str = "Not found", code: ErrorCode = ErrorCode.NOT_FOUND
    ) -> None:
        super().__init__(code, message, 404)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message, ErrorCode.USER_NOT_FOUND)


class ProjectNotFoundError(NotFoundError):
    def __init__(self, message: str = "Project not found") -> None:
        super().__init__(message, ErrorCode.PROJECT_NOT_FOUND)


class CommentNotFoundError(NotFoundError):
    def __init__(self, message: str = "Comment not found") -> None:
        super().__init__(message, ErrorCode.COMMENT_NOT_FOUND)


class ReplyNotFoundError(NotFoundError):
    def __init__(self, message: str = "Reply not found") -> None:
        super().__init__(message, ErrorCode.REPLY_NOT_FOUND)


class NotificationNotFoundError(NotFoundError):
    def __init__(self, message: str = "Notification not found") -> None:
        super().__init__(message, ErrorCode.NOTIFICATION_NOT_FOUND)


class BlogPostNotFoundError(NotFoundError):
    def __init__(self, message: str = "Post not found") -> None:
        super().__init__(message, ErrorCode.BLOG_POST_NOT_FOUND)


class VibeCheckNotFoundError(NotFoundError):
    def __init__(self, message: str = "Vibe check not found") -> None:
        super().__init__(message, ErrorCode.VIBE_CHECK_NOT_FOUND)


class ConflictError(VibeError):
    """409 Conflict - Unique value already taken."""

    def __init__(self, message: str = "Resource already exists") -> None:
        super().__init__(ErrorCode.CONFLICT, message, 409)


class TooManyRequestsError(VibeError):
    """429 Too Many Requests - Login lockout in effect."""

    def __init__(
        self, retry_after: int, message: str = "Too many failed attempts"
    ) -> None:
        self.retry_after = retry_after
        super().__init__(ErrorCode.TOO_MANY_REQUESTS, message, 429)


class RecaptchaFailedError(VibeError):
    """400 Bad Request - reCAPTCHA token rejected."""

    def __init__(
        self, message: str = "reCAPTCHA verification failed. Please try again."
    ) -> None:
        super().__init__(ErrorCode.RECAPTCHA_FAILED, message, 400)


class AIServiceUnavailableError(VibeError):
    """503 Service Unavailable - AI provider failed or is not configured."""

    def __init__(
        self,
        message: str = "AI service temporarily unavailable. Please try again later.",
    ) -> None:
        super().__init__(ErrorCode.AI_SERVICE_UNAVAILABLE, message, 503)


class ServiceUnavailableError(VibeError):
    """503 Service Unavailable - Optional backend disabled or down."""

    def __init__(self, message: str = "Service unavailable") -> None:
        super().__init__(ErrorCode.SERVICE_UNAVAILABLE, message, 503)
