"""Tests for error handling classes."""

import pytest

from ctrlaltvibe.core.errors import (
    AIServiceUnavailableError,
    BadRequestError,
    BlogPostNotFoundError,
    ConflictError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    ProjectNotFoundError,
    RecaptchaFailedError,
    TooManyRequestsError,
    UnauthorizedError,
    VibeCheckNotFoundError,
    VibeError,
)


class TestNotFoundErrors:
    """Tests for the NotFoundError family."""

    @pytest.mark.parametrize(
        ("exc_class", "code", "message"),
        [
            (ProjectNotFoundError, ErrorCode.PROJECT_NOT_FOUND, "Project not found"),
            (BlogPostNotFoundError, ErrorCode.BLOG_POST_NOT_FOUND, "Post not found"),
            (VibeCheckNotFoundError, ErrorCode.VIBE_CHECK_NOT_FOUND, "Vibe check not found"),
        ],
    )
    def test_specific_codes(self, exc_class, code, message) -> None:
        """Each subclass carries its own code and default message with 404."""
        exc = exc_class()
        assert isinstance(exc, NotFoundError)
        assert exc.code == code
        assert exc.message == message
        assert exc.status_code == 404

    def test_generic_not_found(self) -> None:
        """Plain NotFoundError uses NOT_FOUND."""
        exc = NotFoundError("Evaluation not found")
        assert exc.code == ErrorCode.NOT_FOUND
        assert exc.message == "Evaluation not found"


class TestTooManyRequestsError:
    """Tests for TooManyRequestsError."""

    def test_keeps_retry_after(self) -> None:
        """retry_after is exposed for the Retry-After header."""
        exc = TooManyRequestsError(retry_after=30)
        assert exc.retry_after == 30
        assert exc.status_code == 429
        assert exc.code == ErrorCode.TOO_MANY_REQUESTS

    def test_custom_message(self) -> None:
        exc = TooManyRequestsError(retry_after=5, message="Try again in 5 seconds.")
        assert exc.message == "Try again in 5 seconds."


class TestStatusCodes:
    """Status code mapping of the remaining errors."""

    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (BadRequestError(), 400),
            (RecaptchaFailedError(), 400),
            (UnauthorizedError(), 401),
            (ForbiddenError(), 403),
            (ConflictError(), 409),
            (AIServiceUnavailableError(), 503),
        ],
    )
    def test_status(self, exc: VibeError, status: int) -> None:
        assert exc.status_code == status

    def test_recaptcha_message(self) -> None:
        """RecaptchaFailedError tells the client to retry."""
        exc = RecaptchaFailedError()
        assert exc.code == ErrorCode.RECAPTCHA_FAILED
        assert "try again" in exc.message


class TestToResponse:
    """Tests for VibeError.to_response()."""

    def test_shape(self) -> None:
        """to_response() nests code and message under error."""
        resp = ForbiddenError("Admin access required").to_response()
        assert resp.model_dump() == {
            "error": {"code": "FORBIDDEN", "message": "Admin access required"}
        }

    def test_is_exception(self) -> None:
        """VibeError subclasses are raisable with their message."""
        with pytest.raises(VibeError, match="Username already exists"):
            raise ConflictError("Username already exists")
