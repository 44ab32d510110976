"""HTTP middleware."""

from ctrlaltvibe.app.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
