"""HTTP middleware."""

from grievance_engine.api.middleware.logging_middleware import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
