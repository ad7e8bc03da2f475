"""Base exception classes for the grievance engine domain layer."""


class GrievanceEngineError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    This enables consistent error handling across the application:
    the API layer maps subclasses to HTTP responses, and workers can
    catch this type to log and skip a single failed grievance.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
