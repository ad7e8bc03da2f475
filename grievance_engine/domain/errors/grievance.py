"""Grievance lookup and feedback errors."""

from __future__ import annotations

from uuid import UUID

from grievance_engine.domain.exceptions import GrievanceEngineError


class NotFoundError(GrievanceEngineError):
    """Base error for unknown entity references."""

    pass


class GrievanceNotFoundError(NotFoundError):
    """Raised when a grievance id does not exist in the store.

    Attributes:
        grievance_id: The grievance ID that was not found.
    """

    def __init__(self, grievance_id: UUID) -> None:
        """Initialize the error.

        Args:
            grievance_id: The grievance ID that was not found.
        """
        self.grievance_id = grievance_id
        super().__init__(f"Grievance not found: {grievance_id}")


class AlreadyRespondedError(GrievanceEngineError):
    """Raised when the reporter submits satisfaction feedback a second time.

    Reporter feedback is write-once. A second submission is rejected
    rather than overwriting the first, because the first response has
    already frozen community voting on the grievance.

    Attributes:
        grievance_id: The grievance that already has feedback.
        existing_response: The satisfaction value already recorded.
    """

    def __init__(self, grievance_id: UUID, existing_response: str) -> None:
        """Initialize the error.

        Args:
            grievance_id: The grievance that already has feedback.
            existing_response: The satisfaction value already recorded.
        """
        self.grievance_id = grievance_id
        self.existing_response = existing_response
        super().__init__(
            f"Reporter already responded to grievance {grievance_id} "
            f"with '{existing_response}'"
        )
