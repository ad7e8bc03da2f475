"""Storage errors surfaced by grievance store implementations.

The engine never retries these. A StorageError means the whole unit of
work was rolled back; the caller decides whether to retry or surface it.
"""

from __future__ import annotations

from grievance_engine.domain.exceptions import GrievanceEngineError


class StorageError(GrievanceEngineError):
    """Raised when the persistent store fails during an operation."""

    pass


class GrievanceNumberConflictError(StorageError):
    """Raised when a grievance number is already taken.

    Attributes:
        grievance_number: The conflicting human-readable number.
    """

    def __init__(self, grievance_number: str) -> None:
        self.grievance_number = grievance_number
        super().__init__(f"Grievance number already in use: {grievance_number}")


class AuditTokenCollisionError(StorageError):
    """Raised when an audit reference token already exists in the store.

    Attributes:
        reference_token: The colliding token.
    """

    def __init__(self, reference_token: str) -> None:
        self.reference_token = reference_token
        super().__init__(
            f"Audit reference token already recorded: {reference_token[:16]}..."
        )
