"""Domain errors for the grievance engine.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from GrievanceEngineError.
"""

from grievance_engine.domain.errors.audit import AuditChainIntegrityError
from grievance_engine.domain.errors.grievance import (
    AlreadyRespondedError,
    GrievanceNotFoundError,
    NotFoundError,
)
from grievance_engine.domain.errors.state_transition import InvalidTransitionError
from grievance_engine.domain.errors.storage import (
    AuditTokenCollisionError,
    GrievanceNumberConflictError,
    StorageError,
)
from grievance_engine.domain.errors.validation import (
    EscalationReasonTooShortError,
    ValidationError,
)

__all__: list[str] = [
    "AlreadyRespondedError",
    "AuditChainIntegrityError",
    "AuditTokenCollisionError",
    "EscalationReasonTooShortError",
    "GrievanceNotFoundError",
    "GrievanceNumberConflictError",
    "InvalidTransitionError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
]
