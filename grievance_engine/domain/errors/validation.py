"""Validation errors for engine inputs.

Intake owns the detailed submission rules (lengths, categories, phone
formats). The engine re-validates only what it depends on: actor identity
presence, required fields, positive timelines and escalation reason length.
"""

from __future__ import annotations

from grievance_engine.domain.exceptions import GrievanceEngineError


class ValidationError(GrievanceEngineError):
    """Raised when an operation receives malformed or insufficient input.

    Raised before any state is read or written, so a rejected call never
    leaves a partial mutation or an audit entry behind.

    Attributes:
        field: Name of the offending input field.
        reason: Why the value was rejected.
    """

    def __init__(self, field: str, reason: str) -> None:
        """Initialize the validation error.

        Args:
            field: Name of the offending input field.
            reason: Why the value was rejected.
        """
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class EscalationReasonTooShortError(ValidationError):
    """Raised when an escalation reason is under the minimum length.

    Attributes:
        length: Length of the supplied reason.
        minimum: Required minimum length.
    """

    def __init__(self, length: int, minimum: int) -> None:
        self.length = length
        self.minimum = minimum
        super().__init__(
            "reason",
            f"escalation reason must be at least {minimum} characters (got {length})",
        )
