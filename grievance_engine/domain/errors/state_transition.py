"""State transition errors for the grievance state machine."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from grievance_engine.domain.exceptions import GrievanceEngineError

if TYPE_CHECKING:
    from grievance_engine.domain.models.grievance import GrievanceStatus


class InvalidTransitionError(GrievanceEngineError):
    """Raised when an operation is not permitted from the current status.

    Attributes:
        grievance_id: The grievance the operation targeted (if known).
        operation: Name of the rejected operation (e.g. "accept").
        from_status: Current status of the grievance.
        to_status: Status the operation would have moved to.
        allowed_from: Statuses from which the operation is permitted.
    """

    def __init__(
        self,
        from_status: GrievanceStatus,
        to_status: GrievanceStatus,
        operation: str,
        allowed_from: list[GrievanceStatus] | None = None,
        grievance_id: UUID | None = None,
    ) -> None:
        """Initialize invalid transition error.

        Args:
            from_status: Current grievance status.
            to_status: Attempted target status.
            operation: Name of the rejected operation.
            allowed_from: Statuses the operation requires (optional).
            grievance_id: The grievance the operation targeted (optional).
        """
        self.grievance_id = grievance_id
        self.operation = operation
        self.from_status = from_status
        self.to_status = to_status
        self.allowed_from = allowed_from or []

        allowed_str = (
            f" Requires status in {[s.value for s in self.allowed_from]}."
            if self.allowed_from
            else ""
        )
        target = f" for grievance {grievance_id}" if grievance_id else ""
        super().__init__(
            f"Invalid transition{target} during {operation}: "
            f"{from_status.value} -> {to_status.value}.{allowed_str}"
        )
