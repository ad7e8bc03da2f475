"""Audit chain integrity errors."""

from __future__ import annotations

from uuid import UUID

from grievance_engine.domain.exceptions import GrievanceEngineError


class AuditChainIntegrityError(GrievanceEngineError):
    """Raised when a grievance's audit chain fails verification.

    Either an entry's reference token no longer matches its content, an
    entry does not link to its predecessor, or the sequence has a gap.

    Attributes:
        grievance_id: The grievance whose chain is broken.
        sequence: Sequence number of the first bad entry.
        detail: What check failed.
    """

    def __init__(self, grievance_id: UUID, sequence: int, detail: str) -> None:
        self.grievance_id = grievance_id
        self.sequence = sequence
        self.detail = detail
        super().__init__(
            f"Audit chain broken for grievance {grievance_id} at entry {sequence}: {detail}"
        )
