"""Escalation record domain model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from grievance_engine.domain.models.grievance import AuthorityLevel


@dataclass(frozen=True, eq=True)
class EscalationRecord:
    """History row written for every escalation of a grievance.

    Attributes:
        id: Unique identifier (UUIDv7).
        grievance_id: Grievance that was escalated.
        from_level: Authority level before the escalation.
        to_level: Authority level after the escalation.
        reason: Reason given for the escalation.
        escalated_by: Official who escalated, None for automatic escalation.
        auto_escalated: True when no official initiated it.
        created_at: When the escalation happened (UTC).
    """

    id: UUID
    grievance_id: UUID
    from_level: AuthorityLevel
    to_level: AuthorityLevel
    reason: str
    created_at: datetime
    escalated_by: str | None = field(default=None)
    auto_escalated: bool = field(default=False)

    def __post_init__(self) -> None:
        if self.auto_escalated != (self.escalated_by is None):
            raise ValueError(
                "auto_escalated must be True exactly when escalated_by is None"
            )
