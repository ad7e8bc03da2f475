"""Audit entry domain model.

An audit entry is the immutable record of one state-affecting event on a
grievance. Entries for a grievance form a hash chain: each entry's
prev_hash is the reference_token of the entry before it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from grievance_engine.domain.events.grievance import (
    AuditEventType,
    GrievanceEventPayload,
    payload_from_dict,
)
from grievance_engine.domain.events.hash_utils import (
    GENESIS_HASH,
    compute_reference_token,
)


@dataclass(frozen=True, eq=True)
class AuditEntry:
    """Append-only audit record for a grievance.

    Attributes:
        id: Unique identifier (UUIDv7).
        grievance_id: Grievance this entry belongs to.
        sequence: 1-based, gap-free position in the grievance's chain.
        event_type: Tag of the payload.
        payload: Stored payload dict (output of the payload's to_dict()).
        recorded_at: When the transition happened (UTC).
        prev_hash: Reference token of the previous entry.
        reference_token: SHA-256 over this entry's canonical content.
        actor_id: Acting identity, None for system-initiated events.
    """

    id: UUID
    grievance_id: UUID
    sequence: int
    event_type: AuditEventType
    payload: dict[str, Any]
    recorded_at: datetime
    prev_hash: str
    reference_token: str
    actor_id: str | None = field(default=None)

    def __post_init__(self) -> None:
        if self.sequence < 1:
            raise ValueError("sequence must be >= 1")
        if self.sequence == 1 and self.prev_hash != GENESIS_HASH:
            raise ValueError("first entry must chain from GENESIS_HASH")

    def hashable_content(self) -> dict[str, Any]:
        """Fields covered by the reference token."""
        return {
            "grievance_id": self.grievance_id,
            "sequence": self.sequence,
            "event_type": self.event_type.value,
            "payload": self.payload,
            "recorded_at": self.recorded_at,
            "prev_hash": self.prev_hash,
            "actor_id": self.actor_id,
        }

    def compute_token(self) -> str:
        """Recompute the reference token from the stored content."""
        return compute_reference_token(self.hashable_content())

    def typed_payload(self) -> GrievanceEventPayload:
        """Read the stored payload back into its typed dataclass."""
        return payload_from_dict(self.event_type, self.payload)
