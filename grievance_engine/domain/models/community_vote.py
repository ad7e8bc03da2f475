"""Community vote domain model.

A community vote is a neighbour's verify or dispute judgement on a claimed
resolution. Votes are appended once and never edited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

import blake3


class VoteType(Enum):
    """Direction of a community vote."""

    VERIFY = "verify"
    DISPUTE = "dispute"


@dataclass(frozen=True, eq=True)
class CommunityVote:
    """A single community verify/dispute vote on a grievance.

    Attributes:
        id: Unique identifier for this vote (UUIDv7).
        grievance_id: Grievance the vote concerns.
        voter_id: Identity of the voter.
        vote_type: Verify or dispute.
        comments: Optional free-text comments.
        evidence: References to evidence supplied with the vote.
        created_at: When the vote was recorded (UTC timezone-aware).
        content_hash: BLAKE3 digest of the vote's identifying content.
    """

    id: UUID
    grievance_id: UUID
    voter_id: str
    vote_type: VoteType
    created_at: datetime
    content_hash: bytes
    comments: str | None = field(default=None)
    evidence: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        """Validate vote fields.

        Raises:
            ValueError: If any field validation fails.
        """
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware (UTC)")
        if not self.voter_id:
            raise ValueError("voter_id must not be empty")
        if len(self.content_hash) != 32:
            raise ValueError(
                f"content_hash must be 32 bytes (BLAKE3), got {len(self.content_hash)}"
            )

    @staticmethod
    def compute_content_hash(
        grievance_id: UUID,
        voter_id: str,
        vote_type: VoteType,
        created_at: datetime,
    ) -> bytes:
        """Compute BLAKE3 hash for vote content.

        Canonical format: grievance_id|voter_id|vote_type|created_at_iso

        Returns:
            32-byte BLAKE3 hash of the canonical content.
        """
        content = (
            f"{grievance_id}|{voter_id}|{vote_type.value}|{created_at.isoformat()}"
        ).encode("utf-8")
        return blake3.blake3(content).digest()

    def verify_content_hash(self) -> bool:
        """Check that content_hash still matches the vote's content."""
        return self.content_hash == self.compute_content_hash(
            self.grievance_id, self.voter_id, self.vote_type, self.created_at
        )

    @property
    def content_hash_hex(self) -> str:
        """Content hash as lowercase hex."""
        return self.content_hash.hex()
