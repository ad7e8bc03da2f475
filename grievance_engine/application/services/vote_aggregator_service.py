"""Vote aggregator: community verify/dispute tallies and reporter feedback.

The aggregator decides what a vote or a satisfaction response asks for and
records it (vote row + audit entry) inside the caller's grievance
transaction. Applying the resulting status is left to the lifecycle
service, which is the only writer of grievance status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from structlog import get_logger
from uuid6 import uuid7

from grievance_engine.application.ports.grievance_store import (
    GrievanceTransactionProtocol,
)
from grievance_engine.application.services.audit_log_service import AuditLogService
from grievance_engine.domain.events.grievance import (
    CommunityVerificationPayload,
    UserSatisfactionPayload,
)
from grievance_engine.domain.models.community_vote import CommunityVote, VoteType
from grievance_engine.domain.models.grievance import (
    Grievance,
    GrievanceStatus,
    UserSatisfaction,
)

logger = get_logger(__name__)

# Verify votes needed to close a grievance without the reporter
VERIFICATION_THRESHOLD: int = 3


@dataclass(frozen=True)
class VoteTally:
    """Outcome of counting one more community vote.

    Attributes:
        verify_count: Verify tally including this vote.
        dispute_count: Dispute tally including this vote.
        requested_status: Status the vote asks for, None to leave it as is.
    """

    verify_count: int
    dispute_count: int
    requested_status: GrievanceStatus | None


class VoteAggregator:
    """Tallies community votes and records votes and reporter feedback.

    Each accepted vote increments exactly one counter by exactly one. The
    caller holds the grievance's transaction lock, which makes the
    read-modify-write of the counters atomic.
    """

    def __init__(
        self,
        audit_log: AuditLogService,
        verification_threshold: int = VERIFICATION_THRESHOLD,
    ) -> None:
        """Initialize the aggregator.

        Args:
            audit_log: Audit log used to record each vote and response.
            verification_threshold: Verify votes that resolve a grievance.

        Raises:
            ValueError: If verification_threshold is less than 1.
        """
        if verification_threshold < 1:
            raise ValueError(
                f"verification_threshold must be >= 1, got {verification_threshold}"
            )
        self._audit_log = audit_log
        self._threshold = verification_threshold

    @property
    def verification_threshold(self) -> int:
        """Verify votes that resolve a grievance."""
        return self._threshold

    def tally(self, grievance: Grievance, vote_type: VoteType) -> VoteTally:
        """Count one more vote against the grievance's current tallies.

        A dispute always asks to reopen work, whatever the verify count.
        A verify vote asks for resolution once the verify tally reaches
        the threshold.

        Args:
            grievance: Grievance as currently stored.
            vote_type: Direction of the new vote.

        Returns:
            The new tallies and the status the vote asks for.
        """
        verify_count = grievance.community_verify_count
        dispute_count = grievance.community_dispute_count

        if vote_type == VoteType.DISPUTE:
            return VoteTally(
                verify_count=verify_count,
                dispute_count=dispute_count + 1,
                requested_status=GrievanceStatus.IN_PROGRESS,
            )

        verify_count += 1
        requested = (
            GrievanceStatus.RESOLVED if verify_count >= self._threshold else None
        )
        return VoteTally(
            verify_count=verify_count,
            dispute_count=dispute_count,
            requested_status=requested,
        )

    @staticmethod
    def satisfaction_target(satisfaction: UserSatisfaction) -> GrievanceStatus:
        """Status a reporter's response asks for."""
        if satisfaction == UserSatisfaction.SATISFIED:
            return GrievanceStatus.RESOLVED
        return GrievanceStatus.IN_PROGRESS

    async def record_vote(
        self,
        tx: GrievanceTransactionProtocol,
        *,
        before: Grievance,
        after: Grievance,
        vote_type: VoteType,
        voter_id: str,
        recorded_at: datetime,
        comments: str | None = None,
        evidence: tuple[str, ...] = (),
    ) -> CommunityVote:
        """Stage the vote row and its COMMUNITY_VERIFICATION audit entry.

        Args:
            tx: Open transaction on the grievance.
            before: Grievance before the vote was applied.
            after: Grievance after the vote was applied.
            vote_type: Direction of the vote.
            voter_id: Identity of the voter.
            recorded_at: Timestamp of the vote.
            comments: Optional free-text comments.
            evidence: Optional evidence references.

        Returns:
            The staged CommunityVote.
        """
        vote = CommunityVote(
            id=uuid7(),
            grievance_id=before.id,
            voter_id=voter_id,
            vote_type=vote_type,
            created_at=recorded_at,
            content_hash=CommunityVote.compute_content_hash(
                before.id, voter_id, vote_type, recorded_at
            ),
            comments=comments,
            evidence=evidence,
        )
        await tx.add_vote(vote)
        await self._audit_log.append(
            tx,
            CommunityVerificationPayload(
                grievance_number=before.grievance_number,
                vote_id=vote.id,
                vote_type=vote_type.value,
                voter_id=voter_id,
                verify_count=after.community_verify_count,
                dispute_count=after.community_dispute_count,
                from_status=before.status.value,
                to_status=after.status.value,
            ),
            recorded_at=recorded_at,
            actor_id=voter_id,
        )
        logger.debug(
            "community_vote_staged",
            grievance_id=str(before.id),
            vote_id=str(vote.id),
            vote_type=vote_type.value,
        )
        return vote

    async def record_satisfaction(
        self,
        tx: GrievanceTransactionProtocol,
        *,
        before: Grievance,
        after: Grievance,
        satisfaction: UserSatisfaction,
        recorded_at: datetime,
    ) -> None:
        """Stage the USER_SATISFACTION audit entry for a reporter response."""
        await self._audit_log.append(
            tx,
            UserSatisfactionPayload(
                grievance_number=before.grievance_number,
                satisfaction=satisfaction.value,
                from_status=before.status.value,
                to_status=after.status.value,
            ),
            recorded_at=recorded_at,
            actor_id=before.reporter_id,
        )
