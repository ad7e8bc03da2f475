"""Unit tests for VoteAggregator tallying."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from grievance_engine.application.services.audit_log_service import AuditLogService
from grievance_engine.application.services.vote_aggregator_service import (
    VERIFICATION_THRESHOLD,
    VoteAggregator,
)
from grievance_engine.domain.models.community_vote import VoteType
from grievance_engine.domain.models.grievance import (
    Grievance,
    GrievanceStatus,
    UserSatisfaction,
)
from grievance_engine.infrastructure.stubs.grievance_store_stub import GrievanceStoreStub

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def _grievance(verify: int = 0, dispute: int = 0) -> Grievance:
    return Grievance(
        id=uuid4(),
        grievance_number="GR202600042",
        title="Broken culvert",
        category="Road & Infrastructure",
        description="The culvert on the village road collapsed during the monsoon.",
        village_name="Rampur",
        reporter_id="citizen-1",
        status=GrievanceStatus.PENDING_VERIFICATION,
        community_verify_count=verify,
        community_dispute_count=dispute,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def aggregator() -> VoteAggregator:
    return VoteAggregator(AuditLogService(GrievanceStoreStub()))


class TestTally:
    """Tests for VoteAggregator.tally()."""

    def test_threshold_constant(self, aggregator: VoteAggregator) -> None:
        assert VERIFICATION_THRESHOLD == 3
        assert aggregator.verification_threshold == VERIFICATION_THRESHOLD

    def test_verify_below_threshold_requests_nothing(
        self, aggregator: VoteAggregator
    ) -> None:
        tally = aggregator.tally(_grievance(verify=1), VoteType.VERIFY)
        assert (tally.verify_count, tally.dispute_count) == (2, 0)
        assert tally.requested_status is None

    def test_verify_at_threshold_requests_resolution(
        self, aggregator: VoteAggregator
    ) -> None:
        tally = aggregator.tally(_grievance(verify=2), VoteType.VERIFY)
        assert tally.verify_count == 3
        assert tally.requested_status == GrievanceStatus.RESOLVED

    def test_dispute_always_requests_reopen(self, aggregator: VoteAggregator) -> None:
        tally = aggregator.tally(_grievance(verify=5, dispute=2), VoteType.DISPUTE)
        assert (tally.verify_count, tally.dispute_count) == (5, 3)
        assert tally.requested_status == GrievanceStatus.IN_PROGRESS

    def test_custom_threshold(self) -> None:
        aggregator = VoteAggregator(
            AuditLogService(GrievanceStoreStub()), verification_threshold=1
        )
        tally = aggregator.tally(_grievance(), VoteType.VERIFY)
        assert tally.requested_status == GrievanceStatus.RESOLVED

    def test_threshold_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="verification_threshold"):
            VoteAggregator(AuditLogService(GrievanceStoreStub()), verification_threshold=0)


class TestSatisfactionTarget:
    def test_targets(self) -> None:
        assert (
            VoteAggregator.satisfaction_target(UserSatisfaction.SATISFIED)
            == GrievanceStatus.RESOLVED
        )
        assert (
            VoteAggregator.satisfaction_target(UserSatisfaction.NOT_SATISFIED)
            == GrievanceStatus.IN_PROGRESS
        )
