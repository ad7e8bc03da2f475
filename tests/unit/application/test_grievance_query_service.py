"""Unit tests for GrievanceQueryService projections."""

from datetime import timedelta
from uuid import uuid4

import pytest

from grievance_engine.application.services.grievance_lifecycle_service import (
    GrievanceLifecycleService,
)
from grievance_engine.application.services.grievance_query_service import (
    GrievanceQueryService,
)
from grievance_engine.domain.errors import GrievanceNotFoundError
from grievance_engine.domain.models.grievance import Grievance, GrievanceStatus
from grievance_engine.domain.models.grievance_intake import (
    GrievanceIntake,
    ReporterIdentity,
)
from tests.helpers.fake_time_authority import FakeTimeAuthority


async def _create_many(
    lifecycle: GrievanceLifecycleService,
    fake_time: FakeTimeAuthority,
    intake: GrievanceIntake,
    reporter: ReporterIdentity,
    count: int,
) -> list[Grievance]:
    grievances = []
    for _ in range(count):
        grievances.append(await lifecycle.create(intake, reporter))
        fake_time.advance(delta=timedelta(hours=1))
    return grievances


class TestListings:
    """Tests for the simple listings."""

    @pytest.mark.asyncio
    async def test_list_all_newest_first(
        self,
        lifecycle: GrievanceLifecycleService,
        queries: GrievanceQueryService,
        fake_time: FakeTimeAuthority,
        intake: GrievanceIntake,
        reporter: ReporterIdentity,
    ) -> None:
        """Test list_all orders by creation time, newest first."""
        created = await _create_many(lifecycle, fake_time, intake, reporter, 3)

        listed = await queries.list_all()

        assert [g.id for g in listed] == [g.id for g in reversed(created)]

    @pytest.mark.asyncio
    async def test_assigned_covers_pending_and_in_progress(
        self,
        lifecycle: GrievanceLifecycleService,
        queries: GrievanceQueryService,
        fake_time: FakeTimeAuthority,
        intake: GrievanceIntake,
        reporter: ReporterIdentity,
    ) -> None:
        """Test assigned = pending + in_progress, excluding later statuses."""
        pending, working, verifying = await _create_many(
            lifecycle, fake_time, intake, reporter, 3
        )
        await lifecycle.accept(working.id, "officer-7", 5)
        await lifecycle.accept(verifying.id, "officer-7", 5)
        await lifecycle.mark_resolved(verifying.id)

        assigned = await queries.list_assigned()

        assert [g.id for g in assigned] == [working.id, pending.id]

    @pytest.mark.asyncio
    async def test_by_reporter_and_official(
        self,
        lifecycle: GrievanceLifecycleService,
        queries: GrievanceQueryService,
        intake: GrievanceIntake,
        reporter: ReporterIdentity,
    ) -> None:
        """Test reporter and official filters."""
        mine = await lifecycle.create(intake, reporter)
        other = await lifecycle.create(intake, ReporterIdentity(reporter_id="citizen-202"))
        await lifecycle.accept(other.id, "officer-9", 3)

        assert [g.id for g in await queries.list_by_reporter("citizen-101")] == [mine.id]
        assert [g.id for g in await queries.list_by_official("officer-9")] == [other.id]
        assert await queries.list_by_official("officer-1") == []

    @pytest.mark.asyncio
    async def test_get_unknown_grievance(self, queries: GrievanceQueryService) -> None:
        """Test fetching an unknown id raises not found."""
        with pytest.raises(GrievanceNotFoundError):
            await queries.get_grievance(uuid4())


class TestOverdue:
    """Tests for overdue detection."""

    @pytest.mark.asyncio
    async def test_overdue_detection_only(
        self,
        lifecycle: GrievanceLifecycleService,
        queries: GrievanceQueryService,
        fake_time: FakeTimeAuthority,
        intake: GrievanceIntake,
        reporter: ReporterIdentity,
    ) -> None:
        """Test past-due open work is listed, latest due first, and left untouched."""
        short, long_, resolved = await _create_many(
            lifecycle, fake_time, intake, reporter, 3
        )
        await lifecycle.accept(short.id, "officer-7", 1)
        await lifecycle.accept(long_.id, "officer-7", 2)
        await lifecycle.accept(resolved.id, "officer-7", 1)
        await lifecycle.mark_resolved(resolved.id)

        fake_time.advance(delta=timedelta(days=5))
        overdue = await queries.list_overdue()

        assert [g.id for g in overdue] == [long_.id, short.id]
        assert all(g.status == GrievanceStatus.IN_PROGRESS for g in overdue)
        assert all(g.escalation_count == 0 for g in overdue)

    @pytest.mark.asyncio
    async def test_not_overdue_before_due_date(
        self,
        lifecycle: GrievanceLifecycleService,
        queries: GrievanceQueryService,
        fake_time: FakeTimeAuthority,
        intake: GrievanceIntake,
        reporter: ReporterIdentity,
    ) -> None:
        """Test a grievance exactly at its due date is not overdue."""
        grievance = await lifecycle.create(intake, reporter)
        await lifecycle.accept(grievance.id, "officer-7", 2)

        fake_time.advance(delta=timedelta(days=2))

        assert await queries.list_overdue() == []


class TestFeedbackViews:
    """Tests for disputed and pending verification views."""

    @pytest.mark.asyncio
    async def test_disputed_includes_reporter_and_community_disputes(
        self,
        lifecycle: GrievanceLifecycleService,
        queries: GrievanceQueryService,
        fake_time: FakeTimeAuthority,
        intake: GrievanceIntake,
        reporter: ReporterIdentity,
    ) -> None:
        """Test disputed lists both kinds, most recently updated first."""
        by_reporter, by_community, clean = await _create_many(
            lifecycle, fake_time, intake, reporter, 3
        )
        for grievance in (by_reporter, by_community, clean):
            await lifecycle.accept(grievance.id, "officer-7", 5)
            await lifecycle.mark_resolved(grievance.id)

        await lifecycle.submit_community_vote(by_community.id, "dispute", "n-1")
        fake_time.advance(seconds=30)
        await lifecycle.submit_user_satisfaction(by_reporter.id, "not_satisfied")
        await lifecycle.submit_community_vote(clean.id, "verify", "n-2")

        disputed = await queries.list_disputed()

        assert [g.id for g in disputed] == [by_reporter.id, by_community.id]

    @pytest.mark.asyncio
    async def test_pending_verification_most_recently_resolved_first(
        self,
        lifecycle: GrievanceLifecycleService,
        queries: GrievanceQueryService,
        fake_time: FakeTimeAuthority,
        intake: GrievanceIntake,
        reporter: ReporterIdentity,
    ) -> None:
        """Test pending verification is ordered by resolution time."""
        first, second = await _create_many(lifecycle, fake_time, intake, reporter, 2)
        await lifecycle.accept(first.id, "officer-7", 5)
        await lifecycle.accept(second.id, "officer-7", 5)
        await lifecycle.mark_resolved(second.id)
        fake_time.advance(seconds=10)
        await lifecycle.mark_resolved(first.id)

        pending = await queries.list_pending_verification()

        assert [g.id for g in pending] == [first.id, second.id]


class TestVotes:
    """Tests for the vote listing."""

    @pytest.mark.asyncio
    async def test_votes_most_recent_first(
        self,
        lifecycle: GrievanceLifecycleService,
        queries: GrievanceQueryService,
        fake_time: FakeTimeAuthority,
        intake: GrievanceIntake,
        reporter: ReporterIdentity,
    ) -> None:
        """Test vote listing order."""
        grievance = await lifecycle.create(intake, reporter)
        await lifecycle.accept(grievance.id, "officer-7", 5)
        await lifecycle.mark_resolved(grievance.id)
        await lifecycle.submit_community_vote(grievance.id, "verify", "n-1")
        fake_time.advance(seconds=5)
        await lifecycle.submit_community_vote(grievance.id, "dispute", "n-2")

        votes = await queries.list_votes(grievance.id)

        assert [v.voter_id for v in votes] == ["n-2", "n-1"]

    @pytest.mark.asyncio
    async def test_votes_of_unknown_grievance(self, queries: GrievanceQueryService) -> None:
        """Test listing votes of an unknown id raises not found."""
        with pytest.raises(GrievanceNotFoundError):
            await queries.list_votes(uuid4())
