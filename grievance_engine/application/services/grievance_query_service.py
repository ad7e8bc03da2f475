"""Read-only grievance projections for dashboards.

Nothing in this module writes. Orderings are applied here so every store
implementation serves the same views.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from structlog import get_logger

from grievance_engine.application.ports.grievance_store import GrievanceStoreProtocol
from grievance_engine.application.ports.time_authority import TimeAuthorityProtocol
from grievance_engine.domain.errors import GrievanceNotFoundError
from grievance_engine.domain.models.community_vote import CommunityVote
from grievance_engine.domain.models.grievance import (
    OPEN_WORK_STATUSES,
    Grievance,
    GrievanceStatus,
)

logger = get_logger(__name__)

# Sort key for unset timestamps (sorts last in descending order)
_NEVER = datetime.min.replace(tzinfo=timezone.utc)


def _created_desc(grievances: list[Grievance]) -> list[Grievance]:
    return sorted(grievances, key=lambda g: g.created_at, reverse=True)


class GrievanceQueryService:
    """Dashboard projections over the persisted grievance set."""

    def __init__(
        self,
        store: GrievanceStoreProtocol,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._store = store
        self._time = time_authority

    async def get_grievance(self, grievance_id: UUID) -> Grievance:
        """Fetch one grievance.

        Raises:
            GrievanceNotFoundError: Unknown grievance id.
        """
        grievance = await self._store.get(grievance_id)
        if grievance is None:
            raise GrievanceNotFoundError(grievance_id)
        return grievance

    async def list_all(self) -> list[Grievance]:
        """Every grievance, newest first."""
        return _created_desc(await self._store.list_all())

    async def list_assigned(self) -> list[Grievance]:
        """Grievances an official still owes work on (pending or in progress), newest first."""
        return _created_desc(await self._store.list_by_status(OPEN_WORK_STATUSES))

    async def list_overdue(self) -> list[Grievance]:
        """Open grievances whose due date has passed, latest due date first.

        Detection only: nothing here changes or escalates the grievances.
        """
        now = self._time.now()
        overdue = await self._store.list_overdue(now, OPEN_WORK_STATUSES)
        logger.debug("overdue_grievances_listed", count=len(overdue), now=now.isoformat())
        return sorted(
            overdue,
            key=lambda g: g.due_date or _NEVER,
            reverse=True,
        )

    async def list_disputed(self) -> list[Grievance]:
        """Grievances the reporter rejected or the community disputed, most recently updated first."""
        disputed = await self._store.list_disputed()
        return sorted(disputed, key=lambda g: g.updated_at, reverse=True)

    async def list_pending_verification(self) -> list[Grievance]:
        """Grievances awaiting verification, most recently resolved first."""
        pending = await self._store.list_by_status(
            frozenset({GrievanceStatus.PENDING_VERIFICATION})
        )
        return sorted(
            pending,
            key=lambda g: g.resolved_at or _NEVER,
            reverse=True,
        )

    async def list_by_reporter(self, reporter_id: str) -> list[Grievance]:
        """Grievances filed by one reporter, newest first."""
        return _created_desc(await self._store.list_by_reporter(reporter_id))

    async def list_by_official(self, official_id: str) -> list[Grievance]:
        """Grievances assigned to one official, newest first."""
        return _created_desc(await self._store.list_by_official(official_id))

    async def list_votes(self, grievance_id: UUID) -> list[CommunityVote]:
        """Community votes on a grievance, most recent first.

        Raises:
            GrievanceNotFoundError: Unknown grievance id.
        """
        await self.get_grievance(grievance_id)
        votes = await self._store.list_votes(grievance_id)
        return list(reversed(votes))
