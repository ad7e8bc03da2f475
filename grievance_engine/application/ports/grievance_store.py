"""Grievance store port.

This module defines the storage contract for grievances, community votes,
escalation history and audit entries.

Writes only happen through a per-grievance unit of work obtained from
GrievanceStoreProtocol.transaction(). Inside that unit of work the
grievance is locked against concurrent writers, and every staged write
(grievance row, vote, escalation record, audit entry) commits together or
not at all.

Developer Golden Rules:
1. ONE TRANSACTION PER TRANSITION - Never write outside transaction()
2. FAIL LOUD - Stores raise StorageError on backend failure, never retry
3. READS ARE FREE - Read methods take no lock and never mutate
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol
from uuid import UUID

from grievance_engine.domain.models.audit_entry import AuditEntry
from grievance_engine.domain.models.community_vote import CommunityVote
from grievance_engine.domain.models.escalation_record import EscalationRecord
from grievance_engine.domain.models.grievance import Grievance, GrievanceStatus


class GrievanceTransactionProtocol(Protocol):
    """Unit of work scoped to a single grievance.

    Writes are staged and only become visible when the enclosing
    transaction() context exits without an exception.
    """

    @property
    def grievance_id(self) -> UUID:
        """The grievance this unit of work is locked on."""
        ...

    async def load(self) -> Grievance | None:
        """Read the grievance under the transaction's lock.

        Returns:
            The grievance, or None if it does not exist (yet).
        """
        ...

    async def last_audit_entry(self) -> AuditEntry | None:
        """Return the newest audit entry of the grievance, including staged ones."""
        ...

    async def save_grievance(self, grievance: Grievance) -> None:
        """Stage an insert or update of the grievance row."""
        ...

    async def append_audit_entry(self, entry: AuditEntry) -> None:
        """Stage an append to the grievance's audit trail."""
        ...

    async def add_vote(self, vote: CommunityVote) -> None:
        """Stage a community vote record."""
        ...

    async def add_escalation_record(self, record: EscalationRecord) -> None:
        """Stage an escalation history record."""
        ...


class GrievanceStoreProtocol(Protocol):
    """Protocol for grievance persistence.

    Implementations:
    - GrievanceStoreStub: in-memory, asyncio locks (tests, local runs)
    - PostgresGrievanceStore: SQLAlchemy async + asyncpg

    Raises:
        StorageError: Any read or write may raise on backend failure.
        GrievanceNumberConflictError: On commit of a duplicate number.
        AuditTokenCollisionError: On commit of a duplicate reference token.
    """

    def transaction(
        self, grievance_id: UUID
    ) -> AbstractAsyncContextManager[GrievanceTransactionProtocol]:
        """Open a locked unit of work for one grievance.

        Usage:
            async with store.transaction(grievance_id) as tx:
                grievance = await tx.load()
                ...
                await tx.save_grievance(updated)
                await tx.append_audit_entry(entry)
        """
        ...

    async def get(self, grievance_id: UUID) -> Grievance | None:
        """Retrieve a grievance by ID."""
        ...

    async def list_all(self) -> list[Grievance]:
        """List every grievance."""
        ...

    async def list_by_status(
        self, statuses: frozenset[GrievanceStatus]
    ) -> list[Grievance]:
        """List grievances whose status is one of ``statuses``."""
        ...

    async def list_by_reporter(self, reporter_id: str) -> list[Grievance]:
        """List grievances filed by a reporter."""
        ...

    async def list_by_official(self, official_id: str) -> list[Grievance]:
        """List grievances assigned to an official."""
        ...

    async def list_overdue(
        self, now: datetime, statuses: frozenset[GrievanceStatus]
    ) -> list[Grievance]:
        """List grievances in ``statuses`` whose due date is before ``now``."""
        ...

    async def list_disputed(self) -> list[Grievance]:
        """List grievances the reporter rejected or the community disputed."""
        ...

    async def grievance_number_exists(self, grievance_number: str) -> bool:
        """Check whether a grievance number is already taken."""
        ...

    async def list_audit_entries(self, grievance_id: UUID) -> list[AuditEntry]:
        """List a grievance's audit entries in sequence order (oldest first)."""
        ...

    async def list_votes(self, grievance_id: UUID) -> list[CommunityVote]:
        """List a grievance's community votes (oldest first)."""
        ...

    async def list_escalation_records(
        self, grievance_id: UUID
    ) -> list[EscalationRecord]:
        """List a grievance's escalation history (oldest first)."""
        ...
