"""Grievance store stub implementation.

This module provides an in-memory implementation of GrievanceStoreProtocol
for development and testing purposes.

Each grievance has its own asyncio.Lock, the in-memory equivalent of a
database row lock. Writes made inside transaction() are staged and applied
in one step when the block exits cleanly; an exception discards them.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

from structlog import get_logger

from grievance_engine.application.ports.grievance_store import (
    GrievanceStoreProtocol,
    GrievanceTransactionProtocol,
)
from grievance_engine.domain.errors import (
    AuditTokenCollisionError,
    GrievanceNumberConflictError,
    StorageError,
)
from grievance_engine.domain.models.audit_entry import AuditEntry
from grievance_engine.domain.models.community_vote import CommunityVote
from grievance_engine.domain.models.escalation_record import EscalationRecord
from grievance_engine.domain.models.grievance import Grievance, GrievanceStatus

logger = get_logger(__name__)


class _StubTransaction(GrievanceTransactionProtocol):
    """Staged writes for one grievance, applied by the store on commit."""

    def __init__(self, store: GrievanceStoreStub, grievance_id: UUID) -> None:
        self._store = store
        self._grievance_id = grievance_id
        self.grievance: Grievance | None = None
        self.audit_entries: list[AuditEntry] = []
        self.votes: list[CommunityVote] = []
        self.escalation_records: list[EscalationRecord] = []

    @property
    def grievance_id(self) -> UUID:
        return self._grievance_id

    async def load(self) -> Grievance | None:
        # Yield to the loop like a real round trip would
        await asyncio.sleep(0)
        if self.grievance is not None:
            return self.grievance
        return self._store._grievances.get(self._grievance_id)

    async def last_audit_entry(self) -> AuditEntry | None:
        if self.audit_entries:
            return self.audit_entries[-1]
        committed = self._store._audit_entries.get(self._grievance_id, [])
        return committed[-1] if committed else None

    async def save_grievance(self, grievance: Grievance) -> None:
        if grievance.id != self._grievance_id:
            raise StorageError(
                f"Transaction for {self._grievance_id} cannot write grievance {grievance.id}"
            )
        self.grievance = grievance

    async def append_audit_entry(self, entry: AuditEntry) -> None:
        self.audit_entries.append(entry)

    async def add_vote(self, vote: CommunityVote) -> None:
        self.votes.append(vote)

    async def add_escalation_record(self, record: EscalationRecord) -> None:
        self.escalation_records.append(record)


class GrievanceStoreStub(GrievanceStoreProtocol):
    """In-memory stub implementation of GrievanceStoreProtocol.

    NOT suitable for production use.

    Attributes:
        _grievances: Committed grievances by id.
        _audit_entries: Committed audit entries per grievance, in sequence order.
        _votes: Committed votes per grievance, oldest first.
        _escalation_records: Committed escalation history per grievance.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._grievances: dict[UUID, Grievance] = {}
        self._audit_entries: dict[UUID, list[AuditEntry]] = {}
        self._votes: dict[UUID, list[CommunityVote]] = {}
        self._escalation_records: dict[UUID, list[EscalationRecord]] = {}
        self._numbers: dict[str, UUID] = {}
        self._tokens: set[str] = set()
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._fail_next_commit = False
        self.commit_count = 0

    @asynccontextmanager
    async def transaction(
        self, grievance_id: UUID
    ) -> AsyncIterator[GrievanceTransactionProtocol]:
        # One lock per id ever seen, unknown ids included; only clear() shrinks the map
        lock = self._locks.setdefault(grievance_id, asyncio.Lock())
        async with lock:
            tx = _StubTransaction(self, grievance_id)
            yield tx
            self._commit(tx)

    def _commit(self, tx: _StubTransaction) -> None:
        """Apply staged writes all at once, or raise and apply none."""
        if self._fail_next_commit:
            self._fail_next_commit = False
            logger.warning("stub_commit_failure_injected", grievance_id=str(tx.grievance_id))
            raise StorageError(f"Injected commit failure for grievance {tx.grievance_id}")

        if tx.grievance is not None:
            owner = self._numbers.get(tx.grievance.grievance_number)
            if owner is not None and owner != tx.grievance.id:
                raise GrievanceNumberConflictError(tx.grievance.grievance_number)

        staged_tokens = [entry.reference_token for entry in tx.audit_entries]
        for token in staged_tokens:
            if token in self._tokens or staged_tokens.count(token) > 1:
                raise AuditTokenCollisionError(token)

        if tx.grievance is not None:
            self._grievances[tx.grievance.id] = tx.grievance
            self._numbers[tx.grievance.grievance_number] = tx.grievance.id
        self._audit_entries.setdefault(tx.grievance_id, []).extend(tx.audit_entries)
        self._tokens.update(staged_tokens)
        self._votes.setdefault(tx.grievance_id, []).extend(tx.votes)
        self._escalation_records.setdefault(tx.grievance_id, []).extend(
            tx.escalation_records
        )
        self.commit_count += 1

    # =========================================================================
    # Reads
    # =========================================================================

    async def get(self, grievance_id: UUID) -> Grievance | None:
        return self._grievances.get(grievance_id)

    async def list_all(self) -> list[Grievance]:
        return list(self._grievances.values())

    async def list_by_status(
        self, statuses: frozenset[GrievanceStatus]
    ) -> list[Grievance]:
        return [g for g in self._grievances.values() if g.status in statuses]

    async def list_by_reporter(self, reporter_id: str) -> list[Grievance]:
        return [g for g in self._grievances.values() if g.reporter_id == reporter_id]

    async def list_by_official(self, official_id: str) -> list[Grievance]:
        return [g for g in self._grievances.values() if g.assigned_to == official_id]

    async def list_overdue(
        self, now: datetime, statuses: frozenset[GrievanceStatus]
    ) -> list[Grievance]:
        return [
            g
            for g in self._grievances.values()
            if g.status in statuses and g.due_date is not None and g.due_date < now
        ]

    async def list_disputed(self) -> list[Grievance]:
        return [g for g in self._grievances.values() if g.is_disputed]

    async def grievance_number_exists(self, grievance_number: str) -> bool:
        return grievance_number in self._numbers

    async def list_audit_entries(self, grievance_id: UUID) -> list[AuditEntry]:
        return list(self._audit_entries.get(grievance_id, []))

    async def list_votes(self, grievance_id: UUID) -> list[CommunityVote]:
        return list(self._votes.get(grievance_id, []))

    async def list_escalation_records(
        self, grievance_id: UUID
    ) -> list[EscalationRecord]:
        return list(self._escalation_records.get(grievance_id, []))

    # =========================================================================
    # Test helpers
    # =========================================================================

    def fail_next_commit(self) -> None:
        """Make the next transaction commit raise StorageError (test helper)."""
        self._fail_next_commit = True

    def replace_audit_entry(self, entry: AuditEntry) -> None:
        """Overwrite a committed audit entry in place (tamper simulation for tests)."""
        entries = self._audit_entries[entry.grievance_id]
        for index, existing in enumerate(entries):
            if existing.sequence == entry.sequence:
                entries[index] = entry
                return
        raise KeyError(f"No audit entry {entry.sequence} for {entry.grievance_id}")

    def clear(self) -> None:
        """Clear all stored data (for testing)."""
        self._grievances.clear()
        self._audit_entries.clear()
        self._votes.clear()
        self._escalation_records.clear()
        self._numbers.clear()
        self._tokens.clear()
        self._locks.clear()
        self._fail_next_commit = False
        self.commit_count = 0
