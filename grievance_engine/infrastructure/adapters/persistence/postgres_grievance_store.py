"""PostgreSQL grievance store (SQLAlchemy async + asyncpg).

One grievance transaction is one database transaction. The grievance row is
locked with SELECT ... FOR UPDATE, so concurrent transitions on the same
grievance queue up on the row lock while other grievances proceed freely.

Unique constraints back the two global uniqueness guarantees: grievance
numbers and audit reference tokens. Violations surface as
GrievanceNumberConflictError / AuditTokenCollisionError, every other
database failure as StorageError. The whole transaction is rolled back in
each case.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
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
from grievance_engine.domain.events.grievance import AuditEventType
from grievance_engine.domain.models.audit_entry import AuditEntry
from grievance_engine.domain.models.community_vote import CommunityVote, VoteType
from grievance_engine.domain.models.escalation_record import EscalationRecord
from grievance_engine.domain.models.grievance import (
    AuthorityLevel,
    Grievance,
    GrievancePriority,
    GrievanceStatus,
    UserSatisfaction,
)

logger = get_logger(__name__)

GRIEVANCE_SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS grievances (
        id UUID PRIMARY KEY,
        grievance_number TEXT NOT NULL,
        title TEXT NOT NULL,
        category TEXT NOT NULL,
        description TEXT NOT NULL,
        village_name TEXT NOT NULL,
        reporter_id TEXT NOT NULL,
        reporter_name TEXT,
        reporter_mobile TEXT,
        priority TEXT NOT NULL DEFAULT 'medium',
        evidence_files JSONB NOT NULL DEFAULT '[]'::jsonb,
        voice_transcription TEXT,
        status TEXT NOT NULL,
        authority_level TEXT NOT NULL,
        assigned_to TEXT,
        resolution_timeline_days INTEGER,
        due_date TIMESTAMPTZ,
        resolved_at TIMESTAMPTZ,
        resolution_notes TEXT,
        resolution_evidence JSONB NOT NULL DEFAULT '[]'::jsonb,
        verification_deadline TIMESTAMPTZ,
        is_escalated BOOLEAN NOT NULL DEFAULT FALSE,
        escalated_at TIMESTAMPTZ,
        escalation_count INTEGER NOT NULL DEFAULT 0 CHECK (escalation_count >= 0),
        escalation_reason TEXT,
        escalation_due_date TIMESTAMPTZ,
        can_resolve BOOLEAN,
        user_satisfaction TEXT,
        user_satisfaction_at TIMESTAMPTZ,
        community_verify_count INTEGER NOT NULL DEFAULT 0 CHECK (community_verify_count >= 0),
        community_dispute_count INTEGER NOT NULL DEFAULT 0 CHECK (community_dispute_count >= 0),
        created_at TIMESTAMPTZ NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL,
        CONSTRAINT uq_grievances_grievance_number UNIQUE (grievance_number)
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_grievances_status ON grievances (status)",
    "CREATE INDEX IF NOT EXISTS ix_grievances_reporter_id ON grievances (reporter_id)",
    "CREATE INDEX IF NOT EXISTS ix_grievances_assigned_to ON grievances (assigned_to)",
    """
    CREATE TABLE IF NOT EXISTS grievance_community_votes (
        seq BIGSERIAL PRIMARY KEY,
        id UUID NOT NULL UNIQUE,
        grievance_id UUID NOT NULL REFERENCES grievances (id),
        voter_id TEXT NOT NULL,
        vote_type TEXT NOT NULL,
        comments TEXT,
        evidence JSONB NOT NULL DEFAULT '[]'::jsonb,
        content_hash BYTEA NOT NULL,
        created_at TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS grievance_escalation_records (
        seq BIGSERIAL PRIMARY KEY,
        id UUID NOT NULL UNIQUE,
        grievance_id UUID NOT NULL REFERENCES grievances (id),
        from_level TEXT NOT NULL,
        to_level TEXT NOT NULL,
        reason TEXT NOT NULL,
        escalated_by TEXT,
        auto_escalated BOOLEAN NOT NULL,
        created_at TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS grievance_audit_entries (
        id UUID PRIMARY KEY,
        grievance_id UUID NOT NULL REFERENCES grievances (id),
        sequence INTEGER NOT NULL CHECK (sequence >= 1),
        event_type TEXT NOT NULL,
        payload JSONB NOT NULL,
        recorded_at TIMESTAMPTZ NOT NULL,
        prev_hash CHAR(64) NOT NULL,
        reference_token CHAR(64) NOT NULL,
        actor_id TEXT,
        CONSTRAINT uq_grievance_audit_reference_token UNIQUE (reference_token),
        CONSTRAINT uq_grievance_audit_sequence UNIQUE (grievance_id, sequence)
    )
    """,
)

_GRIEVANCE_COLUMNS: tuple[str, ...] = (
    "id",
    "grievance_number",
    "title",
    "category",
    "description",
    "village_name",
    "reporter_id",
    "reporter_name",
    "reporter_mobile",
    "priority",
    "evidence_files",
    "voice_transcription",
    "status",
    "authority_level",
    "assigned_to",
    "resolution_timeline_days",
    "due_date",
    "resolved_at",
    "resolution_notes",
    "resolution_evidence",
    "verification_deadline",
    "is_escalated",
    "escalated_at",
    "escalation_count",
    "escalation_reason",
    "escalation_due_date",
    "can_resolve",
    "user_satisfaction",
    "user_satisfaction_at",
    "community_verify_count",
    "community_dispute_count",
    "created_at",
    "updated_at",
)

_JSONB_COLUMNS = frozenset({"evidence_files", "resolution_evidence"})

# Immutable after creation
_INSERT_ONLY_COLUMNS = frozenset({"id", "grievance_number", "created_at"})

_SELECT_GRIEVANCE = f"SELECT {', '.join(_GRIEVANCE_COLUMNS)} FROM grievances"

_UPSERT_GRIEVANCE = (
    f"INSERT INTO grievances ({', '.join(_GRIEVANCE_COLUMNS)}) VALUES ("
    + ", ".join(
        f"CAST(:{c} AS JSONB)" if c in _JSONB_COLUMNS else f":{c}"
        for c in _GRIEVANCE_COLUMNS
    )
    + ") ON CONFLICT (id) DO UPDATE SET "
    + ", ".join(
        f"{c} = EXCLUDED.{c}" for c in _GRIEVANCE_COLUMNS if c not in _INSERT_ONLY_COLUMNS
    )
)


def _json_value(value: Any) -> Any:
    if isinstance(value, str):
        return json.loads(value)
    return value


def _grievance_params(grievance: Grievance) -> dict[str, Any]:
    return {
        "id": grievance.id,
        "grievance_number": grievance.grievance_number,
        "title": grievance.title,
        "category": grievance.category,
        "description": grievance.description,
        "village_name": grievance.village_name,
        "reporter_id": grievance.reporter_id,
        "reporter_name": grievance.reporter_name,
        "reporter_mobile": grievance.reporter_mobile,
        "priority": grievance.priority.value,
        "evidence_files": json.dumps(list(grievance.evidence_files)),
        "voice_transcription": grievance.voice_transcription,
        "status": grievance.status.value,
        "authority_level": grievance.authority_level.value,
        "assigned_to": grievance.assigned_to,
        "resolution_timeline_days": grievance.resolution_timeline_days,
        "due_date": grievance.due_date,
        "resolved_at": grievance.resolved_at,
        "resolution_notes": grievance.resolution_notes,
        "resolution_evidence": json.dumps(list(grievance.resolution_evidence)),
        "verification_deadline": grievance.verification_deadline,
        "is_escalated": grievance.is_escalated,
        "escalated_at": grievance.escalated_at,
        "escalation_count": grievance.escalation_count,
        "escalation_reason": grievance.escalation_reason,
        "escalation_due_date": grievance.escalation_due_date,
        "can_resolve": grievance.can_resolve,
        "user_satisfaction": grievance.user_satisfaction.value
        if grievance.user_satisfaction
        else None,
        "user_satisfaction_at": grievance.user_satisfaction_at,
        "community_verify_count": grievance.community_verify_count,
        "community_dispute_count": grievance.community_dispute_count,
        "created_at": grievance.created_at,
        "updated_at": grievance.updated_at,
    }


def _row_to_grievance(row: Mapping[str, Any]) -> Grievance:
    return Grievance(
        id=row["id"],
        grievance_number=row["grievance_number"],
        title=row["title"],
        category=row["category"],
        description=row["description"],
        village_name=row["village_name"],
        reporter_id=row["reporter_id"],
        reporter_name=row["reporter_name"],
        reporter_mobile=row["reporter_mobile"],
        priority=GrievancePriority(row["priority"]),
        evidence_files=tuple(_json_value(row["evidence_files"]) or ()),
        voice_transcription=row["voice_transcription"],
        status=GrievanceStatus(row["status"]),
        authority_level=AuthorityLevel(row["authority_level"]),
        assigned_to=row["assigned_to"],
        resolution_timeline_days=row["resolution_timeline_days"],
        due_date=row["due_date"],
        resolved_at=row["resolved_at"],
        resolution_notes=row["resolution_notes"],
        resolution_evidence=tuple(_json_value(row["resolution_evidence"]) or ()),
        verification_deadline=row["verification_deadline"],
        is_escalated=row["is_escalated"],
        escalated_at=row["escalated_at"],
        escalation_count=row["escalation_count"],
        escalation_reason=row["escalation_reason"],
        escalation_due_date=row["escalation_due_date"],
        can_resolve=row["can_resolve"],
        user_satisfaction=UserSatisfaction(row["user_satisfaction"])
        if row["user_satisfaction"]
        else None,
        user_satisfaction_at=row["user_satisfaction_at"],
        community_verify_count=row["community_verify_count"],
        community_dispute_count=row["community_dispute_count"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_audit_entry(row: Mapping[str, Any]) -> AuditEntry:
    return AuditEntry(
        id=row["id"],
        grievance_id=row["grievance_id"],
        sequence=row["sequence"],
        event_type=AuditEventType(row["event_type"]),
        payload=_json_value(row["payload"]),
        recorded_at=row["recorded_at"],
        prev_hash=row["prev_hash"],
        reference_token=row["reference_token"],
        actor_id=row["actor_id"],
    )


def _row_to_vote(row: Mapping[str, Any]) -> CommunityVote:
    return CommunityVote(
        id=row["id"],
        grievance_id=row["grievance_id"],
        voter_id=row["voter_id"],
        vote_type=VoteType(row["vote_type"]),
        created_at=row["created_at"],
        content_hash=bytes(row["content_hash"]),
        comments=row["comments"],
        evidence=tuple(_json_value(row["evidence"]) or ()),
    )


def _row_to_escalation_record(row: Mapping[str, Any]) -> EscalationRecord:
    return EscalationRecord(
        id=row["id"],
        grievance_id=row["grievance_id"],
        from_level=AuthorityLevel(row["from_level"]),
        to_level=AuthorityLevel(row["to_level"]),
        reason=row["reason"],
        created_at=row["created_at"],
        escalated_by=row["escalated_by"],
        auto_escalated=row["auto_escalated"],
    )


_SELECT_AUDIT = (
    "SELECT id, grievance_id, sequence, event_type, payload, recorded_at, "
    "prev_hash, reference_token, actor_id FROM grievance_audit_entries"
)


class _PostgresTransaction(GrievanceTransactionProtocol):
    """Writes go straight to the open database transaction."""

    def __init__(self, session: AsyncSession, grievance_id: UUID) -> None:
        self._session = session
        self._grievance_id = grievance_id
        self.grievance_number: str | None = None
        self.reference_token: str | None = None

    @property
    def grievance_id(self) -> UUID:
        return self._grievance_id

    async def load(self) -> Grievance | None:
        result = await self._session.execute(
            text(f"{_SELECT_GRIEVANCE} WHERE id = :id FOR UPDATE"),
            {"id": self._grievance_id},
        )
        row = result.mappings().first()
        return _row_to_grievance(row) if row is not None else None

    async def last_audit_entry(self) -> AuditEntry | None:
        result = await self._session.execute(
            text(
                f"{_SELECT_AUDIT} WHERE grievance_id = :grievance_id "
                "ORDER BY sequence DESC LIMIT 1"
            ),
            {"grievance_id": self._grievance_id},
        )
        row = result.mappings().first()
        return _row_to_audit_entry(row) if row is not None else None

    async def save_grievance(self, grievance: Grievance) -> None:
        self.grievance_number = grievance.grievance_number
        await self._session.execute(text(_UPSERT_GRIEVANCE), _grievance_params(grievance))

    async def append_audit_entry(self, entry: AuditEntry) -> None:
        self.reference_token = entry.reference_token
        await self._session.execute(
            text("""
                INSERT INTO grievance_audit_entries (
                    id, grievance_id, sequence, event_type, payload,
                    recorded_at, prev_hash, reference_token, actor_id
                ) VALUES (
                    :id, :grievance_id, :sequence, :event_type, CAST(:payload AS JSONB),
                    :recorded_at, :prev_hash, :reference_token, :actor_id
                )
            """),
            {
                "id": entry.id,
                "grievance_id": entry.grievance_id,
                "sequence": entry.sequence,
                "event_type": entry.event_type.value,
                "payload": json.dumps(entry.payload),
                "recorded_at": entry.recorded_at,
                "prev_hash": entry.prev_hash,
                "reference_token": entry.reference_token,
                "actor_id": entry.actor_id,
            },
        )

    async def add_vote(self, vote: CommunityVote) -> None:
        await self._session.execute(
            text("""
                INSERT INTO grievance_community_votes (
                    id, grievance_id, voter_id, vote_type, comments,
                    evidence, content_hash, created_at
                ) VALUES (
                    :id, :grievance_id, :voter_id, :vote_type, :comments,
                    CAST(:evidence AS JSONB), :content_hash, :created_at
                )
            """),
            {
                "id": vote.id,
                "grievance_id": vote.grievance_id,
                "voter_id": vote.voter_id,
                "vote_type": vote.vote_type.value,
                "comments": vote.comments,
                "evidence": json.dumps(list(vote.evidence)),
                "content_hash": vote.content_hash,
                "created_at": vote.created_at,
            },
        )

    async def add_escalation_record(self, record: EscalationRecord) -> None:
        await self._session.execute(
            text("""
                INSERT INTO grievance_escalation_records (
                    id, grievance_id, from_level, to_level, reason,
                    escalated_by, auto_escalated, created_at
                ) VALUES (
                    :id, :grievance_id, :from_level, :to_level, :reason,
                    :escalated_by, :auto_escalated, :created_at
                )
            """),
            {
                "id": record.id,
                "grievance_id": record.grievance_id,
                "from_level": record.from_level.value,
                "to_level": record.to_level.value,
                "reason": record.reason,
                "escalated_by": record.escalated_by,
                "auto_escalated": record.auto_escalated,
                "created_at": record.created_at,
            },
        )


class PostgresGrievanceStore(GrievanceStoreProtocol):
    """PostgreSQL implementation of GrievanceStoreProtocol.

    Example:
        >>> store = PostgresGrievanceStore(get_session_factory())
        >>> await store.create_schema()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the store.

        Args:
            session_factory: SQLAlchemy async session factory.
        """
        self._session_factory = session_factory

    async def create_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    for statement in GRIEVANCE_SCHEMA_STATEMENTS:
                        await session.execute(text(statement))
        except SQLAlchemyError as exc:
            logger.error("grievance_schema_creation_failed", error=str(exc))
            raise StorageError(f"Failed to create grievance schema: {exc}") from exc
        logger.info("grievance_schema_ready")

    @asynccontextmanager
    async def transaction(
        self, grievance_id: UUID
    ) -> AsyncIterator[GrievanceTransactionProtocol]:
        tx: _PostgresTransaction | None = None
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    tx = _PostgresTransaction(session, grievance_id)
                    yield tx
        except IntegrityError as exc:
            detail = str(exc.orig)
            log = logger.bind(grievance_id=str(grievance_id))
            if "uq_grievances_grievance_number" in detail:
                log.warning("grievance_number_conflict")
                raise GrievanceNumberConflictError(
                    tx.grievance_number if tx and tx.grievance_number else "unknown"
                ) from exc
            if "uq_grievance_audit_reference_token" in detail:
                log.error("audit_reference_token_collision")
                raise AuditTokenCollisionError(
                    tx.reference_token if tx and tx.reference_token else "unknown"
                ) from exc
            log.error("grievance_transaction_integrity_error", error=detail)
            raise StorageError(f"Integrity error for grievance {grievance_id}: {detail}") from exc
        except SQLAlchemyError as exc:
            logger.error(
                "grievance_transaction_failed",
                grievance_id=str(grievance_id),
                error=str(exc),
            )
            raise StorageError(f"Storage failure for grievance {grievance_id}: {exc}") from exc

    async def _fetch(self, sql: str, params: dict[str, Any] | None = None) -> list[Mapping[str, Any]]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(text(sql), params or {})
                return list(result.mappings().all())
        except SQLAlchemyError as exc:
            logger.error("grievance_read_failed", error=str(exc))
            raise StorageError(f"Storage read failure: {exc}") from exc

    async def get(self, grievance_id: UUID) -> Grievance | None:
        rows = await self._fetch(f"{_SELECT_GRIEVANCE} WHERE id = :id", {"id": grievance_id})
        return _row_to_grievance(rows[0]) if rows else None

    async def list_all(self) -> list[Grievance]:
        rows = await self._fetch(_SELECT_GRIEVANCE)
        return [_row_to_grievance(row) for row in rows]

    async def list_by_status(
        self, statuses: frozenset[GrievanceStatus]
    ) -> list[Grievance]:
        rows = await self._fetch(
            f"{_SELECT_GRIEVANCE} WHERE status = ANY(:statuses)",
            {"statuses": sorted(s.value for s in statuses)},
        )
        return [_row_to_grievance(row) for row in rows]

    async def list_by_reporter(self, reporter_id: str) -> list[Grievance]:
        rows = await self._fetch(
            f"{_SELECT_GRIEVANCE} WHERE reporter_id = :reporter_id",
            {"reporter_id": reporter_id},
        )
        return [_row_to_grievance(row) for row in rows]

    async def list_by_official(self, official_id: str) -> list[Grievance]:
        rows = await self._fetch(
            f"{_SELECT_GRIEVANCE} WHERE assigned_to = :official_id",
            {"official_id": official_id},
        )
        return [_row_to_grievance(row) for row in rows]

    async def list_overdue(
        self, now: datetime, statuses: frozenset[GrievanceStatus]
    ) -> list[Grievance]:
        rows = await self._fetch(
            f"{_SELECT_GRIEVANCE} WHERE due_date < :now AND status = ANY(:statuses)",
            {"now": now, "statuses": sorted(s.value for s in statuses)},
        )
        return [_row_to_grievance(row) for row in rows]

    async def list_disputed(self) -> list[Grievance]:
        rows = await self._fetch(
            f"{_SELECT_GRIEVANCE} WHERE user_satisfaction = :not_satisfied "
            "OR community_dispute_count > 0",
            {"not_satisfied": UserSatisfaction.NOT_SATISFIED.value},
        )
        return [_row_to_grievance(row) for row in rows]

    async def grievance_number_exists(self, grievance_number: str) -> bool:
        rows = await self._fetch(
            "SELECT 1 FROM grievances WHERE grievance_number = :grievance_number",
            {"grievance_number": grievance_number},
        )
        return bool(rows)

    async def list_audit_entries(self, grievance_id: UUID) -> list[AuditEntry]:
        rows = await self._fetch(
            f"{_SELECT_AUDIT} WHERE grievance_id = :grievance_id ORDER BY sequence ASC",
            {"grievance_id": grievance_id},
        )
        return [_row_to_audit_entry(row) for row in rows]

    async def list_votes(self, grievance_id: UUID) -> list[CommunityVote]:
        rows = await self._fetch(
            """
            SELECT id, grievance_id, voter_id, vote_type, comments, evidence,
                   content_hash, created_at
            FROM grievance_community_votes
            WHERE grievance_id = :grievance_id
            ORDER BY seq ASC
            """,
            {"grievance_id": grievance_id},
        )
        return [_row_to_vote(row) for row in rows]

    async def list_escalation_records(
        self, grievance_id: UUID
    ) -> list[EscalationRecord]:
        rows = await self._fetch(
            """
            SELECT id, grievance_id, from_level, to_level, reason,
                   escalated_by, auto_escalated, created_at
            FROM grievance_escalation_records
            WHERE grievance_id = :grievance_id
            ORDER BY seq ASC
            """,
            {"grievance_id": grievance_id},
        )
        return [_row_to_escalation_record(row) for row in rows]
