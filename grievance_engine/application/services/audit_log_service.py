"""Audit log service: append-only, hash-chained audit trail per grievance.

Entries are appended inside the caller's grievance transaction, so an entry
is durable exactly when the state change it records is durable.

Each entry's reference token is a SHA-256 digest of its canonical content
plus the previous entry's token. The token is therefore unguessable without
the chain, and the store's unique index on it turns any collision into a
failed commit rather than a silent duplicate.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from structlog import get_logger
from uuid6 import uuid7

from grievance_engine.application.ports.grievance_store import (
    GrievanceStoreProtocol,
    GrievanceTransactionProtocol,
)
from grievance_engine.domain.errors import (
    AuditChainIntegrityError,
    GrievanceNotFoundError,
)
from grievance_engine.domain.events.grievance import GrievanceEventPayload
from grievance_engine.domain.events.hash_utils import (
    GENESIS_HASH,
    compute_reference_token,
    get_prev_hash,
)
from grievance_engine.domain.models.audit_entry import AuditEntry

logger = get_logger(__name__)


class AuditLogService:
    """Records and verifies grievance audit trails.

    Example:
        >>> async with store.transaction(grievance_id) as tx:
        ...     await tx.save_grievance(updated)
        ...     await audit_log.append(tx, payload, recorded_at=now, actor_id=official_id)
    """

    def __init__(self, store: GrievanceStoreProtocol) -> None:
        """Initialize the audit log service.

        Args:
            store: Grievance store holding the audit entries.
        """
        self._store = store

    async def append(
        self,
        tx: GrievanceTransactionProtocol,
        payload: GrievanceEventPayload,
        *,
        recorded_at: datetime,
        actor_id: str | None = None,
    ) -> AuditEntry:
        """Stage the next audit entry in the grievance's chain.

        Args:
            tx: Open transaction on the grievance the entry belongs to.
            payload: Typed event payload; its event_type tags the entry.
            recorded_at: Timestamp of the transition.
            actor_id: Acting identity, None for system-initiated events.

        Returns:
            The staged AuditEntry.
        """
        previous = await tx.last_audit_entry()
        sequence = 1 if previous is None else previous.sequence + 1
        prev_hash = get_prev_hash(
            sequence, previous.reference_token if previous is not None else None
        )
        payload_dict = payload.to_dict()

        token = compute_reference_token(
            {
                "grievance_id": tx.grievance_id,
                "sequence": sequence,
                "event_type": payload.event_type.value,
                "payload": payload_dict,
                "recorded_at": recorded_at,
                "prev_hash": prev_hash,
                "actor_id": actor_id,
            }
        )
        entry = AuditEntry(
            id=uuid7(),
            grievance_id=tx.grievance_id,
            sequence=sequence,
            event_type=payload.event_type,
            payload=payload_dict,
            recorded_at=recorded_at,
            prev_hash=prev_hash,
            reference_token=token,
            actor_id=actor_id,
        )
        await tx.append_audit_entry(entry)

        logger.debug(
            "audit_entry_staged",
            grievance_id=str(tx.grievance_id),
            sequence=sequence,
            event_type=payload.event_type.value,
            reference_token=token,
        )
        return entry

    async def get_trail(self, grievance_id: UUID) -> list[AuditEntry]:
        """Return a grievance's audit entries, most recent first.

        Raises:
            GrievanceNotFoundError: If the grievance does not exist.
        """
        await self._require_grievance(grievance_id)
        entries = await self._store.list_audit_entries(grievance_id)
        return sorted(entries, key=lambda entry: entry.sequence, reverse=True)

    async def verify_chain(self, grievance_id: UUID) -> int:
        """Recompute every token and link in a grievance's audit chain.

        Args:
            grievance_id: Grievance whose chain to verify.

        Returns:
            Number of entries verified.

        Raises:
            GrievanceNotFoundError: If the grievance does not exist.
            AuditChainIntegrityError: On the first entry that fails a check.
        """
        await self._require_grievance(grievance_id)
        entries = await self._store.list_audit_entries(grievance_id)
        log = logger.bind(grievance_id=str(grievance_id))

        expected_prev = GENESIS_HASH
        for expected_sequence, entry in enumerate(entries, start=1):
            if entry.sequence != expected_sequence:
                log.error("audit_chain_sequence_gap", sequence=entry.sequence)
                raise AuditChainIntegrityError(
                    grievance_id,
                    entry.sequence,
                    f"expected sequence {expected_sequence}",
                )
            if entry.prev_hash != expected_prev:
                log.error("audit_chain_link_broken", sequence=entry.sequence)
                raise AuditChainIntegrityError(
                    grievance_id, entry.sequence, "prev_hash does not match previous token"
                )
            if entry.compute_token() != entry.reference_token:
                log.error("audit_chain_token_mismatch", sequence=entry.sequence)
                raise AuditChainIntegrityError(
                    grievance_id, entry.sequence, "reference token does not match content"
                )
            expected_prev = entry.reference_token

        log.info("audit_chain_verified", entries=len(entries))
        return len(entries)

    async def _require_grievance(self, grievance_id: UUID) -> None:
        if await self._store.get(grievance_id) is None:
            raise GrievanceNotFoundError(grievance_id)
