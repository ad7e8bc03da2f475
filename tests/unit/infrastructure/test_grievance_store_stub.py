"""Unit tests for the in-memory grievance store."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from grievance_engine.domain.errors import (
    AuditTokenCollisionError,
    GrievanceNumberConflictError,
    StorageError,
)
from grievance_engine.domain.events.grievance import AuditEventType
from grievance_engine.domain.events.hash_utils import GENESIS_HASH
from grievance_engine.domain.models.audit_entry import AuditEntry
from grievance_engine.domain.models.grievance import Grievance, GrievanceStatus
from grievance_engine.infrastructure.stubs.grievance_store_stub import GrievanceStoreStub

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def _grievance(number: str = "GR202600042", **overrides) -> Grievance:
    fields = {
        "id": uuid4(),
        "grievance_number": number,
        "title": "Open drain near the market",
        "category": "Sanitation & Waste Management",
        "description": "The drain near the weekly market overflows onto the road.",
        "village_name": "Rampur",
        "reporter_id": "citizen-1",
        "created_at": NOW,
        "updated_at": NOW,
    }
    fields.update(overrides)
    return Grievance(**fields)


def _entry(grievance_id, token: str = "a" * 64) -> AuditEntry:
    return AuditEntry(
        id=uuid4(),
        grievance_id=grievance_id,
        sequence=1,
        event_type=AuditEventType.GRIEVANCE_SUBMITTED,
        payload={},
        recorded_at=NOW,
        prev_hash=GENESIS_HASH,
        reference_token=token,
    )


class TestTransaction:
    """Tests for commit and rollback semantics."""

    @pytest.mark.asyncio
    async def test_writes_visible_only_after_commit(self) -> None:
        store = GrievanceStoreStub()
        grievance = _grievance()

        async with store.transaction(grievance.id) as tx:
            await tx.save_grievance(grievance)
            await tx.append_audit_entry(_entry(grievance.id))
            assert await store.get(grievance.id) is None
            assert await tx.load() == grievance
            assert (await tx.last_audit_entry()).reference_token == "a" * 64

        assert await store.get(grievance.id) == grievance
        assert len(await store.list_audit_entries(grievance.id)) == 1
        assert await store.grievance_number_exists("GR202600042")
        assert store.commit_count == 1

    @pytest.mark.asyncio
    async def test_exception_discards_staged_writes(self) -> None:
        store = GrievanceStoreStub()
        grievance = _grievance()

        with pytest.raises(RuntimeError):
            async with store.transaction(grievance.id) as tx:
                await tx.save_grievance(grievance)
                raise RuntimeError("abort")

        assert await store.get(grievance.id) is None
        assert store.commit_count == 0

    @pytest.mark.asyncio
    async def test_injected_failure_raises_storage_error_once(self) -> None:
        store = GrievanceStoreStub()
        grievance = _grievance()
        store.fail_next_commit()

        with pytest.raises(StorageError):
            async with store.transaction(grievance.id) as tx:
                await tx.save_grievance(grievance)

        async with store.transaction(grievance.id) as tx:
            await tx.save_grievance(grievance)
        assert await store.get(grievance.id) == grievance

    @pytest.mark.asyncio
    async def test_duplicate_number_rejected(self) -> None:
        store = GrievanceStoreStub()
        first = _grievance()
        second = _grievance()
        async with store.transaction(first.id) as tx:
            await tx.save_grievance(first)

        with pytest.raises(GrievanceNumberConflictError):
            async with store.transaction(second.id) as tx:
                await tx.save_grievance(second)

        assert await store.get(second.id) is None

    @pytest.mark.asyncio
    async def test_duplicate_token_rejected(self) -> None:
        store = GrievanceStoreStub()
        first = _grievance("GR202600001")
        second = _grievance("GR202600002")
        async with store.transaction(first.id) as tx:
            await tx.save_grievance(first)
            await tx.append_audit_entry(_entry(first.id))

        with pytest.raises(AuditTokenCollisionError):
            async with store.transaction(second.id) as tx:
                await tx.save_grievance(second)
                await tx.append_audit_entry(_entry(second.id))

    @pytest.mark.asyncio
    async def test_cannot_write_other_grievance(self) -> None:
        store = GrievanceStoreStub()
        with pytest.raises(StorageError):
            async with store.transaction(uuid4()) as tx:
                await tx.save_grievance(_grievance())


class TestReads:
    @pytest.mark.asyncio
    async def test_filters(self) -> None:
        store = GrievanceStoreStub()
        pending = _grievance("GR202600001")
        working = _grievance(
            "GR202600002",
            status=GrievanceStatus.IN_PROGRESS,
            assigned_to="officer-7",
            due_date=datetime(2026, 3, 1, tzinfo=timezone.utc),
            community_dispute_count=1,
        )
        for grievance in (pending, working):
            async with store.transaction(grievance.id) as tx:
                await tx.save_grievance(grievance)

        assert len(await store.list_all()) == 2
        assert await store.list_by_status(frozenset({GrievanceStatus.PENDING})) == [pending]
        assert await store.list_by_official("officer-7") == [working]
        assert len(await store.list_by_reporter("citizen-1")) == 2
        assert await store.list_overdue(NOW, frozenset({GrievanceStatus.IN_PROGRESS})) == [
            working
        ]
        assert await store.list_disputed() == [working]

    @pytest.mark.asyncio
    async def test_clear(self) -> None:
        store = GrievanceStoreStub()
        grievance = _grievance()
        async with store.transaction(grievance.id) as tx:
            await tx.save_grievance(grievance)

        store.clear()

        assert await store.list_all() == []
        assert not await store.grievance_number_exists(grievance.grievance_number)
        assert store.commit_count == 0

    @pytest.mark.asyncio
    async def test_lock_map_grows_until_clear(self) -> None:
        """Test unknown ids also get a lock, and only clear() drops them."""
        store = GrievanceStoreStub()
        unknown = uuid4()
        async with store.transaction(unknown) as tx:
            assert await tx.load() is None

        assert unknown in store._locks

        store.clear()

        assert store._locks == {}
