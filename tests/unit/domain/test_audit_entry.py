"""Unit tests for AuditEntry and the audit event payloads."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from grievance_engine.domain.events.grievance import (
    GRIEVANCE_EVENT_SCHEMA_VERSION,
    AuditEventType,
    CommunityVerificationPayload,
    GrievanceEscalatedPayload,
    GrievanceSubmittedPayload,
    StatusUpdatedPayload,
    TaskAcceptedPayload,
    payload_from_dict,
)
from grievance_engine.domain.events.hash_utils import (
    GENESIS_HASH,
    canonical_json,
    compute_reference_token,
)
from grievance_engine.domain.models.audit_entry import AuditEntry

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def _submitted_payload() -> GrievanceSubmittedPayload:
    return GrievanceSubmittedPayload(
        grievance_number="GR202600042",
        title="Broken handpump near school",
        category="Water Supply",
        village_name="Rampur",
        priority="medium",
        reporter_id="citizen-1",
    )


def _entry(sequence: int = 1, prev_hash: str = GENESIS_HASH, **overrides) -> AuditEntry:
    grievance_id = overrides.pop("grievance_id", uuid4())
    payload = overrides.pop("payload", _submitted_payload().to_dict())
    actor_id = overrides.pop("actor_id", "citizen-1")
    token = compute_reference_token(
        {
            "grievance_id": grievance_id,
            "sequence": sequence,
            "event_type": AuditEventType.GRIEVANCE_SUBMITTED.value,
            "payload": payload,
            "recorded_at": NOW,
            "prev_hash": prev_hash,
            "actor_id": actor_id,
        }
    )
    return AuditEntry(
        id=uuid4(),
        grievance_id=grievance_id,
        sequence=sequence,
        event_type=AuditEventType.GRIEVANCE_SUBMITTED,
        payload=payload,
        recorded_at=NOW,
        prev_hash=prev_hash,
        reference_token=token,
        actor_id=actor_id,
    )


class TestAuditEntry:
    """Tests for AuditEntry invariants and token recomputation."""

    def test_compute_token_matches_stored_token(self) -> None:
        entry = _entry()
        assert entry.compute_token() == entry.reference_token

    def test_edited_payload_changes_token(self) -> None:
        entry = _entry()
        edited = AuditEntry(
            id=entry.id,
            grievance_id=entry.grievance_id,
            sequence=entry.sequence,
            event_type=entry.event_type,
            payload={**entry.payload, "title": "Something else entirely"},
            recorded_at=entry.recorded_at,
            prev_hash=entry.prev_hash,
            reference_token=entry.reference_token,
            actor_id=entry.actor_id,
        )
        assert edited.compute_token() != edited.reference_token

    def test_sequence_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="sequence"):
            _entry(sequence=0)

    def test_first_entry_must_chain_from_genesis(self) -> None:
        with pytest.raises(ValueError, match="GENESIS_HASH"):
            _entry(sequence=1, prev_hash="a" * 64)

    def test_later_entry_may_chain_from_any_token(self) -> None:
        entry = _entry(sequence=2, prev_hash="a" * 64)
        assert entry.prev_hash == "a" * 64

    def test_typed_payload(self) -> None:
        assert _entry().typed_payload() == _submitted_payload()


class TestPayloads:
    """Tests for payload serialization."""

    def test_all_payloads_carry_schema_version(self) -> None:
        assert _submitted_payload().to_dict()["schema_version"] == (
            GRIEVANCE_EVENT_SCHEMA_VERSION
        )

    def test_signable_content_is_canonical_json(self) -> None:
        payload = _submitted_payload()
        assert payload.signable_content() == canonical_json(payload.to_dict()).encode(
            "utf-8"
        )

    def test_status_updated_stores_iso_timestamps(self) -> None:
        payload = StatusUpdatedPayload(
            grievance_number="GR202600042",
            from_status="in_progress",
            to_status="pending_verification",
            resolved_at=NOW,
            verification_deadline=NOW + timedelta(days=7),
            resolution_evidence=("photo-1.jpg",),
        )
        data = payload.to_dict()
        assert data["resolved_at"] == NOW.isoformat()
        assert data["resolution_evidence"] == ["photo-1.jpg"]
        assert payload_from_dict(AuditEventType.STATUS_UPDATED, data) == payload

    def test_escalated_payload_records_can_resolve(self) -> None:
        payload = GrievanceEscalatedPayload(
            grievance_number="GR202600042",
            from_level="panchayat",
            to_level="block",
            reason="x" * 100,
            escalation_count=1,
            auto_escalated=False,
            escalation_due_date=NOW + timedelta(days=7),
            escalated_by="officer-7",
            can_resolve=False,
        )
        restored = payload_from_dict("GRIEVANCE_ESCALATED", payload.to_dict())
        assert isinstance(restored, GrievanceEscalatedPayload)
        assert restored.can_resolve is False

    def test_community_payload_vote_id_roundtrips_as_uuid(self) -> None:
        vote_id = uuid4()
        payload = CommunityVerificationPayload(
            grievance_number="GR202600042",
            vote_id=vote_id,
            vote_type="verify",
            voter_id="neighbour-1",
            verify_count=1,
            dispute_count=0,
            from_status="pending_verification",
            to_status="pending_verification",
        )
        data = payload.to_dict()
        assert data["vote_id"] == str(vote_id)
        restored = payload_from_dict(AuditEventType.COMMUNITY_VERIFICATION, data)
        assert restored.vote_id == vote_id

    def test_missing_schema_version_defaults(self) -> None:
        data = TaskAcceptedPayload(
            grievance_number="GR202600042",
            official_id="officer-7",
            resolution_timeline_days=5,
            due_date=NOW,
        ).to_dict()
        del data["schema_version"]
        restored = payload_from_dict(AuditEventType.TASK_ACCEPTED, data)
        assert restored.schema_version == GRIEVANCE_EVENT_SCHEMA_VERSION

    def test_unknown_event_type_rejected(self) -> None:
        with pytest.raises(ValueError):
            payload_from_dict("GRIEVANCE_DELETED", {})
