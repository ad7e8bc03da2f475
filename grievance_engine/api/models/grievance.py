"""Grievance API request/response models.

Pydantic models for the /v1/grievances endpoints. Intake format rules
(minimum lengths, category enumeration, mobile number shape) are enforced
here; lifecycle rules are enforced by the engine.

Developer Golden Rules:
1. VALIDATE EARLY - Pydantic handles schema validation (422)
2. FAIL LOUD - Engine errors return RFC 7807 bodies
3. ACTOR IN BODY - Official, voter and actor ids arrive with the request
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, Field, PlainSerializer, field_validator

from grievance_engine.domain.models.audit_entry import AuditEntry
from grievance_engine.domain.models.community_vote import CommunityVote, VoteType
from grievance_engine.domain.models.escalation_record import EscalationRecord
from grievance_engine.domain.models.grievance import (
    AuthorityLevel,
    Grievance,
    GrievanceCategory,
    GrievancePriority,
    GrievanceStatus,
    UserSatisfaction,
)

# ISO 8601 with Z suffix
DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z") if v else None, return_type=str
    ),
]

INDIAN_MOBILE_PATTERN = r"^[6-9]\d{9}$"
MIN_TITLE_LENGTH = 10
MIN_DESCRIPTION_LENGTH = 50


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


# =============================================================================
# Requests
# =============================================================================


class CreateGrievanceRequest(BaseModel):
    """Citizen grievance intake.

    Attributes:
        title: Short summary (at least 10 characters).
        category: One of the supported grievance categories.
        description: Full complaint (at least 50 characters).
        village_name: Village the complaint concerns.
        reporter_id: Authenticated reporter identity.
        reporter_name: Reporter display name.
        reporter_mobile: 10-digit Indian mobile number.
        priority: Handling priority (default: medium).
        evidence_files: References to uploaded evidence.
        voice_transcription: Transcribed voice complaint.
    """

    title: str = Field(..., min_length=MIN_TITLE_LENGTH, max_length=200)
    category: GrievanceCategory
    description: str = Field(..., min_length=MIN_DESCRIPTION_LENGTH, max_length=5000)
    village_name: str = Field(..., min_length=1, max_length=200)
    reporter_id: str = Field(..., min_length=1, max_length=100)
    reporter_name: str | None = Field(default=None, max_length=200)
    reporter_mobile: str | None = Field(default=None, pattern=INDIAN_MOBILE_PATTERN)
    priority: GrievancePriority = GrievancePriority.MEDIUM
    evidence_files: list[str] = Field(default_factory=list)
    voice_transcription: str | None = None

    @field_validator("title", "description", "village_name", "reporter_id")
    @classmethod
    def validate_not_whitespace(cls, v: str) -> str:
        return _not_blank(v)


class AcceptGrievanceRequest(BaseModel):
    """Official accepting a pending grievance."""

    official_id: str
    timeline_days: int = Field(..., description="Days the official commits to")


class ResolveGrievanceRequest(BaseModel):
    """Official marking work as resolved."""

    notes: str | None = None
    evidence: list[str] = Field(default_factory=list)
    actor_id: str | None = None


class UserSatisfactionRequest(BaseModel):
    """Reporter's one-time response to a resolution."""

    satisfaction: UserSatisfaction


class CommunityVoteRequest(BaseModel):
    """Community member verifying or disputing a resolution."""

    vote_type: VoteType
    voter_id: str = Field(..., min_length=1, max_length=100)
    comments: str | None = Field(default=None, max_length=2000)
    evidence: list[str] = Field(default_factory=list)


class EscalateGrievanceRequest(BaseModel):
    """Escalation request.

    ``actor_id`` omitted means a system escalation.
    """

    reason: str
    actor_id: str | None = None


class CannotResolveRequest(BaseModel):
    """Official declaring a grievance beyond their authority."""

    reason: str
    official_id: str


# =============================================================================
# Responses
# =============================================================================


class GrievanceResponse(BaseModel):
    """Full grievance record."""

    id: UUID
    grievance_number: str
    title: str
    category: str
    description: str
    village_name: str
    reporter_id: str
    reporter_name: str | None
    reporter_mobile: str | None
    priority: GrievancePriority
    evidence_files: list[str]
    voice_transcription: str | None
    status: GrievanceStatus
    authority_level: AuthorityLevel
    assigned_to: str | None
    resolution_timeline_days: int | None
    due_date: DateTimeWithZ | None
    resolved_at: DateTimeWithZ | None
    resolution_notes: str | None
    resolution_evidence: list[str]
    verification_deadline: DateTimeWithZ | None
    is_escalated: bool
    escalated_at: DateTimeWithZ | None
    escalation_count: int
    escalation_reason: str | None
    escalation_due_date: DateTimeWithZ | None
    can_resolve: bool | None
    user_satisfaction: UserSatisfaction | None
    user_satisfaction_at: DateTimeWithZ | None
    community_verify_count: int
    community_dispute_count: int
    created_at: DateTimeWithZ
    updated_at: DateTimeWithZ

    @classmethod
    def from_domain(cls, grievance: Grievance) -> GrievanceResponse:
        return cls(
            id=grievance.id,
            grievance_number=grievance.grievance_number,
            title=grievance.title,
            category=grievance.category,
            description=grievance.description,
            village_name=grievance.village_name,
            reporter_id=grievance.reporter_id,
            reporter_name=grievance.reporter_name,
            reporter_mobile=grievance.reporter_mobile,
            priority=grievance.priority,
            evidence_files=list(grievance.evidence_files),
            voice_transcription=grievance.voice_transcription,
            status=grievance.status,
            authority_level=grievance.authority_level,
            assigned_to=grievance.assigned_to,
            resolution_timeline_days=grievance.resolution_timeline_days,
            due_date=grievance.due_date,
            resolved_at=grievance.resolved_at,
            resolution_notes=grievance.resolution_notes,
            resolution_evidence=list(grievance.resolution_evidence),
            verification_deadline=grievance.verification_deadline,
            is_escalated=grievance.is_escalated,
            escalated_at=grievance.escalated_at,
            escalation_count=grievance.escalation_count,
            escalation_reason=grievance.escalation_reason,
            escalation_due_date=grievance.escalation_due_date,
            can_resolve=grievance.can_resolve,
            user_satisfaction=grievance.user_satisfaction,
            user_satisfaction_at=grievance.user_satisfaction_at,
            community_verify_count=grievance.community_verify_count,
            community_dispute_count=grievance.community_dispute_count,
            created_at=grievance.created_at,
            updated_at=grievance.updated_at,
        )


class GrievanceListResponse(BaseModel):
    """A list of grievances in the order the projection defines."""

    items: list[GrievanceResponse]
    total: int

    @classmethod
    def from_domain(cls, grievances: list[Grievance]) -> GrievanceListResponse:
        return cls(
            items=[GrievanceResponse.from_domain(g) for g in grievances],
            total=len(grievances),
        )


class CommunityVoteResponse(BaseModel):
    """One community vote. ``content_hash`` is BLAKE3, hex-encoded."""

    id: UUID
    grievance_id: UUID
    voter_id: str
    vote_type: VoteType
    comments: str | None
    evidence: list[str]
    content_hash: str
    created_at: DateTimeWithZ

    @classmethod
    def from_domain(cls, vote: CommunityVote) -> CommunityVoteResponse:
        return cls(
            id=vote.id,
            grievance_id=vote.grievance_id,
            voter_id=vote.voter_id,
            vote_type=vote.vote_type,
            comments=vote.comments,
            evidence=list(vote.evidence),
            content_hash=vote.content_hash_hex,
            created_at=vote.created_at,
        )


class EscalationRecordResponse(BaseModel):
    """One escalation history entry."""

    id: UUID
    grievance_id: UUID
    from_level: AuthorityLevel
    to_level: AuthorityLevel
    reason: str
    escalated_by: str | None
    auto_escalated: bool
    created_at: DateTimeWithZ

    @classmethod
    def from_domain(cls, record: EscalationRecord) -> EscalationRecordResponse:
        return cls(
            id=record.id,
            grievance_id=record.grievance_id,
            from_level=record.from_level,
            to_level=record.to_level,
            reason=record.reason,
            escalated_by=record.escalated_by,
            auto_escalated=record.auto_escalated,
            created_at=record.created_at,
        )


class AuditEntryResponse(BaseModel):
    """One hash-chained audit entry."""

    id: UUID
    grievance_id: UUID
    sequence: int
    event_type: str
    payload: dict[str, Any]
    actor_id: str | None
    prev_hash: str
    reference_token: str
    recorded_at: DateTimeWithZ

    @classmethod
    def from_domain(cls, entry: AuditEntry) -> AuditEntryResponse:
        return cls(
            id=entry.id,
            grievance_id=entry.grievance_id,
            sequence=entry.sequence,
            event_type=entry.event_type.value,
            payload=dict(entry.payload),
            actor_id=entry.actor_id,
            prev_hash=entry.prev_hash,
            reference_token=entry.reference_token,
            recorded_at=entry.recorded_at,
        )


class AuditChainVerificationResponse(BaseModel):
    """Result of re-verifying a grievance's audit chain."""

    grievance_id: UUID
    entries_verified: int
    intact: bool = True


class GrievanceErrorResponse(BaseModel):
    """Error response for grievance operations (RFC 7807).

    Attributes:
        type: Error type URI.
        title: Human-readable error title.
        status: HTTP status code.
        detail: Specific error message.
        instance: Request URL.
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
