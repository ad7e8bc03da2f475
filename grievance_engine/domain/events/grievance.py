"""Grievance audit event payloads.

Every audit entry carries exactly one of the payloads below. The payloads
form a tagged union keyed by AuditEventType, so stored entries can be read
back into typed values with payload_from_dict().

Developer Golden Rules:
1. USE to_dict() - Never use asdict() for event serialization
2. INCLUDE schema_version - All event payloads carry schema_version
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Union
from uuid import UUID

from grievance_engine.domain.events.hash_utils import canonical_json

GRIEVANCE_EVENT_SCHEMA_VERSION: int = 1


class AuditEventType(str, Enum):
    """Enumerated audit event types."""

    GRIEVANCE_SUBMITTED = "GRIEVANCE_SUBMITTED"
    STATUS_UPDATED = "STATUS_UPDATED"
    TASK_ACCEPTED = "TASK_ACCEPTED"
    USER_SATISFACTION = "USER_SATISFACTION"
    COMMUNITY_VERIFICATION = "COMMUNITY_VERIFICATION"
    GRIEVANCE_ESCALATED = "GRIEVANCE_ESCALATED"


class _PayloadMixin:
    """Shared serialization helpers for payload dataclasses."""

    event_type: ClassVar[AuditEventType]

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    def signable_content(self) -> bytes:
        """Return canonical bytes of this payload.

        Returns:
            UTF-8 encoded canonical JSON of to_dict().
        """
        return canonical_json(self.to_dict()).encode("utf-8")


@dataclass(frozen=True, eq=True)
class GrievanceSubmittedPayload(_PayloadMixin):
    """Payload for GRIEVANCE_SUBMITTED."""

    event_type: ClassVar[AuditEventType] = AuditEventType.GRIEVANCE_SUBMITTED

    grievance_number: str
    title: str
    category: str
    village_name: str
    priority: str
    reporter_id: str
    schema_version: int = GRIEVANCE_EVENT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert payload to dict for audit storage."""
        return {
            "grievance_number": self.grievance_number,
            "title": self.title,
            "category": self.category,
            "village_name": self.village_name,
            "priority": self.priority,
            "reporter_id": self.reporter_id,
            "schema_version": self.schema_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GrievanceSubmittedPayload:
        return cls(
            grievance_number=data["grievance_number"],
            title=data["title"],
            category=data["category"],
            village_name=data["village_name"],
            priority=data["priority"],
            reporter_id=data["reporter_id"],
            schema_version=data.get("schema_version", GRIEVANCE_EVENT_SCHEMA_VERSION),
        )


@dataclass(frozen=True, eq=True)
class StatusUpdatedPayload(_PayloadMixin):
    """Payload for STATUS_UPDATED (official marked the work resolved)."""

    event_type: ClassVar[AuditEventType] = AuditEventType.STATUS_UPDATED

    grievance_number: str
    from_status: str
    to_status: str
    resolved_at: datetime
    verification_deadline: datetime
    resolution_notes: str | None = None
    resolution_evidence: tuple[str, ...] = field(default=())
    schema_version: int = GRIEVANCE_EVENT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert payload to dict for audit storage."""
        return {
            "grievance_number": self.grievance_number,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "resolved_at": self.resolved_at.isoformat(),
            "verification_deadline": self.verification_deadline.isoformat(),
            "resolution_notes": self.resolution_notes,
            "resolution_evidence": list(self.resolution_evidence),
            "schema_version": self.schema_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StatusUpdatedPayload:
        return cls(
            grievance_number=data["grievance_number"],
            from_status=data["from_status"],
            to_status=data["to_status"],
            resolved_at=datetime.fromisoformat(data["resolved_at"]),
            verification_deadline=datetime.fromisoformat(data["verification_deadline"]),
            resolution_notes=data.get("resolution_notes"),
            resolution_evidence=tuple(data.get("resolution_evidence") or ()),
            schema_version=data.get("schema_version", GRIEVANCE_EVENT_SCHEMA_VERSION),
        )


@dataclass(frozen=True, eq=True)
class TaskAcceptedPayload(_PayloadMixin):
    """Payload for TASK_ACCEPTED."""

    event_type: ClassVar[AuditEventType] = AuditEventType.TASK_ACCEPTED

    grievance_number: str
    official_id: str
    resolution_timeline_days: int
    due_date: datetime
    schema_version: int = GRIEVANCE_EVENT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert payload to dict for audit storage."""
        return {
            "grievance_number": self.grievance_number,
            "official_id": self.official_id,
            "resolution_timeline_days": self.resolution_timeline_days,
            "due_date": self.due_date.isoformat(),
            "schema_version": self.schema_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskAcceptedPayload:
        return cls(
            grievance_number=data["grievance_number"],
            official_id=data["official_id"],
            resolution_timeline_days=data["resolution_timeline_days"],
            due_date=datetime.fromisoformat(data["due_date"]),
            schema_version=data.get("schema_version", GRIEVANCE_EVENT_SCHEMA_VERSION),
        )


@dataclass(frozen=True, eq=True)
class UserSatisfactionPayload(_PayloadMixin):
    """Payload for USER_SATISFACTION."""

    event_type: ClassVar[AuditEventType] = AuditEventType.USER_SATISFACTION

    grievance_number: str
    satisfaction: str
    from_status: str
    to_status: str
    schema_version: int = GRIEVANCE_EVENT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert payload to dict for audit storage."""
        return {
            "grievance_number": self.grievance_number,
            "satisfaction": self.satisfaction,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "schema_version": self.schema_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserSatisfactionPayload:
        return cls(
            grievance_number=data["grievance_number"],
            satisfaction=data["satisfaction"],
            from_status=data["from_status"],
            to_status=data["to_status"],
            schema_version=data.get("schema_version", GRIEVANCE_EVENT_SCHEMA_VERSION),
        )


@dataclass(frozen=True, eq=True)
class CommunityVerificationPayload(_PayloadMixin):
    """Payload for COMMUNITY_VERIFICATION."""

    event_type: ClassVar[AuditEventType] = AuditEventType.COMMUNITY_VERIFICATION

    grievance_number: str
    vote_id: UUID
    vote_type: str
    voter_id: str
    verify_count: int
    dispute_count: int
    from_status: str
    to_status: str
    schema_version: int = GRIEVANCE_EVENT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert payload to dict for audit storage."""
        return {
            "grievance_number": self.grievance_number,
            "vote_id": str(self.vote_id),
            "vote_type": self.vote_type,
            "voter_id": self.voter_id,
            "verify_count": self.verify_count,
            "dispute_count": self.dispute_count,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "schema_version": self.schema_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommunityVerificationPayload:
        return cls(
            grievance_number=data["grievance_number"],
            vote_id=UUID(data["vote_id"]),
            vote_type=data["vote_type"],
            voter_id=data["voter_id"],
            verify_count=data["verify_count"],
            dispute_count=data["dispute_count"],
            from_status=data["from_status"],
            to_status=data["to_status"],
            schema_version=data.get("schema_version", GRIEVANCE_EVENT_SCHEMA_VERSION),
        )


@dataclass(frozen=True, eq=True)
class GrievanceEscalatedPayload(_PayloadMixin):
    """Payload for GRIEVANCE_ESCALATED.

    can_resolve is False when the escalation came from an official
    declaring they cannot resolve the grievance, otherwise None.
    """

    event_type: ClassVar[AuditEventType] = AuditEventType.GRIEVANCE_ESCALATED

    grievance_number: str
    from_level: str
    to_level: str
    reason: str
    escalation_count: int
    auto_escalated: bool
    escalation_due_date: datetime
    escalated_by: str | None = None
    can_resolve: bool | None = None
    schema_version: int = GRIEVANCE_EVENT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert payload to dict for audit storage."""
        return {
            "grievance_number": self.grievance_number,
            "from_level": self.from_level,
            "to_level": self.to_level,
            "reason": self.reason,
            "escalation_count": self.escalation_count,
            "auto_escalated": self.auto_escalated,
            "escalation_due_date": self.escalation_due_date.isoformat(),
            "escalated_by": self.escalated_by,
            "can_resolve": self.can_resolve,
            "schema_version": self.schema_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GrievanceEscalatedPayload:
        return cls(
            grievance_number=data["grievance_number"],
            from_level=data["from_level"],
            to_level=data["to_level"],
            reason=data["reason"],
            escalation_count=data["escalation_count"],
            auto_escalated=data["auto_escalated"],
            escalation_due_date=datetime.fromisoformat(data["escalation_due_date"]),
            escalated_by=data.get("escalated_by"),
            can_resolve=data.get("can_resolve"),
            schema_version=data.get("schema_version", GRIEVANCE_EVENT_SCHEMA_VERSION),
        )


GrievanceEventPayload = Union[
    GrievanceSubmittedPayload,
    StatusUpdatedPayload,
    TaskAcceptedPayload,
    UserSatisfactionPayload,
    CommunityVerificationPayload,
    GrievanceEscalatedPayload,
]

PAYLOAD_TYPES: dict[AuditEventType, type[Any]] = {
    payload_type.event_type: payload_type
    for payload_type in (
        GrievanceSubmittedPayload,
        StatusUpdatedPayload,
        TaskAcceptedPayload,
        UserSatisfactionPayload,
        CommunityVerificationPayload,
        GrievanceEscalatedPayload,
    )
}


def payload_from_dict(
    event_type: AuditEventType | str, data: dict[str, Any]
) -> GrievanceEventPayload:
    """Rebuild the typed payload for a stored audit entry.

    Args:
        event_type: Event type tag of the entry.
        data: Stored payload dict (output of to_dict()).

    Returns:
        The typed payload matching event_type.

    Raises:
        ValueError: If event_type is not a known audit event type.
    """
    tag = AuditEventType(event_type)
    payload_type = PAYLOAD_TYPES[tag]
    payload: GrievanceEventPayload = payload_type.from_dict(data)
    return payload
