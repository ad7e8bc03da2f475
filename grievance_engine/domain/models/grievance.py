"""Grievance domain model.

This module defines the central Grievance entity together with its status
state machine, authority levels and reporter feedback values.

State Machine:
    PENDING -> IN_PROGRESS (official accepts the task)
    IN_PROGRESS -> PENDING_VERIFICATION (official marks work resolved)

Feedback (reporter satisfaction or community votes) may move a grievance
from any status:
    satisfied / verify threshold reached -> RESOLVED
    not satisfied / dispute              -> IN_PROGRESS

RESOLVED is the closing state; only feedback reopens it. Resolved
grievances are retained for history and are never deleted.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

# GR + 4-digit year + 5-digit zero-padded number
GRIEVANCE_NUMBER_PATTERN: re.Pattern[str] = re.compile(r"^GR\d{4}\d{5}$")

GRIEVANCE_NUMBER_SPACE: int = 100_000


class GrievanceStatus(Enum):
    """Lifecycle status of a grievance.

    States:
        PENDING: Submitted, waiting for an official to accept it
        IN_PROGRESS: Accepted by an official, or reopened after a dispute
        PENDING_VERIFICATION: Official marked it resolved; awaiting confirmation
        RESOLVED: Confirmed resolved; reopened only by a dispute or unsatisfied reporter
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    PENDING_VERIFICATION = "pending_verification"
    RESOLVED = "resolved"

    def valid_transitions(self) -> frozenset[GrievanceStatus]:
        """Get valid target statuses from this status.

        Returns:
            Frozenset of statuses this status can transition to.
        """
        return STATUS_TRANSITION_MATRIX.get(self, frozenset())


# Statuses in which an official still owes work on the grievance
OPEN_WORK_STATUSES: frozenset[GrievanceStatus] = frozenset(
    {GrievanceStatus.PENDING, GrievanceStatus.IN_PROGRESS}
)

# Statuses reporter and community feedback can ask for
FEEDBACK_TARGET_STATUSES: frozenset[GrievanceStatus] = frozenset(
    {GrievanceStatus.IN_PROGRESS, GrievanceStatus.RESOLVED}
)

STATUS_TRANSITION_MATRIX: dict[GrievanceStatus, frozenset[GrievanceStatus]] = {
    # Satisfied reporter or verify threshold before anyone accepted it
    GrievanceStatus.PENDING: frozenset(
        {GrievanceStatus.IN_PROGRESS, GrievanceStatus.RESOLVED}
    ),
    GrievanceStatus.IN_PROGRESS: frozenset(
        {
            GrievanceStatus.PENDING_VERIFICATION,
            GrievanceStatus.RESOLVED,
        }
    ),
    # A contested resolution reopens work
    GrievanceStatus.PENDING_VERIFICATION: frozenset(
        {
            GrievanceStatus.IN_PROGRESS,
            GrievanceStatus.RESOLVED,
        }
    ),
    # Community dispute or unsatisfied reporter after closing
    GrievanceStatus.RESOLVED: frozenset({GrievanceStatus.IN_PROGRESS}),
}


class AuthorityLevel(Enum):
    """Rung on the escalation ladder, lowest first."""

    PANCHAYAT = "panchayat"
    BLOCK = "block"
    DISTRICT = "district"
    STATE = "state"

    @property
    def rank(self) -> int:
        """Position of this level on the ladder (0 = panchayat)."""
        return AUTHORITY_LADDER.index(self)


AUTHORITY_LADDER: tuple[AuthorityLevel, ...] = (
    AuthorityLevel.PANCHAYAT,
    AuthorityLevel.BLOCK,
    AuthorityLevel.DISTRICT,
    AuthorityLevel.STATE,
)


class UserSatisfaction(Enum):
    """Reporter's response to a claimed resolution."""

    SATISFIED = "satisfied"
    NOT_SATISFIED = "not_satisfied"


class GrievancePriority(Enum):
    """Handling priority carried on the grievance record."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class GrievanceCategory(Enum):
    """Categories accepted by the intake layer."""

    WATER_SUPPLY = "Water Supply"
    ROAD_INFRASTRUCTURE = "Road & Infrastructure"
    ELECTRICITY = "Electricity"
    SANITATION = "Sanitation & Waste Management"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    AGRICULTURE_SUPPORT = "Agriculture Support"
    SOCIAL_WELFARE = "Social Welfare Schemes"
    OTHER = "Other"


def generate_grievance_number(year: int) -> str:
    """Generate a candidate human-readable grievance number.

    The number is not guaranteed unique; callers must check it against
    the store before use.

    Args:
        year: Four-digit year the grievance is filed in.

    Returns:
        A number such as ``GR202600042``.
    """
    return f"GR{year:04d}{secrets.randbelow(GRIEVANCE_NUMBER_SPACE):05d}"


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class Grievance:
    """A tracked citizen complaint.

    Grievances are immutable values: every mutation produces a new
    instance through with_status() or with_changes(), which also bumps
    updated_at. Only the lifecycle service writes new instances to the
    store.

    Attributes:
        id: Unique identifier.
        grievance_number: Human-readable number (GR + year + 5 digits).
        title: Short summary from intake.
        category: Category label from intake.
        description: Full complaint text from intake.
        village_name: Village the complaint concerns.
        reporter_id: Identity of the citizen who filed it.
        reporter_name: Reporter's full name (optional).
        reporter_mobile: Reporter's mobile number (optional).
        priority: Handling priority.
        evidence_files: References to evidence attached at intake.
        voice_transcription: Transcribed voice complaint (optional).
        status: Current lifecycle status.
        authority_level: Current rung on the escalation ladder.
        assigned_to: Official who accepted the task.
        resolution_timeline_days: Days the official committed to.
        due_date: When the accepted work is due.
        resolved_at: When the official marked it resolved.
        resolution_notes: Official's resolution notes.
        resolution_evidence: References to resolution evidence.
        verification_deadline: End of the verification window.
        is_escalated: Whether it has ever been escalated.
        escalated_at: Timestamp of the latest escalation.
        escalation_count: Number of escalations so far.
        escalation_reason: Reason given for the latest escalation.
        escalation_due_date: When the escalated authority must act by.
        can_resolve: Official's declaration (None = not declared).
        user_satisfaction: Reporter feedback (write-once).
        user_satisfaction_at: When the feedback was recorded.
        community_verify_count: Accepted community verify votes.
        community_dispute_count: Accepted community dispute votes.
        created_at: Submission timestamp (UTC, immutable).
        updated_at: Last modification timestamp (UTC).
    """

    id: UUID
    grievance_number: str
    title: str
    category: str
    description: str
    village_name: str
    reporter_id: str
    reporter_name: str | None = field(default=None)
    reporter_mobile: str | None = field(default=None)
    priority: GrievancePriority = field(default=GrievancePriority.MEDIUM)
    evidence_files: tuple[str, ...] = field(default=())
    voice_transcription: str | None = field(default=None)
    status: GrievanceStatus = field(default=GrievanceStatus.PENDING)
    authority_level: AuthorityLevel = field(default=AuthorityLevel.PANCHAYAT)
    assigned_to: str | None = field(default=None)
    resolution_timeline_days: int | None = field(default=None)
    due_date: datetime | None = field(default=None)
    resolved_at: datetime | None = field(default=None)
    resolution_notes: str | None = field(default=None)
    resolution_evidence: tuple[str, ...] = field(default=())
    verification_deadline: datetime | None = field(default=None)
    is_escalated: bool = field(default=False)
    escalated_at: datetime | None = field(default=None)
    escalation_count: int = field(default=0)
    escalation_reason: str | None = field(default=None)
    escalation_due_date: datetime | None = field(default=None)
    can_resolve: bool | None = field(default=None)
    user_satisfaction: UserSatisfaction | None = field(default=None)
    user_satisfaction_at: datetime | None = field(default=None)
    community_verify_count: int = field(default=0)
    community_dispute_count: int = field(default=0)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        """Validate grievance fields."""
        if not GRIEVANCE_NUMBER_PATTERN.match(self.grievance_number):
            raise ValueError(
                f"Grievance number must match GR<yyyy><nnnnn>, got {self.grievance_number!r}"
            )
        if self.escalation_count < 0:
            raise ValueError("escalation_count must be non-negative")
        if self.community_verify_count < 0 or self.community_dispute_count < 0:
            raise ValueError("community tallies must be non-negative")

    @property
    def is_disputed(self) -> bool:
        """Whether the reporter or the community has contested the resolution."""
        return (
            self.user_satisfaction == UserSatisfaction.NOT_SATISFIED
            or self.community_dispute_count > 0
        )

    @property
    def has_reporter_feedback(self) -> bool:
        """Whether the reporter has already responded (freezes community votes)."""
        return self.user_satisfaction is not None

    def is_overdue(self, now: datetime) -> bool:
        """Check whether accepted work is past due and still open.

        Args:
            now: Reference time.

        Returns:
            True if due_date is in the past and work is still owed.
        """
        return (
            self.due_date is not None
            and self.due_date < now
            and self.status in OPEN_WORK_STATUSES
        )

    def with_feedback(
        self,
        target: GrievanceStatus,
        operation: str,
        updated_at: datetime,
        **changes: Any,
    ) -> Grievance:
        """Apply the status reporter or community feedback asks for.

        Feedback is not gated on the current status: a dispute reopens a
        resolved grievance and a satisfied reporter closes a pending one.
        Asking for the current status leaves it unchanged.

        Args:
            target: IN_PROGRESS or RESOLVED.
            operation: Name of the operation, for error reporting.
            updated_at: Timestamp of the mutation.
            **changes: Other fields to change in the same mutation.

        Returns:
            New Grievance with the feedback applied.

        Raises:
            ValueError: If target is not a feedback status.
        """
        if target not in FEEDBACK_TARGET_STATUSES:
            raise ValueError(f"{target.value} is not a feedback status")
        if target == self.status:
            return self.with_changes(updated_at, **changes)
        return self.with_status(target, operation, updated_at, **changes)

    def with_status(
        self,
        new_status: GrievanceStatus,
        operation: str,
        updated_at: datetime,
        **changes: Any,
    ) -> Grievance:
        """Create new grievance with updated status.

        Enforces the status transition matrix. Since Grievance is frozen,
        returns a new instance.

        Args:
            new_status: The status to transition to.
            operation: Name of the operation, for error reporting.
            updated_at: Timestamp of the mutation.
            **changes: Other fields to change in the same mutation.

        Returns:
            New Grievance with updated status, fields and timestamp.

        Raises:
            InvalidTransitionError: If the transition is not in the matrix.
        """
        # Import here to avoid circular dependency
        from grievance_engine.domain.errors.state_transition import (
            InvalidTransitionError,
        )

        if new_status not in self.status.valid_transitions():
            raise InvalidTransitionError(
                from_status=self.status,
                to_status=new_status,
                operation=operation,
                grievance_id=self.id,
            )
        return replace(self, status=new_status, updated_at=updated_at, **changes)

    def with_changes(self, updated_at: datetime, **changes: Any) -> Grievance:
        """Create new grievance with the given fields changed.

        Status changes must go through with_status() or with_feedback().

        Args:
            updated_at: Timestamp of the mutation.
            **changes: Fields to change.

        Returns:
            New Grievance with the changes applied.
        """
        return replace(self, updated_at=updated_at, **changes)
