"""Domain models for the grievance engine.

Contains the immutable entities and value objects of the grievance
lifecycle. These models contain no infrastructure dependencies.
"""

from grievance_engine.domain.models.audit_entry import AuditEntry
from grievance_engine.domain.models.community_vote import CommunityVote, VoteType
from grievance_engine.domain.models.escalation_record import EscalationRecord
from grievance_engine.domain.models.grievance import (
    AUTHORITY_LADDER,
    AuthorityLevel,
    Grievance,
    GrievanceCategory,
    GrievancePriority,
    GrievanceStatus,
    UserSatisfaction,
    generate_grievance_number,
)
from grievance_engine.domain.models.grievance_intake import (
    GrievanceIntake,
    ReporterIdentity,
)

__all__: list[str] = [
    "AUTHORITY_LADDER",
    "AuditEntry",
    "AuthorityLevel",
    "CommunityVote",
    "EscalationRecord",
    "Grievance",
    "GrievanceCategory",
    "GrievanceIntake",
    "GrievancePriority",
    "GrievanceStatus",
    "ReporterIdentity",
    "UserSatisfaction",
    "VoteType",
    "generate_grievance_number",
]
