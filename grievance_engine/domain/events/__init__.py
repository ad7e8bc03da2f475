"""Audit event payloads and hash chain utilities."""

from grievance_engine.domain.events.grievance import (
    AuditEventType,
    CommunityVerificationPayload,
    GrievanceEscalatedPayload,
    GrievanceEventPayload,
    GrievanceSubmittedPayload,
    StatusUpdatedPayload,
    TaskAcceptedPayload,
    UserSatisfactionPayload,
    payload_from_dict,
)
from grievance_engine.domain.events.hash_utils import (
    GENESIS_HASH,
    canonical_json,
    compute_reference_token,
)

__all__: list[str] = [
    "GENESIS_HASH",
    "AuditEventType",
    "CommunityVerificationPayload",
    "GrievanceEscalatedPayload",
    "GrievanceEventPayload",
    "GrievanceSubmittedPayload",
    "StatusUpdatedPayload",
    "TaskAcceptedPayload",
    "UserSatisfactionPayload",
    "canonical_json",
    "compute_reference_token",
    "payload_from_dict",
]
