"""Application services for the grievance engine.

Available services:
- GrievanceLifecycleService: Sole writer of grievance state
- GrievanceQueryService: Read-only dashboard projections
- VoteAggregator: Community tallies and reporter feedback recording
- AuditLogService: Hash-chained audit trail
- OverdueEscalationService: Opt-in automatic escalation of overdue grievances
"""

from grievance_engine.application.services.audit_log_service import AuditLogService
from grievance_engine.application.services.grievance_lifecycle_service import (
    GrievanceLifecycleService,
)
from grievance_engine.application.services.grievance_query_service import (
    GrievanceQueryService,
)
from grievance_engine.application.services.overdue_escalation_service import (
    OverdueEscalationService,
    SweepResult,
)
from grievance_engine.application.services.vote_aggregator_service import (
    VERIFICATION_THRESHOLD,
    VoteAggregator,
    VoteTally,
)

__all__: list[str] = [
    "VERIFICATION_THRESHOLD",
    "AuditLogService",
    "GrievanceLifecycleService",
    "GrievanceQueryService",
    "OverdueEscalationService",
    "SweepResult",
    "VoteAggregator",
    "VoteTally",
]
