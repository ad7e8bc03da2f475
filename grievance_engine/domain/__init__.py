"""
Domain layer - Pure business logic for the grievance engine.

This layer contains:
- Domain models (Grievance, CommunityVote, EscalationRecord, AuditEntry)
- Audit event payloads (typed, one per event type)
- Pure domain services (authority ladder)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
No database, web or logging framework imports are allowed.
"""

from grievance_engine.domain.exceptions import GrievanceEngineError

__all__: list[str] = ["GrievanceEngineError"]
