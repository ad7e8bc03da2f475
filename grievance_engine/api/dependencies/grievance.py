"""Grievance API dependencies.

Thin FastAPI dependency functions over the bootstrap singletons. Tests swap
implementations through the bootstrap ``set_*`` / ``reset_*`` helpers.
"""

from grievance_engine.application.services.audit_log_service import AuditLogService
from grievance_engine.application.services.grievance_lifecycle_service import (
    GrievanceLifecycleService,
)
from grievance_engine.application.services.grievance_query_service import (
    GrievanceQueryService,
)
from grievance_engine.bootstrap.grievance import (
    get_audit_log_service as _get_audit_log_service,
    get_grievance_lifecycle_service as _get_grievance_lifecycle_service,
    get_grievance_query_service as _get_grievance_query_service,
)


def get_grievance_lifecycle_service() -> GrievanceLifecycleService:
    """Get the lifecycle service (all grievance writes)."""
    return _get_grievance_lifecycle_service()


def get_grievance_query_service() -> GrievanceQueryService:
    """Get the query service (dashboard reads)."""
    return _get_grievance_query_service()


def get_audit_log_service() -> AuditLogService:
    """Get the audit log service (chain verification)."""
    return _get_audit_log_service()
