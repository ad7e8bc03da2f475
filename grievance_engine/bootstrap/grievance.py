"""Bootstrap wiring for the grievance engine.

The store is chosen once per process: PostgreSQL when DATABASE_URL is set,
the in-memory stub otherwise.
"""

from __future__ import annotations

from structlog import get_logger

from grievance_engine.application.ports.grievance_metrics import (
    GrievanceMetricsProtocol,
)
from grievance_engine.application.ports.grievance_store import GrievanceStoreProtocol
from grievance_engine.application.ports.time_authority import TimeAuthorityProtocol
from grievance_engine.application.services.audit_log_service import AuditLogService
from grievance_engine.application.services.grievance_lifecycle_service import (
    GrievanceLifecycleService,
)
from grievance_engine.application.services.grievance_query_service import (
    GrievanceQueryService,
)
from grievance_engine.application.services.overdue_escalation_service import (
    OverdueEscalationService,
)
from grievance_engine.bootstrap.database import (
    get_session_factory,
    is_database_configured,
)
from grievance_engine.config.grievance_config import (
    GrievanceLifecycleConfig,
    OverdueSweepConfig,
)
from grievance_engine.infrastructure.adapters.persistence import PostgresGrievanceStore
from grievance_engine.infrastructure.adapters.time import SystemTimeAuthority
from grievance_engine.infrastructure.monitoring.grievance_metrics import (
    METRICS_CONTENT_TYPE,
    get_grievance_metrics_collector,
)
from grievance_engine.infrastructure.stubs.grievance_store_stub import (
    GrievanceStoreStub,
)

logger = get_logger(__name__)

_grievance_store: GrievanceStoreProtocol | None = None
_time_authority: TimeAuthorityProtocol | None = None
_metrics: GrievanceMetricsProtocol | None = None
_lifecycle_config: GrievanceLifecycleConfig | None = None
_sweep_config: OverdueSweepConfig | None = None
_lifecycle_service: GrievanceLifecycleService | None = None
_query_service: GrievanceQueryService | None = None
_audit_log_service: AuditLogService | None = None
_overdue_escalation_service: OverdueEscalationService | None = None


def get_grievance_store() -> GrievanceStoreProtocol:
    """Get the grievance store (PostgreSQL if configured, else in-memory)."""
    global _grievance_store
    if _grievance_store is None:
        if is_database_configured():
            _grievance_store = PostgresGrievanceStore(get_session_factory())
            logger.info("grievance_store_selected", store="postgres")
        else:
            _grievance_store = GrievanceStoreStub()
            logger.warning("grievance_store_selected", store="in_memory")
    return _grievance_store


async def initialize_grievance_store() -> None:
    """Create the database schema when the PostgreSQL store is in use."""
    store = get_grievance_store()
    if isinstance(store, PostgresGrievanceStore):
        await store.create_schema()


def get_time_authority() -> TimeAuthorityProtocol:
    """Get the time authority instance."""
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_grievance_metrics() -> GrievanceMetricsProtocol:
    """Get the grievance metrics sink."""
    global _metrics
    if _metrics is None:
        _metrics = get_grievance_metrics_collector()
    return _metrics


def generate_grievance_metrics() -> tuple[bytes, str]:
    """Render grievance metrics as (body, content type) for scraping."""
    return get_grievance_metrics_collector().generate_metrics(), METRICS_CONTENT_TYPE


def get_lifecycle_config() -> GrievanceLifecycleConfig:
    """Get lifecycle configuration (read from environment once)."""
    global _lifecycle_config
    if _lifecycle_config is None:
        _lifecycle_config = GrievanceLifecycleConfig.from_environment()
    return _lifecycle_config


def get_overdue_sweep_config() -> OverdueSweepConfig:
    """Get overdue sweep configuration (read from environment once)."""
    global _sweep_config
    if _sweep_config is None:
        _sweep_config = OverdueSweepConfig.from_environment()
    return _sweep_config


def get_audit_log_service() -> AuditLogService:
    """Get the audit log service instance."""
    global _audit_log_service
    if _audit_log_service is None:
        _audit_log_service = AuditLogService(get_grievance_store())
    return _audit_log_service


def get_grievance_lifecycle_service() -> GrievanceLifecycleService:
    """Get the grievance lifecycle service instance."""
    global _lifecycle_service
    if _lifecycle_service is None:
        _lifecycle_service = GrievanceLifecycleService(
            store=get_grievance_store(),
            time_authority=get_time_authority(),
            config=get_lifecycle_config(),
            metrics=get_grievance_metrics(),
            audit_log=get_audit_log_service(),
        )
    return _lifecycle_service


def get_grievance_query_service() -> GrievanceQueryService:
    """Get the grievance query service instance."""
    global _query_service
    if _query_service is None:
        _query_service = GrievanceQueryService(
            store=get_grievance_store(),
            time_authority=get_time_authority(),
        )
    return _query_service


def get_overdue_escalation_service() -> OverdueEscalationService:
    """Get the overdue escalation service instance."""
    global _overdue_escalation_service
    if _overdue_escalation_service is None:
        _overdue_escalation_service = OverdueEscalationService(
            lifecycle=get_grievance_lifecycle_service(),
            queries=get_grievance_query_service(),
            time_authority=get_time_authority(),
        )
    return _overdue_escalation_service


def set_grievance_store(store: GrievanceStoreProtocol) -> None:
    """Set custom grievance store for testing."""
    global _grievance_store
    _grievance_store = store


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom time authority for testing."""
    global _time_authority
    _time_authority = time_authority


def set_grievance_metrics(metrics: GrievanceMetricsProtocol) -> None:
    """Set custom metrics sink for testing."""
    global _metrics
    _metrics = metrics


def set_lifecycle_config(config: GrievanceLifecycleConfig) -> None:
    """Set custom lifecycle configuration for testing."""
    global _lifecycle_config
    _lifecycle_config = config


def set_overdue_sweep_config(config: OverdueSweepConfig) -> None:
    """Set custom overdue sweep configuration for testing."""
    global _sweep_config
    _sweep_config = config


def reset_grievance_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _grievance_store
    global _time_authority
    global _metrics
    global _lifecycle_config
    global _sweep_config
    global _lifecycle_service
    global _query_service
    global _audit_log_service
    global _overdue_escalation_service

    _grievance_store = None
    _time_authority = None
    _metrics = None
    _lifecycle_config = None
    _sweep_config = None
    _lifecycle_service = None
    _query_service = None
    _audit_log_service = None
    _overdue_escalation_service = None
