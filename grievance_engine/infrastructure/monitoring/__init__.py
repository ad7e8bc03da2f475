"""Monitoring adapters (Prometheus)."""

from grievance_engine.infrastructure.monitoring.grievance_metrics import (
    METRICS_CONTENT_TYPE,
    GrievanceMetricsCollector,
    get_grievance_metrics_collector,
    reset_grievance_metrics_collector,
)

__all__: list[str] = [
    "METRICS_CONTENT_TYPE",
    "GrievanceMetricsCollector",
    "get_grievance_metrics_collector",
    "reset_grievance_metrics_collector",
]
