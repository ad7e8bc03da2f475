"""Configuration for the grievance engine."""

from grievance_engine.config.grievance_config import (
    DEFAULT_GRIEVANCE_CONFIG,
    DEFAULT_OVERDUE_SWEEP_CONFIG,
    TEST_GRIEVANCE_CONFIG,
    TEST_OVERDUE_SWEEP_CONFIG,
    GrievanceLifecycleConfig,
    OverdueSweepConfig,
)

__all__: list[str] = [
    "DEFAULT_GRIEVANCE_CONFIG",
    "DEFAULT_OVERDUE_SWEEP_CONFIG",
    "TEST_GRIEVANCE_CONFIG",
    "TEST_OVERDUE_SWEEP_CONFIG",
    "GrievanceLifecycleConfig",
    "OverdueSweepConfig",
]
