"""Grievance engine configuration.

This module defines the lifecycle policy knobs and the overdue sweep
settings, with environment variable overrides for production tuning.

Environment Variables (Lifecycle):
- GRIEVANCE_VERIFICATION_THRESHOLD: Verify votes that resolve a grievance (default: 3)
- GRIEVANCE_VERIFICATION_WINDOW_DAYS: Days between resolution and verification deadline (default: 7)
- GRIEVANCE_ESCALATION_DUE_DAYS: Days the escalated authority has to act (default: 10)
- GRIEVANCE_MIN_ESCALATION_REASON_LENGTH: Minimum escalation reason length (default: 100)
- GRIEVANCE_NUMBER_MAX_ATTEMPTS: Tries to find a free grievance number (default: 20)

Environment Variables (Overdue sweep):
- GRIEVANCE_OVERDUE_SWEEP_ENABLED: Run the overdue escalation worker (default: false)
- GRIEVANCE_OVERDUE_SWEEP_INTERVAL_SECONDS: Seconds between sweeps (default: 3600)
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable ("1", "true", "yes", "on") with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GrievanceLifecycleConfig:
    """Policy settings for the grievance lifecycle.

    Attributes:
        verification_threshold: Verify votes that resolve a grievance.
            Default: 3.
        verification_window_days: Days from resolution to verification
            deadline. Default: 7.
        escalation_due_days: Days the escalated authority has to act.
            Default: 10.
        min_escalation_reason_length: Minimum characters in an escalation
            reason. Default: 100.
        grievance_number_max_attempts: Random grievance numbers tried before
            giving up with GrievanceNumberConflictError. Default: 20.
    """

    verification_threshold: int = 3
    verification_window_days: int = 7
    escalation_due_days: int = 10
    min_escalation_reason_length: int = 100
    grievance_number_max_attempts: int = 20

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.verification_threshold < 1:
            raise ValueError(
                f"verification_threshold must be positive, got {self.verification_threshold}"
            )
        if self.verification_window_days < 1:
            raise ValueError(
                f"verification_window_days must be positive, got {self.verification_window_days}"
            )
        if self.escalation_due_days < 1:
            raise ValueError(
                f"escalation_due_days must be positive, got {self.escalation_due_days}"
            )
        if self.min_escalation_reason_length < 1:
            raise ValueError(
                "min_escalation_reason_length must be positive, "
                f"got {self.min_escalation_reason_length}"
            )
        if self.grievance_number_max_attempts < 1:
            raise ValueError(
                "grievance_number_max_attempts must be positive, "
                f"got {self.grievance_number_max_attempts}"
            )

    @classmethod
    def from_environment(cls) -> "GrievanceLifecycleConfig":
        """Create config from environment variables with defaults.

        Returns:
            GrievanceLifecycleConfig with values from environment or defaults.
        """
        return cls(
            verification_threshold=_get_int_env("GRIEVANCE_VERIFICATION_THRESHOLD", 3),
            verification_window_days=_get_int_env(
                "GRIEVANCE_VERIFICATION_WINDOW_DAYS", 7
            ),
            escalation_due_days=_get_int_env("GRIEVANCE_ESCALATION_DUE_DAYS", 10),
            min_escalation_reason_length=_get_int_env(
                "GRIEVANCE_MIN_ESCALATION_REASON_LENGTH", 100
            ),
            grievance_number_max_attempts=_get_int_env(
                "GRIEVANCE_NUMBER_MAX_ATTEMPTS", 20
            ),
        )


@dataclass(frozen=True)
class OverdueSweepConfig:
    """Configuration for the overdue escalation worker.

    Attributes:
        enabled: Whether the worker runs at all. Default: False
            (overdue grievances are only reported by the query service).
        interval_seconds: Seconds between sweeps. Default: 3600.
    """

    enabled: bool = False
    interval_seconds: float = 3600.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.interval_seconds <= 0:
            raise ValueError(
                f"interval_seconds must be positive, got {self.interval_seconds}"
            )

    @classmethod
    def from_environment(cls) -> "OverdueSweepConfig":
        """Create config from environment variables with defaults."""
        return cls(
            enabled=_get_bool_env("GRIEVANCE_OVERDUE_SWEEP_ENABLED", False),
            interval_seconds=_get_float_env(
                "GRIEVANCE_OVERDUE_SWEEP_INTERVAL_SECONDS", 3600.0
            ),
        )


# Pre-defined configurations for common use cases

# Default production config
DEFAULT_GRIEVANCE_CONFIG = GrievanceLifecycleConfig()

# Testing config: same policy, fewer number attempts so conflicts surface fast
TEST_GRIEVANCE_CONFIG = GrievanceLifecycleConfig(grievance_number_max_attempts=3)

DEFAULT_OVERDUE_SWEEP_CONFIG = OverdueSweepConfig()

TEST_OVERDUE_SWEEP_CONFIG = OverdueSweepConfig(enabled=True, interval_seconds=0.01)
