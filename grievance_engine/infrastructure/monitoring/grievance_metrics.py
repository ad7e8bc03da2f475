"""Grievance lifecycle metrics for Prometheus exposition.

This module provides Prometheus counters for committed grievance
transitions, community votes and escalations. Counters are only
incremented after the unit of work that produced them has committed.
"""

from __future__ import annotations

import os
import threading

from prometheus_client import CollectorRegistry, Counter, generate_latest

from grievance_engine.application.ports.grievance_metrics import (
    GrievanceMetricsProtocol,
)

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Thread lock for singleton initialization
_metrics_lock = threading.Lock()


class GrievanceMetricsCollector(GrievanceMetricsProtocol):
    """Collects grievance lifecycle metrics for Prometheus.

    Attributes:
        transitions_total: Committed transitions by audit event type.
        community_votes_total: Community votes by type and whether applied.
        escalations_total: Escalations by target level and origin.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize grievance metrics collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "grievance-engine")

        self.transitions_total = Counter(
            name="grievance_transitions_total",
            documentation="Committed grievance transitions by audit event type",
            labelnames=["event_type", "service", "environment"],
            registry=self._registry,
        )

        self.community_votes_total = Counter(
            name="grievance_community_votes_total",
            documentation="Community votes by type; applied=false for frozen grievances",
            labelnames=["vote_type", "applied", "service", "environment"],
            registry=self._registry,
        )

        self.escalations_total = Counter(
            name="grievance_escalations_total",
            documentation="Grievance escalations by target authority level",
            labelnames=["to_level", "auto", "service", "environment"],
            registry=self._registry,
        )

    def record_transition(self, event_type: str) -> None:
        self.transitions_total.labels(
            event_type=event_type,
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def record_community_vote(self, vote_type: str, applied: bool) -> None:
        self.community_votes_total.labels(
            vote_type=vote_type,
            applied=str(applied).lower(),
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def record_escalation(self, to_level: str, auto: bool) -> None:
        self.escalations_total.labels(
            to_level=to_level,
            auto=str(auto).lower(),
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry.

        Returns:
            The Prometheus collector registry.
        """
        return self._registry

    def generate_metrics(self) -> bytes:
        """Render this collector's registry in Prometheus text format."""
        return generate_latest(self._registry)


# Singleton instance
_grievance_metrics_collector: GrievanceMetricsCollector | None = None


def get_grievance_metrics_collector() -> GrievanceMetricsCollector:
    """Get the singleton GrievanceMetricsCollector instance (thread-safe).

    Uses double-checked locking pattern for thread-safe lazy initialization.
    """
    global _grievance_metrics_collector
    if _grievance_metrics_collector is None:
        with _metrics_lock:
            # Double-check inside lock
            if _grievance_metrics_collector is None:
                _grievance_metrics_collector = GrievanceMetricsCollector()
    return _grievance_metrics_collector


def reset_grievance_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _grievance_metrics_collector
    with _metrics_lock:
        _grievance_metrics_collector = None
