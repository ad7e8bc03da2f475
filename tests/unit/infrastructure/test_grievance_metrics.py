"""Unit tests for GrievanceMetricsCollector."""

import pytest
from prometheus_client import CollectorRegistry

from grievance_engine.infrastructure.monitoring.grievance_metrics import (
    GrievanceMetricsCollector,
    get_grievance_metrics_collector,
    reset_grievance_metrics_collector,
)


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def collector(
    registry: CollectorRegistry, monkeypatch: pytest.MonkeyPatch
) -> GrievanceMetricsCollector:
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("SERVICE_NAME", "grievance-engine")
    return GrievanceMetricsCollector(registry=registry)


class TestGrievanceMetricsCollector:
    """Tests for counter labelling and exposition."""

    def test_record_transition(
        self, collector: GrievanceMetricsCollector, registry: CollectorRegistry
    ) -> None:
        collector.record_transition("TASK_ACCEPTED")
        collector.record_transition("TASK_ACCEPTED")

        value = registry.get_sample_value(
            "grievance_transitions_total",
            {
                "event_type": "TASK_ACCEPTED",
                "service": "grievance-engine",
                "environment": "test",
            },
        )
        assert value == 2.0

    def test_record_community_vote_applied_label(
        self, collector: GrievanceMetricsCollector, registry: CollectorRegistry
    ) -> None:
        collector.record_community_vote("verify", False)

        value = registry.get_sample_value(
            "grievance_community_votes_total",
            {
                "vote_type": "verify",
                "applied": "false",
                "service": "grievance-engine",
                "environment": "test",
            },
        )
        assert value == 1.0

    def test_record_escalation(
        self, collector: GrievanceMetricsCollector, registry: CollectorRegistry
    ) -> None:
        collector.record_escalation("state", True)

        value = registry.get_sample_value(
            "grievance_escalations_total",
            {
                "to_level": "state",
                "auto": "true",
                "service": "grievance-engine",
                "environment": "test",
            },
        )
        assert value == 1.0

    def test_generate_metrics(self, collector: GrievanceMetricsCollector) -> None:
        collector.record_transition("GRIEVANCE_SUBMITTED")
        output = collector.generate_metrics().decode("utf-8")
        assert 'event_type="GRIEVANCE_SUBMITTED"' in output

    def test_registry_isolated(self, collector: GrievanceMetricsCollector) -> None:
        assert collector.get_registry() is not None
        other = GrievanceMetricsCollector(registry=CollectorRegistry())
        collector.record_transition("TASK_ACCEPTED")
        assert other.get_registry().get_sample_value(
            "grievance_transitions_total",
            {"event_type": "TASK_ACCEPTED", "service": "grievance-engine", "environment": "test"},
        ) is None


class TestSingleton:
    def test_singleton_and_reset(self) -> None:
        reset_grievance_metrics_collector()
        first = get_grievance_metrics_collector()
        assert get_grievance_metrics_collector() is first
        reset_grievance_metrics_collector()
        assert get_grievance_metrics_collector() is not first
