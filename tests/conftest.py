"""
Pytest configuration and shared fixtures for grievance engine tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async collaborator mocking
- Time-dependent tests use FakeTimeAuthority
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from datetime import datetime, timezone

import pytest
from prometheus_client import CollectorRegistry

from grievance_engine.application.services.grievance_lifecycle_service import (
    GrievanceLifecycleService,
)
from grievance_engine.application.services.grievance_query_service import (
    GrievanceQueryService,
)
from grievance_engine.config.grievance_config import TEST_GRIEVANCE_CONFIG
from grievance_engine.domain.models.grievance import GrievanceCategory
from grievance_engine.domain.models.grievance_intake import (
    GrievanceIntake,
    ReporterIdentity,
)
from grievance_engine.infrastructure.monitoring.grievance_metrics import (
    GrievanceMetricsCollector,
)
from grievance_engine.infrastructure.stubs.grievance_store_stub import GrievanceStoreStub
from tests.helpers.fake_time_authority import FakeTimeAuthority

FROZEN_AT = datetime(2026, 3, 2, 9, 30, 0, tzinfo=timezone.utc)

LONG_REASON = (
    "The borewell pump has been broken for three weeks and the panchayat "
    "has not responded to repeated requests from the residents of ward 4."
)


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from grievance_engine import __version__

    return __version__


@pytest.fixture
def fake_time() -> FakeTimeAuthority:
    """Time frozen at a fixed instant."""
    return FakeTimeAuthority(frozen_at=FROZEN_AT)


@pytest.fixture
def store() -> GrievanceStoreStub:
    """Empty in-memory grievance store."""
    return GrievanceStoreStub()


@pytest.fixture
def metrics() -> GrievanceMetricsCollector:
    """Metrics collector on an isolated registry."""
    return GrievanceMetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def lifecycle(
    store: GrievanceStoreStub,
    fake_time: FakeTimeAuthority,
    metrics: GrievanceMetricsCollector,
) -> GrievanceLifecycleService:
    """Lifecycle service wired to the stub store and fake clock."""
    return GrievanceLifecycleService(
        store=store,
        time_authority=fake_time,
        config=TEST_GRIEVANCE_CONFIG,
        metrics=metrics,
    )


@pytest.fixture
def queries(
    store: GrievanceStoreStub, fake_time: FakeTimeAuthority
) -> GrievanceQueryService:
    """Query service over the same store and clock."""
    return GrievanceQueryService(store=store, time_authority=fake_time)


@pytest.fixture
def intake() -> GrievanceIntake:
    """A complete grievance intake."""
    return GrievanceIntake(
        title="Broken hand pump near school",
        category=GrievanceCategory.WATER_SUPPLY.value,
        description=(
            "The hand pump next to the primary school has not worked for two "
            "weeks and children have no drinking water during the day."
        ),
        village_name="Rampur",
    )


@pytest.fixture
def reporter() -> ReporterIdentity:
    """An authenticated reporter."""
    return ReporterIdentity(
        reporter_id="citizen-101",
        full_name="Asha Devi",
        mobile_number="9876543210",
    )


@pytest.fixture
def long_reason() -> str:
    """An escalation reason above the minimum length."""
    return LONG_REASON
