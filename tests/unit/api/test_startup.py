"""Unit tests for API startup and shutdown hooks."""

from collections.abc import Iterator

import pytest

from grievance_engine.api import startup
from grievance_engine.bootstrap.grievance import (
    reset_grievance_dependencies,
    set_grievance_store,
    set_overdue_sweep_config,
    set_time_authority,
)
from grievance_engine.config.grievance_config import (
    DEFAULT_OVERDUE_SWEEP_CONFIG,
    TEST_OVERDUE_SWEEP_CONFIG,
)
from grievance_engine.infrastructure.stubs.grievance_store_stub import GrievanceStoreStub
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture(autouse=True)
def wired(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    reset_grievance_dependencies()
    set_grievance_store(GrievanceStoreStub())
    set_time_authority(FakeTimeAuthority())
    yield
    reset_grievance_dependencies()


class TestStartup:
    @pytest.mark.asyncio
    async def test_worker_not_started_when_disabled(self) -> None:
        set_overdue_sweep_config(DEFAULT_OVERDUE_SWEEP_CONFIG)
        await startup.on_startup()
        assert startup._worker is None
        await startup.on_shutdown()

    @pytest.mark.asyncio
    async def test_worker_started_and_stopped(self) -> None:
        set_overdue_sweep_config(TEST_OVERDUE_SWEEP_CONFIG)

        await startup.on_startup()
        worker = startup._worker
        assert worker is not None
        assert worker.running

        await startup.on_shutdown()
        assert not worker.running
        assert startup._worker is None
