"""Overdue escalation worker.

Runs OverdueEscalationService.sweep() on a fixed interval. Started with the
application lifecycle only when GRIEVANCE_OVERDUE_SWEEP_ENABLED is true.
"""

from __future__ import annotations

import asyncio

import structlog

from grievance_engine.application.services.overdue_escalation_service import (
    OverdueEscalationService,
    SweepResult,
)
from grievance_engine.config.grievance_config import (
    DEFAULT_OVERDUE_SWEEP_CONFIG,
    OverdueSweepConfig,
)


class OverdueEscalationWorker:
    """Periodic driver for the overdue sweep.

    A sweep that raises is logged and the loop waits for the next interval.
    Individual grievance failures are already handled inside the sweep.

    Example:
        >>> worker = OverdueEscalationWorker(service, config)
        >>> await worker.start()
        >>> # ... application runs ...
        >>> await worker.stop()
    """

    def __init__(
        self,
        service: OverdueEscalationService,
        config: OverdueSweepConfig | None = None,
    ) -> None:
        self._service = service
        self._config = config or DEFAULT_OVERDUE_SWEEP_CONFIG
        self._running: bool = False
        self._task: asyncio.Task[None] | None = None
        self._sweeps_completed = 0
        self._log = structlog.get_logger(__name__).bind(worker="overdue_escalation")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_seconds(self) -> float:
        return self._config.interval_seconds

    @property
    def sweeps_completed(self) -> int:
        return self._sweeps_completed

    async def start(self) -> None:
        """Start the sweep loop as a background task. Idempotent."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self.run())
        self._log.info("overdue_escalation_worker_started", interval=self.interval_seconds)

    async def stop(self) -> None:
        """Stop the loop and wait for the task to finish. Safe when not running."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._log.info("overdue_escalation_worker_stopped", sweeps=self._sweeps_completed)

    async def run(self) -> None:
        """Sweep, sleep, repeat while running."""
        self._running = True
        while self._running:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self._log.exception(
                    "overdue_sweep_failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
            await asyncio.sleep(self.interval_seconds)

    async def run_once(self) -> SweepResult:
        """Run a single sweep."""
        result = await self._service.sweep()
        self._sweeps_completed += 1
        return result
