"""Startup and shutdown hooks for the grievance API.

Startup:
1. Configure structured logging from ENVIRONMENT
2. Create the database schema when the PostgreSQL store is in use
3. Start the overdue escalation worker when enabled

Shutdown stops the worker and disposes of the database engine.
"""

from __future__ import annotations

import os

from structlog import get_logger

from grievance_engine.bootstrap.database import close_database_engine
from grievance_engine.bootstrap.grievance import (
    get_overdue_escalation_service,
    get_overdue_sweep_config,
    initialize_grievance_store,
)
from grievance_engine.bootstrap.logging import configure_structlog
from grievance_engine.workers.overdue_escalation_worker import OverdueEscalationWorker

ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"

logger = get_logger(__name__)

_worker: OverdueEscalationWorker | None = None


def configure_logging() -> None:
    """Configure structlog: JSON in production, console otherwise."""
    environment = os.environ.get(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)
    configure_structlog(environment)
    logger.info("logging_configured", environment=environment)


async def start_overdue_worker() -> OverdueEscalationWorker | None:
    """Start the overdue escalation worker if GRIEVANCE_OVERDUE_SWEEP_ENABLED."""
    global _worker
    config = get_overdue_sweep_config()
    if not config.enabled:
        logger.info("overdue_escalation_worker_disabled")
        return None
    if _worker is None:
        _worker = OverdueEscalationWorker(get_overdue_escalation_service(), config)
    await _worker.start()
    return _worker


async def on_startup() -> None:
    configure_logging()
    await initialize_grievance_store()
    await start_overdue_worker()
    logger.info("grievance_api_started")


async def on_shutdown() -> None:
    global _worker
    if _worker is not None:
        await _worker.stop()
        _worker = None
    await close_database_engine()
    logger.info("grievance_api_stopped")
