"""FastAPI application entry point for the grievance engine."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from grievance_engine import __version__
from grievance_engine.api.middleware.logging_middleware import LoggingMiddleware
from grievance_engine.api.routes.grievance import router as grievance_router
from grievance_engine.api.routes.health import router as health_router
from grievance_engine.api.routes.metrics import router as metrics_router
from grievance_engine.api.startup import on_shutdown, on_startup


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await on_startup()
    yield
    await on_shutdown()


app = FastAPI(
    title="Grievance Engine API",
    description="Village grievance lifecycle, community verification and escalation",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(grievance_router)
