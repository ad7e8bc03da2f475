"""
Integration test configuration with testcontainers.

A PostgreSQL 16 container is started once per test session and shared by
every integration test. Each test gets its own engine and a freshly created
schema; tables are truncated afterwards so tests stay independent.

Usage:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_example(postgres_store: PostgresGrievanceStore) -> None:
        ...

Note: Docker must be running; without it these tests are skipped.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from testcontainers.postgres import PostgresContainer

from grievance_engine.application.services.grievance_lifecycle_service import (
    GrievanceLifecycleService,
)
from grievance_engine.config.grievance_config import TEST_GRIEVANCE_CONFIG
from grievance_engine.infrastructure.adapters.persistence import PostgresGrievanceStore
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container."""
    container = PostgresContainer("postgres:16-alpine")
    try:
        container.start()
    except Exception as exc:  # docker missing or daemon not running
        pytest.skip(f"PostgreSQL container unavailable: {exc}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """asyncpg URL for the container (testcontainers returns a psycopg2 URL)."""
    sync_url = postgres_container.get_connection_url()
    async_url: str = sync_url.replace(
        "postgresql+psycopg2://", "postgresql+asyncpg://"
    ).replace("postgresql://", "postgresql+asyncpg://")
    return async_url


@pytest.fixture
async def session_factory(
    postgres_async_url: str,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Per-test session factory; grievance tables are emptied afterwards."""
    engine = create_async_engine(postgres_async_url, echo=False)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    yield factory

    async with factory() as session, session.begin():
        await session.execute(
            text(
                "TRUNCATE grievance_audit_entries, grievance_community_votes, "
                "grievance_escalation_records, grievances"
            )
        )
    await engine.dispose()


@pytest.fixture
async def postgres_store(
    session_factory: async_sessionmaker[AsyncSession],
) -> PostgresGrievanceStore:
    """PostgreSQL grievance store with its schema created."""
    store = PostgresGrievanceStore(session_factory)
    await store.create_schema()
    return store


@pytest.fixture
def postgres_lifecycle(
    postgres_store: PostgresGrievanceStore, fake_time: FakeTimeAuthority
) -> GrievanceLifecycleService:
    """Lifecycle service backed by PostgreSQL."""
    return GrievanceLifecycleService(
        store=postgres_store,
        time_authority=fake_time,
        config=TEST_GRIEVANCE_CONFIG,
    )
