"""Persistence adapters."""

from grievance_engine.infrastructure.adapters.persistence.postgres_grievance_store import (
    GRIEVANCE_SCHEMA_STATEMENTS,
    PostgresGrievanceStore,
)

__all__ = ["GRIEVANCE_SCHEMA_STATEMENTS", "PostgresGrievanceStore"]
