"""
Infrastructure layer - adapters for the grievance engine.

This layer contains:
- PostgreSQL grievance store (SQLAlchemy async)
- In-memory stubs for development and tests
- System clock, structured logging and Prometheus metrics

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""

__all__: list[str] = []
