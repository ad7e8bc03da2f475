"""Infrastructure stubs for development and testing.

Available stubs:
- GrievanceStoreStub: In-memory grievance store with per-grievance locks,
  staged commits and failure injection

WARNING: These stubs are NOT for production use.
Production implementations are in grievance_engine/infrastructure/adapters/.
"""

from grievance_engine.infrastructure.stubs.grievance_store_stub import GrievanceStoreStub

__all__ = ["GrievanceStoreStub"]
