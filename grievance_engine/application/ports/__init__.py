"""Application ports - Abstract interfaces for infrastructure adapters.

Available ports:
- GrievanceStoreProtocol: Grievance, vote, escalation and audit persistence
- GrievanceTransactionProtocol: Per-grievance unit of work
- GrievanceMetricsProtocol: Lifecycle counters
- TimeAuthorityProtocol: Injected clock
"""

from grievance_engine.application.ports.grievance_metrics import (
    GrievanceMetricsProtocol,
)
from grievance_engine.application.ports.grievance_store import (
    GrievanceStoreProtocol,
    GrievanceTransactionProtocol,
)
from grievance_engine.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = [
    "GrievanceMetricsProtocol",
    "GrievanceStoreProtocol",
    "GrievanceTransactionProtocol",
    "TimeAuthorityProtocol",
]
