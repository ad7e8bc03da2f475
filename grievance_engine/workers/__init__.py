"""Background workers."""

from grievance_engine.workers.overdue_escalation_worker import OverdueEscalationWorker

__all__ = ["OverdueEscalationWorker"]
