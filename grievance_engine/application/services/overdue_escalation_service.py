"""Overdue escalation: opt-in automatic escalation of overdue grievances.

The query service only detects overdue grievances. This service is the
explicit policy that acts on them: each overdue grievance is escalated with
a system reason and no actor, so the escalation is recorded as automatic.
A grievance that was escalated recently (its escalation due date has not
passed yet) is left for the authority it was escalated to. Both checks are
repeated under the grievance lock, so a grievance resolved after the
overdue listing is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from structlog import get_logger

from grievance_engine.application.ports.time_authority import TimeAuthorityProtocol
from grievance_engine.application.services.grievance_lifecycle_service import (
    GrievanceLifecycleService,
)
from grievance_engine.application.services.grievance_query_service import (
    GrievanceQueryService,
)
from grievance_engine.domain.exceptions import GrievanceEngineError
from grievance_engine.domain.models.grievance import Grievance

logger = get_logger(__name__)

OVERDUE_ESCALATION_REASON_TEMPLATE: str = (
    "Automatic escalation: grievance {number} was accepted with a resolution "
    "timeline of {days} day(s) and passed its due date of {due} without being "
    "resolved by the assigned official."
)


@dataclass(frozen=True)
class SweepResult:
    """Outcome of one overdue sweep.

    Attributes:
        escalated: Grievances escalated in this sweep.
        skipped: Overdue grievances still within an escalation window, or no
            longer overdue once locked.
        failed: Grievances whose escalation raised, with the error message.
    """

    escalated: tuple[UUID, ...] = field(default=())
    skipped: tuple[UUID, ...] = field(default=())
    failed: tuple[tuple[UUID, str], ...] = field(default=())


class OverdueEscalationService:
    """Escalates grievances that are past their due date."""

    def __init__(
        self,
        lifecycle: GrievanceLifecycleService,
        queries: GrievanceQueryService,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._lifecycle = lifecycle
        self._queries = queries
        self._time = time_authority

    def build_reason(self, grievance: Grievance) -> str:
        """System reason text for escalating ``grievance``.

        Padded to the configured minimum reason length.
        """
        reason = OVERDUE_ESCALATION_REASON_TEMPLATE.format(
            number=grievance.grievance_number,
            days=grievance.resolution_timeline_days or 0,
            due=grievance.due_date.isoformat() if grievance.due_date else "unknown",
        )
        minimum = self._lifecycle.config.min_escalation_reason_length
        return reason.ljust(minimum, ".") if len(reason) < minimum else reason

    async def sweep(self) -> SweepResult:
        """Escalate every overdue grievance once.

        A grievance that fails to escalate is logged and skipped; the sweep
        carries on with the rest.

        Returns:
            SweepResult listing escalated, skipped and failed grievances.
        """
        now = self._time.now()
        started = self._time.monotonic()
        overdue = await self._queries.list_overdue()
        log = logger.bind(sweep_at=now.isoformat(), overdue=len(overdue))
        log.info("overdue_sweep_started")

        escalated: list[UUID] = []
        skipped: list[UUID] = []
        failed: list[tuple[UUID, str]] = []

        for grievance in overdue:
            if grievance.escalation_due_date is not None and grievance.escalation_due_date > now:
                skipped.append(grievance.id)
                continue
            try:
                escalated_grievance = await self._lifecycle.escalate_if_overdue(
                    grievance.id, self.build_reason(grievance)
                )
            except GrievanceEngineError as exc:
                log.warning(
                    "overdue_escalation_failed",
                    grievance_id=str(grievance.id),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                failed.append((grievance.id, str(exc)))
                continue
            if escalated_grievance is None:
                skipped.append(grievance.id)
                continue
            escalated.append(grievance.id)

        log.info(
            "overdue_sweep_completed",
            escalated=len(escalated),
            skipped=len(skipped),
            failed=len(failed),
            duration_ms=round((self._time.monotonic() - started) * 1000, 2),
        )
        return SweepResult(
            escalated=tuple(escalated),
            skipped=tuple(skipped),
            failed=tuple(failed),
        )
