"""Grievance lifecycle service: the only writer of grievance state.

Every operation runs inside one per-grievance transaction:

    load (locked) -> check -> build new Grievance -> stage grievance write
    -> stage vote / escalation record -> stage audit entry -> commit

so a transition and its audit entry are durable together or not at all,
and concurrent operations on the same grievance are serialized.

Input validation happens before the transaction opens. A rejected call
never reads under lock, never writes and never appends an audit entry.

Developer Golden Rules:
1. ACTOR IS EXPLICIT - Officials, reporters and voters are passed in,
   never created or guessed here
2. ONE ENTRY PER TRANSITION - Each accepted mutation stages exactly one
   audit entry
3. FAIL LOUD - Errors propagate; nothing here retries
"""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from structlog import get_logger
from uuid6 import uuid7

from grievance_engine.application.ports.grievance_metrics import (
    GrievanceMetricsProtocol,
)
from grievance_engine.application.ports.grievance_store import (
    GrievanceStoreProtocol,
    GrievanceTransactionProtocol,
)
from grievance_engine.application.ports.time_authority import TimeAuthorityProtocol
from grievance_engine.application.services.audit_log_service import AuditLogService
from grievance_engine.application.services.vote_aggregator_service import (
    VoteAggregator,
)
from grievance_engine.config.grievance_config import (
    DEFAULT_GRIEVANCE_CONFIG,
    GrievanceLifecycleConfig,
)
from grievance_engine.domain.errors import (
    AlreadyRespondedError,
    EscalationReasonTooShortError,
    GrievanceNotFoundError,
    GrievanceNumberConflictError,
    InvalidTransitionError,
    ValidationError,
)
from grievance_engine.domain.events.grievance import (
    AuditEventType,
    GrievanceEscalatedPayload,
    GrievanceSubmittedPayload,
    StatusUpdatedPayload,
    TaskAcceptedPayload,
)
from grievance_engine.domain.models.audit_entry import AuditEntry
from grievance_engine.domain.models.community_vote import VoteType
from grievance_engine.domain.models.escalation_record import EscalationRecord
from grievance_engine.domain.models.grievance import (
    Grievance,
    GrievanceStatus,
    UserSatisfaction,
    generate_grievance_number,
)
from grievance_engine.domain.models.grievance_intake import (
    GrievanceIntake,
    ReporterIdentity,
)
from grievance_engine.domain.services.authority_ladder import next_authority_level

logger = get_logger(__name__)


def _require_identity(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationError(field, "identity is required")
    return value


class GrievanceLifecycleService:
    """Orchestrates grievance status, escalation and feedback transitions.

    Example:
        >>> service = GrievanceLifecycleService(
        ...     store=store,
        ...     time_authority=time_authority,
        ... )
        >>> grievance = await service.create(intake, reporter)
        >>> grievance = await service.accept(grievance.id, "officer-7", 15)
    """

    def __init__(
        self,
        store: GrievanceStoreProtocol,
        time_authority: TimeAuthorityProtocol,
        config: GrievanceLifecycleConfig | None = None,
        metrics: GrievanceMetricsProtocol | None = None,
        audit_log: AuditLogService | None = None,
        vote_aggregator: VoteAggregator | None = None,
    ) -> None:
        """Initialize the lifecycle service.

        Args:
            store: Grievance store (unit of work per grievance).
            time_authority: Clock for all timestamps.
            config: Lifecycle policy. Defaults to DEFAULT_GRIEVANCE_CONFIG.
            metrics: Optional metrics sink. If not provided, nothing is counted.
            audit_log: Audit log service. Built from ``store`` if not provided.
            vote_aggregator: Vote aggregator. Built with the configured
                verification threshold if not provided.
        """
        self._store = store
        self._time = time_authority
        self._config = config or DEFAULT_GRIEVANCE_CONFIG
        self._metrics = metrics
        self._audit_log = audit_log or AuditLogService(store)
        self._votes = vote_aggregator or VoteAggregator(
            self._audit_log,
            verification_threshold=self._config.verification_threshold,
        )

    @property
    def config(self) -> GrievanceLifecycleConfig:
        return self._config

    # =========================================================================
    # Creation
    # =========================================================================

    async def create(
        self,
        intake: GrievanceIntake,
        reporter: ReporterIdentity | None,
    ) -> Grievance:
        """Create a new grievance in ``pending`` at ``panchayat`` level.

        Args:
            intake: Validated complaint fields from the intake layer.
            reporter: Authenticated reporter identity.

        Returns:
            The created grievance.

        Raises:
            ValidationError: Reporter identity or a required field is missing.
            GrievanceNumberConflictError: No free grievance number was found.
            StorageError: The store failed; nothing was written.
        """
        if reporter is None:
            raise ValidationError("reporter_id", "identity is required")
        _require_identity("reporter_id", reporter.reporter_id)
        missing = intake.missing_fields()
        if missing:
            logger.warning("grievance_create_rejected", missing_fields=missing)
            raise ValidationError(missing[0], "is required")

        now = self._time.now()
        grievance_number = await self._allocate_grievance_number(now.year)
        grievance = Grievance(
            id=uuid7(),
            grievance_number=grievance_number,
            title=intake.title,
            category=intake.category,
            description=intake.description,
            village_name=intake.village_name,
            reporter_id=reporter.reporter_id,
            reporter_name=reporter.full_name,
            reporter_mobile=reporter.mobile_number,
            priority=intake.priority,
            evidence_files=tuple(intake.evidence_files),
            voice_transcription=intake.voice_transcription,
            created_at=now,
            updated_at=now,
        )

        async with self._store.transaction(grievance.id) as tx:
            await tx.save_grievance(grievance)
            await self._audit_log.append(
                tx,
                GrievanceSubmittedPayload(
                    grievance_number=grievance.grievance_number,
                    title=grievance.title,
                    category=grievance.category,
                    village_name=grievance.village_name,
                    priority=grievance.priority.value,
                    reporter_id=grievance.reporter_id,
                ),
                recorded_at=now,
                actor_id=reporter.reporter_id,
            )

        self._record_transition(AuditEventType.GRIEVANCE_SUBMITTED)
        logger.info(
            "grievance_created",
            grievance_id=str(grievance.id),
            grievance_number=grievance.grievance_number,
            category=grievance.category,
            village_name=grievance.village_name,
        )
        return grievance

    async def _allocate_grievance_number(self, year: int) -> str:
        """Find a grievance number not yet in the store.

        The store's unique constraint still guards the commit against a
        concurrent create picking the same number.
        """
        candidate = ""
        for _ in range(self._config.grievance_number_max_attempts):
            candidate = generate_grievance_number(year)
            if not await self._store.grievance_number_exists(candidate):
                return candidate
        logger.error(
            "grievance_number_exhausted",
            attempts=self._config.grievance_number_max_attempts,
            year=year,
        )
        raise GrievanceNumberConflictError(candidate)

    # =========================================================================
    # Official actions
    # =========================================================================

    async def accept(
        self,
        grievance_id: UUID,
        official_id: str,
        timeline_days: int,
    ) -> Grievance:
        """Accept a pending grievance on behalf of an official.

        Args:
            grievance_id: Grievance to accept.
            official_id: Official taking the task.
            timeline_days: Days committed to; due date = now + timeline_days.

        Returns:
            The grievance in ``in_progress``.

        Raises:
            ValidationError: Blank official or non-positive timeline.
            GrievanceNotFoundError: Unknown grievance id.
            InvalidTransitionError: Grievance is not ``pending``.
        """
        _require_identity("official_id", official_id)
        if isinstance(timeline_days, bool) or timeline_days <= 0:
            raise ValidationError("timeline_days", "must be a positive number of days")

        log = logger.bind(
            grievance_id=str(grievance_id), official_id=official_id, operation="accept"
        )
        now = self._time.now()
        async with self._store.transaction(grievance_id) as tx:
            grievance = await self._load(tx)
            self._require_status(
                grievance, GrievanceStatus.PENDING, GrievanceStatus.IN_PROGRESS, "accept"
            )
            updated = grievance.with_status(
                GrievanceStatus.IN_PROGRESS,
                "accept",
                now,
                assigned_to=official_id,
                resolution_timeline_days=timeline_days,
                due_date=now + timedelta(days=timeline_days),
            )
            await tx.save_grievance(updated)
            await self._audit_log.append(
                tx,
                TaskAcceptedPayload(
                    grievance_number=updated.grievance_number,
                    official_id=official_id,
                    resolution_timeline_days=timeline_days,
                    due_date=updated.due_date or now,
                ),
                recorded_at=now,
                actor_id=official_id,
            )

        self._record_transition(AuditEventType.TASK_ACCEPTED)
        log.info("grievance_accepted", due_date=updated.due_date)
        return updated

    async def mark_resolved(
        self,
        grievance_id: UUID,
        notes: str | None = None,
        evidence: list[str] | tuple[str, ...] | None = None,
        actor_id: str | None = None,
    ) -> Grievance:
        """Mark in-progress work as resolved, pending verification.

        Args:
            grievance_id: Grievance to resolve.
            notes: Official's resolution notes.
            evidence: References to resolution evidence.
            actor_id: Official marking it resolved. Defaults to the
                assigned official.

        Returns:
            The grievance in ``pending_verification`` with a verification
            deadline of now + the configured window.

        Raises:
            GrievanceNotFoundError: Unknown grievance id.
            InvalidTransitionError: Grievance is not ``in_progress``.
        """
        if actor_id is not None:
            _require_identity("actor_id", actor_id)

        log = logger.bind(grievance_id=str(grievance_id), operation="mark_resolved")
        now = self._time.now()
        async with self._store.transaction(grievance_id) as tx:
            grievance = await self._load(tx)
            self._require_status(
                grievance,
                GrievanceStatus.IN_PROGRESS,
                GrievanceStatus.PENDING_VERIFICATION,
                "mark_resolved",
            )
            deadline = now + timedelta(days=self._config.verification_window_days)
            resolution_evidence = tuple(evidence or ())
            updated = grievance.with_status(
                GrievanceStatus.PENDING_VERIFICATION,
                "mark_resolved",
                now,
                resolved_at=now,
                resolution_notes=notes,
                resolution_evidence=resolution_evidence,
                verification_deadline=deadline,
            )
            await tx.save_grievance(updated)
            await self._audit_log.append(
                tx,
                StatusUpdatedPayload(
                    grievance_number=updated.grievance_number,
                    from_status=grievance.status.value,
                    to_status=updated.status.value,
                    resolved_at=now,
                    verification_deadline=deadline,
                    resolution_notes=notes,
                    resolution_evidence=resolution_evidence,
                ),
                recorded_at=now,
                actor_id=actor_id or grievance.assigned_to,
            )

        self._record_transition(AuditEventType.STATUS_UPDATED)
        log.info("grievance_marked_resolved", verification_deadline=deadline)
        return updated

    # =========================================================================
    # Reporter and community feedback
    # =========================================================================

    async def submit_user_satisfaction(
        self,
        grievance_id: UUID,
        satisfaction: UserSatisfaction | str,
    ) -> Grievance:
        """Record the reporter's one-time response to a resolution.

        ``satisfied`` resolves the grievance and ``not_satisfied`` reopens
        work, whatever its current status. Community voting is frozen
        afterwards.

        Raises:
            ValidationError: Unknown satisfaction value.
            GrievanceNotFoundError: Unknown grievance id.
            AlreadyRespondedError: The reporter has already responded.
        """
        response = self._parse_satisfaction(satisfaction)
        log = logger.bind(
            grievance_id=str(grievance_id),
            operation="submit_user_satisfaction",
            satisfaction=response.value,
        )
        now = self._time.now()
        async with self._store.transaction(grievance_id) as tx:
            grievance = await self._load(tx)
            if grievance.user_satisfaction is not None:
                log.warning(
                    "user_satisfaction_rejected",
                    existing=grievance.user_satisfaction.value,
                )
                raise AlreadyRespondedError(
                    grievance.id, grievance.user_satisfaction.value
                )
            updated = grievance.with_feedback(
                self._votes.satisfaction_target(response),
                "submit_user_satisfaction",
                now,
                user_satisfaction=response,
                user_satisfaction_at=now,
            )
            await tx.save_grievance(updated)
            await self._votes.record_satisfaction(
                tx,
                before=grievance,
                after=updated,
                satisfaction=response,
                recorded_at=now,
            )

        self._record_transition(AuditEventType.USER_SATISFACTION)
        log.info(
            "user_satisfaction_recorded",
            from_status=grievance.status.value,
            to_status=updated.status.value,
        )
        return updated

    async def submit_community_vote(
        self,
        grievance_id: UUID,
        vote_type: VoteType | str,
        voter_id: str,
        comments: str | None = None,
        evidence: list[str] | tuple[str, ...] | None = None,
    ) -> Grievance:
        """Record a community verify/dispute vote.

        Once the reporter has responded this is a no-op: the current
        grievance is returned and nothing is written. Otherwise exactly one
        tally grows by one; a dispute reopens work whatever the current
        status, and a verify vote that reaches the threshold resolves the
        grievance.

        Raises:
            ValidationError: Unknown vote type or blank voter.
            GrievanceNotFoundError: Unknown grievance id.
        """
        parsed_type = self._parse_vote_type(vote_type)
        _require_identity("voter_id", voter_id)
        log = logger.bind(
            grievance_id=str(grievance_id),
            operation="submit_community_vote",
            vote_type=parsed_type.value,
            voter_id=voter_id,
        )
        now = self._time.now()
        async with self._store.transaction(grievance_id) as tx:
            grievance = await self._load(tx)
            if grievance.has_reporter_feedback:
                applied = False
                updated = grievance
            else:
                applied = True
                tally = self._votes.tally(grievance, parsed_type)
                counts = {
                    "community_verify_count": tally.verify_count,
                    "community_dispute_count": tally.dispute_count,
                }
                if tally.requested_status is None:
                    updated = grievance.with_changes(now, **counts)
                else:
                    updated = grievance.with_feedback(
                        tally.requested_status, "submit_community_vote", now, **counts
                    )
                await tx.save_grievance(updated)
                await self._votes.record_vote(
                    tx,
                    before=grievance,
                    after=updated,
                    vote_type=parsed_type,
                    voter_id=voter_id,
                    recorded_at=now,
                    comments=comments,
                    evidence=tuple(evidence or ()),
                )

        if self._metrics is not None:
            self._metrics.record_community_vote(parsed_type.value, applied)
        if not applied:
            log.info(
                "community_vote_ignored",
                reason="reporter_already_responded",
                user_satisfaction=grievance.user_satisfaction.value,
            )
            return grievance

        self._record_transition(AuditEventType.COMMUNITY_VERIFICATION)
        log.info(
            "community_vote_recorded",
            verify_count=updated.community_verify_count,
            dispute_count=updated.community_dispute_count,
            from_status=grievance.status.value,
            to_status=updated.status.value,
        )
        return updated

    # =========================================================================
    # Escalation
    # =========================================================================

    async def escalate(
        self,
        grievance_id: UUID,
        reason: str,
        actor_id: str | None = None,
    ) -> Grievance:
        """Escalate a grievance one rung up the authority ladder.

        At the top rung the level stays put, but the escalation is still
        counted, recorded in the history and audited.

        Args:
            grievance_id: Grievance to escalate.
            reason: Why; at least the configured minimum length.
            actor_id: Escalating official. None means automatic escalation.

        Raises:
            ValidationError: Reason too short or blank actor.
            GrievanceNotFoundError: Unknown grievance id.
        """
        self._validate_reason(reason)
        if actor_id is not None:
            _require_identity("actor_id", actor_id)

        now = self._time.now()
        async with self._store.transaction(grievance_id) as tx:
            grievance = await self._load(tx)
            updated, record = await self._escalate_in_transaction(
                tx, grievance, reason=reason, actor_id=actor_id, now=now
            )

        self._after_escalation(grievance, record, operation="escalate")
        return updated

    async def escalate_if_overdue(
        self, grievance_id: UUID, reason: str
    ) -> Grievance | None:
        """Automatically escalate a grievance that is still overdue.

        The overdue check is repeated under the grievance's lock, so a
        grievance resolved, handed for verification or escalated since it
        was listed is left untouched.

        Returns:
            The escalated grievance, or None if it no longer qualifies.

        Raises:
            ValidationError: Reason too short.
            GrievanceNotFoundError: Unknown grievance id.
        """
        self._validate_reason(reason)

        now = self._time.now()
        async with self._store.transaction(grievance_id) as tx:
            grievance = await self._load(tx)
            in_window = (
                grievance.escalation_due_date is not None
                and grievance.escalation_due_date > now
            )
            if not grievance.is_overdue(now) or in_window:
                logger.info(
                    "overdue_escalation_skipped",
                    grievance_id=str(grievance_id),
                    status=grievance.status.value,
                    in_escalation_window=in_window,
                )
                return None
            updated, record = await self._escalate_in_transaction(
                tx, grievance, reason=reason, actor_id=None, now=now
            )

        self._after_escalation(grievance, record, operation="escalate_if_overdue")
        return updated

    async def cannot_resolve(
        self,
        grievance_id: UUID,
        reason: str,
        official_id: str,
    ) -> Grievance:
        """Record that an official cannot resolve a grievance, and escalate it.

        Sets ``can_resolve`` to False and escalates with ``official_id`` as
        the actor, all in one transaction with a single
        GRIEVANCE_ESCALATED audit entry.

        Raises:
            ValidationError: Reason too short or blank official.
            GrievanceNotFoundError: Unknown grievance id.
        """
        self._validate_reason(reason)
        _require_identity("official_id", official_id)

        now = self._time.now()
        async with self._store.transaction(grievance_id) as tx:
            grievance = await self._load(tx)
            updated, record = await self._escalate_in_transaction(
                tx,
                grievance,
                reason=reason,
                actor_id=official_id,
                now=now,
                can_resolve=False,
            )

        self._after_escalation(grievance, record, operation="cannot_resolve")
        return updated

    async def _escalate_in_transaction(
        self,
        tx: GrievanceTransactionProtocol,
        grievance: Grievance,
        *,
        reason: str,
        actor_id: str | None,
        now: datetime,
        can_resolve: bool | None = None,
    ) -> tuple[Grievance, EscalationRecord]:
        """Stage one escalation: grievance update, history record, audit entry."""
        to_level = next_authority_level(grievance.authority_level)
        changes: dict[str, object] = {
            "authority_level": to_level,
            "escalation_count": grievance.escalation_count + 1,
            "escalation_reason": reason,
            "escalation_due_date": now
            + timedelta(days=self._config.escalation_due_days),
            "is_escalated": True,
            "escalated_at": now,
        }
        if can_resolve is not None:
            changes["can_resolve"] = can_resolve
        updated = grievance.with_changes(now, **changes)

        record = EscalationRecord(
            id=uuid7(),
            grievance_id=grievance.id,
            from_level=grievance.authority_level,
            to_level=to_level,
            reason=reason,
            created_at=now,
            escalated_by=actor_id,
            auto_escalated=actor_id is None,
        )

        await tx.save_grievance(updated)
        await tx.add_escalation_record(record)
        await self._audit_log.append(
            tx,
            GrievanceEscalatedPayload(
                grievance_number=grievance.grievance_number,
                from_level=grievance.authority_level.value,
                to_level=to_level.value,
                reason=reason,
                escalation_count=updated.escalation_count,
                auto_escalated=record.auto_escalated,
                escalation_due_date=updated.escalation_due_date or now,
                escalated_by=actor_id,
                can_resolve=can_resolve,
            ),
            recorded_at=now,
            actor_id=actor_id,
        )
        return updated, record

    def _after_escalation(
        self, before: Grievance, record: EscalationRecord, *, operation: str
    ) -> None:
        self._record_transition(AuditEventType.GRIEVANCE_ESCALATED)
        if self._metrics is not None:
            self._metrics.record_escalation(
                record.to_level.value, record.auto_escalated
            )
        logger.info(
            "grievance_escalated",
            grievance_id=str(before.id),
            operation=operation,
            from_level=record.from_level.value,
            to_level=record.to_level.value,
            escalation_count=before.escalation_count + 1,
            auto_escalated=record.auto_escalated,
        )

    # =========================================================================
    # Reads owned by the engine
    # =========================================================================

    async def get_escalation_history(
        self, grievance_id: UUID
    ) -> list[EscalationRecord]:
        """Return a grievance's escalation history, most recent first.

        Raises:
            GrievanceNotFoundError: Unknown grievance id.
        """
        if await self._store.get(grievance_id) is None:
            raise GrievanceNotFoundError(grievance_id)
        records = await self._store.list_escalation_records(grievance_id)
        return list(reversed(records))

    async def get_audit_trail(self, grievance_id: UUID) -> list[AuditEntry]:
        """Return a grievance's audit entries, most recent first.

        Raises:
            GrievanceNotFoundError: Unknown grievance id.
        """
        return await self._audit_log.get_trail(grievance_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _load(self, tx: GrievanceTransactionProtocol) -> Grievance:
        grievance = await tx.load()
        if grievance is None:
            logger.warning("grievance_not_found", grievance_id=str(tx.grievance_id))
            raise GrievanceNotFoundError(tx.grievance_id)
        return grievance

    @staticmethod
    def _require_status(
        grievance: Grievance,
        required: GrievanceStatus,
        target: GrievanceStatus,
        operation: str,
    ) -> None:
        if grievance.status != required:
            logger.warning(
                "grievance_transition_rejected",
                grievance_id=str(grievance.id),
                operation=operation,
                status=grievance.status.value,
                required=required.value,
            )
            raise InvalidTransitionError(
                from_status=grievance.status,
                to_status=target,
                operation=operation,
                allowed_from=[required],
                grievance_id=grievance.id,
            )

    def _validate_reason(self, reason: str | None) -> None:
        minimum = self._config.min_escalation_reason_length
        length = len(reason.strip()) if reason else 0
        if length < minimum:
            logger.warning("escalation_rejected", reason_length=length, minimum=minimum)
            raise EscalationReasonTooShortError(length, minimum)

    @staticmethod
    def _parse_satisfaction(value: UserSatisfaction | str) -> UserSatisfaction:
        if isinstance(value, UserSatisfaction):
            return value
        try:
            return UserSatisfaction(value)
        except ValueError:
            allowed = [s.value for s in UserSatisfaction]
            raise ValidationError("satisfaction", f"must be one of {allowed}") from None

    @staticmethod
    def _parse_vote_type(value: VoteType | str) -> VoteType:
        if isinstance(value, VoteType):
            return value
        try:
            return VoteType(value)
        except ValueError:
            allowed = [v.value for v in VoteType]
            raise ValidationError("vote_type", f"must be one of {allowed}") from None

    def _record_transition(self, event_type: AuditEventType) -> None:
        if self._metrics is not None:
            self._metrics.record_transition(event_type.value)
