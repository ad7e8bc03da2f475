"""Grievance API routes.

FastAPI router for grievance intake, lifecycle transitions, community
verification, escalation and dashboard reads.

Error mapping (RFC 7807 bodies):
- ValidationError -> 400
- NotFoundError -> 404
- InvalidTransitionError -> 409
- AlreadyRespondedError -> 409
- AuditChainIntegrityError -> 500
- StorageError -> 503

Static paths (assigned, overdue, ...) are registered before /{grievance_id}.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request

from grievance_engine.api.dependencies.grievance import (
    get_audit_log_service,
    get_grievance_lifecycle_service,
    get_grievance_query_service,
)
from grievance_engine.api.models.grievance import (
    AcceptGrievanceRequest,
    AuditChainVerificationResponse,
    AuditEntryResponse,
    CannotResolveRequest,
    CommunityVoteRequest,
    CommunityVoteResponse,
    CreateGrievanceRequest,
    EscalateGrievanceRequest,
    EscalationRecordResponse,
    GrievanceErrorResponse,
    GrievanceListResponse,
    GrievanceResponse,
    ResolveGrievanceRequest,
    UserSatisfactionRequest,
)
from grievance_engine.application.services.audit_log_service import AuditLogService
from grievance_engine.application.services.grievance_lifecycle_service import (
    GrievanceLifecycleService,
)
from grievance_engine.application.services.grievance_query_service import (
    GrievanceQueryService,
)
from grievance_engine.domain.errors import (
    AlreadyRespondedError,
    AuditChainIntegrityError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from grievance_engine.domain.exceptions import GrievanceEngineError
from grievance_engine.domain.models.grievance_intake import (
    GrievanceIntake,
    ReporterIdentity,
)

router = APIRouter(prefix="/v1/grievances", tags=["grievances"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": GrievanceErrorResponse, "description": "Invalid input"},
    404: {"model": GrievanceErrorResponse, "description": "Grievance not found"},
    409: {
        "model": GrievanceErrorResponse,
        "description": "Transition not allowed or reporter already responded",
    },
    503: {"model": GrievanceErrorResponse, "description": "Storage unavailable"},
}


def _problem(exc: GrievanceEngineError, request: Request) -> HTTPException:
    """Translate an engine error into an RFC 7807 HTTPException."""
    extensions: dict[str, Any] = {}
    if isinstance(exc, ValidationError):
        status, slug, title = 400, "validation-failed", "Invalid Input"
        extensions["field"] = exc.field
    elif isinstance(exc, NotFoundError):
        status, slug, title = 404, "not-found", "Grievance Not Found"
    elif isinstance(exc, InvalidTransitionError):
        status, slug, title = 409, "invalid-transition", "Transition Not Allowed"
        extensions["operation"] = exc.operation
        extensions["current_status"] = exc.from_status.value
        extensions["allowed_from"] = [s.value for s in exc.allowed_from]
    elif isinstance(exc, AlreadyRespondedError):
        status, slug, title = 409, "already-responded", "Reporter Already Responded"
        extensions["existing_response"] = exc.existing_response
    elif isinstance(exc, AuditChainIntegrityError):
        status, slug, title = 500, "audit-chain-broken", "Audit Chain Integrity Failure"
        extensions["sequence"] = exc.sequence
    elif isinstance(exc, StorageError):
        status, slug, title = 503, "storage-unavailable", "Storage Unavailable"
    else:
        status, slug, title = 500, "engine-error", "Grievance Engine Error"

    return HTTPException(
        status_code=status,
        detail={
            "type": f"urn:grievance-engine:grievance:{slug}",
            "title": title,
            "status": status,
            "detail": str(exc),
            "instance": str(request.url),
            **extensions,
        },
    )


# =============================================================================
# Intake and listings
# =============================================================================


@router.post(
    "",
    response_model=GrievanceResponse,
    status_code=201,
    responses=_ERROR_RESPONSES,
    summary="File a grievance",
)
async def create_grievance(
    request_data: CreateGrievanceRequest,
    request: Request,
    service: GrievanceLifecycleService = Depends(get_grievance_lifecycle_service),
) -> GrievanceResponse:
    """File a new grievance. It starts pending at panchayat level."""
    intake = GrievanceIntake(
        title=request_data.title,
        category=request_data.category.value,
        description=request_data.description,
        village_name=request_data.village_name,
        priority=request_data.priority,
        evidence_files=tuple(request_data.evidence_files),
        voice_transcription=request_data.voice_transcription,
    )
    reporter = ReporterIdentity(
        reporter_id=request_data.reporter_id,
        full_name=request_data.reporter_name,
        mobile_number=request_data.reporter_mobile,
    )
    try:
        grievance = await service.create(intake, reporter)
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return GrievanceResponse.from_domain(grievance)


@router.get("", response_model=GrievanceListResponse, summary="List all grievances")
async def list_grievances(
    request: Request,
    queries: GrievanceQueryService = Depends(get_grievance_query_service),
) -> GrievanceListResponse:
    try:
        return GrievanceListResponse.from_domain(await queries.list_all())
    except GrievanceEngineError as e:
        raise _problem(e, request) from None


@router.get(
    "/assigned",
    response_model=GrievanceListResponse,
    summary="Grievances with open work (pending or in progress)",
)
async def list_assigned(
    request: Request,
    queries: GrievanceQueryService = Depends(get_grievance_query_service),
) -> GrievanceListResponse:
    try:
        return GrievanceListResponse.from_domain(await queries.list_assigned())
    except GrievanceEngineError as e:
        raise _problem(e, request) from None


@router.get(
    "/overdue",
    response_model=GrievanceListResponse,
    summary="Open grievances past their due date",
)
async def list_overdue(
    request: Request,
    queries: GrievanceQueryService = Depends(get_grievance_query_service),
) -> GrievanceListResponse:
    try:
        return GrievanceListResponse.from_domain(await queries.list_overdue())
    except GrievanceEngineError as e:
        raise _problem(e, request) from None


@router.get(
    "/disputed",
    response_model=GrievanceListResponse,
    summary="Grievances the reporter rejected or the community disputed",
)
async def list_disputed(
    request: Request,
    queries: GrievanceQueryService = Depends(get_grievance_query_service),
) -> GrievanceListResponse:
    try:
        return GrievanceListResponse.from_domain(await queries.list_disputed())
    except GrievanceEngineError as e:
        raise _problem(e, request) from None


@router.get(
    "/pending-verification",
    response_model=GrievanceListResponse,
    summary="Grievances awaiting verification",
)
async def list_pending_verification(
    request: Request,
    queries: GrievanceQueryService = Depends(get_grievance_query_service),
) -> GrievanceListResponse:
    try:
        return GrievanceListResponse.from_domain(await queries.list_pending_verification())
    except GrievanceEngineError as e:
        raise _problem(e, request) from None


@router.get(
    "/by-reporter/{reporter_id}",
    response_model=GrievanceListResponse,
    summary="Grievances filed by a reporter",
)
async def list_by_reporter(
    reporter_id: str,
    request: Request,
    queries: GrievanceQueryService = Depends(get_grievance_query_service),
) -> GrievanceListResponse:
    try:
        return GrievanceListResponse.from_domain(await queries.list_by_reporter(reporter_id))
    except GrievanceEngineError as e:
        raise _problem(e, request) from None


@router.get(
    "/by-official/{official_id}",
    response_model=GrievanceListResponse,
    summary="Grievances assigned to an official",
)
async def list_by_official(
    official_id: str,
    request: Request,
    queries: GrievanceQueryService = Depends(get_grievance_query_service),
) -> GrievanceListResponse:
    try:
        return GrievanceListResponse.from_domain(await queries.list_by_official(official_id))
    except GrievanceEngineError as e:
        raise _problem(e, request) from None


@router.get(
    "/{grievance_id}",
    response_model=GrievanceResponse,
    responses=_ERROR_RESPONSES,
    summary="Get a grievance",
)
async def get_grievance(
    grievance_id: UUID,
    request: Request,
    queries: GrievanceQueryService = Depends(get_grievance_query_service),
) -> GrievanceResponse:
    try:
        return GrievanceResponse.from_domain(await queries.get_grievance(grievance_id))
    except GrievanceEngineError as e:
        raise _problem(e, request) from None


# =============================================================================
# Transitions
# =============================================================================


@router.post(
    "/{grievance_id}/accept",
    response_model=GrievanceResponse,
    responses=_ERROR_RESPONSES,
    summary="Accept a pending grievance",
)
async def accept_grievance(
    grievance_id: UUID,
    request_data: AcceptGrievanceRequest,
    request: Request,
    service: GrievanceLifecycleService = Depends(get_grievance_lifecycle_service),
) -> GrievanceResponse:
    try:
        grievance = await service.accept(
            grievance_id, request_data.official_id, request_data.timeline_days
        )
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return GrievanceResponse.from_domain(grievance)


@router.post(
    "/{grievance_id}/resolve",
    response_model=GrievanceResponse,
    responses=_ERROR_RESPONSES,
    summary="Mark in-progress work as resolved",
)
async def resolve_grievance(
    grievance_id: UUID,
    request_data: ResolveGrievanceRequest,
    request: Request,
    service: GrievanceLifecycleService = Depends(get_grievance_lifecycle_service),
) -> GrievanceResponse:
    try:
        grievance = await service.mark_resolved(
            grievance_id,
            notes=request_data.notes,
            evidence=request_data.evidence,
            actor_id=request_data.actor_id,
        )
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return GrievanceResponse.from_domain(grievance)


@router.post(
    "/{grievance_id}/user-satisfaction",
    response_model=GrievanceResponse,
    responses=_ERROR_RESPONSES,
    summary="Record the reporter's satisfaction (once)",
)
async def submit_user_satisfaction(
    grievance_id: UUID,
    request_data: UserSatisfactionRequest,
    request: Request,
    service: GrievanceLifecycleService = Depends(get_grievance_lifecycle_service),
) -> GrievanceResponse:
    try:
        grievance = await service.submit_user_satisfaction(
            grievance_id, request_data.satisfaction
        )
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return GrievanceResponse.from_domain(grievance)


@router.post(
    "/{grievance_id}/community-votes",
    response_model=GrievanceResponse,
    responses=_ERROR_RESPONSES,
    summary="Verify or dispute a resolution",
    description=(
        "Ignored (no record, grievance returned unchanged) once the reporter "
        "has responded."
    ),
)
async def submit_community_vote(
    grievance_id: UUID,
    request_data: CommunityVoteRequest,
    request: Request,
    service: GrievanceLifecycleService = Depends(get_grievance_lifecycle_service),
) -> GrievanceResponse:
    try:
        grievance = await service.submit_community_vote(
            grievance_id,
            request_data.vote_type,
            request_data.voter_id,
            comments=request_data.comments,
            evidence=request_data.evidence,
        )
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return GrievanceResponse.from_domain(grievance)


@router.post(
    "/{grievance_id}/escalate",
    response_model=GrievanceResponse,
    responses=_ERROR_RESPONSES,
    summary="Escalate one level up the authority ladder",
)
async def escalate_grievance(
    grievance_id: UUID,
    request_data: EscalateGrievanceRequest,
    request: Request,
    service: GrievanceLifecycleService = Depends(get_grievance_lifecycle_service),
) -> GrievanceResponse:
    try:
        grievance = await service.escalate(
            grievance_id, request_data.reason, actor_id=request_data.actor_id
        )
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return GrievanceResponse.from_domain(grievance)


@router.post(
    "/{grievance_id}/cannot-resolve",
    response_model=GrievanceResponse,
    responses=_ERROR_RESPONSES,
    summary="Declare a grievance beyond the official's authority",
)
async def cannot_resolve_grievance(
    grievance_id: UUID,
    request_data: CannotResolveRequest,
    request: Request,
    service: GrievanceLifecycleService = Depends(get_grievance_lifecycle_service),
) -> GrievanceResponse:
    try:
        grievance = await service.cannot_resolve(
            grievance_id, request_data.reason, request_data.official_id
        )
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return GrievanceResponse.from_domain(grievance)


# =============================================================================
# Per-grievance history
# =============================================================================


@router.get(
    "/{grievance_id}/community-votes",
    response_model=list[CommunityVoteResponse],
    responses=_ERROR_RESPONSES,
    summary="Community votes, most recent first",
)
async def list_community_votes(
    grievance_id: UUID,
    request: Request,
    queries: GrievanceQueryService = Depends(get_grievance_query_service),
) -> list[CommunityVoteResponse]:
    try:
        votes = await queries.list_votes(grievance_id)
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return [CommunityVoteResponse.from_domain(v) for v in votes]


@router.get(
    "/{grievance_id}/escalation-history",
    response_model=list[EscalationRecordResponse],
    responses=_ERROR_RESPONSES,
    summary="Escalation history, most recent first",
)
async def get_escalation_history(
    grievance_id: UUID,
    request: Request,
    service: GrievanceLifecycleService = Depends(get_grievance_lifecycle_service),
) -> list[EscalationRecordResponse]:
    try:
        records = await service.get_escalation_history(grievance_id)
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return [EscalationRecordResponse.from_domain(r) for r in records]


@router.get(
    "/{grievance_id}/audit-trail",
    response_model=list[AuditEntryResponse],
    responses=_ERROR_RESPONSES,
    summary="Audit trail, most recent first",
)
async def get_audit_trail(
    grievance_id: UUID,
    request: Request,
    service: GrievanceLifecycleService = Depends(get_grievance_lifecycle_service),
) -> list[AuditEntryResponse]:
    try:
        entries = await service.get_audit_trail(grievance_id)
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return [AuditEntryResponse.from_domain(entry) for entry in entries]


@router.get(
    "/{grievance_id}/audit-trail/verify",
    response_model=AuditChainVerificationResponse,
    responses={
        **_ERROR_RESPONSES,
        500: {"model": GrievanceErrorResponse, "description": "Audit chain broken"},
    },
    summary="Recompute and check the audit hash chain",
)
async def verify_audit_trail(
    grievance_id: UUID,
    request: Request,
    audit_log: AuditLogService = Depends(get_audit_log_service),
) -> AuditChainVerificationResponse:
    try:
        count = await audit_log.verify_chain(grievance_id)
    except GrievanceEngineError as e:
        raise _problem(e, request) from None
    return AuditChainVerificationResponse(grievance_id=grievance_id, entries_verified=count)
