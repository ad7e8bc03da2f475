"""Metrics endpoint for Prometheus scraping.

Exposes grievance lifecycle counters in Prometheus exposition format.
"""

from fastapi import APIRouter, Response

from grievance_engine.bootstrap.grievance import generate_grievance_metrics

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    description="Returns grievance lifecycle metrics in Prometheus exposition format.",
    response_class=Response,
    responses={
        200: {
            "description": "Metrics in Prometheus format",
            "content": {"text/plain": {}},
        }
    },
)
async def get_metrics() -> Response:
    """Get grievance metrics in Prometheus format.

    Counters exposed:
    - grievance_transitions_total
    - grievance_community_votes_total
    - grievance_escalations_total
    """
    content, content_type = generate_grievance_metrics()
    return Response(content=content, media_type=content_type)
