"""Metrics endpoint for Prometheus scraping.

Exposes HTTP request metrics and session counters (votes, proposals,
tally runs, current meeting) in Prometheus exposition format.
"""

from fastapi import APIRouter, Response

from src.bootstrap.metrics import get_metrics_exporter

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    description="Returns metrics in Prometheus exposition format for scraping.",
    response_class=Response,
    responses={
        200: {
            "description": "Metrics in Prometheus format",
            "content": {"text/plain": {}},
        }
    },
)
async def get_metrics() -> Response:
    """Get metrics in Prometheus format."""
    exporter = get_metrics_exporter()
    return Response(
        content=exporter.generate_metrics(),
        media_type=exporter.content_type,
    )
