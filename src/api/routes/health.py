"""Health check endpoint for the parliament session API."""

from fastapi import APIRouter, Depends

from src.api.dependencies.session import get_sse_broadcaster
from src.api.models.health import HealthResponse
from src.bootstrap.session import get_document_store
from src.infrastructure.adapters.broadcast.sse_broadcaster import SSEBroadcaster
from src.infrastructure.adapters.persistence.postgres_document_store import (
    PostgresDocumentStore,
)

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    broadcaster: SSEBroadcaster = Depends(get_sse_broadcaster),
) -> HealthResponse:
    """Return health status.

    Returns:
        Health status with 200 OK, the active store backend and the
        number of connected event stream clients.
    """
    store = get_document_store()
    backend = "postgres" if isinstance(store, PostgresDocumentStore) else "memory"
    return HealthResponse(
        status="healthy",
        store=backend,
        observers=broadcaster.get_active_connection_count(),
    )
