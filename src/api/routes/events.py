"""Server-Sent Events stream of session changes.

Every event is delivered as an SSE message whose ``event`` field is the
session event type (seatUpdate, proposalUpdate, votingEnded, ...) and
whose ``data`` is the JSON message ``{"type", "payload", "eventId"}``.
"""

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from src.api.dependencies.session import get_sse_broadcaster
from src.infrastructure.adapters.broadcast.sse_broadcaster import SSEBroadcaster

router = APIRouter(prefix="/v1/events", tags=["events"])

KEEPALIVE_SECONDS = 30.0


@router.get("/stream", summary="Subscribe to session events")
async def stream_events(
    broadcaster: SSEBroadcaster = Depends(get_sse_broadcaster),
) -> EventSourceResponse:
    """Stream session events via Server-Sent Events.

    No authentication required. There is no replay: only events
    published after the connection opens are delivered. A keepalive
    comment is sent every 30 seconds.
    """
    connection_id, queue = broadcaster.register_connection()

    async def event_generator() -> AsyncIterator[dict[str, str]]:
        try:
            while True:
                try:
                    message: dict[str, Any] = await asyncio.wait_for(
                        queue.get(), timeout=KEEPALIVE_SECONDS
                    )
                    yield {
                        "event": message["type"],
                        "data": json.dumps(message),
                        "id": message["eventId"],
                    }
                except asyncio.TimeoutError:
                    yield {"comment": "keepalive"}
        finally:
            broadcaster.unregister_connection(connection_id)

    return EventSourceResponse(
        event_generator(),
        headers={
            "X-Accel-Buffering": "no",  # Disable nginx buffering
            "Cache-Control": "no-cache",
        },
    )
