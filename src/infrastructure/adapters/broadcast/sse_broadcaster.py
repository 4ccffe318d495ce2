"""Server-Sent Events broadcaster.

Each connected observer owns a bounded asyncio.Queue. Publishing puts
the event's wire message on every queue without waiting; an observer
whose queue is full misses the event. There is no replay: a client that
reconnects only sees events published after it registered.
"""

from __future__ import annotations

import asyncio
from typing import Any
from uuid import UUID, uuid4

import structlog

from src.domain.events.session import SessionEvent

log = structlog.get_logger()


class SSEBroadcaster:
    """BroadcasterProtocol implementation backing the SSE stream route."""

    def __init__(self, queue_size: int = 100) -> None:
        """Initialize the broadcaster.

        Args:
            queue_size: Events buffered per observer before dropping.
        """
        self._queue_size = queue_size
        self._connections: dict[UUID, asyncio.Queue[dict[str, Any]]] = {}
        self._dropped = 0

    def register_connection(self) -> tuple[UUID, asyncio.Queue[dict[str, Any]]]:
        """Register a new observer.

        Returns:
            Tuple of (connection_id, event_queue).
        """
        connection_id = uuid4()
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=self._queue_size)
        self._connections[connection_id] = queue
        log.info("sse_connection_registered", connection_id=str(connection_id))
        return connection_id, queue

    def unregister_connection(self, connection_id: UUID) -> None:
        if self._connections.pop(connection_id, None) is not None:
            log.info("sse_connection_closed", connection_id=str(connection_id))

    def get_active_connection_count(self) -> int:
        return len(self._connections)

    @property
    def dropped_count(self) -> int:
        """Events dropped because an observer's queue was full."""
        return self._dropped

    async def publish(self, event: SessionEvent) -> None:
        """Queue the event for every observer without blocking."""
        message = event.to_message()
        message["eventId"] = event.event_id
        delivered = 0
        for connection_id, queue in list(self._connections.items()):
            try:
                queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                self._dropped += 1
                log.warning(
                    "sse_event_dropped",
                    connection_id=str(connection_id),
                    event_type=event.event_type,
                )
        log.debug(
            "session_event_published",
            event_type=event.event_type,
            event_id=event.event_id,
            observers=delivered,
        )
