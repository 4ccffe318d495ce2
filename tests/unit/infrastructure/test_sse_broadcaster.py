"""Unit tests for SSEBroadcaster."""

from __future__ import annotations

from src.domain.events.session import SessionEvent
from src.infrastructure.adapters.broadcast.sse_broadcaster import SSEBroadcaster


class TestSSEBroadcaster:
    async def test_every_observer_receives_the_message(self) -> None:
        broadcaster = SSEBroadcaster()
        _, first = broadcaster.register_connection()
        _, second = broadcaster.register_connection()
        event = SessionEvent.create("endSession", {"membersReset": 3})

        await broadcaster.publish(event)

        for queue in (first, second):
            message = queue.get_nowait()
            assert message == {
                "type": "endSession",
                "membersReset": 3,
                "eventId": event.event_id,
            }

    async def test_full_queue_drops_without_blocking(self) -> None:
        broadcaster = SSEBroadcaster(queue_size=2)
        _, queue = broadcaster.register_connection()

        for _ in range(3):
            await broadcaster.publish(SessionEvent.create("break", {}))

        assert queue.qsize() == 2
        assert broadcaster.dropped_count == 1

    async def test_unregistered_observer_receives_nothing(self) -> None:
        broadcaster = SSEBroadcaster()
        connection_id, queue = broadcaster.register_connection()
        broadcaster.unregister_connection(connection_id)

        await broadcaster.publish(SessionEvent.create("break", {}))

        assert queue.empty()
        assert broadcaster.get_active_connection_count() == 0

    async def test_publish_without_observers(self) -> None:
        await SSEBroadcaster().publish(SessionEvent.create("break", {}))
