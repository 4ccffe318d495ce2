"""Recording broadcaster stub.

Keeps every published event in order so tests can assert on the event
stream without a live fan-out channel.
"""

from __future__ import annotations

from src.application.ports.broadcaster import BroadcasterProtocol
from src.domain.events.session import SessionEvent


class RecordingBroadcasterStub(BroadcasterProtocol):
    """In-memory broadcaster that records instead of delivering.

    Attributes:
        events: Published events, oldest first.
        fail: When True, ``publish`` raises to simulate a broken channel.
    """

    def __init__(self, fail: bool = False) -> None:
        self.events: list[SessionEvent] = []
        self.fail = fail

    def clear(self) -> None:
        """Clear all recorded events for test cleanup."""
        self.events.clear()

    async def publish(self, event: SessionEvent) -> None:
        if self.fail:
            raise ConnectionError("Broadcast channel unavailable")
        self.events.append(event)

    def of_type(self, event_type: str) -> list[SessionEvent]:
        """Recorded events of one type."""
        return [event for event in self.events if event.event_type == event_type]

    def messages(self) -> list[dict]:
        """Recorded events in their wire shape."""
        return [event.to_message() for event in self.events]
