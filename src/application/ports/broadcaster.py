"""Session broadcaster port.

Fan-out of state-change events to every connected observer. Delivery
is best-effort and at-most-once per observer; there is no replay or
backlog on reconnect.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.events.session import SessionEvent


class BroadcasterProtocol(Protocol):
    """Protocol for publishing session events to observers.

    Implementations must never block on a slow observer. Callers still
    guard ``publish`` so that a failing channel cannot fail the state
    mutation that produced the event.
    """

    async def publish(self, event: SessionEvent) -> None:
        """Publish one event to all currently connected observers."""
        ...
