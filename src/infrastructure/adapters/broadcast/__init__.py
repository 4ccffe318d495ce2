"""Event fan-out adapters."""

from src.infrastructure.adapters.broadcast.sse_broadcaster import SSEBroadcaster

__all__: list[str] = ["SSEBroadcaster"]
