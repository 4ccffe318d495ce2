"""Infrastructure stubs for development and testing.

Available stubs:
- DocumentStoreStub: In-memory document store with failure injection
- RecordingBroadcasterStub: Records published session events

WARNING: These stubs are NOT for production use.
Production implementations are in src/infrastructure/adapters/.
"""

from src.infrastructure.stubs.broadcaster_stub import RecordingBroadcasterStub
from src.infrastructure.stubs.document_store_stub import DocumentStoreStub

__all__: list[str] = [
    "DocumentStoreStub",
    "RecordingBroadcasterStub",
]
