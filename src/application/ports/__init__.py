"""Application ports - Abstract interfaces for infrastructure adapters.

This module defines the contracts that infrastructure adapters must implement.
Ports enable dependency inversion and make the application layer testable.

Available ports:
- DocumentStoreProtocol: Durable document store with an atomic counter
- BroadcasterProtocol: Best-effort fan-out of session events
- PasswordHasherProtocol: Salted credential hashing
- TallyNotifierProtocol: Outbound tally summaries
- SessionMetricsProtocol: Operational counters
"""

from src.application.ports.broadcaster import BroadcasterProtocol
from src.application.ports.document_store import DocumentStoreProtocol
from src.application.ports.password_hasher import PasswordHasherProtocol
from src.application.ports.session_metrics import SessionMetricsProtocol
from src.application.ports.tally_notifier import TallyNotifierProtocol

__all__: list[str] = [
    "BroadcasterProtocol",
    "DocumentStoreProtocol",
    "PasswordHasherProtocol",
    "SessionMetricsProtocol",
    "TallyNotifierProtocol",
]
