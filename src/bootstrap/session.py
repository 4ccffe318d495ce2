"""Bootstrap wiring for the session services.

Every getter returns a process-wide singleton. The document store is
PostgreSQL when DATABASE_URL is set and the in-memory stub otherwise.
VoteLedgerService and TallyService share one ballot lock.
"""

from __future__ import annotations

import asyncio
import os

from structlog import get_logger

from src.application.ports.broadcaster import BroadcasterProtocol
from src.application.ports.document_store import DocumentStoreProtocol
from src.application.ports.password_hasher import PasswordHasherProtocol
from src.application.ports.tally_notifier import TallyNotifierProtocol
from src.application.services.chamber_service import ChamberService
from src.application.services.member_service import MemberService
from src.application.services.proposal_sequencer_service import (
    ProposalSequencerService,
)
from src.application.services.seat_registry_service import SeatRegistryService
from src.application.services.system_parameters_service import (
    SystemParametersService,
)
from src.application.services.tally_service import TallyService
from src.application.services.vote_ledger_service import VoteLedgerService
from src.bootstrap.database import get_session_factory
from src.bootstrap.metrics import get_metrics_collector
from src.config.session_config import SessionConfig
from src.infrastructure.adapters.broadcast.sse_broadcaster import SSEBroadcaster
from src.infrastructure.adapters.notification.webhook_tally_notifier import (
    WebhookTallyNotifier,
)
from src.infrastructure.adapters.persistence.postgres_document_store import (
    PostgresDocumentStore,
)
from src.infrastructure.adapters.security.pbkdf2_password_hasher import (
    Pbkdf2PasswordHasher,
)
from src.infrastructure.stubs.document_store_stub import DocumentStoreStub

logger = get_logger(__name__)

_config: SessionConfig | None = None
_document_store: DocumentStoreProtocol | None = None
_broadcaster: SSEBroadcaster | None = None
_password_hasher: PasswordHasherProtocol | None = None
_ballot_lock: asyncio.Lock | None = None
_parameters_service: SystemParametersService | None = None
_member_service: MemberService | None = None
_seat_registry_service: SeatRegistryService | None = None
_proposal_service: ProposalSequencerService | None = None
_vote_ledger_service: VoteLedgerService | None = None
_tally_service: TallyService | None = None
_chamber_service: ChamberService | None = None


def get_session_config() -> SessionConfig:
    """Get session configuration, read from the environment once."""
    global _config
    if _config is None:
        _config = SessionConfig.from_environment()
    return _config


def get_document_store() -> DocumentStoreProtocol:
    """Get the document store (PostgreSQL if DATABASE_URL is set)."""
    global _document_store
    if _document_store is None:
        if os.environ.get("DATABASE_URL"):
            _document_store = PostgresDocumentStore(get_session_factory())
        else:
            logger.warning(
                "DATABASE_URL not set, using in-memory document store",
                component="session_bootstrap",
            )
            _document_store = DocumentStoreStub()
    return _document_store


def get_sse_broadcaster() -> SSEBroadcaster:
    global _broadcaster
    if _broadcaster is None:
        _broadcaster = SSEBroadcaster(
            queue_size=get_session_config().broadcast_queue_size
        )
    return _broadcaster


def get_broadcaster() -> BroadcasterProtocol:
    return get_sse_broadcaster()


def get_password_hasher() -> PasswordHasherProtocol:
    global _password_hasher
    if _password_hasher is None:
        _password_hasher = Pbkdf2PasswordHasher()
    return _password_hasher


def get_ballot_lock() -> asyncio.Lock:
    """Lock serializing vote submission against end-of-voting closes."""
    global _ballot_lock
    if _ballot_lock is None:
        _ballot_lock = asyncio.Lock()
    return _ballot_lock


def get_tally_notifier() -> TallyNotifierProtocol | None:
    """Webhook notifier, or None when TALLY_WEBHOOK_URL is unset."""
    config = get_session_config()
    if config.tally_webhook_url is None:
        return None
    return WebhookTallyNotifier(
        config.tally_webhook_url, secret=config.tally_webhook_secret
    )


def get_system_parameters_service() -> SystemParametersService:
    global _parameters_service
    if _parameters_service is None:
        _parameters_service = SystemParametersService(get_document_store())
    return _parameters_service


def get_member_service() -> MemberService:
    global _member_service
    if _member_service is None:
        _member_service = MemberService(
            store=get_document_store(),
            broadcaster=get_broadcaster(),
            password_hasher=get_password_hasher(),
            config=get_session_config(),
        )
    return _member_service


def get_seat_registry_service() -> SeatRegistryService:
    global _seat_registry_service
    if _seat_registry_service is None:
        _seat_registry_service = SeatRegistryService(
            store=get_document_store(),
            broadcaster=get_broadcaster(),
            config=get_session_config(),
        )
    return _seat_registry_service


def get_proposal_sequencer_service() -> ProposalSequencerService:
    global _proposal_service
    if _proposal_service is None:
        _proposal_service = ProposalSequencerService(
            store=get_document_store(),
            parameters=get_system_parameters_service(),
            ballot_lock=get_ballot_lock(),
            broadcaster=get_broadcaster(),
            metrics=get_metrics_collector(),
        )
    return _proposal_service


def get_vote_ledger_service() -> VoteLedgerService:
    global _vote_ledger_service
    if _vote_ledger_service is None:
        _vote_ledger_service = VoteLedgerService(
            store=get_document_store(),
            ballot_lock=get_ballot_lock(),
            metrics=get_metrics_collector(),
        )
    return _vote_ledger_service


def get_tally_service() -> TallyService:
    global _tally_service
    if _tally_service is None:
        _tally_service = TallyService(
            store=get_document_store(),
            parameters=get_system_parameters_service(),
            ballot_lock=get_ballot_lock(),
            broadcaster=get_broadcaster(),
            config=get_session_config(),
            metrics=get_metrics_collector(),
            notifier=get_tally_notifier(),
        )
    return _tally_service


def get_chamber_service() -> ChamberService:
    global _chamber_service
    if _chamber_service is None:
        _chamber_service = ChamberService(
            store=get_document_store(),
            parameters=get_system_parameters_service(),
            broadcaster=get_broadcaster(),
        )
    return _chamber_service


async def initialize_session_store() -> None:
    """Create the schema (PostgreSQL) and default system parameters."""
    store = get_document_store()
    if isinstance(store, PostgresDocumentStore):
        await store.ensure_schema()
    await get_system_parameters_service().ensure_initialized()


def reset_session_services() -> None:
    """Reset all singletons (testing cleanup)."""
    global _config, _document_store, _broadcaster, _password_hasher, _ballot_lock
    global _parameters_service, _member_service, _seat_registry_service
    global _proposal_service, _vote_ledger_service, _tally_service, _chamber_service
    _config = None
    _document_store = None
    _broadcaster = None
    _password_hasher = None
    _ballot_lock = None
    _parameters_service = None
    _member_service = None
    _seat_registry_service = None
    _proposal_service = None
    _vote_ledger_service = None
    _tally_service = None
    _chamber_service = None
