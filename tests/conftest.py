"""
Pytest configuration and shared fixtures for parliament session tests.

Testing Standards:
- Async tests run in pytest-asyncio auto mode (configured in pyproject.toml)
- Use AsyncMock for async function mocking
- Services are wired against DocumentStoreStub and RecordingBroadcasterStub
- Unit tests go in tests/unit/
"""

from __future__ import annotations

import asyncio

import pytest

from src.application.dtos.identity import ActorContext
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
from src.config.session_config import SessionConfig
from src.domain.models.member import MemberRole
from src.infrastructure.adapters.security.pbkdf2_password_hasher import (
    Pbkdf2PasswordHasher,
)
from src.infrastructure.stubs import DocumentStoreStub, RecordingBroadcasterStub
from tests.helpers.members import seed_member


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from src import __version__

    return __version__


# =============================================================================
# Infrastructure doubles
# =============================================================================


@pytest.fixture
def store() -> DocumentStoreStub:
    return DocumentStoreStub()


@pytest.fixture
def broadcaster() -> RecordingBroadcasterStub:
    return RecordingBroadcasterStub()


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig()


@pytest.fixture
def hasher() -> Pbkdf2PasswordHasher:
    """Low iteration count keeps credential tests fast."""
    return Pbkdf2PasswordHasher(iterations=1_000)


@pytest.fixture
def ballot_lock() -> asyncio.Lock:
    return asyncio.Lock()


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def parameters(store: DocumentStoreStub) -> SystemParametersService:
    return SystemParametersService(store)


@pytest.fixture
def member_service(
    store: DocumentStoreStub,
    broadcaster: RecordingBroadcasterStub,
    hasher: Pbkdf2PasswordHasher,
    session_config: SessionConfig,
) -> MemberService:
    return MemberService(store, broadcaster, hasher, session_config)


@pytest.fixture
def seat_registry(
    store: DocumentStoreStub,
    broadcaster: RecordingBroadcasterStub,
    session_config: SessionConfig,
) -> SeatRegistryService:
    return SeatRegistryService(store, broadcaster, session_config)


@pytest.fixture
def sequencer(
    store: DocumentStoreStub,
    parameters: SystemParametersService,
    ballot_lock: asyncio.Lock,
    broadcaster: RecordingBroadcasterStub,
) -> ProposalSequencerService:
    return ProposalSequencerService(store, parameters, ballot_lock, broadcaster)


@pytest.fixture
def ledger(store: DocumentStoreStub, ballot_lock: asyncio.Lock) -> VoteLedgerService:
    return VoteLedgerService(store, ballot_lock)


@pytest.fixture
def tally_service(
    store: DocumentStoreStub,
    parameters: SystemParametersService,
    ballot_lock: asyncio.Lock,
    broadcaster: RecordingBroadcasterStub,
    session_config: SessionConfig,
) -> TallyService:
    return TallyService(store, parameters, ballot_lock, broadcaster, session_config)


@pytest.fixture
def chamber(
    store: DocumentStoreStub,
    parameters: SystemParametersService,
    broadcaster: RecordingBroadcasterStub,
) -> ChamberService:
    return ChamberService(store, parameters, broadcaster)


# =============================================================================
# Seeded members
# =============================================================================


@pytest.fixture
async def chair(store: DocumentStoreStub) -> ActorContext:
    return await seed_member(
        store, member_id="chair", role=MemberRole.CHAIR, affiliation="NEZ", strength=0
    )


@pytest.fixture
async def alice(store: DocumentStoreStub) -> ActorContext:
    return await seed_member(store, member_id="alice", affiliation="Red")


@pytest.fixture
async def bob(store: DocumentStoreStub) -> ActorContext:
    return await seed_member(store, member_id="bob", affiliation="Red")
