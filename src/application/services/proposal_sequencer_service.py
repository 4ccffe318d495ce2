"""Proposal sequencer service.

Numbers are drawn from an atomic per-class counter in the store, so
concurrent chair sessions never receive the same number and numbers of
deleted proposals are never reused. Normal and priority proposals are
numbered independently, and neither sequence resets between meetings.
"""

from __future__ import annotations

import asyncio
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import uuid4

from structlog import get_logger

from src.application.ports.document_store import PROPOSALS, VOTES
from src.application.services.session_guards import (
    publish_event,
    require_chair,
    require_text,
)
from src.domain.errors import ProposalNotFoundError, VotingClosedError
from src.domain.events.session import (
    PROPOSAL_DELETED_EVENT_TYPE,
    PROPOSAL_UPDATE_EVENT_TYPE,
    SessionEvent,
    proposal_deleted_payload,
    proposal_update_payload,
)
from src.domain.models.proposal import (
    DEFAULT_PROPOSAL_PARTY,
    AssociationType,
    Proposal,
    counter_key,
    render_label,
)

if TYPE_CHECKING:
    from src.application.dtos.identity import ActorContext
    from src.application.ports.broadcaster import BroadcasterProtocol
    from src.application.ports.document_store import DocumentStoreProtocol
    from src.application.ports.session_metrics import SessionMetricsProtocol
    from src.application.services.system_parameters_service import (
        SystemParametersService,
    )

logger = get_logger(__name__)

_LABEL_PATTERN = re.compile(r"(?P<priority>[Pp])?(?P<number>\d+)")


class ProposalSequencerService:
    """Creation, numbering, editing and deletion of proposals.

    Example:
        >>> proposal = await service.create_proposal(
        ...     chair, "Budget 2027", is_priority=True
        ... )
        >>> proposal.proposal_visual
        'P1'
    """

    def __init__(
        self,
        store: DocumentStoreProtocol,
        parameters: SystemParametersService,
        ballot_lock: asyncio.Lock,
        broadcaster: BroadcasterProtocol | None,
        metrics: SessionMetricsProtocol | None = None,
    ) -> None:
        """Initialize the sequencer.

        Args:
            store: Document store holding proposals and counters.
            parameters: Source of the current meeting number.
            ballot_lock: Lock shared with VoteLedgerService and TallyService.
            broadcaster: Event fan-out, None to disable events.
            metrics: Optional metrics recorder.
        """
        self._store = store
        self._parameters = parameters
        self._ballot_lock = ballot_lock
        self._broadcaster = broadcaster
        self._metrics = metrics
        self._log = logger.bind(component="proposal_sequencer")

    async def next_proposal_number(self, is_priority: bool) -> int:
        """Allocate the next number of a priority class."""
        return await self._store.increment_and_fetch(counter_key(is_priority))

    async def create_proposal(
        self,
        actor: ActorContext,
        title: str,
        party: str | None = None,
        is_priority: bool = False,
        association_type: str | None = None,
        referenced_proposal: str | None = None,
    ) -> Proposal:
        """Create a proposal in the current meeting.

        Input is validated before a number is allocated, so rejected
        requests never consume a number.

        Raises:
            PermissionDeniedError: Actor is not the chair.
            SessionValidationError: Blank title or unknown association type.
        """
        require_chair(actor, "create proposals")
        title = require_text(title, "title")
        association = AssociationType.parse(association_type)
        associated_label = (
            (referenced_proposal or "").strip()
            if association is not AssociationType.NONE
            else ""
        )
        party_label = (party or "").strip() or DEFAULT_PROPOSAL_PARTY

        parameters = await self._parameters.get()
        number = await self.next_proposal_number(is_priority)

        proposal = Proposal(
            id=str(uuid4()),
            title=title,
            proposal_number=number,
            meeting_number=parameters.meeting_number,
            party=party_label,
            is_priority=is_priority,
            association_type=association,
            referenced_proposal=associated_label,
            proposal_visual=render_label(
                is_priority, number, association, associated_label
            ),
            created_at=datetime.now(timezone.utc),
        )
        await self._store.insert_one(PROPOSALS, proposal.to_document())

        self._log.info(
            "Proposal created",
            proposal_id=proposal.id,
            proposal_visual=proposal.proposal_visual,
            meeting_number=proposal.meeting_number,
        )
        if self._metrics is not None:
            self._metrics.record_proposal_created(is_priority)
        await publish_event(
            self._broadcaster,
            SessionEvent.create(
                PROPOSAL_UPDATE_EVENT_TYPE, proposal_update_payload(proposal)
            ),
        )
        return proposal

    async def update_proposal(
        self,
        actor: ActorContext,
        proposal_id: str,
        title: str | None = None,
        party: str | None = None,
    ) -> Proposal:
        """Edit title and affiliation label of an open proposal.

        Raises:
            PermissionDeniedError: Actor is not the chair.
            SessionValidationError: A supplied title is blank.
            ProposalNotFoundError: Unknown proposal.
            VotingClosedError: Voting on the proposal has ended.
        """
        require_chair(actor, "edit proposals")
        patch: dict[str, str] = {}
        if title is not None:
            patch["title"] = require_text(title, "title")
        if party is not None:
            patch["party"] = party.strip() or DEFAULT_PROPOSAL_PARTY

        if not patch:
            return await self.get_proposal(proposal_id)

        updated = await self._store.find_one_and_update(
            PROPOSALS, {"id": proposal_id, "votingEnded": False}, patch
        )
        if updated is None:
            await self.get_proposal(proposal_id)
            raise VotingClosedError(proposal_id)

        proposal = Proposal.from_document(updated)
        self._log.info("Proposal updated", proposal_id=proposal_id, fields=sorted(patch))
        await publish_event(
            self._broadcaster,
            SessionEvent.create(
                PROPOSAL_UPDATE_EVENT_TYPE, proposal_update_payload(proposal)
            ),
        )
        return proposal

    async def delete_proposal(self, actor: ActorContext, proposal_id: str) -> Proposal:
        """Delete a proposal and its ballots.

        Voting logs of a tallied proposal are kept. The ballot lock is held
        so no vote lands between the two deletes.

        Raises:
            PermissionDeniedError: Actor is not the chair.
            ProposalNotFoundError: Unknown proposal.
        """
        require_chair(actor, "delete proposals")
        proposal = await self.get_proposal(proposal_id)

        async with self._ballot_lock:
            if await self._store.delete_one(PROPOSALS, {"id": proposal_id}) == 0:
                raise ProposalNotFoundError(proposal_id)
            removed_votes = await self._store.delete_many(
                VOTES, {"proposalId": proposal_id}
            )

        self._log.info(
            "Proposal deleted",
            proposal_id=proposal_id,
            proposal_visual=proposal.proposal_visual,
            votes_removed=removed_votes,
        )
        await publish_event(
            self._broadcaster,
            SessionEvent.create(
                PROPOSAL_DELETED_EVENT_TYPE, proposal_deleted_payload(proposal)
            ),
        )
        return proposal

    async def get_proposal(self, proposal_id: str) -> Proposal:
        document = await self._store.find_one(PROPOSALS, {"id": proposal_id})
        if document is None:
            raise ProposalNotFoundError(proposal_id)
        return Proposal.from_document(document)

    async def get_proposal_by_number(self, number: int, is_priority: bool) -> Proposal:
        """Look a proposal up by its number within a priority class.

        The pair is unique because neither sequence resets or reuses numbers.

        Raises:
            ProposalNotFoundError: No proposal carries the number.
        """
        document = await self._store.find_one(
            PROPOSALS, {"proposalNumber": number, "isPriority": is_priority}
        )
        if document is None:
            raise ProposalNotFoundError(
                render_label(is_priority, number, AssociationType.NONE)
            )
        return Proposal.from_document(document)

    async def get_proposal_by_label(self, label: str) -> Proposal:
        """Look a proposal up by the number part of its label.

        ``"P3"`` names priority proposal 3 and ``"12"`` normal proposal 12.
        Any association suffix (``"5 x 4"``) is ignored.

        Raises:
            ProposalNotFoundError: Malformed label or no such proposal.
        """
        match = _LABEL_PATTERN.match(label.strip())
        if match is None:
            raise ProposalNotFoundError(label)
        return await self.get_proposal_by_number(
            int(match.group("number")), is_priority=bool(match.group("priority"))
        )

    async def list_proposals(self, meeting_number: int | None = None) -> list[Proposal]:
        """Proposals ordered priority class first, then by number.

        Args:
            meeting_number: Restrict to proposals created in this meeting.
        """
        query = {"meetingNumber": meeting_number} if meeting_number is not None else None
        documents = await self._store.find_many(PROPOSALS, query)
        proposals = [Proposal.from_document(document) for document in documents]
        return sorted(
            proposals,
            key=lambda proposal: (not proposal.is_priority, proposal.proposal_number),
        )
