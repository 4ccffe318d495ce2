"""Vote ledger service.

One ballot per (proposal, voter), keyed by a deterministic document id
so a second submission replaces the first. Submissions hold the ballot
lock shared with the tally service: a vote either lands before the
proposal is closed and is counted, or sees ``votingEnded`` and is
rejected. A member who never votes has no record and counts as Abstain.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from structlog import get_logger

from src.application.ports.document_store import PROPOSALS, VOTES, VOTING_LOGS
from src.domain.errors import ProposalNotFoundError, VotingClosedError
from src.domain.models.vote import Vote, VoteChoice, VotingLogEntry, vote_document_id

if TYPE_CHECKING:
    from src.application.dtos.identity import ActorContext
    from src.application.ports.document_store import DocumentStoreProtocol
    from src.application.ports.session_metrics import SessionMetricsProtocol

logger = get_logger(__name__)


class VoteLedgerService:
    """Ballot submission and read access to ballots and voting logs."""

    def __init__(
        self,
        store: DocumentStoreProtocol,
        ballot_lock: asyncio.Lock,
        metrics: SessionMetricsProtocol | None = None,
    ) -> None:
        """Initialize the ledger.

        Args:
            store: Document store holding proposals, votes and logs.
            ballot_lock: Lock shared with TallyService.
            metrics: Optional metrics recorder.
        """
        self._store = store
        self._ballot_lock = ballot_lock
        self._metrics = metrics
        self._log = logger.bind(component="vote_ledger")

    async def submit_vote(
        self, actor: ActorContext, proposal_id: str, choice: str
    ) -> Vote:
        """Record or replace the actor's ballot on an open proposal.

        The stored strength is the actor's current base strength.

        Raises:
            SessionValidationError: Choice is not For, Against or Abstain.
            ProposalNotFoundError: Unknown proposal.
            VotingClosedError: Voting on the proposal has ended.
        """
        vote_choice = VoteChoice.parse(choice)
        log = self._log.bind(proposal_id=proposal_id, voter_id=actor.member_id)

        async with self._ballot_lock:
            document = await self._store.find_one(PROPOSALS, {"id": proposal_id})
            if document is None:
                raise ProposalNotFoundError(proposal_id)
            if document.get("votingEnded", False):
                log.warning("Vote rejected, voting closed")
                raise VotingClosedError(proposal_id)

            vote = Vote(
                proposal_id=proposal_id,
                voter_id=actor.member_id,
                voter_username=actor.username,
                choice=vote_choice,
                electoral_strength=actor.electoral_strength,
                cast_at=datetime.now(timezone.utc),
            )
            await self._store.upsert_one(VOTES, vote.to_document())

        log.info("Vote recorded", choice=vote_choice.value)
        if self._metrics is not None:
            self._metrics.record_vote_submitted(vote_choice.value)
        return vote

    async def votes_for_proposal(self, proposal_id: str) -> list[Vote]:
        """Every recorded ballot of a proposal, oldest first.

        Raises:
            ProposalNotFoundError: Unknown proposal.
        """
        if await self._store.find_one(PROPOSALS, {"id": proposal_id}) is None:
            raise ProposalNotFoundError(proposal_id)
        documents = await self._store.find_many(VOTES, {"proposalId": proposal_id})
        votes = [Vote.from_document(document) for document in documents]
        return sorted(votes, key=lambda vote: vote.cast_at)

    async def member_vote(self, proposal_id: str, member_id: str) -> Vote | None:
        """The member's ballot on a proposal, or None if they have not voted."""
        document = await self._store.find_one(
            VOTES, {"id": vote_document_id(proposal_id, member_id)}
        )
        return Vote.from_document(document) if document is not None else None

    async def voting_log(self, proposal_id: str) -> VotingLogEntry:
        """The audit snapshot written when the proposal was tallied.

        Raises:
            ProposalNotFoundError: No log exists for the proposal.
        """
        document = await self._store.find_one(VOTING_LOGS, {"id": proposal_id})
        if document is None:
            raise ProposalNotFoundError(proposal_id)
        return VotingLogEntry.from_document(document)
