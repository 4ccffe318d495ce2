"""End-of-voting tally service.

``end_voting`` closes every open proposal, tallies it with
redistributed electoral strengths and advances the meeting number, in
three phases that each tolerate being run again:

1. Close: flip ``votingEnded`` on every open proposal and stamp the
   meeting being closed. Runs under the ballot lock shared with the vote
   ledger, so no ballot can be accepted for a proposal once its tally
   has started.
2. Tally: every closed but untallied proposal gets its voting log
   (write-once, keyed by proposal id) and then its result fields with
   ``tallied`` set. A proposal is therefore never tallied twice.
3. Advance: compare-and-set of the meeting number from ``m`` to
   ``m + 1``, attempted only when phases 1 and 2 had no failures.

Any failure raises TallyIncompleteError and leaves the meeting number
unchanged; calling ``end_voting`` again finishes the remaining work.
Redistribution is recomputed from the members' current presence on
every attempt.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from structlog import get_logger

from src.application.ports.document_store import MEMBERS, PROPOSALS, VOTES, VOTING_LOGS
from src.application.services.session_guards import publish_event, require_chair
from src.config.session_config import DEFAULT_SESSION_CONFIG, SessionConfig
from src.domain.errors import DuplicateDocumentError, StoreError, TallyIncompleteError
from src.domain.events.session import (
    PROPOSAL_UPDATE_EVENT_TYPE,
    VOTING_ENDED_EVENT_TYPE,
    SessionEvent,
    proposal_update_payload,
    voting_ended_payload,
)
from src.domain.models.member import Member
from src.domain.models.proposal import Proposal
from src.domain.models.tally import (
    ProposalVerdict,
    RedistributionResult,
    TallyReport,
)
from src.domain.models.vote import LoggedVote, Vote, VotingLogEntry
from src.domain.services.redistribution import compute_adjusted_strengths, count_ballots

if TYPE_CHECKING:
    from src.application.dtos.identity import ActorContext
    from src.application.ports.broadcaster import BroadcasterProtocol
    from src.application.ports.document_store import DocumentStoreProtocol
    from src.application.ports.session_metrics import SessionMetricsProtocol
    from src.application.ports.tally_notifier import TallyNotifierProtocol
    from src.application.services.system_parameters_service import (
        SystemParametersService,
    )

logger = get_logger(__name__)

TALLY_OUTCOME_COMPLETED = "completed"
TALLY_OUTCOME_INCOMPLETE = "incomplete"


def _verdict_order(proposal: Proposal) -> tuple[bool, int]:
    return (not proposal.is_priority, proposal.proposal_number)


class TallyService:
    """Closes voting, computes verdicts and advances the meeting.

    Example:
        >>> report = await tally_service.end_voting(chair)
        >>> [verdict.passed for verdict in report.verdicts]
        [True, False]
    """

    def __init__(
        self,
        store: DocumentStoreProtocol,
        parameters: SystemParametersService,
        ballot_lock: asyncio.Lock,
        broadcaster: BroadcasterProtocol | None,
        config: SessionConfig = DEFAULT_SESSION_CONFIG,
        metrics: SessionMetricsProtocol | None = None,
        notifier: TallyNotifierProtocol | None = None,
    ) -> None:
        """Initialize the tally service.

        Args:
            store: Document store with members, proposals, votes and logs.
            parameters: Meeting number access.
            ballot_lock: Lock shared with VoteLedgerService.
            broadcaster: Event fan-out, None to disable events.
            config: Redistribution labels and pass rule threshold.
            metrics: Optional metrics recorder.
            notifier: Optional outbound summary channel.
        """
        self._store = store
        self._parameters = parameters
        self._ballot_lock = ballot_lock
        self._broadcaster = broadcaster
        self._config = config
        self._metrics = metrics
        self._notifier = notifier
        self._log = logger.bind(component="tally")

    async def end_voting(self, actor: ActorContext) -> TallyReport:
        """Close and tally every open proposal, then advance the meeting.

        Returns:
            TallyReport with a verdict for every proposal closed in the
            meeting that just ended.

        Raises:
            PermissionDeniedError: Actor is not the chair.
            TallyIncompleteError: Some proposal could not be closed or
                tallied; the meeting number did not advance.
            StoreError: The store failed before any proposal was touched.
        """
        require_chair(actor, "end voting")

        async with self._ballot_lock:
            meeting_number = (await self._parameters.get()).meeting_number
            log = self._log.bind(meeting_number=meeting_number, actor_id=actor.member_id)
            log.info("End of voting started")

            members = [
                Member.from_document(document)
                for document in await self._store.find_many(MEMBERS)
            ]
            redistribution = compute_adjusted_strengths(
                members,
                exempt_affiliation=self._config.exempt_affiliation,
                independent_label=self._config.independent_label,
            )
            for group in redistribution.anomalies:
                log.warning(
                    "Absent weight lost, no member of the group is present",
                    affiliation=group.affiliation,
                    lost_weight=group.lost_weight,
                )

            failed = await self._close_open_proposals(meeting_number)
            completed, tally_failed = await self._tally_closed_proposals(
                redistribution, meeting_number
            )
            failed.extend(tally_failed)

        if failed:
            log.error(
                "End of voting incomplete",
                failed_proposal_ids=failed,
                completed_proposal_ids=completed,
            )
            if self._metrics is not None:
                self._metrics.record_tally_run(
                    TALLY_OUTCOME_INCOMPLETE, len(completed), meeting_number
                )
            raise TallyIncompleteError(meeting_number, failed, completed)

        next_meeting_number = await self._parameters.advance_meeting(meeting_number)

        closed = sorted(
            (
                Proposal.from_document(document)
                for document in await self._store.find_many(
                    PROPOSALS, {"closedInMeeting": meeting_number}
                )
            ),
            key=_verdict_order,
        )
        report = TallyReport(
            meeting_number=meeting_number,
            next_meeting_number=next_meeting_number,
            verdicts=tuple(
                ProposalVerdict(
                    proposal_id=proposal.id,
                    proposal_visual=proposal.proposal_visual,
                    title=proposal.title,
                    passed=proposal.passed,
                    total_for=proposal.total_for,
                    total_against=proposal.total_against,
                    supporters_count=proposal.supporters_count,
                )
                for proposal in closed
            ),
            redistribution=redistribution,
            completed_at=datetime.now(timezone.utc),
        )
        log.info(
            "End of voting completed",
            proposals_closed=len(report.verdicts),
            passed=sum(1 for verdict in report.verdicts if verdict.passed),
            next_meeting_number=next_meeting_number,
        )
        if self._metrics is not None:
            self._metrics.record_tally_run(
                TALLY_OUTCOME_COMPLETED, len(completed), next_meeting_number
            )

        for proposal in closed:
            await publish_event(
                self._broadcaster,
                SessionEvent.create(
                    PROPOSAL_UPDATE_EVENT_TYPE, proposal_update_payload(proposal)
                ),
            )
        await publish_event(
            self._broadcaster,
            SessionEvent.create(VOTING_ENDED_EVENT_TYPE, voting_ended_payload(report)),
        )
        if self._notifier is not None:
            await self._notifier.notify_tally(report)
        return report

    async def _close_open_proposals(self, meeting_number: int) -> list[str]:
        """Phase 1. Returns ids of proposals that could not be closed."""
        failed: list[str] = []
        for document in await self._store.find_many(PROPOSALS, {"votingEnded": False}):
            proposal_id = document["id"]
            try:
                await self._store.find_one_and_update(
                    PROPOSALS,
                    {"id": proposal_id, "votingEnded": False},
                    {
                        "votingEnded": True,
                        "tallied": False,
                        "closedInMeeting": meeting_number,
                    },
                )
            except StoreError as exc:
                self._log.error(
                    "Closing proposal failed", proposal_id=proposal_id, error=str(exc)
                )
                failed.append(proposal_id)
        return failed

    async def _tally_closed_proposals(
        self, redistribution: RedistributionResult, meeting_number: int
    ) -> tuple[list[str], list[str]]:
        """Phase 2. Returns (completed ids, failed ids)."""
        completed: list[str] = []
        failed: list[str] = []
        pending = sorted(
            (
                Proposal.from_document(document)
                for document in await self._store.find_many(
                    PROPOSALS, {"votingEnded": True, "tallied": False}
                )
            ),
            key=_verdict_order,
        )
        for proposal in pending:
            try:
                await self._tally_proposal(proposal, redistribution, meeting_number)
            except StoreError as exc:
                self._log.error(
                    "Tallying proposal failed", proposal_id=proposal.id, error=str(exc)
                )
                failed.append(proposal.id)
            else:
                completed.append(proposal.id)
        return completed, failed

    async def _tally_proposal(
        self,
        proposal: Proposal,
        redistribution: RedistributionResult,
        meeting_number: int,
    ) -> None:
        votes = sorted(
            (
                Vote.from_document(document)
                for document in await self._store.find_many(
                    VOTES, {"proposalId": proposal.id}
                )
            ),
            key=lambda vote: vote.cast_at,
        )
        count = count_ballots(votes, redistribution, self._config.min_supporters)

        entry = VotingLogEntry(
            proposal_id=proposal.id,
            title=proposal.title,
            meeting_number=proposal.closed_in_meeting or meeting_number,
            votes=tuple(
                LoggedVote(
                    voter_id=vote.voter_id,
                    username=vote.voter_username,
                    choice=vote.choice,
                    adjusted_strength=redistribution.strength_of(vote.voter_id),
                    cast_at=vote.cast_at,
                )
                for vote in votes
            ),
            logged_at=datetime.now(timezone.utc),
        )
        try:
            await self._store.insert_one(VOTING_LOGS, entry.to_document())
        except DuplicateDocumentError:
            # Written by an earlier attempt that failed before the result
            self._log.info("Voting log already present", proposal_id=proposal.id)

        await self._store.update_one(
            PROPOSALS,
            {"id": proposal.id, "tallied": False},
            {
                "passed": count.passed,
                "totalFor": count.total_for,
                "totalAgainst": count.total_against,
                "supportersCount": count.supporters_count,
                "tallied": True,
            },
        )
        self._log.info(
            "Proposal tallied",
            proposal_id=proposal.id,
            proposal_visual=proposal.proposal_visual,
            passed=count.passed,
            total_for=count.total_for,
            total_against=count.total_against,
            supporters_count=count.supporters_count,
        )
