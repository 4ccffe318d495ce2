"""Unit tests for TallyService (end of voting)."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.application.dtos.identity import ActorContext
from src.application.ports.document_store import PROPOSALS, VOTING_LOGS
from src.application.services.proposal_sequencer_service import (
    ProposalSequencerService,
)
from src.application.services.system_parameters_service import (
    SystemParametersService,
)
from src.application.services.tally_service import (
    TALLY_OUTCOME_COMPLETED,
    TALLY_OUTCOME_INCOMPLETE,
    TallyService,
)
from src.application.services.vote_ledger_service import VoteLedgerService
from src.domain.errors import (
    PermissionDeniedError,
    StoreError,
    TallyIncompleteError,
    VotingClosedError,
)
from src.infrastructure.stubs import DocumentStoreStub, RecordingBroadcasterStub
from tests.helpers.members import seed_member


@pytest.fixture
async def party_a(store: DocumentStoreStub) -> list[ActorContext]:
    """Party A: 10 and 20 present, 10 absent."""
    return [
        await seed_member(store, member_id="a1", strength=10, affiliation="A"),
        await seed_member(store, member_id="a2", strength=20, affiliation="A"),
        await seed_member(
            store, member_id="a3", strength=10, affiliation="A", present=False
        ),
    ]


@pytest.fixture
async def party_b(store: DocumentStoreStub) -> ActorContext:
    return await seed_member(store, member_id="b1", strength=30, affiliation="B")


class TestEndVoting:
    """Tests for a clean end-of-voting run."""

    async def test_tallies_with_redistributed_strengths(
        self,
        tally_service: TallyService,
        sequencer: ProposalSequencerService,
        ledger: VoteLedgerService,
        parameters: SystemParametersService,
        chair: ActorContext,
        party_a: list[ActorContext],
        party_b: ActorContext,
    ) -> None:
        a1, a2, _ = party_a
        budget = await sequencer.create_proposal(chair, "Budget", is_priority=True)
        motion = await sequencer.create_proposal(chair, "Motion")
        await ledger.submit_vote(a1, budget.id, "For")
        await ledger.submit_vote(a2, budget.id, "For")
        await ledger.submit_vote(party_b, budget.id, "Against")
        await ledger.submit_vote(a1, motion.id, "For")

        report = await tally_service.end_voting(chair)

        assert report.meeting_number == 1
        assert report.next_meeting_number == 2
        assert (await parameters.get()).meeting_number == 2
        first, second = report.verdicts
        assert (first.proposal_visual, first.passed) == ("P1", True)
        assert (first.total_for, first.total_against, first.supporters_count) == (40, 30, 2)
        assert (second.proposal_visual, second.passed) == ("1", False)
        assert (second.total_for, second.supporters_count) == (13, 1)

        stored = await sequencer.get_proposal(budget.id)
        assert stored.voting_ended is True
        assert stored.tallied is True
        assert stored.passed is True

    async def test_voting_log_records_adjusted_strengths(
        self,
        tally_service: TallyService,
        sequencer: ProposalSequencerService,
        ledger: VoteLedgerService,
        chair: ActorContext,
        party_a: list[ActorContext],
    ) -> None:
        a1, a2, _ = party_a
        proposal = await sequencer.create_proposal(chair, "Budget")
        await ledger.submit_vote(a1, proposal.id, "For")
        await ledger.submit_vote(a2, proposal.id, "Abstain")

        await tally_service.end_voting(chair)

        entry = await ledger.voting_log(proposal.id)
        assert entry.meeting_number == 1
        assert {vote.voter_id: vote.adjusted_strength for vote in entry.votes} == {
            "a1": 13,
            "a2": 27,
        }

    async def test_events_follow_the_commit(
        self,
        tally_service: TallyService,
        sequencer: ProposalSequencerService,
        broadcaster: RecordingBroadcasterStub,
        chair: ActorContext,
    ) -> None:
        await sequencer.create_proposal(chair, "One")
        await sequencer.create_proposal(chair, "Two")
        broadcaster.clear()

        await tally_service.end_voting(chair)

        messages = broadcaster.messages()
        assert [m["type"] for m in messages] == [
            "proposalUpdate",
            "proposalUpdate",
            "votingEnded",
        ]
        assert all(m["proposal"]["votingEnded"] for m in messages[:2])
        assert messages[-1]["meetingNumber"] == 1
        assert messages[-1]["nextMeetingNumber"] == 2
        assert len(messages[-1]["results"]) == 2

    async def test_no_open_proposals_still_advances_meeting(
        self,
        tally_service: TallyService,
        parameters: SystemParametersService,
        chair: ActorContext,
    ) -> None:
        report = await tally_service.end_voting(chair)

        assert report.verdicts == ()
        assert (await parameters.get()).meeting_number == 2

    async def test_previous_meeting_results_are_not_reported_again(
        self,
        tally_service: TallyService,
        sequencer: ProposalSequencerService,
        chair: ActorContext,
    ) -> None:
        await sequencer.create_proposal(chair, "Old")
        await tally_service.end_voting(chair)
        new = await sequencer.create_proposal(chair, "New")

        report = await tally_service.end_voting(chair)

        assert [verdict.proposal_id for verdict in report.verdicts] == [new.id]
        assert report.meeting_number == 2

    async def test_member_cannot_end_voting(
        self,
        tally_service: TallyService,
        sequencer: ProposalSequencerService,
        chair: ActorContext,
        alice: ActorContext,
    ) -> None:
        proposal = await sequencer.create_proposal(chair, "Budget")

        with pytest.raises(PermissionDeniedError):
            await tally_service.end_voting(alice)
        assert (await sequencer.get_proposal(proposal.id)).voting_ended is False

    async def test_lost_weight_is_reported(
        self,
        tally_service: TallyService,
        store: DocumentStoreStub,
        chair: ActorContext,
        party_b: ActorContext,
    ) -> None:
        await seed_member(store, member_id="c1", strength=7, affiliation="C", present=False)

        report = await tally_service.end_voting(chair)

        (anomaly,) = report.redistribution.anomalies
        assert (anomaly.affiliation, anomaly.lost_weight) == ("C", 7)

    async def test_broadcast_failure_does_not_fail_tally(
        self,
        store: DocumentStoreStub,
        parameters: SystemParametersService,
        ballot_lock: asyncio.Lock,
        sequencer: ProposalSequencerService,
        chair: ActorContext,
    ) -> None:
        service = TallyService(
            store, parameters, ballot_lock, RecordingBroadcasterStub(fail=True)
        )
        await sequencer.create_proposal(chair, "Budget")

        report = await service.end_voting(chair)

        assert report.next_meeting_number == 2

    async def test_notifier_and_metrics_receive_report(
        self,
        store: DocumentStoreStub,
        parameters: SystemParametersService,
        ballot_lock: asyncio.Lock,
        broadcaster: RecordingBroadcasterStub,
        sequencer: ProposalSequencerService,
        chair: ActorContext,
    ) -> None:
        notifier = AsyncMock()
        metrics = MagicMock()
        service = TallyService(
            store, parameters, ballot_lock, broadcaster, metrics=metrics, notifier=notifier
        )
        await sequencer.create_proposal(chair, "Budget")

        report = await service.end_voting(chair)

        notifier.notify_tally.assert_awaited_once_with(report)
        metrics.record_tally_run.assert_called_once_with(TALLY_OUTCOME_COMPLETED, 1, 2)


class TestPartialFailure:
    """A failed run never advances the meeting and can be retried."""

    async def test_tally_failure_then_retry(
        self,
        tally_service: TallyService,
        sequencer: ProposalSequencerService,
        ledger: VoteLedgerService,
        parameters: SystemParametersService,
        store: DocumentStoreStub,
        broadcaster: RecordingBroadcasterStub,
        chair: ActorContext,
        alice: ActorContext,
        bob: ActorContext,
    ) -> None:
        first = await sequencer.create_proposal(chair, "First")
        second = await sequencer.create_proposal(chair, "Second")
        await ledger.submit_vote(alice, second.id, "For")
        await ledger.submit_vote(bob, second.id, "For")
        store.fail_writes_for(VOTING_LOGS, second.id)
        broadcaster.clear()

        with pytest.raises(TallyIncompleteError) as exc_info:
            await tally_service.end_voting(chair)

        assert exc_info.value.failed_proposal_ids == (second.id,)
        assert exc_info.value.completed_proposal_ids == (first.id,)
        assert (await parameters.get()).meeting_number == 1
        assert broadcaster.events == []
        stuck = await sequencer.get_proposal(second.id)
        assert (stuck.voting_ended, stuck.tallied) == (True, False)
        with pytest.raises(VotingClosedError):
            await ledger.submit_vote(alice, second.id, "Against")

        store.heal()
        report = await tally_service.end_voting(chair)

        assert report.meeting_number == 1
        assert report.next_meeting_number == 2
        assert (await parameters.get()).meeting_number == 2
        assert [v.proposal_id for v in report.verdicts] == [first.id, second.id]
        assert report.verdicts[1].passed is True
        assert len(store.documents(VOTING_LOGS)) == 2

    async def test_close_failure_leaves_proposal_open_until_retry(
        self,
        tally_service: TallyService,
        sequencer: ProposalSequencerService,
        parameters: SystemParametersService,
        store: DocumentStoreStub,
        chair: ActorContext,
    ) -> None:
        proposal = await sequencer.create_proposal(chair, "Budget")
        store.fail_writes_for(PROPOSALS, proposal.id)

        with pytest.raises(TallyIncompleteError):
            await tally_service.end_voting(chair)
        assert (await sequencer.get_proposal(proposal.id)).voting_ended is False

        store.heal()
        report = await tally_service.end_voting(chair)

        assert [v.proposal_id for v in report.verdicts] == [proposal.id]
        assert (await parameters.get()).meeting_number == 2

    async def test_log_written_by_failed_attempt_is_kept(
        self,
        tally_service: TallyService,
        sequencer: ProposalSequencerService,
        store: DocumentStoreStub,
        chair: ActorContext,
    ) -> None:
        """The result write fails after the log was written; retry skips the log."""
        proposal = await sequencer.create_proposal(chair, "Budget")
        original_update = store.update_one
        store.update_one = AsyncMock(side_effect=_fail_once(original_update))  # type: ignore[method-assign]

        with pytest.raises(TallyIncompleteError):
            await tally_service.end_voting(chair)
        assert len(store.documents(VOTING_LOGS)) == 1

        report = await tally_service.end_voting(chair)

        assert [v.proposal_id for v in report.verdicts] == [proposal.id]
        assert len(store.documents(VOTING_LOGS)) == 1

    async def test_incomplete_run_records_metric(
        self,
        store: DocumentStoreStub,
        parameters: SystemParametersService,
        ballot_lock: asyncio.Lock,
        broadcaster: RecordingBroadcasterStub,
        sequencer: ProposalSequencerService,
        chair: ActorContext,
    ) -> None:
        metrics = MagicMock()
        service = TallyService(store, parameters, ballot_lock, broadcaster, metrics=metrics)
        proposal = await sequencer.create_proposal(chair, "Budget")
        store.fail_writes_for(VOTING_LOGS, proposal.id)

        with pytest.raises(TallyIncompleteError):
            await service.end_voting(chair)

        metrics.record_tally_run.assert_called_once_with(TALLY_OUTCOME_INCOMPLETE, 0, 1)


def _fail_once(delegate: Callable[..., Awaitable[int]]) -> Callable[..., Awaitable[int]]:
    """Side effect that raises StoreError on the first call, then delegates."""
    calls = {"count": 0}

    async def side_effect(*args: Any, **kwargs: Any) -> int:
        calls["count"] += 1
        if calls["count"] == 1:
            raise StoreError("Injected result write failure", operation="update_one")
        return await delegate(*args, **kwargs)

    return side_effect
