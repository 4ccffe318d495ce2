"""Unit tests for session domain models, events and errors."""

from __future__ import annotations

import pytest

from src.domain.errors import (
    SelfObjectionLockError,
    SessionValidationError,
    TallyIncompleteError,
)
from src.domain.events.session import (
    SEAT_UPDATE_EVENT_TYPE,
    SessionEvent,
    proposal_update_payload,
    seat_update_payload,
)
from src.domain.models.member import Member, MemberRole, SeatStatus
from src.domain.models.proposal import (
    AssociationType,
    Proposal,
    counter_key,
    render_label,
)
from src.domain.models.vote import VoteChoice, vote_document_id
from tests.helpers.members import make_member


class TestMember:
    """Tests for the Member model."""

    def test_negative_strength_is_rejected(self) -> None:
        with pytest.raises(SessionValidationError):
            Member(id="m", username="m", electoral_strength=-1)

    def test_public_dict_has_no_credentials(self) -> None:
        member = Member(id="m", username="m", password_hash="pbkdf2_sha256$1$aa$bb")

        public = member.to_public_dict()

        assert "passwordHash" not in public
        assert public["seatStatus"] == "NEUTRAL"
        assert member.to_document()["passwordHash"].startswith("pbkdf2_sha256")

    def test_document_round_trip_keeps_seat_state(self) -> None:
        member = make_member(
            "m", strength=4, affiliation="Green", seat_status=SeatStatus.OBJECTING
        )

        restored = Member.from_document(member.to_document())

        assert restored == member

    def test_status_change_marks_member_present(self) -> None:
        member = make_member("m", present=False)

        changed = member.with_seat_status(SeatStatus.REQUESTING_TO_SPEAK)

        assert changed.present is True
        assert changed.seat_status is SeatStatus.REQUESTING_TO_SPEAK
        assert changed.status_changed_at > member.status_changed_at

    def test_blank_affiliation_uses_independent_label(self) -> None:
        assert make_member("m", affiliation=" ").affiliation_group("Independent") == (
            "Independent"
        )

    @pytest.mark.parametrize("value", ["speaking", " OBJECTING ", "Neutral"])
    def test_seat_status_parse_is_case_insensitive(self, value: str) -> None:
        assert SeatStatus.parse(value).value == value.strip().upper()

    def test_unknown_seat_status_is_a_validation_error(self) -> None:
        with pytest.raises(SessionValidationError) as exc_info:
            SeatStatus.parse("SHOUTING")
        assert exc_info.value.field == "seatStatus"

    def test_role_parse(self) -> None:
        assert MemberRole.parse("chair") is MemberRole.CHAIR
        with pytest.raises(SessionValidationError):
            MemberRole.parse("KING")


class TestProposalLabels:
    """Tests for numbering keys and display labels."""

    def test_priority_classes_use_separate_counters(self) -> None:
        assert counter_key(True) != counter_key(False)

    @pytest.mark.parametrize(
        ("is_priority", "number", "association", "reference", "expected"),
        [
            (True, 3, AssociationType.NONE, "", "P3"),
            (False, 7, AssociationType.NONE, "", "7"),
            (False, 4, AssociationType.ADDITIVE, "P3", "4 → P3"),
            (False, 5, AssociationType.COUNTERING, "4", "5 x 4"),
            (True, 2, AssociationType.COUNTERING, "P1", "P2 x P1"),
        ],
    )
    def test_render_label(
        self,
        is_priority: bool,
        number: int,
        association: AssociationType,
        reference: str,
        expected: str,
    ) -> None:
        assert render_label(is_priority, number, association, reference) == expected

    @pytest.mark.parametrize("value", [None, "", "normal", "NONE"])
    def test_blank_association_means_none(self, value: str | None) -> None:
        assert AssociationType.parse(value) is AssociationType.NONE

    def test_unknown_association_is_rejected(self) -> None:
        with pytest.raises(SessionValidationError):
            AssociationType.parse("amending")


class TestVoteChoice:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("for", VoteChoice.FOR), ("AGAINST", VoteChoice.AGAINST), (" Abstain", VoteChoice.ABSTAIN)],
    )
    def test_parse(self, value: str, expected: VoteChoice) -> None:
        assert VoteChoice.parse(value) is expected

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(SessionValidationError):
            VoteChoice.parse("Maybe")

    def test_vote_id_is_deterministic(self) -> None:
        assert vote_document_id("p1", "m1") == vote_document_id("p1", "m1")
        assert vote_document_id("p1", "m1") != vote_document_id("p1", "m2")


class TestSessionEvent:
    """Tests for the event wire contract."""

    def test_seat_update_message_shape(self) -> None:
        member = make_member("m", seat_status=SeatStatus.SPEAKING)

        message = SessionEvent.create(
            SEAT_UPDATE_EVENT_TYPE, seat_update_payload(member)
        ).to_message()

        assert message["type"] == "seatUpdate"
        assert message["user"]["id"] == "m"
        assert message["user"]["seatStatus"] == "SPEAKING"
        assert message["user"]["present"] is True
        assert "passwordHash" not in message["user"]

    def test_proposal_update_carries_result_fields(self) -> None:
        proposal = Proposal(
            id="p",
            title="Budget",
            proposal_number=1,
            meeting_number=1,
            proposal_visual="P1",
            passed=True,
            total_for=12,
        )

        payload = proposal_update_payload(proposal)

        assert payload["proposal"]["proposalVisual"] == "P1"
        assert payload["proposal"]["passed"] is True
        assert payload["proposal"]["totalFor"] == 12

    def test_unknown_event_type_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            SessionEvent.create("somethingElse", {})

    def test_payload_is_read_only(self) -> None:
        event = SessionEvent.create("break", {})
        with pytest.raises(TypeError):
            event.payload["x"] = 1  # type: ignore[index]


class TestProblemDetails:
    def test_tally_incomplete_is_retryable(self) -> None:
        error = TallyIncompleteError(3, ["p2"], ["p1"])

        problem = error.to_rfc7807_dict()

        assert problem["status"] == 503
        assert problem["type"] == "urn:parliament:tally:incomplete"
        assert problem["failed_proposal_ids"] == ["p2"]
        assert problem["completed_proposal_ids"] == ["p1"]
        assert problem["retryable"] is True

    def test_objection_lock_is_a_permission_error(self) -> None:
        assert SelfObjectionLockError().status_code == 403
