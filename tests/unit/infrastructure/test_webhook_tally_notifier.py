"""Unit tests for WebhookTallyNotifier."""

from __future__ import annotations

import hashlib
import hmac
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from src.domain.models.tally import ProposalVerdict, RedistributionResult, TallyReport
from src.infrastructure.adapters.notification.webhook_tally_notifier import (
    SIGNATURE_HEADER,
    WebhookTallyNotifier,
    format_summary,
)

WEBHOOK_URL = "https://hooks.example.test/tally"
SLEEP_PATH = "src.infrastructure.adapters.notification.webhook_tally_notifier.asyncio.sleep"


@pytest.fixture
def report() -> TallyReport:
    return TallyReport(
        meeting_number=4,
        next_meeting_number=5,
        verdicts=(
            ProposalVerdict(
                proposal_id="p1",
                proposal_visual="1",
                title="Budget",
                passed=True,
                total_for=40,
                total_against=30,
                supporters_count=2,
            ),
            ProposalVerdict(
                proposal_id="p2",
                proposal_visual="2 → 1",
                title="Amend budget",
                passed=False,
                total_for=10,
                total_against=60,
                supporters_count=1,
            ),
        ),
        redistribution=RedistributionResult(adjusted_strengths={}),
    )


class TestFormatSummary:
    def test_one_line_per_verdict(self, report: TallyReport) -> None:
        assert format_summary(report).splitlines() == [
            "Meeting 4 voting results:",
            "1 Budget: PASSED (40 for, 30 against, 2 supporters)",
            "2 → 1 Amend budget: REJECTED (10 for, 60 against, 1 supporters)",
        ]

    def test_empty_run(self) -> None:
        empty = TallyReport(
            meeting_number=1,
            next_meeting_number=2,
            verdicts=(),
            redistribution=RedistributionResult(adjusted_strengths={}),
        )

        assert format_summary(empty).endswith("No proposals were open.")


class TestWebhookTallyNotifier:
    async def test_delivers_signed_payload(self, report: TallyReport) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(204)

        notifier = WebhookTallyNotifier(
            WEBHOOK_URL, secret="s3cret", transport=httpx.MockTransport(handler)
        )

        await notifier.notify_tally(report)

        assert len(requests) == 1
        body = requests[0].content
        payload = json.loads(body)
        assert payload["meetingNumber"] == 4
        assert payload["results"][0]["proposalVisual"] == "1"
        assert payload["content"].startswith("Meeting 4 voting results:")
        expected = hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()
        assert requests[0].headers[SIGNATURE_HEADER] == f"sha256={expected}"

    async def test_unsigned_without_secret(self, report: TallyReport) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200)

        notifier = WebhookTallyNotifier(WEBHOOK_URL, transport=httpx.MockTransport(handler))

        await notifier.notify_tally(report)

        assert SIGNATURE_HEADER not in requests[0].headers

    async def test_retries_after_rejection(self, report: TallyReport) -> None:
        statuses = iter([500, 502, 200])
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(next(statuses))

        notifier = WebhookTallyNotifier(WEBHOOK_URL, transport=httpx.MockTransport(handler))

        with patch(SLEEP_PATH, new_callable=AsyncMock) as sleep:
            await notifier.notify_tally(report)

        assert calls == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1, 2]

    async def test_exhaustion_is_not_raised(self, report: TallyReport) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("refused", request=request)

        notifier = WebhookTallyNotifier(
            WEBHOOK_URL, max_retries=2, transport=httpx.MockTransport(handler)
        )

        with patch(SLEEP_PATH, new_callable=AsyncMock):
            await notifier.notify_tally(report)

        assert calls == 2
