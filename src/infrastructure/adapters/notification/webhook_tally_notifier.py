"""Webhook delivery of tally summaries.

Posts a JSON summary of a completed end-voting run to a configured URL,
for example a chat channel. The tally is already committed when this
runs, so delivery failures are logged and never raised.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
from typing import Any

import httpx
import structlog

from src.domain.models.tally import TallyReport

log = structlog.get_logger()

SIGNATURE_HEADER = "X-Parliament-Signature"


def format_summary(report: TallyReport) -> str:
    """Human-readable one-line-per-proposal summary."""
    lines = [f"Meeting {report.meeting_number} voting results:"]
    for verdict in report.verdicts:
        outcome = "PASSED" if verdict.passed else "REJECTED"
        lines.append(
            f"{verdict.proposal_visual} {verdict.title}: {outcome} "
            f"({verdict.total_for} for, {verdict.total_against} against, "
            f"{verdict.supporters_count} supporters)"
        )
    if not report.verdicts:
        lines.append("No proposals were open.")
    return "\n".join(lines)


class WebhookTallyNotifier:
    """TallyNotifierProtocol implementation using httpx."""

    def __init__(
        self,
        webhook_url: str,
        secret: str | None = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            webhook_url: URL to POST summaries to.
            secret: Optional HMAC secret for the signature header.
            timeout: Per-request timeout in seconds.
            max_retries: Delivery attempts before giving up.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self._webhook_url = webhook_url
        self._secret = secret
        self._timeout = timeout
        self._max_retries = max_retries
        self._transport = transport

    def _build_payload(self, report: TallyReport) -> dict[str, Any]:
        payload = report.to_dict()
        payload["content"] = format_summary(report)
        return payload

    async def notify_tally(self, report: TallyReport) -> None:
        """Deliver the summary with retry; returns after success or exhaustion."""
        payload_json = json.dumps(self._build_payload(report))
        headers = {"Content-Type": "application/json"}
        if self._secret:
            signature = hmac.new(
                self._secret.encode(),
                payload_json.encode(),
                hashlib.sha256,
            ).hexdigest()
            headers[SIGNATURE_HEADER] = f"sha256={signature}"

        async with httpx.AsyncClient(transport=self._transport) as client:
            for attempt in range(self._max_retries):
                try:
                    response = await client.post(
                        self._webhook_url,
                        content=payload_json,
                        headers=headers,
                        timeout=self._timeout,
                    )
                    if response.status_code < 300:
                        log.info(
                            "tally_webhook_delivered",
                            meeting_number=report.meeting_number,
                            status_code=response.status_code,
                            attempt=attempt + 1,
                        )
                        return

                    log.warning(
                        "tally_webhook_rejected",
                        status_code=response.status_code,
                        attempt=attempt + 1,
                    )
                except httpx.HTTPError as exc:
                    log.warning(
                        "tally_webhook_error",
                        error=str(exc),
                        attempt=attempt + 1,
                    )

                if attempt < self._max_retries - 1:
                    await asyncio.sleep(2**attempt)

        log.error(
            "tally_webhook_exhausted",
            meeting_number=report.meeting_number,
            max_retries=self._max_retries,
        )
