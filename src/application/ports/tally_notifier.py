"""Outbound tally summary port (e.g. a chat webhook)."""

from __future__ import annotations

from typing import Protocol

from src.domain.models.tally import TallyReport


class TallyNotifierProtocol(Protocol):
    """Protocol for sending a completed tally to an external channel.

    Implementations swallow and log their own delivery failures; the
    tally is already committed when they are called.
    """

    async def notify_tally(self, report: TallyReport) -> None:
        """Send a summary of every verdict in ``report``."""
        ...
