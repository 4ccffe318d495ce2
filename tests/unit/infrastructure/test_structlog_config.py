"""Unit tests for the structlog processors."""

from __future__ import annotations

import contextvars

from src.infrastructure.observability.correlation import (
    correlation_id_processor,
    set_correlation_id,
)
from src.infrastructure.observability.logging import (
    REDACTED_VALUE,
    redact_credentials,
)


class TestRedactCredentials:
    def test_masks_credential_keys(self) -> None:
        event = {"event": "member_registered", "password": "hunter2", "secret": "x"}

        result = redact_credentials(None, "info", event)

        assert result["password"] == REDACTED_VALUE
        assert result["secret"] == REDACTED_VALUE
        assert result["event"] == "member_registered"

    def test_leaves_other_keys(self) -> None:
        event = {"event": "vote_recorded", "member_id": "alice"}

        assert redact_credentials(None, "info", dict(event)) == event


class TestCorrelationProcessor:
    def test_adds_id_inside_request(self) -> None:
        def run() -> dict[str, str]:
            set_correlation_id("abc-123")
            return correlation_id_processor(None, "info", {"event": "x"})

        result = contextvars.copy_context().run(run)

        assert result["correlation_id"] == "abc-123"

    def test_absent_outside_request(self) -> None:
        result = contextvars.copy_context().run(
            correlation_id_processor, None, "info", {"event": "x"}
        )

        assert "correlation_id" not in result
