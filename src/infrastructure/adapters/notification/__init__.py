"""Outbound notification adapters."""

from src.infrastructure.adapters.notification.webhook_tally_notifier import (
    WebhookTallyNotifier,
)

__all__: list[str] = ["WebhookTallyNotifier"]
