"""Message delivery: single HTTP submission and bounded retry."""

from send2teams.delivery.client import (
    CONTENT_TYPE,
    DEFAULT_WEBHOOK_SEND_TIMEOUT,
    TeamsClient,
)
from send2teams.delivery.retry import (
    ConstantBackoff,
    RetryOrchestrator,
    RetryOutcome,
    RetryState,
    send_with_retry,
)

__all__ = [
    "CONTENT_TYPE",
    "DEFAULT_WEBHOOK_SEND_TIMEOUT",
    "TeamsClient",
    "ConstantBackoff",
    "RetryOrchestrator",
    "RetryOutcome",
    "RetryState",
    "send_with_retry",
]
