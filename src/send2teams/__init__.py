"""send2teams - Submit Microsoft Teams cards via incoming webhooks."""

import logging

# Version: single source of truth from pyproject.toml
try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("send2teams")
except PackageNotFoundError:
    # Package not installed (development mode)
    __version__ = "0.0.0.dev"

from send2teams.cards import (
    Card,
    Message,
    MessageCard,
    Section,
    new_card,
    new_message_card,
    new_simple_message,
)
from send2teams.config import CardFormat, Config, TargetURL, UserMention
from send2teams.context import SendContext
from send2teams.delivery import RetryOrchestrator, RetryOutcome, RetryState, TeamsClient
from send2teams.errors import (
    CardError,
    ConfigError,
    ContextError,
    DeliveryError,
    InvalidFieldValueError,
    InvalidTypeError,
    MissingValueError,
    ProtocolError,
    RetryAbortedError,
    RetryExhaustedError,
    Send2TeamsError,
    TransportError,
    ValueNotFoundError,
    WebhookURLError,
)
from send2teams.serialization import TeamsMessage
from send2teams.webhook import validate_webhook

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # Cards
    "Card",
    "Message",
    "MessageCard",
    "Section",
    "TeamsMessage",
    "new_card",
    "new_message_card",
    "new_simple_message",
    # Configuration
    "CardFormat",
    "Config",
    "TargetURL",
    "UserMention",
    # Delivery
    "SendContext",
    "TeamsClient",
    "RetryOrchestrator",
    "RetryOutcome",
    "RetryState",
    "validate_webhook",
    # Errors
    "Send2TeamsError",
    "CardError",
    "ConfigError",
    "ContextError",
    "DeliveryError",
    "InvalidFieldValueError",
    "InvalidTypeError",
    "MissingValueError",
    "ProtocolError",
    "RetryAbortedError",
    "RetryExhaustedError",
    "TransportError",
    "ValueNotFoundError",
    "WebhookURLError",
]
