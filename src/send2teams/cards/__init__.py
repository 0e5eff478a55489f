"""Card models for Microsoft Teams.

Two independent formats are supported:
    - messagecard: legacy Office 365 connector MessageCard
    - adaptivecard: Adaptive Card wrapped in a Teams message

Both implement the ``TeamsMessage`` protocol, so either can be handed to the
delivery client.
"""

from send2teams.cards.adaptivecard import (
    Action,
    Card,
    Column,
    ColumnWidth,
    Element,
    Mention,
    Message,
    TopLevelCard,
    new_action_open_url,
    new_action_sets_from_actions,
    new_card,
    new_mention,
    new_message_from_card,
    new_simple_message,
)
from send2teams.cards.messagecard import (
    MessageCard,
    PotentialAction,
    Section,
    new_message_card,
    new_potential_action_open_uri,
)
from send2teams.cards.validation import CardValidator, collect_errors, validate

__all__ = [
    # Adaptive Card
    "Action",
    "Card",
    "Column",
    "ColumnWidth",
    "Element",
    "Mention",
    "Message",
    "TopLevelCard",
    "new_action_open_url",
    "new_action_sets_from_actions",
    "new_card",
    "new_mention",
    "new_message_from_card",
    "new_simple_message",
    # MessageCard
    "MessageCard",
    "PotentialAction",
    "Section",
    "new_message_card",
    "new_potential_action_open_uri",
    # Validation
    "CardValidator",
    "collect_errors",
    "validate",
]
