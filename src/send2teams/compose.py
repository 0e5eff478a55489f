"""Build and submit a message from a :class:`~send2teams.config.Config`."""

from __future__ import annotations

import logging
from datetime import datetime

from send2teams.branding import message_trailer
from send2teams.cards import adaptivecard as ac
from send2teams.cards import messagecard as mc
from send2teams.config import CardFormat, Config
from send2teams.context import SendContext
from send2teams.delivery.client import TeamsClient
from send2teams.delivery.retry import RetryOutcome
from send2teams.formatting import convert_eol_to_break
from send2teams.serialization import TeamsMessage

logger = logging.getLogger(__name__)


def message_text(config: Config) -> str:
    if config.convert_eol:
        return convert_eol_to_break(config.message)
    return config.message


def build_message_card(config: Config, now: datetime | None = None) -> mc.MessageCard:
    """Build a legacy MessageCard.

    Target URLs become OpenUri buttons in their own section. The branding
    trailer, unless disabled, goes in a final section that starts a new
    visual group.
    """
    card = mc.new_message_card(config.title, message_text(config), config.theme_color)

    if config.target_urls:
        links = mc.Section()
        links.add_potential_action(
            *(mc.new_potential_action_open_uri(t.description, t.url) for t in config.target_urls)
        )
        card.add_section(links)

    if not config.disable_branding:
        trailer = mc.Section(text=message_trailer(config.sender, now), start_group=True)
        card.add_section(trailer)

    return card


def build_adaptive_message(config: Config, now: datetime | None = None) -> ac.Message:
    """Build an Adaptive Card message.

    Mentions are added in a TextBlock after the message text. Up to six
    target URLs go in the card's action bar; more are paged into ActionSets
    at the end of the body.
    """
    card = ac.new_text_block_card(message_text(config), config.title, wrap=True)

    if config.user_mentions:
        card.add_mention(*(ac.new_mention(m.name, m.id) for m in config.user_mentions))

    if config.target_urls:
        actions = [ac.new_action_open_url(t.url, t.description) for t in config.target_urls]
        if len(actions) <= ac.TEAMS_ACTIONS_DISPLAY_LIMIT:
            card.add_action(*actions)
        else:
            card.add_element(*ac.new_action_sets_from_actions(*actions))

    if not config.disable_branding:
        card.add_element(
            ac.Element(
                type=ac.ElementType.TEXT_BLOCK.value,
                text=message_trailer(config.sender, now),
                size=ac.TextSize.SMALL.value,
                weight=ac.TextWeight.LIGHTER.value,
                wrap=True,
                separator=True,
            )
        )

    card.set_full_width()
    return ac.new_message_from_card(card)


def build_message(config: Config, now: datetime | None = None) -> TeamsMessage:
    """Build the message in the configured card format."""
    if config.card_format == CardFormat.MESSAGECARD:
        return build_message_card(config, now)
    return build_adaptive_message(config, now)


def submit(
    config: Config,
    message: TeamsMessage | None = None,
    client: TeamsClient | None = None,
    ctx: SendContext | None = None,
) -> RetryOutcome:
    """Validate the config, build the message and deliver it with retries.

    Args:
        config: Submission settings.
        message: Prebuilt message; built from ``config`` if omitted.
        client: Delivery client; a new one is created if omitted.
        ctx: Deadline for every attempt; defaults to
            :meth:`Config.submission_timeout` from now.

    Raises:
        ConfigError: Invalid settings.
        CardError: The built message is invalid.
        RetryAbortedError: The deadline passed before delivery succeeded.
        RetryExhaustedError: Every delivery attempt failed.
    """
    config.validate()

    if message is None:
        message = build_message(config)
    if ctx is None:
        ctx = SendContext.with_timeout(config.submission_timeout())

    owns_client = client is None
    if client is None:
        client = TeamsClient(validate_webhook_pattern=not config.disable_webhook_url_validation)

    logger.debug(
        f"Submitting message to {config.channel!r} channel in the {config.team!r} team "
        f"({config.card_format} format, {config.retries} retries)"
    )
    try:
        return client.send_with_retry(ctx, config.webhook_url, message, config.retries, config.retries_delay)
    finally:
        if owns_client:
            client.close()
