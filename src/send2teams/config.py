"""Configuration record consumed by the message pipeline.

The CLI fills a :class:`Config`; library callers can build one directly.
:meth:`Config.validate` enforces the cross-field rules before anything is
built or sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from send2teams.cards.messagecard import POTENTIAL_ACTION_MAX_SUPPORTED
from send2teams.delivery.client import DEFAULT_WEBHOOK_SEND_TIMEOUT
from send2teams.errors import ConfigError, WebhookURLError
from send2teams.webhook import (
    validate_webhook,
    validate_webhook_length,
    validate_webhook_prefix,
)


# =============================================================================
# Defaults
# =============================================================================


DEFAULT_THEME_COLOR = "#832561"
DEFAULT_TEAM_NAME = "unspecified"
DEFAULT_CHANNEL_NAME = "unspecified"
DEFAULT_RETRIES = 2
DEFAULT_RETRIES_DELAY = 2

WEBHOOK_URL_ENV_VAR = "TEAMS_WEBHOOK_URL"


class CardFormat(str, Enum):
    """Card format used for the submitted message."""

    MESSAGECARD = "messagecard"
    ADAPTIVECARD = "adaptivecard"

    def __str__(self) -> str:
        return self.value


def _split_pair(value: str, flag: str) -> tuple[str, str]:
    items = value.split(",")
    if len(items) != 2:
        raise ConfigError(f"received {len(items)} arguments for {flag}, expected 2")

    first, second = (item.strip().replace("'", "").replace('"', "") for item in items)
    return first, second


@dataclass(frozen=True)
class TargetURL:
    """A URL rendered as a button, with its label."""

    url: str
    description: str

    @classmethod
    def parse(cls, value: str) -> TargetURL:
        """Parse a ``"url, description"`` pair.

        Surrounding whitespace and quotes are stripped from both parts.

        Raises:
            ConfigError: If the value is not a pair or the URL is unusable.
        """
        url, description = _split_pair(value, "target URL")
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            raise ConfigError(f"provided URL {url!r} failed to parse")
        if not description:
            raise ConfigError(f"missing description for target URL {url!r}")
        return cls(url=url, description=description)

    def __str__(self) -> str:
        return f"[URL: {self.url}, Desc: {self.description}]"


@dataclass(frozen=True)
class UserMention:
    """A user to mention, by display name and Teams user id."""

    name: str
    id: str

    @classmethod
    def parse(cls, value: str) -> UserMention:
        """Parse a ``"display name, id"`` pair.

        Raises:
            ConfigError: If the value is not a pair or a part is empty.
        """
        name, user_id = _split_pair(value, "user mention")
        if not name or not user_id:
            raise ConfigError(f"user mention {value!r} requires both a name and an id")
        return cls(name=name, id=user_id)


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Settings for one message submission.

    Attributes:
        webhook_url: Teams incoming webhook URL.
        title: Message title (required).
        message: Message body, Markdown allowed (required).
        theme_color: Hex color for the legacy card trim.
        team: Team name, informational only.
        channel: Channel name, informational only.
        sender: Application on whose behalf the message is sent.
        target_urls: Buttons added to the message.
        user_mentions: Users mentioned in the message (Adaptive Card only).
        retries: Extra delivery attempts after the first one.
        retries_delay: Seconds between delivery attempts.
        card_format: Legacy MessageCard or Adaptive Card.
        disable_branding: Omit the "Message delivered by" trailer.
        disable_webhook_url_validation: Accept webhook URLs that do not
            match the expected path pattern.
        silent: Print nothing.
        verbose: Print configuration and payload details.
        convert_eol: Turn line endings in the message into breaks.
    """

    webhook_url: str = ""
    title: str = ""
    message: str = ""
    theme_color: str = DEFAULT_THEME_COLOR
    team: str = DEFAULT_TEAM_NAME
    channel: str = DEFAULT_CHANNEL_NAME
    sender: str = ""
    target_urls: list[TargetURL] = field(default_factory=list)
    user_mentions: list[UserMention] = field(default_factory=list)
    retries: int = DEFAULT_RETRIES
    retries_delay: int = DEFAULT_RETRIES_DELAY
    card_format: CardFormat = CardFormat.ADAPTIVECARD
    disable_branding: bool = False
    disable_webhook_url_validation: bool = False
    silent: bool = False
    verbose: bool = False
    convert_eol: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.card_format, str) and not isinstance(self.card_format, CardFormat):
            try:
                self.card_format = CardFormat(self.card_format.lower())
            except ValueError:
                raise ConfigError(
                    f"unsupported card format {self.card_format!r}; "
                    f"expected one of {[f.value for f in CardFormat]}"
                ) from None

    def validate(self) -> None:
        """Check every setting.

        Raises:
            ConfigError: On the first invalid setting.
        """
        if self.silent and self.verbose:
            raise ConfigError("unsupported: You cannot have both silent and verbose output")

        if len(self.theme_color) < len(DEFAULT_THEME_COLOR):
            raise ConfigError(
                f"provided message theme color too short; got message {self.theme_color!r} "
                f"of length {len(self.theme_color)}, expected length of {len(DEFAULT_THEME_COLOR)}"
            )

        if not self.title:
            raise ConfigError("message title too short")

        if not self.message:
            raise ConfigError("message content too short")

        if self.card_format == CardFormat.MESSAGECARD:
            if len(self.target_urls) > POTENTIAL_ACTION_MAX_SUPPORTED:
                raise ConfigError(
                    f"{len(self.target_urls)} target URLs specified, a maximum of "
                    f"{POTENTIAL_ACTION_MAX_SUPPORTED} are supported"
                )
            if self.user_mentions:
                raise ConfigError("user mentions require the adaptivecard format")

        if self.retries < 0:
            raise ConfigError("retries too short")

        if self.retries_delay < 0:
            raise ConfigError("retries delay too short")

        # The relaxed pattern warning is left to the delivery client
        try:
            if self.disable_webhook_url_validation:
                validate_webhook_length(self.webhook_url)
                validate_webhook_prefix(self.webhook_url)
            else:
                validate_webhook(self.webhook_url)
        except WebhookURLError as e:
            raise ConfigError(f"webhook URL validation failed: {e}") from e

    def submission_timeout(self) -> float:
        """Deadline in seconds covering every planned delivery attempt.

        Each attempt may take the per-request timeout and is followed by the
        retry delay.
        """
        attempts = 1 + max(self.retries, 0)
        return attempts * (DEFAULT_WEBHOOK_SEND_TIMEOUT + max(self.retries_delay, 0))

    def to_dict(self) -> dict[str, Any]:
        return {
            "team": self.team,
            "channel": self.channel,
            "webhook_url": self.webhook_url,
            "theme_color": self.theme_color,
            "title": self.title,
            "message": self.message,
            "sender": self.sender,
            "target_urls": [str(t) for t in self.target_urls],
            "user_mentions": [f"{m.name} ({m.id})" for m in self.user_mentions],
            "retries": self.retries,
            "retries_delay": self.retries_delay,
            "card_format": self.card_format.value,
            "submission_timeout": self.submission_timeout(),
        }
