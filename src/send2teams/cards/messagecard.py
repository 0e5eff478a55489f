"""Legacy Office 365 connector MessageCard model.

The MessageCard format is a flat card of sections, each holding activity
fields, facts, images and "potential action" buttons.

Example:
    >>> card = new_message_card("Build Failed", "job #42", "#832561")
    >>> section = Section(title="Details")
    >>> section.add_fact(Fact("Stage", "test"))
    >>> card.add_section(section)
    >>> card.validate()
    >>> card.prepare()

References:
    - https://docs.microsoft.com/en-us/outlook/actionable-messages/message-card-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from send2teams.errors import InvalidTypeError, MissingValueError
from send2teams.serialization import PreparedPayload, compact


# =============================================================================
# Constants
# =============================================================================


MESSAGE_CARD_TYPE = "MessageCard"
MESSAGE_CARD_CONTEXT = "https://schema.org/extensions"

# Teams displays at most this many potential actions per section
POTENTIAL_ACTION_MAX_SUPPORTED = 4


class PotentialActionType(str, Enum):
    """Potential action types usable from an incoming webhook."""

    OPEN_URI = "OpenUri"

    def __str__(self) -> str:
        return self.value


class TargetOS(str, Enum):
    """Operating systems an OpenUri target applies to."""

    DEFAULT = "default"
    IOS = "iOS"
    ANDROID = "android"
    WINDOWS = "windows"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Section Members
# =============================================================================


@dataclass
class Fact:
    """A name/value pair rendered as a table row."""

    name: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass
class SectionImage:
    """An image shown in a section's image gallery or as its hero image."""

    image: str
    title: str

    def to_dict(self) -> dict[str, Any]:
        return {"image": self.image, "title": self.title}


@dataclass
class OpenUriTarget:
    os: str
    uri: str

    def to_dict(self) -> dict[str, Any]:
        return {"os": self.os, "uri": self.uri}


@dataclass
class PotentialAction:
    """A button on a section or card.

    Attributes:
        name: Button label.
        type: Action type tag; only ``OpenUri`` is supported.
        targets: URIs opened by the button, one per operating system.
    """

    name: str
    type: str = PotentialActionType.OPEN_URI.value
    targets: list[OpenUriTarget] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "@type": str(self.type),
                "name": self.name,
                "targets": [t.to_dict() for t in self.targets],
            },
            required=("@type", "name"),
        )


def new_potential_action_open_uri(name: str, uri: str) -> PotentialAction:
    """Create an OpenUri action that opens ``uri`` on every platform.

    Raises:
        MissingValueError: If name or uri is empty.
    """
    if not name:
        raise MissingValueError("missing name value for OpenUri potential action")
    if not uri:
        raise MissingValueError("missing uri value for OpenUri potential action")

    return PotentialAction(
        name=name,
        type=PotentialActionType.OPEN_URI.value,
        targets=[OpenUriTarget(os=TargetOS.DEFAULT.value, uri=uri)],
    )


# =============================================================================
# Section
# =============================================================================


@dataclass
class Section:
    """A block of content within a MessageCard."""

    title: str = ""
    text: str = ""
    activity_title: str = ""
    activity_subtitle: str = ""
    activity_text: str = ""
    activity_image: str = ""
    hero_image: SectionImage | None = None
    markdown: bool = True
    start_group: bool = False
    facts: list[Fact] = field(default_factory=list)
    images: list[SectionImage] = field(default_factory=list)
    potential_actions: list[PotentialAction] = field(default_factory=list)

    def add_fact(self, *facts: Fact) -> None:
        """Append facts after checking all of them.

        Raises:
            MissingValueError: If any fact has an empty name or value. No
                fact is added in that case.
        """
        for fact in facts:
            if not fact.name:
                raise MissingValueError("empty name field for fact", details={"fact": fact.value})
            if not fact.value:
                raise MissingValueError("empty value field for fact", details={"fact": fact.name})

        self.facts.extend(facts)

    def add_fact_from_key_value(self, key: str, *values: str) -> None:
        """Add a single fact whose value is the given values joined by commas."""
        if not key:
            raise MissingValueError("empty key received for new fact")
        if not values:
            raise MissingValueError("no values received for new fact")

        self.add_fact(Fact(name=key, value=", ".join(values)))

    def add_image(self, *images: SectionImage) -> None:
        """Append images after checking all of them.

        Raises:
            MissingValueError: If any image lacks a URL or title.
        """
        for image in images:
            _check_image(image)

        self.images.extend(images)

    def add_hero_image(self, image: SectionImage) -> None:
        _check_image(image)
        self.hero_image = image

    def add_hero_image_str(self, url: str, title: str) -> None:
        self.add_hero_image(SectionImage(image=url, title=title))

    def add_potential_action(self, *actions: PotentialAction) -> None:
        """Append potential actions.

        More than :data:`POTENTIAL_ACTION_MAX_SUPPORTED` actions are accepted;
        Teams shows only the first few.

        Raises:
            MissingValueError: If an action has no name.
            InvalidTypeError: If an action type is not supported.
        """
        for action in actions:
            _check_potential_action(action)

        self.potential_actions.extend(actions)

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "title": self.title,
                "text": self.text,
                "activityImage": self.activity_image,
                "activityTitle": self.activity_title,
                "activitySubtitle": self.activity_subtitle,
                "activityText": self.activity_text,
                "heroImage": self.hero_image.to_dict() if self.hero_image else None,
                "markdown": self.markdown,
                "startGroup": self.start_group,
                "facts": [f.to_dict() for f in self.facts],
                "images": [i.to_dict() for i in self.images],
                "potentialAction": [a.to_dict() for a in self.potential_actions],
            }
        )


def _check_image(image: SectionImage) -> None:
    if not image.image:
        raise MissingValueError("cannot add empty image URL")
    if not image.title:
        raise MissingValueError("cannot add empty image title")


def _check_potential_action(action: PotentialAction) -> None:
    if not action.name:
        raise MissingValueError("missing name value for potential action")
    if str(action.type) not in {t.value for t in PotentialActionType}:
        raise InvalidTypeError(
            f"unsupported potential action type {str(action.type)!r}",
            details={"type": str(action.type)},
        )


# =============================================================================
# MessageCard
# =============================================================================


@dataclass
class MessageCard(PreparedPayload):
    """Legacy connector card.

    Teams rejects a card that has neither ``text`` nor ``summary`` with
    ``400 Summary or Text is required.``; :meth:`validate` catches that before
    submission.
    """

    title: str = ""
    text: str = ""
    summary: str = ""
    theme_color: str = ""
    sections: list[Section] = field(default_factory=list)
    potential_actions: list[PotentialAction] = field(default_factory=list)

    @property
    def type(self) -> str:
        return MESSAGE_CARD_TYPE

    @property
    def context(self) -> str:
        return MESSAGE_CARD_CONTEXT

    def add_section(self, *sections: Section | None) -> None:
        """Append sections, silently skipping ``None``.

        Skipping ``None`` is the one place a builder accepts an unusable
        argument without raising.
        """
        self.sections.extend(s for s in sections if s is not None)

    def add_potential_action(self, *actions: PotentialAction) -> None:
        for action in actions:
            _check_potential_action(action)

        self.potential_actions.extend(actions)

    def validate(self) -> None:
        """Raise the first problem found with this card.

        Raises:
            MissingValueError: If both text and summary are empty.
        """
        from send2teams.cards.validation import validate

        validate(self)

    def is_valid(self) -> bool:
        from send2teams.cards.validation import collect_errors

        return not collect_errors(self)

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "@type": MESSAGE_CARD_TYPE,
                "@context": MESSAGE_CARD_CONTEXT,
                "summary": self.summary,
                "title": self.title,
                "text": self.text,
                "themeColor": self.theme_color,
                "sections": [s.to_dict() for s in self.sections if s is not None],
                "potentialAction": [a.to_dict() for a in self.potential_actions],
            },
            required=("@type", "@context"),
        )


def new_message_card(title: str = "", text: str = "", theme_color: str = "") -> MessageCard:
    """Create a MessageCard with the common top-level fields set."""
    return MessageCard(title=title, text=text, theme_color=theme_color)


def new_section() -> Section:
    return Section()
