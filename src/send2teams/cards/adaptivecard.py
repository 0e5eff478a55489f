"""Adaptive Card model for Teams incoming webhooks.

A :class:`Message` wraps one or more attachments, each holding a
:class:`TopLevelCard`. Cards hold an ordered body of :class:`Element` values
and an ordered list of :class:`Action` values.

Builder methods check their arguments before touching the card, so a failed
call leaves the card unchanged.

Example:
    >>> msg = new_simple_message("job #42 failed", title="Build Failed")
    >>> card = msg.attachments[0].content
    >>> card.add_action(new_action_open_url("https://ci.example.com/42", "Logs"))
    >>> msg.validate()
    >>> msg.prepare()

References:
    - Adaptive Cards: https://adaptivecards.io/
    - Teams format reference: https://docs.microsoft.com/en-us/microsoftteams/platform/task-modules-and-cards/cards/cards-format
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from send2teams.errors import InvalidTypeError, MissingValueError, ValueNotFoundError
from send2teams.serialization import PreparedPayload, compact


# =============================================================================
# Constants
# =============================================================================


TYPE_MESSAGE = "message"
TYPE_ADAPTIVE_CARD = "AdaptiveCard"
TYPE_COLUMN = "Column"
TYPE_MENTION = "mention"

ADAPTIVE_CARD_SCHEMA = "http://adaptivecards.io/schemas/adaptive-card.json"
ATTACHMENT_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"

# Newest schema version this module targets; newer versions are still accepted
ADAPTIVE_CARD_MAX_VERSION = 1.3
ADAPTIVE_CARD_MIN_VERSION = 1.0
ADAPTIVE_CARD_VERSION_TEMPLATE = "{:0.1f}"

ACTION_EXECUTE_MIN_CARD_VERSION = 1.4

MENTION_TEXT_TEMPLATE = "<at>{}</at>"
DEFAULT_MENTION_SEPARATOR = " "

# Teams shows at most this many actions per card or ActionSet
TEAMS_ACTIONS_DISPLAY_LIMIT = 6

MSTEAMS_WIDTH_FULL = "Full"

COLUMN_WIDTH_PIXEL_PATTERN = re.compile(r"^[0-9]+px$")
COLUMN_WIDTH_PIXEL_EXAMPLE = "50px"

FALLBACK_OPTION_DROP = "drop"


class AttachmentLayout(str, Enum):
    LIST = "list"
    CAROUSEL = "carousel"

    def __str__(self) -> str:
        return self.value


class ElementType(str, Enum):
    """Element types a card body may contain."""

    ACTION_SET = "ActionSet"
    COLUMN_SET = "ColumnSet"
    CONTAINER = "Container"
    FACT_SET = "FactSet"
    IMAGE = "Image"
    IMAGE_SET = "ImageSet"
    INPUT_CHOICE_SET = "Input.ChoiceSet"
    INPUT_DATE = "Input.Date"
    INPUT_NUMBER = "Input.Number"
    INPUT_TEXT = "Input.Text"
    INPUT_TIME = "Input.Time"
    INPUT_TOGGLE = "Input.Toggle"
    MEDIA = "Media"
    RICH_TEXT_BLOCK = "RichTextBlock"
    TEXT_BLOCK = "TextBlock"
    TEXT_RUN = "TextRun"

    def __str__(self) -> str:
        return self.value


class ActionType(str, Enum):
    """Action types.

    ``Action.Submit`` is listed for completeness but is not usable from an
    incoming webhook and fails validation.
    """

    EXECUTE = "Action.Execute"
    SUBMIT = "Action.Submit"
    OPEN_URL = "Action.OpenUrl"
    SHOW_CARD = "Action.ShowCard"
    TOGGLE_VISIBILITY = "Action.ToggleVisibility"

    def __str__(self) -> str:
        return self.value


class TextSize(str, Enum):
    SMALL = "small"
    DEFAULT = "default"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extraLarge"

    def __str__(self) -> str:
        return self.value


class TextWeight(str, Enum):
    BOLDER = "bolder"
    LIGHTER = "lighter"
    DEFAULT = "default"

    def __str__(self) -> str:
        return self.value


class TextColor(str, Enum):
    DEFAULT = "default"
    DARK = "dark"
    LIGHT = "light"
    ACCENT = "accent"
    GOOD = "good"
    WARNING = "warning"
    ATTENTION = "attention"

    def __str__(self) -> str:
        return self.value


class Spacing(str, Enum):
    DEFAULT = "default"
    NONE = "none"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extraLarge"
    PADDING = "padding"

    def __str__(self) -> str:
        return self.value


class TextBlockStyle(str, Enum):
    DEFAULT = "default"
    HEADING = "heading"

    def __str__(self) -> str:
        return self.value


class ContainerStyle(str, Enum):
    DEFAULT = "default"
    EMPHASIS = "emphasis"
    GOOD = "good"
    ATTENTION = "attention"
    WARNING = "warning"
    ACCENT = "accent"

    def __str__(self) -> str:
        return self.value


class ImageStyle(str, Enum):
    DEFAULT = "default"
    PERSON = "person"

    def __str__(self) -> str:
        return self.value


class ChoiceInputStyle(str, Enum):
    COMPACT = "compact"
    EXPANDED = "expanded"
    FILTERED = "filtered"

    def __str__(self) -> str:
        return self.value


class TextInputStyle(str, Enum):
    TEXT = "text"
    TEL = "tel"
    URL = "url"
    EMAIL = "email"
    PASSWORD = "password"

    def __str__(self) -> str:
        return self.value


class ColumnWidthKeyword(str, Enum):
    AUTO = "auto"
    STRETCH = "stretch"

    def __str__(self) -> str:
        return self.value


def enum_value(value: Any) -> Any:
    """Plain value of an enum member, anything else unchanged."""
    if isinstance(value, Enum):
        return value.value
    return value


def supported_style_values(element_type: str) -> tuple[str, ...]:
    """Style values allowed for an element type (empty if it has no style)."""
    styles: dict[str, type[Enum]] = {
        ElementType.TEXT_BLOCK.value: TextBlockStyle,
        ElementType.CONTAINER.value: ContainerStyle,
        ElementType.COLUMN_SET.value: ContainerStyle,
        ElementType.IMAGE.value: ImageStyle,
        ElementType.INPUT_CHOICE_SET.value: ChoiceInputStyle,
        ElementType.INPUT_TEXT.value: TextInputStyle,
    }
    enum_cls = styles.get(enum_value(element_type))
    if enum_cls is None:
        return ()
    return tuple(m.value for m in enum_cls)


def supported_action_values(version: float) -> tuple[str, ...]:
    """Action types usable in a card of the given schema version."""
    values = [
        ActionType.OPEN_URL.value,
        ActionType.SHOW_CARD.value,
        ActionType.TOGGLE_VISIBILITY.value,
    ]
    if version >= ACTION_EXECUTE_MIN_CARD_VERSION:
        values.insert(0, ActionType.EXECUTE.value)
    return tuple(values)


def supported_select_action_values(version: float) -> tuple[str, ...]:
    """Action types usable as a select action; ShowCard is excluded."""
    return tuple(v for v in supported_action_values(version) if v != ActionType.SHOW_CARD.value)


def supported_fallback_values(version: float) -> tuple[str, ...]:
    return supported_action_values(version) + (FALLBACK_OPTION_DROP,)


def format_version(version: float) -> str:
    return ADAPTIVE_CARD_VERSION_TEMPLATE.format(version)


# =============================================================================
# Column Width
# =============================================================================


class ColumnWidthKind(str, Enum):
    KEYWORD = "keyword"
    WEIGHT = "weight"
    PIXELS = "pixels"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ColumnWidth:
    """Width of a column: a keyword, a relative weight, or a pixel size.

    Use the constructors rather than building instances directly:

        ColumnWidth.auto()
        ColumnWidth.weight(2)
        ColumnWidth.pixels(50)    # "50px"
    """

    kind: ColumnWidthKind
    value: str | int

    @classmethod
    def auto(cls) -> ColumnWidth:
        return cls(ColumnWidthKind.KEYWORD, ColumnWidthKeyword.AUTO.value)

    @classmethod
    def stretch(cls) -> ColumnWidth:
        return cls(ColumnWidthKind.KEYWORD, ColumnWidthKeyword.STRETCH.value)

    @classmethod
    def weight(cls, weight: int) -> ColumnWidth:
        return cls(ColumnWidthKind.WEIGHT, weight)

    @classmethod
    def pixels(cls, pixels: int | str) -> ColumnWidth:
        if isinstance(pixels, int):
            pixels = f"{pixels}px"
        return cls(ColumnWidthKind.PIXELS, pixels.strip())

    @classmethod
    def parse(cls, value: str | int) -> ColumnWidth:
        """Build a width from its JSON form (``"auto"``, ``2``, ``"50px"``)."""
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.weight(value)
        text = str(value).strip()
        if text in {k.value for k in ColumnWidthKeyword}:
            return cls(ColumnWidthKind.KEYWORD, text)
        return cls(ColumnWidthKind.PIXELS, text)

    def to_json(self) -> str | int:
        return self.value


# =============================================================================
# Card Members
# =============================================================================


@dataclass
class Fact:
    """A title/value pair within a FactSet."""

    title: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "value": self.value}


@dataclass
class Mentioned:
    """The user referenced by a mention."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class Mention:
    """A user mention entity registered on a card.

    ``text`` must also appear in a TextBlock or Fact of the card body,
    otherwise Teams ignores the mention.
    """

    text: str
    mentioned: Mentioned
    type: str = TYPE_MENTION

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "text": self.text,
            "mentioned": self.mentioned.to_dict(),
        }


@dataclass
class MSTeams:
    """Teams specific card properties."""

    width: str = ""
    allow_expand: bool = False
    entities: list[Mention] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "width": enum_value(self.width),
                "allowExpand": self.allow_expand or None,
                "entities": [m.to_dict() for m in self.entities],
            }
        )


@dataclass
class ISelectAction:
    """Action invoked by selecting a column (ShowCard is not allowed)."""

    type: str
    id: str = ""
    title: str = ""
    url: str = ""
    fallback: str = ""

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "type": enum_value(self.type),
                "id": self.id,
                "title": self.title,
                "url": self.url,
                "fallback": enum_value(self.fallback),
            },
            required=("type",),
        )


@dataclass
class Action:
    """A button in a card's action bar or in an ActionSet."""

    type: str
    id: str = ""
    title: str = ""
    url: str = ""
    fallback: str = ""
    card: Card | None = None

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "type": enum_value(self.type),
                "id": self.id,
                "title": self.title,
                "url": self.url,
                "fallback": enum_value(self.fallback),
                "card": self.card.to_dict() if self.card is not None else None,
            },
            required=("type",),
        )


def new_action_open_url(url: str, title: str) -> Action:
    """Create a validated ``Action.OpenUrl`` button.

    Raises:
        MissingValueError: If url is empty.
    """
    action = Action(type=ActionType.OPEN_URL.value, title=title, url=url)
    _validate(action)
    return action


def new_action_sets_from_actions(*actions: Action) -> list[Element]:
    """Split actions into ActionSets of at most six, preserving order.

    Raises:
        MissingValueError: If no actions are given.
    """
    if not actions:
        raise MissingValueError("received empty collection of actions to create ActionSet")

    for action in actions:
        _validate(action)

    limit = TEAMS_ACTIONS_DISPLAY_LIMIT
    sets_needed = math.ceil(len(actions) / limit)
    return [
        Element(type=ElementType.ACTION_SET.value, actions=list(actions[i * limit : (i + 1) * limit]))
        for i in range(sets_needed)
    ]


@dataclass
class Column:
    """A column within a ColumnSet."""

    items: list[Element] = field(default_factory=list)
    width: ColumnWidth | None = None
    id: str = ""
    select_action: ISelectAction | None = None
    type: str = TYPE_COLUMN

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "type": self.type,
                "id": self.id,
                "width": self.width.to_json() if self.width is not None else None,
                "items": [i.to_dict() for i in self.items if i is not None],
                "selectAction": self.select_action.to_dict() if self.select_action else None,
            },
            required=("type",),
        )


# =============================================================================
# Element
# =============================================================================


@dataclass
class Element:
    """A card body element.

    One record covers every element type; ``type`` decides which of the
    collection fields are meaningful (``items`` for Container, ``columns``
    for ColumnSet, ``actions`` for ActionSet, ``facts`` for FactSet).
    """

    type: str
    id: str = ""
    text: str = ""
    url: str = ""
    size: str = ""
    weight: str = ""
    color: str = ""
    spacing: str = ""
    style: str = ""
    items: list[Element] = field(default_factory=list)
    columns: list[Column] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    facts: list[Fact] = field(default_factory=list)
    wrap: bool = False
    separator: bool = False

    def add_fact(self, *facts: Fact) -> None:
        """Append facts to a FactSet.

        Raises:
            InvalidTypeError: If this element is not a FactSet.
            MissingValueError: If no facts are given, or any fact has an
                empty title or value. Nothing is appended on error.
        """
        if enum_value(self.type) != ElementType.FACT_SET.value:
            raise InvalidTypeError(
                f"unsupported element type {enum_value(self.type)}; "
                f"expected {ElementType.FACT_SET.value}"
            )
        if not facts:
            raise MissingValueError("received empty collection of facts")

        for fact in facts:
            _validate(fact)

        self.facts.extend(facts)

    def add_element(self, element: Element, prepend: bool = False) -> None:
        """Add an element to a Container's items.

        Raises:
            InvalidTypeError: If this element is not a Container.
        """
        self._require_container()
        _validate(element)
        if prepend:
            self.items.insert(0, element)
        else:
            self.items.append(element)

    def add_action(self, *actions: Action, prepend: bool = False) -> None:
        """Add actions to a Container, grouped into ActionSets of six."""
        self._require_container()
        action_sets = new_action_sets_from_actions(*actions)
        if prepend:
            self.items[:0] = action_sets
        else:
            self.items.extend(action_sets)

    def _require_container(self) -> None:
        if enum_value(self.type) != ElementType.CONTAINER.value:
            raise InvalidTypeError(
                f"unsupported element type {enum_value(self.type)}; "
                f"expected {ElementType.CONTAINER.value}"
            )

    def has_mention_text(self, mention: Mention) -> bool:
        """Whether this TextBlock or FactSet contains the mention text."""
        element_type = enum_value(self.type)
        if element_type == ElementType.TEXT_BLOCK.value:
            return mention.text in self.text
        if element_type == ElementType.FACT_SET.value:
            return any(mention.text in f.title or mention.text in f.value for f in self.facts)
        return False

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "type": enum_value(self.type),
                "id": self.id,
                "text": self.text,
                "url": self.url,
                "size": enum_value(self.size),
                "weight": enum_value(self.weight),
                "color": enum_value(self.color),
                "spacing": enum_value(self.spacing),
                "style": enum_value(self.style),
                "items": [i.to_dict() for i in self.items],
                "columns": [c.to_dict() for c in self.columns],
                "actions": [a.to_dict() for a in self.actions],
                "facts": [f.to_dict() for f in self.facts],
                "wrap": self.wrap or None,
                "separator": self.separator or None,
            },
            required=("type",),
        )


def new_text_block(text: str, wrap: bool = True) -> Element:
    return Element(type=ElementType.TEXT_BLOCK.value, text=text, wrap=wrap)


def new_title_text_block(title: str, wrap: bool = True) -> Element:
    """TextBlock styled as a card heading."""
    return Element(
        type=ElementType.TEXT_BLOCK.value,
        text=title,
        wrap=wrap,
        style=TextBlockStyle.HEADING.value,
        size=TextSize.LARGE.value,
        weight=TextWeight.BOLDER.value,
    )


def new_container() -> Element:
    return Element(type=ElementType.CONTAINER.value)


def new_action_set() -> Element:
    return Element(type=ElementType.ACTION_SET.value)


def new_fact_set() -> Element:
    return Element(type=ElementType.FACT_SET.value)


def new_mention(display_name: str, id: str) -> Mention:
    """Create a mention entity for a user.

    Raises:
        MissingValueError: If display_name or id is empty.
    """
    if not display_name:
        raise MissingValueError("required name argument is empty")
    if not id:
        raise MissingValueError("required id argument is empty")

    return Mention(
        text=MENTION_TEXT_TEMPLATE.format(display_name),
        mentioned=Mentioned(id=id, name=display_name),
    )


# =============================================================================
# Card
# =============================================================================


@dataclass
class Card:
    """An Adaptive Card.

    Attributes:
        body: Ordered body elements.
        actions: Ordered action bar buttons.
        msteams: Teams specific properties (width, mention entities).
        min_height: Minimum card height, e.g. ``"50px"``. Requires
            ``vertical_content_alignment``.
    """

    type: str = TYPE_ADAPTIVE_CARD
    schema: str = ADAPTIVE_CARD_SCHEMA
    version: str = field(default_factory=lambda: format_version(ADAPTIVE_CARD_MAX_VERSION))
    fallback_text: str = ""
    body: list[Element] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    msteams: MSTeams = field(default_factory=MSTeams)
    min_height: str = ""
    vertical_content_alignment: str = ""

    def version_number(self) -> float:
        """Schema version as a float, or the newest known version if unparsable."""
        try:
            return float(self.version)
        except (TypeError, ValueError):
            return ADAPTIVE_CARD_MAX_VERSION

    def add_element(self, *elements: Element, prepend: bool = False) -> None:
        """Add body elements after validating every one of them.

        Raises:
            MissingValueError: If no elements are given.
            CardError: If any element is invalid. The body is unchanged.
        """
        if not elements:
            raise MissingValueError("received empty collection of elements")

        for element in elements:
            _validate(element, self.version_number())

        if prepend:
            self.body[:0] = elements
        else:
            self.body.extend(elements)

    def add_action(self, *actions: Action, prepend: bool = False) -> None:
        """Add action bar buttons after validating every one of them.

        Teams shows only the first six; use :func:`new_action_sets_from_actions`
        to page larger sets into the body instead.
        """
        if not actions:
            raise MissingValueError("received empty collection of actions")

        for action in actions:
            _validate(action, self.version_number())

        if prepend:
            self.actions[:0] = actions
        else:
            self.actions.extend(actions)

    def add_fact_set(self, *fact_sets: Element, prepend: bool = False) -> None:
        if not fact_sets:
            raise MissingValueError("received empty collection of factsets")

        for fact_set in fact_sets:
            if enum_value(fact_set.type) != ElementType.FACT_SET.value:
                raise InvalidTypeError(
                    f"invalid element type {enum_value(fact_set.type)!r}; "
                    f"expected {ElementType.FACT_SET.value!r}"
                )

        self.add_element(*fact_sets, prepend=prepend)

    def add_container(self, container: Element, prepend: bool = False) -> None:
        """Add a Container element to the body.

        Raises:
            InvalidTypeError: If the element is not a Container.
            MissingValueError: If the container has no items.
        """
        if enum_value(container.type) != ElementType.CONTAINER.value:
            raise InvalidTypeError(
                f"invalid element type {enum_value(container.type)!r}; "
                f"expected {ElementType.CONTAINER.value!r}"
            )
        self.add_element(container, prepend=prepend)

    def add_mention(self, *mentions: Mention, prepend: bool = False) -> None:
        """Register mentions and add a TextBlock carrying their text."""
        text_block = Element(type=ElementType.TEXT_BLOCK.value, wrap=True)
        add_mention(self, text_block, *mentions, prepend_text=True)

        if prepend:
            self.body.insert(0, text_block)
        else:
            self.body.append(text_block)

    def mention(
        self,
        display_name: str,
        id: str,
        text: str,
        prepend: bool = False,
    ) -> None:
        """Mention a user in a new TextBlock reading ``<at>name</at> text``.

        Raises:
            MissingValueError: If any argument is empty.
        """
        if not text:
            raise MissingValueError("required text argument is empty")

        mention = new_mention(display_name, id)
        text_block = new_text_block(f"{mention.text} {text}", wrap=True)

        if prepend:
            self.body.insert(0, text_block)
        else:
            self.body.append(text_block)
        self.msteams.entities.append(mention)

    def get_element(self, id: str) -> Element:
        """Find a body element, or an item of a body element, by id.

        Raises:
            MissingValueError: If id is empty.
            ValueNotFoundError: If no element has that id.
        """
        if not id:
            raise MissingValueError("empty ID value specified")

        for element in self.body:
            if element.id == id:
                return element
            for item in element.items:
                if item.id == id:
                    return item

        raise ValueNotFoundError(f"unable to retrieve element id {id!r}", details={"id": id})

    def set_full_width(self) -> None:
        """Render the card across the full width of the Teams channel."""
        self.msteams.width = MSTEAMS_WIDTH_FULL

    def has_mentions(self) -> bool:
        return bool(self.msteams.entities)

    def validate(self) -> None:
        _validate(self)

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "type": self.type,
                "$schema": self.schema,
                "version": self.version,
                "fallbackText": self.fallback_text,
                "body": [e.to_dict() for e in self.body],
                "actions": [a.to_dict() for a in self.actions],
                "msteams": self.msteams.to_dict(),
                "minHeight": self.min_height,
                "verticalContentAlignment": self.vertical_content_alignment,
            },
            required=("type", "body"),
        )


@dataclass
class TopLevelCard(Card):
    """A card attached directly to a message; its version is required."""

    @classmethod
    def from_card(cls, card: Card) -> TopLevelCard:
        if isinstance(card, TopLevelCard):
            return card
        return cls(**{f.name: getattr(card, f.name) for f in fields(Card)})


def new_card() -> Card:
    """Create an empty card targeting the newest known schema version."""
    return Card()


def new_text_block_card(text: str, title: str = "", wrap: bool = True) -> Card:
    """Create a card holding a text block, headed by a title when given.

    Raises:
        MissingValueError: If text is empty.
    """
    if not text:
        raise MissingValueError("required field text is empty")

    card = new_card()
    if title:
        card.body.append(new_title_text_block(title, wrap))
    card.body.append(new_text_block(text, wrap))
    return card


def new_mention_card(display_name: str, id: str, text: str) -> Card:
    """Create a card whose single TextBlock mentions a user."""
    if not text:
        raise MissingValueError("required text argument is empty")

    mention = new_mention(display_name, id)
    card = new_text_block_card(text, "", True)
    card.body[0].text = f"{mention.text} {card.body[0].text}"
    card.msteams.entities.append(mention)
    return card


def add_mention(
    card: Card,
    text_block: Element,
    *mentions: Mention,
    prepend_text: bool = True,
    separator: str = DEFAULT_MENTION_SEPARATOR,
) -> None:
    """Register mentions on a card and write their text into a TextBlock.

    The text block is not added to the card; the caller places it.

    Raises:
        InvalidTypeError: If text_block is not a TextBlock.
        MissingValueError: If no mentions are given.
        CardError: If any mention is invalid.
    """
    if card is None:
        raise MissingValueError("specified card is None")
    if text_block is None:
        raise MissingValueError("specified TextBlock element is None")
    if enum_value(text_block.type) != ElementType.TEXT_BLOCK.value:
        raise InvalidTypeError(
            f"invalid element type {enum_value(text_block.type)!r}; "
            f"expected {ElementType.TEXT_BLOCK.value!r}"
        )
    if not mentions:
        raise MissingValueError("received empty collection of mentions")

    for mention in mentions:
        _validate(mention)

    separator = separator or DEFAULT_MENTION_SEPARATOR
    mentions_text = " ".join(m.text for m in mentions)
    card.msteams.entities.extend(mentions)

    if prepend_text:
        text_block.text = mentions_text + separator + text_block.text
    else:
        text_block.text = text_block.text + separator + mentions_text
    text_block.wrap = True


# =============================================================================
# Message
# =============================================================================


@dataclass
class Attachment:
    """Message attachment wrapping a top-level card."""

    content: TopLevelCard
    content_type: str = ATTACHMENT_CONTENT_TYPE
    content_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "contentType": self.content_type,
                "contentUrl": self.content_url,
                "content": self.content.to_dict(),
            },
            required=("contentType", "content"),
        )


@dataclass
class Message(PreparedPayload):
    """Top-level Adaptive Card message posted to the webhook."""

    type: str = TYPE_MESSAGE
    attachments: list[Attachment] = field(default_factory=list)
    attachment_layout: str = ""

    def attach(self, *cards: Card) -> None:
        """Attach cards, each wrapped as a top-level card.

        Raises:
            MissingValueError: If no cards are given.
        """
        if not cards:
            raise MissingValueError("received empty collection of cards")

        for card in cards:
            self.attachments.append(Attachment(content=TopLevelCard.from_card(card)))

    def carousel(self) -> Message:
        """Display attachments as a carousel instead of a list."""
        self.attachment_layout = AttachmentLayout.CAROUSEL.value
        return self

    def mention(
        self,
        display_name: str,
        id: str,
        text: str,
        prepend: bool = False,
    ) -> None:
        """Mention a user in the first attached card.

        A message without attachments gets a new mention card instead.
        """
        if not self.attachments:
            self.attach(new_mention_card(display_name, id, text))
            return

        self.attachments[0].content.mention(display_name, id, text, prepend=prepend)

    def validate(self) -> None:
        """Raise the first validation error found in the message tree."""
        _validate(self)

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "type": self.type,
                "attachments": [a.to_dict() for a in self.attachments],
                "attachmentLayout": enum_value(self.attachment_layout),
            },
            required=("type", "attachments"),
        )


def new_message() -> Message:
    return Message()


def new_message_from_card(card: Card) -> Message:
    msg = Message()
    msg.attach(card)
    return msg


def new_simple_message(text: str, title: str = "", wrap: bool = True) -> Message:
    """Create a message holding a single text card.

    Raises:
        MissingValueError: If text is empty.
    """
    return new_message_from_card(new_text_block_card(text, title, wrap))


def new_mention_message(display_name: str, id: str, text: str) -> Message:
    return new_message_from_card(new_mention_card(display_name, id, text))


def _validate(node: Any, version: float | None = None) -> None:
    from send2teams.cards.validation import CardValidator

    CardValidator(version=version).validate(node)
