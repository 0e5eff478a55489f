"""Recursive card validation.

:class:`CardValidator` walks a card tree depth first and applies the rule set
registered for each node type. Both card formats share the walker; the legacy
MessageCard and the Adaptive Card model each register their own node types.

In fail-fast mode (the default) the first violation is raised. With
``fail_fast=False`` the validator keeps walking and reports every violation.

Example:
    >>> validator = CardValidator(fail_fast=False)
    >>> errors = validator.collect(message)
    >>> for error in errors:
    ...     print(error)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from send2teams.cards import adaptivecard as ac
from send2teams.cards import messagecard as mc
from send2teams.errors import (
    CardError,
    CardValidationError,
    InvalidFieldValueError,
    InvalidTypeError,
    MissingValueError,
)

logger = logging.getLogger(__name__)

Visitor = Callable[[Any, float], None]


class _StopValidation(Exception):
    """Internal signal used to unwind the walk in fail-fast mode."""

    def __init__(self, error: CardError) -> None:
        self.error = error
        super().__init__(str(error))


class CardValidator:
    """Depth-first validator for MessageCard and Adaptive Card trees.

    Args:
        fail_fast: Stop at the first violation.
        version: Schema version assumed for nodes validated outside a
            top-level card (e.g. a single action). Defaults to the newest
            version this package knows.
    """

    def __init__(self, fail_fast: bool = True, version: float | None = None) -> None:
        self._fail_fast = fail_fast
        self._version = version if version is not None else ac.ADAPTIVE_CARD_MAX_VERSION
        self._errors: list[CardError] = []
        self._visitors: dict[type, Visitor] = {
            # Legacy MessageCard
            mc.MessageCard: self._visit_message_card,
            mc.Section: self._visit_section,
            mc.Fact: self._visit_legacy_fact,
            mc.SectionImage: self._visit_section_image,
            mc.PotentialAction: self._visit_potential_action,
            # Adaptive Card
            ac.Message: self._visit_message,
            ac.Attachment: self._visit_attachment,
            ac.TopLevelCard: self._visit_top_level_card,
            ac.Card: self._visit_card,
            ac.Element: self._visit_element,
            ac.Column: self._visit_column,
            ac.Fact: self._visit_fact,
            ac.Action: self._visit_action,
            ac.ISelectAction: self._visit_select_action,
            ac.MSTeams: self._visit_msteams,
            ac.Mention: self._visit_mention,
            ac.Mentioned: self._visit_mentioned,
        }

    @property
    def fail_fast(self) -> bool:
        return self._fail_fast

    def collect(self, node: Any) -> list[CardError]:
        """Return the violations found in ``node``.

        In fail-fast mode the list holds at most one error.
        """
        self._errors = []
        try:
            self._visit(node, self._version)
        except _StopValidation as stop:
            return [stop.error]
        return list(self._errors)

    def validate(self, node: Any) -> None:
        """Raise if ``node`` has any violation.

        Raises:
            CardError: The single violation found, or a
                :class:`CardValidationError` grouping several of them.
        """
        errors = self.collect(node)
        if not errors:
            return
        if len(errors) == 1:
            raise errors[0]
        raise CardValidationError(errors)

    # -------------------------------------------------------------------------
    # Walk helpers
    # -------------------------------------------------------------------------

    def _report(self, error: CardError) -> None:
        logger.debug(f"Card validation error: {error}")
        if self._fail_fast:
            raise _StopValidation(error)
        self._errors.append(error)

    def _visit(self, node: Any, version: float) -> None:
        for cls in type(node).__mro__:
            visitor = self._visitors.get(cls)
            if visitor is not None:
                visitor(node, version)
                return
        self._report(InvalidTypeError(f"unsupported card node type {type(node).__name__}"))

    def _visit_all(self, nodes: Iterable[Any], version: float) -> None:
        for node in nodes:
            self._visit(node, version)

    def _require(self, value: Any, field_name: str, owner: str) -> bool:
        if value:
            return True
        self._report(MissingValueError(f"required field {field_name} is empty for {owner}"))
        return False

    def _require_type(self, value: Any, expected: str, owner: str) -> None:
        if ac.enum_value(value) != expected:
            self._report(
                InvalidTypeError(f"invalid {owner} type {ac.enum_value(value)!r}; expected {expected!r}")
            )

    def _in_list_if_set(
        self,
        value: Any,
        field_name: str,
        owner: str,
        allowed: Iterable[str],
        error_cls: type[CardError] = InvalidFieldValueError,
    ) -> None:
        value = ac.enum_value(value)
        allowed = list(allowed)
        if value and value not in allowed:
            self._report(
                error_cls(f"invalid {field_name} {value!r} for {owner}; expected one of {allowed}")
            )

    # -------------------------------------------------------------------------
    # Legacy MessageCard
    # -------------------------------------------------------------------------

    def _visit_message_card(self, card: mc.MessageCard, version: float) -> None:
        if not card.text and not card.summary:
            # Teams answers "400 Summary or Text is required." otherwise
            self._report(MissingValueError("invalid message card: summary or text field is required"))

        self._visit_all((s for s in card.sections if s is not None), version)
        self._visit_all(card.potential_actions, version)

    def _visit_section(self, section: mc.Section, version: float) -> None:
        self._visit_all(section.facts, version)
        self._visit_all(section.images, version)
        if section.hero_image is not None:
            self._visit(section.hero_image, version)
        self._visit_all(section.potential_actions, version)

    def _visit_legacy_fact(self, fact: mc.Fact, version: float) -> None:
        self._require(fact.name, "name", "fact")
        self._require(fact.value, "value", "fact")

    def _visit_section_image(self, image: mc.SectionImage, version: float) -> None:
        self._require(image.image, "image", "section image")
        self._require(image.title, "title", "section image")

    def _visit_potential_action(self, action: mc.PotentialAction, version: float) -> None:
        self._require(action.name, "name", "potential action")
        self._in_list_if_set(
            action.type,
            "@type",
            "potential action",
            [t.value for t in mc.PotentialActionType],
            InvalidTypeError,
        )
        if self._require(action.targets, "targets", "OpenUri potential action"):
            for target in action.targets:
                self._require(target.uri, "uri", "OpenUri target")

    # -------------------------------------------------------------------------
    # Adaptive Card: message and card
    # -------------------------------------------------------------------------

    def _visit_message(self, message: ac.Message, version: float) -> None:
        self._require_type(message.type, ac.TYPE_MESSAGE, "message")
        if self._require(message.attachments, "attachments", "message"):
            self._visit_all(message.attachments, version)
        self._in_list_if_set(
            message.attachment_layout,
            "attachmentLayout",
            "message",
            [layout.value for layout in ac.AttachmentLayout],
        )

    def _visit_attachment(self, attachment: ac.Attachment, version: float) -> None:
        self._require_type(attachment.content_type, ac.ATTACHMENT_CONTENT_TYPE, "attachment")
        if attachment.content is None:
            self._report(MissingValueError("required field content is empty for attachment"))
            return
        self._visit(ac.TopLevelCard.from_card(attachment.content), version)

    def _visit_top_level_card(self, card: ac.TopLevelCard, version: float) -> None:
        raw = (card.version or "").strip()
        if not raw:
            self._report(MissingValueError("required field Version is empty for top-level Card"))
        else:
            try:
                number = float(raw)
            except ValueError:
                self._report(InvalidFieldValueError(f"value {card.version!r} incompatible with Version field"))
            else:
                # No upper bound: Teams may support newer schemas first
                if number < ac.ADAPTIVE_CARD_MIN_VERSION:
                    self._report(
                        InvalidFieldValueError(
                            f"unsupported version {card.version!r}; expected minimum value "
                            f"of {ac.format_version(ac.ADAPTIVE_CARD_MIN_VERSION)}"
                        )
                    )

        self._visit_card(card, version)

    def _visit_card(self, card: ac.Card, version: float) -> None:
        try:
            version = float(card.version)
        except (TypeError, ValueError):
            pass

        self._require_type(card.type, ac.TYPE_ADAPTIVE_CARD, "card")
        if card.schema and card.schema != ac.ADAPTIVE_CARD_SCHEMA:
            self._report(
                InvalidFieldValueError(
                    f"invalid Schema {card.schema!r} for card; expected {ac.ADAPTIVE_CARD_SCHEMA!r}"
                )
            )
        if card.min_height and not card.vertical_content_alignment:
            self._report(
                MissingValueError(
                    "field MinHeight is set, VerticalContentAlignment is not; field "
                    "VerticalContentAlignment is only optional when MinHeight is not set"
                )
            )

        self._check_mentions_in_body(card)

        self._visit_all(card.body, version)
        self._visit_all(card.actions, version)
        self._visit(card.msteams, version)

    def _check_mentions_in_body(self, card: ac.Card) -> None:
        mentions = card.msteams.entities
        if not mentions:
            return
        if not card.body:
            self._report(MissingValueError("user mention text not found in empty Card Body"))
            return

        elements = list(_walk_elements(card.body))
        for mention in mentions:
            if not any(e.has_mention_text(mention) for e in elements):
                self._report(
                    MissingValueError(
                        f"user mention text {mention.text!r} not found in elements of Card Body"
                    )
                )

    # -------------------------------------------------------------------------
    # Adaptive Card: elements
    # -------------------------------------------------------------------------

    def _visit_element(self, element: ac.Element, version: float) -> None:
        element_type = ac.enum_value(element.type)
        styles = ac.supported_style_values(element_type)

        if self._require(element_type, "type", "element"):
            self._in_list_if_set(
                element_type,
                "Type",
                "element",
                [t.value for t in ac.ElementType],
                InvalidTypeError,
            )
        self._in_list_if_set(element.size, "Size", "element", [s.value for s in ac.TextSize])
        self._in_list_if_set(element.weight, "Weight", "element", [w.value for w in ac.TextWeight])
        self._in_list_if_set(element.color, "Color", "element", [c.value for c in ac.TextColor])
        self._in_list_if_set(element.spacing, "Spacing", "element", [s.value for s in ac.Spacing])

        if element.style and not styles:
            self._report(
                InvalidFieldValueError(
                    f"invalid Style {ac.enum_value(element.style)!r} for element; "
                    f"Style values not supported for element type {element_type!r}"
                )
            )
        else:
            self._in_list_if_set(element.style, "Style", "element", styles)

        if element_type == ac.ElementType.COLUMN_SET.value:
            self._visit_all(element.columns, version)
        elif element_type == ac.ElementType.ACTION_SET.value:
            if self._require(element.actions, "Actions", element_type):
                self._visit_all(element.actions, version)
        elif element_type == ac.ElementType.CONTAINER.value:
            if self._require(element.items, "Items", element_type):
                self._visit_all(element.items, version)
        elif element_type == ac.ElementType.IMAGE.value:
            self._require(element.url, "URL", element_type)
        elif element_type == ac.ElementType.FACT_SET.value:
            if self._require(element.facts, "Facts", element_type):
                self._visit_all(element.facts, version)

    def _visit_column(self, column: ac.Column, version: float) -> None:
        self._require_type(column.type, ac.TYPE_COLUMN, "column")
        self._check_column_width(column.width)

        for item in column.items:
            if item is None:
                self._report(MissingValueError("card element in Column is None"))
                continue
            self._visit(item, version)

        if column.select_action is not None:
            self._visit(column.select_action, version)

    def _check_column_width(self, width: ac.ColumnWidth | None) -> None:
        if width is None:
            return

        if not isinstance(width, ac.ColumnWidth):
            self._report(
                InvalidFieldValueError(f"invalid column width {width!r}; expected a ColumnWidth value")
            )
            return

        if width.kind == ac.ColumnWidthKind.KEYWORD:
            keywords = [k.value for k in ac.ColumnWidthKeyword]
            if width.value not in keywords:
                self._report(
                    InvalidFieldValueError(
                        f"invalid column width keyword {width.value!r}; expected one of {keywords}"
                    )
                )
        elif width.kind == ac.ColumnWidthKind.WEIGHT:
            if not isinstance(width.value, int) or isinstance(width.value, bool):
                self._report(InvalidFieldValueError(f"invalid column width weight {width.value!r}"))
        elif width.kind == ac.ColumnWidthKind.PIXELS:
            if not ac.COLUMN_WIDTH_PIXEL_PATTERN.match(str(width.value)):
                self._report(
                    InvalidFieldValueError(
                        f"invalid pixel width {width.value!r}; expected value in format "
                        f"{ac.COLUMN_WIDTH_PIXEL_EXAMPLE}"
                    )
                )

    def _visit_fact(self, fact: ac.Fact, version: float) -> None:
        self._require(fact.title, "Title", "Fact")
        self._require(fact.value, "Value", "Fact")

    # -------------------------------------------------------------------------
    # Adaptive Card: actions, Teams properties, mentions
    # -------------------------------------------------------------------------

    def _visit_action(self, action: ac.Action, version: float) -> None:
        action_type = ac.enum_value(action.type)
        allowed = ac.supported_action_values(version)

        if action_type not in allowed:
            message = f"invalid Type {action_type!r} for Action; expected one of {list(allowed)}"
            if action_type == ac.ActionType.EXECUTE.value:
                message += (
                    f" (Action.Execute requires card version "
                    f"{ac.format_version(ac.ACTION_EXECUTE_MIN_CARD_VERSION)} or newer)"
                )
            self._report(InvalidTypeError(message))
            return

        if action_type == ac.ActionType.OPEN_URL.value and not action.url:
            self._report(MissingValueError("invalid URL for Action"))

        self._in_list_if_set(action.fallback, "Fallback", "Action", ac.supported_fallback_values(version))

        if action.card is not None:
            if action_type != ac.ActionType.SHOW_CARD.value:
                self._report(
                    InvalidFieldValueError(f"specifying a Card is unsupported for Action type {action_type!r}")
                )
            else:
                self._visit(action.card, version)

    def _visit_select_action(self, action: ac.ISelectAction, version: float) -> None:
        action_type = ac.enum_value(action.type)
        allowed = ac.supported_select_action_values(version)

        if action_type not in allowed:
            self._report(
                InvalidTypeError(f"invalid Type {action_type!r} for ISelectAction; expected one of {list(allowed)}")
            )
        self._in_list_if_set(
            action.fallback,
            "Fallback",
            "ISelectAction",
            supported_select_fallback_values(version),
        )
        if action_type == ac.ActionType.OPEN_URL.value:
            self._require(action.url, "URL", action_type)

    def _visit_msteams(self, msteams: ac.MSTeams, version: float) -> None:
        self._in_list_if_set(msteams.width, "Width", "MSTeams", [ac.MSTEAMS_WIDTH_FULL])
        self._visit_all(msteams.entities, version)

    def _visit_mention(self, mention: ac.Mention, version: float) -> None:
        if mention.type != ac.TYPE_MENTION:
            self._report(InvalidTypeError(f"invalid Mention type {mention.type!r}; expected {ac.TYPE_MENTION!r}"))
        self._require(mention.text, "Text", "Mention")
        if mention.mentioned is None:
            self._report(MissingValueError("required field Mentioned is empty for Mention"))
        else:
            self._visit(mention.mentioned, version)

    def _visit_mentioned(self, mentioned: ac.Mentioned, version: float) -> None:
        self._require(mentioned.id, "ID", "Mentioned")
        self._require(mentioned.name, "Name", "Mentioned")


def supported_select_fallback_values(version: float) -> tuple[str, ...]:
    return ac.supported_select_action_values(version) + (ac.FALLBACK_OPTION_DROP,)


def _walk_elements(elements: Iterable[ac.Element]) -> Iterable[ac.Element]:
    for element in elements:
        if element is None:
            continue
        yield element
        yield from _walk_elements(element.items)
        for column in element.columns:
            yield from _walk_elements(column.items)


def validate(node: Any, fail_fast: bool = True) -> None:
    """Validate a card tree, raising on the first (or every) violation."""
    CardValidator(fail_fast=fail_fast).validate(node)


def collect_errors(node: Any) -> list[CardError]:
    """Return every violation in a card tree without raising."""
    return CardValidator(fail_fast=False).collect(node)


def is_valid(node: Any) -> bool:
    return not CardValidator().collect(node)
