"""Tests for recursive card validation."""

from __future__ import annotations

import pytest

from send2teams.cards.adaptivecard import (
    Action,
    ActionType,
    Card,
    Column,
    ColumnWidth,
    ColumnWidthKind,
    Element,
    ElementType,
    Fact,
    ISelectAction,
    Mention,
    Mentioned,
    Message,
    new_action_open_url,
    new_container,
    new_mention,
    new_message_from_card,
    new_simple_message,
    new_text_block,
    new_text_block_card,
)
from send2teams.cards.messagecard import MessageCard
from send2teams.cards.validation import CardValidator, collect_errors, is_valid, validate
from send2teams.errors import (
    CardValidationError,
    InvalidFieldValueError,
    InvalidTypeError,
    MissingValueError,
)


def _column_set(*columns: Column) -> Element:
    return Element(type=ElementType.COLUMN_SET.value, columns=list(columns))


# =============================================================================
# Validator Modes
# =============================================================================


class TestCardValidator:
    """Tests for fail-fast and aggregate validation."""

    def test_valid_message(self):
        """Test a well-formed message passes."""
        validate(new_simple_message("hello", title="Title"))

    def test_validation_is_idempotent(self):
        """Test validating twice gives the same result."""
        msg = new_simple_message("hello")
        msg.attachments[0].content.body.append(Element(type=ElementType.IMAGE.value))

        first = [str(e) for e in collect_errors(msg)]
        second = [str(e) for e in collect_errors(msg)]

        assert first == second
        assert len(first) == 1

    def test_fail_fast_reports_first_error(self):
        """Test fail-fast mode raises the first violation only."""
        card = new_text_block_card("text")
        card.body.append(Element(type=ElementType.IMAGE.value))
        card.body.append(Element(type=ElementType.TEXT_BLOCK.value, size="gigantic"))

        with pytest.raises(MissingValueError):
            CardValidator().validate(card)
        assert len(CardValidator().collect(card)) == 1

    def test_aggregate_mode_collects_everything(self):
        """Test aggregate mode raises one error listing every violation."""
        card = new_text_block_card("text")
        card.body.append(Element(type=ElementType.IMAGE.value))
        card.body.append(Element(type=ElementType.TEXT_BLOCK.value, size="gigantic"))

        with pytest.raises(CardValidationError) as exc_info:
            validate(card, fail_fast=False)

        errors = exc_info.value.errors
        assert len(errors) == 2
        assert isinstance(errors[0], MissingValueError)
        assert isinstance(errors[1], InvalidFieldValueError)
        assert "2 card validation error(s)" in str(exc_info.value)

    def test_aggregate_mode_single_error_is_raised_directly(self):
        """Test one collected error is raised as itself."""
        card = new_text_block_card("text")
        card.body.append(Element(type=ElementType.IMAGE.value))

        with pytest.raises(MissingValueError):
            validate(card, fail_fast=False)

    def test_unsupported_node(self):
        """Test unknown objects are rejected."""
        with pytest.raises(InvalidTypeError):
            validate(object())

    def test_is_valid(self):
        """Test the boolean helper."""
        assert is_valid(new_simple_message("hello"))
        assert not is_valid(MessageCard())


# =============================================================================
# Message and Card Rules
# =============================================================================


class TestMessageRules:
    """Tests for message, attachment and card rules."""

    def test_message_requires_attachments(self):
        """Test an empty message is invalid."""
        with pytest.raises(MissingValueError):
            Message().validate()

    def test_message_type(self):
        """Test the message type tag is checked."""
        msg = new_simple_message("hello")
        msg.type = "notmessage"

        with pytest.raises(InvalidTypeError):
            msg.validate()

    def test_attachment_layout(self):
        """Test only list and carousel layouts are accepted."""
        msg = new_simple_message("hello")
        msg.attachment_layout = "grid"

        with pytest.raises(InvalidFieldValueError):
            msg.validate()

    def test_attachment_content_type(self):
        """Test the attachment content type is checked."""
        msg = new_simple_message("hello")
        msg.attachments[0].content_type = "application/json"

        with pytest.raises(InvalidTypeError):
            msg.validate()

    @pytest.mark.parametrize(
        "version, error",
        [("", MissingValueError), ("one", InvalidFieldValueError), ("0.9", InvalidFieldValueError)],
    )
    def test_top_level_version(self, version, error):
        """Test the top-level card version must be a number of at least 1.0."""
        msg = new_simple_message("hello")
        msg.attachments[0].content.version = version

        with pytest.raises(error):
            msg.validate()

    def test_newer_version_accepted(self):
        """Test versions above the newest known one are allowed."""
        msg = new_simple_message("hello")
        msg.attachments[0].content.version = "1.6"
        msg.validate()

    def test_card_type(self):
        """Test the card type tag is checked."""
        card = new_text_block_card("text")
        card.type = "HeroCard"

        with pytest.raises(InvalidTypeError):
            card.validate()

    def test_min_height_requires_alignment(self):
        """Test min height needs a vertical alignment."""
        card = new_text_block_card("text")
        card.min_height = "50px"

        with pytest.raises(MissingValueError):
            card.validate()

        card.vertical_content_alignment = "center"
        card.validate()

    def test_msteams_width(self):
        """Test only the Full width is accepted."""
        card = new_text_block_card("text")
        card.msteams.width = "Half"

        with pytest.raises(InvalidFieldValueError):
            card.validate()


# =============================================================================
# Element Rules
# =============================================================================


class TestElementRules:
    """Tests for body element rules."""

    def test_unknown_element_type(self):
        """Test unknown element types are rejected."""
        card = Card(body=[Element(type="Carousel")])

        with pytest.raises(InvalidTypeError):
            card.validate()

    def test_style_not_supported_for_type(self):
        """Test a style on an element type without styles is rejected."""
        fact_set = Element(type=ElementType.FACT_SET.value, style="emphasis", facts=[Fact("a", "b")])

        with pytest.raises(InvalidFieldValueError) as exc_info:
            Card(body=[fact_set]).validate()

        assert "not supported" in str(exc_info.value)

    def test_style_value_checked(self):
        """Test style values are checked per element type."""
        card = Card(body=[Element(type=ElementType.CONTAINER.value, style="heading", items=[new_text_block("x")])])

        with pytest.raises(InvalidFieldValueError):
            card.validate()

        card.body[0].style = "emphasis"
        card.validate()

    def test_empty_action_set(self):
        """Test an ActionSet needs actions."""
        with pytest.raises(MissingValueError):
            Card(body=[Element(type=ElementType.ACTION_SET.value)]).validate()

    def test_nested_container_is_validated(self):
        """Test validation recurses into container items."""
        inner = new_container()
        inner.items.append(Element(type=ElementType.IMAGE.value))
        outer = new_container()
        outer.items.append(inner)

        with pytest.raises(MissingValueError):
            Card(body=[outer]).validate()


# =============================================================================
# Columns
# =============================================================================


class TestColumnRules:
    """Tests for ColumnSet and Column rules."""

    @pytest.mark.parametrize(
        "width",
        [None, ColumnWidth.auto(), ColumnWidth.stretch(), ColumnWidth.weight(1), ColumnWidth.pixels(50)],
    )
    def test_valid_widths(self, width):
        """Test every width form is accepted."""
        column = Column(items=[new_text_block("x")], width=width)
        Card(body=[_column_set(column)]).validate()

    @pytest.mark.parametrize(
        "width",
        [
            ColumnWidth(ColumnWidthKind.KEYWORD, "wide"),
            ColumnWidth(ColumnWidthKind.PIXELS, "50"),
            ColumnWidth(ColumnWidthKind.PIXELS, "50 px"),
            ColumnWidth(ColumnWidthKind.WEIGHT, "2"),
        ],
    )
    def test_invalid_widths(self, width):
        """Test malformed widths are rejected."""
        column = Column(items=[new_text_block("x")], width=width)

        with pytest.raises(InvalidFieldValueError):
            Card(body=[_column_set(column)]).validate()

    def test_raw_string_width_rejected(self):
        """Test a width must be a ColumnWidth value."""
        column = Column(items=[new_text_block("x")], width="auto")

        with pytest.raises(InvalidFieldValueError):
            Card(body=[_column_set(column)]).validate()

    def test_column_type(self):
        """Test the column type tag is checked."""
        column = Column(items=[new_text_block("x")], type="Row")

        with pytest.raises(InvalidTypeError):
            Card(body=[_column_set(column)]).validate()

    def test_none_item_in_column(self):
        """Test a None column item is reported."""
        column = Column(items=[None])

        with pytest.raises(MissingValueError):
            Card(body=[_column_set(column)]).validate()

    def test_select_action_cannot_show_card(self):
        """Test ShowCard is not a valid select action."""
        column = Column(
            items=[new_text_block("x")],
            select_action=ISelectAction(type=ActionType.SHOW_CARD.value),
        )

        with pytest.raises(InvalidTypeError):
            Card(body=[_column_set(column)]).validate()

    def test_select_action_open_url(self):
        """Test an OpenUrl select action needs a url."""
        column = Column(
            items=[new_text_block("x")],
            select_action=ISelectAction(type=ActionType.OPEN_URL.value),
        )

        with pytest.raises(MissingValueError):
            Card(body=[_column_set(column)]).validate()

        column.select_action.url = "https://example.com"
        Card(body=[_column_set(column)]).validate()


# =============================================================================
# Actions
# =============================================================================


class TestActionRules:
    """Tests for action rules."""

    def test_execute_requires_version_1_4(self):
        """Test Action.Execute is rejected below card version 1.4."""
        card = new_text_block_card("text")
        card.actions.append(Action(type=ActionType.EXECUTE.value, title="Run"))

        with pytest.raises(InvalidTypeError) as exc_info:
            card.validate()
        assert "1.4" in str(exc_info.value)

        card.version = "1.4"
        card.validate()

    def test_submit_rejected(self):
        """Test Action.Submit is never accepted."""
        card = new_text_block_card("text")
        card.version = "1.5"
        card.actions.append(Action(type=ActionType.SUBMIT.value, title="Send"))

        with pytest.raises(InvalidTypeError):
            card.validate()

    def test_fallback_values(self):
        """Test the fallback must be an action type or drop."""
        action = new_action_open_url("https://example.com", "Go")
        action.fallback = "drop"
        validate(action)

        action.fallback = "ignore"
        with pytest.raises(InvalidFieldValueError):
            validate(action)

    def test_card_only_on_show_card(self):
        """Test only ShowCard actions may carry a card."""
        action = new_action_open_url("https://example.com", "Go")
        action.card = new_text_block_card("nested")

        with pytest.raises(InvalidFieldValueError):
            validate(action)

    def test_show_card_nested_card_is_validated(self):
        """Test the ShowCard card is validated with the parent version."""
        nested = new_text_block_card("nested")
        nested.body.append(Element(type=ElementType.IMAGE.value))
        card = new_text_block_card("text")
        card.actions.append(Action(type=ActionType.SHOW_CARD.value, title="More", card=nested))

        with pytest.raises(MissingValueError):
            card.validate()


# =============================================================================
# Mentions
# =============================================================================


class TestMentionRules:
    """Tests for mention rules."""

    def test_mention_present_in_body(self):
        """Test a mention whose text is in the body passes."""
        card = new_text_block_card("Hello <at>Jane Doe</at>")
        card.msteams.entities.append(new_mention("Jane Doe", "jane@example.com"))

        validate(new_message_from_card(card))

    def test_mention_missing_from_body(self):
        """Test a mention whose text is absent from the body fails."""
        card = new_text_block_card("Hello everyone")
        card.msteams.entities.append(new_mention("Jane Doe", "jane@example.com"))

        with pytest.raises(MissingValueError) as exc_info:
            validate(new_message_from_card(card))

        assert "<at>Jane Doe</at>" in str(exc_info.value)

    def test_mention_with_empty_body(self):
        """Test mentions on a card without a body fail."""
        card = Card()
        card.msteams.entities.append(new_mention("Jane Doe", "jane@example.com"))

        with pytest.raises(MissingValueError) as exc_info:
            card.validate()

        assert "empty Card Body" in str(exc_info.value)

    def test_mention_found_in_nested_container(self):
        """Test mention text inside a container counts."""
        container = new_container()
        container.add_element(new_text_block("ping <at>Jane Doe</at>"))
        card = Card(body=[container])
        card.msteams.entities.append(new_mention("Jane Doe", "jane@example.com"))

        card.validate()

    def test_mention_found_in_fact(self):
        """Test mention text inside a fact counts."""
        fact_set = Element(type=ElementType.FACT_SET.value)
        fact_set.add_fact(Fact("Owner", "<at>Jane Doe</at>"))
        card = Card(body=[fact_set])
        card.msteams.entities.append(new_mention("Jane Doe", "jane@example.com"))

        card.validate()

    def test_mention_fields(self):
        """Test the mention entity fields are checked."""
        card = new_text_block_card("<at>Jane</at>")
        card.msteams.entities.append(Mention(text="<at>Jane</at>", mentioned=Mentioned(id="", name="Jane")))

        with pytest.raises(MissingValueError):
            card.validate()
