"""Tests for payload serialization shared by both card formats."""

from __future__ import annotations

import json

from send2teams.cards.adaptivecard import new_simple_message
from send2teams.cards.messagecard import MessageCard, Section, new_message_card
from send2teams.serialization import TeamsMessage, compact, to_json_bytes


class TestCompact:
    """Tests for compact."""

    def test_drops_empty_values(self):
        """Test None and empty containers are removed."""
        data = {"a": None, "b": "", "c": [], "d": {}, "e": "x"}
        assert compact(data) == {"e": "x"}

    def test_keeps_false_and_zero(self):
        """Test falsy scalars other than empty strings are kept."""
        assert compact({"flag": False, "count": 0}) == {"flag": False, "count": 0}

    def test_required_keys_kept(self):
        """Test required keys survive even when empty."""
        assert compact({"body": [], "x": None}, required=("body",)) == {"body": []}

    def test_to_json_bytes_is_compact_utf8(self):
        """Test the wire encoding has no whitespace and keeps non-ASCII text."""
        assert to_json_bytes({"a": 1, "b": "é"}) == '{"a":1,"b":"é"}'.encode("utf-8")


class TestPreparedPayload:
    """Tests for prepare, payload and pretty_print."""

    def test_pretty_print_before_prepare(self):
        """Test pretty_print is empty until the message is prepared."""
        card = new_message_card("Title", "Text")

        assert not card.is_prepared
        assert card.pretty_print() == ""
        assert card.payload().read() == b""

    def test_message_card_round_trip(self):
        """Test a prepared MessageCard decodes to the same content."""
        card = new_message_card("Build Failed", "job #42", "#832561")
        card.add_section(Section(text="one"), Section(text="two"))
        card.prepare()

        data = json.loads(card.payload().read())
        assert data["@type"] == "MessageCard"
        assert data["title"] == "Build Failed"
        assert data["text"] == "job #42"
        assert data["themeColor"] == "#832561"
        assert len(data["sections"]) == 2

    def test_empty_fields_omitted(self):
        """Test unset optional fields do not appear on the wire."""
        card = MessageCard(text="only text")
        card.prepare()

        data = json.loads(card.payload_bytes())
        assert set(data) == {"@type", "@context", "text"}

    def test_pretty_print_is_tab_indented(self):
        """Test pretty_print indents with tabs."""
        msg = new_simple_message("hello")
        msg.prepare()

        pretty = msg.pretty_print()
        assert '\n\t"type": "message"' in pretty
        assert json.loads(pretty) == json.loads(msg.payload_bytes())

    def test_prepare_refreshes_payload(self):
        """Test preparing after a change picks up the change."""
        card = new_message_card("Title", "before")
        card.prepare()
        card.text = "after"
        card.prepare()

        assert json.loads(card.payload_bytes())["text"] == "after"

    def test_payload_streams_are_independent(self):
        """Test each payload() call returns a fresh stream."""
        card = new_message_card("Title", "Text")
        card.prepare()

        first = card.payload().read()
        second = card.payload().read()
        assert first == second != b""

    def test_both_formats_are_teams_messages(self):
        """Test both card formats satisfy the delivery protocol."""
        assert isinstance(new_message_card("t", "x"), TeamsMessage)
        assert isinstance(new_simple_message("x"), TeamsMessage)
