"""Tests for single-attempt HTTP delivery."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from send2teams.cards.adaptivecard import new_simple_message
from send2teams.cards.messagecard import MessageCard, new_message_card
from send2teams.context import SendContext
from send2teams.delivery.client import CONTENT_TYPE, TeamsClient
from send2teams.errors import (
    CancelledError,
    DeadlineExceededError,
    InvalidWebhookPrefixError,
    MissingValueError,
    ProtocolError,
    TransportError,
)


# =============================================================================
# Validation and Preparation
# =============================================================================


class TestTeamsClientPrepare:
    """Tests for input validation and payload preparation."""

    def test_prepare_returns_wire_bytes(self, mock_session, webhook_url):
        """Test prepare returns the serialized message."""
        client = TeamsClient(session=mock_session)
        body = client.prepare(webhook_url, new_message_card("Title", "Text"))

        assert json.loads(body)["text"] == "Text"

    def test_invalid_url_rejected_before_request(self, mock_session):
        """Test a bad webhook URL fails without any HTTP call."""
        client = TeamsClient(session=mock_session)

        with pytest.raises(InvalidWebhookPrefixError):
            client.send(SendContext.background(), "https://example.com/webhook/x", new_simple_message("x"))

        mock_session.post.assert_not_called()

    def test_invalid_message_rejected_before_request(self, mock_session, webhook_url):
        """Test an invalid card fails without any HTTP call."""
        client = TeamsClient(session=mock_session)

        with pytest.raises(MissingValueError):
            client.send(SendContext.background(), webhook_url, MessageCard(title="No text"))

        mock_session.post.assert_not_called()

    def test_relaxed_pattern_validation(self, mock_session):
        """Test a non-standard webhook path is accepted when pattern checks are off."""
        client = TeamsClient(session=mock_session, validate_webhook_pattern=False)
        client.send(
            SendContext.background(),
            "https://outlook.office.com/webhook/custom-path",
            new_simple_message("x"),
        )

        mock_session.post.assert_called_once()


# =============================================================================
# HTTP Submission
# =============================================================================


class TestTeamsClientSend:
    """Tests for the HTTP request and response handling."""

    def test_send_posts_json(self, mock_session, webhook_url):
        """Test the request carries the payload and the JSON content type."""
        client = TeamsClient(session=mock_session)
        msg = new_simple_message("hello")
        client.send(SendContext.with_timeout(30), webhook_url, msg)

        mock_session.post.assert_called_once()
        args, kwargs = mock_session.post.call_args
        assert args[0] == webhook_url
        assert kwargs["headers"] == {"Content-Type": CONTENT_TYPE}
        assert kwargs["data"] == msg.payload_bytes()
        assert 0 < kwargs["timeout"] <= 30

    def test_background_context_has_no_timeout(self, mock_session, webhook_url):
        """Test a context without deadline sends no request timeout."""
        client = TeamsClient(session=mock_session)
        client.send(SendContext.background(), webhook_url, new_simple_message("x"))

        assert mock_session.post.call_args.kwargs["timeout"] is None

    def test_response_closed_on_success(self, mock_session, webhook_url):
        """Test the response is released after a successful post."""
        client = TeamsClient(session=mock_session)
        client.send(SendContext.background(), webhook_url, new_simple_message("x"))

        mock_session.post.return_value.close.assert_called_once()

    def test_failure_status_raises_protocol_error(self, mock_session, make_response, webhook_url):
        """Test a failure status carries the response text verbatim."""
        response = make_response(400, "Summary or Text is required.", "Bad Request")
        mock_session.post.return_value = response
        client = TeamsClient(session=mock_session)

        with pytest.raises(ProtocolError) as exc_info:
            client.send(SendContext.background(), webhook_url, new_simple_message("x"))

        error = exc_info.value
        assert error.status_code == 400
        assert error.response_text == "Summary or Text is required."
        assert "Summary or Text is required." in str(error)
        assert "400 Bad Request" in str(error)
        response.close.assert_called_once()

    def test_server_error(self, mock_session, make_response, webhook_url):
        """Test a 500 answer is a protocol error."""
        mock_session.post.return_value = make_response(500, "Internal error", "Internal Server Error")
        client = TeamsClient(session=mock_session)

        with pytest.raises(ProtocolError) as exc_info:
            client.send(SendContext.background(), webhook_url, new_simple_message("x"))

        assert exc_info.value.status_code == 500

    def test_status_299_is_failure(self, mock_session, make_response, webhook_url):
        """Test statuses from 299 upwards are failures."""
        mock_session.post.return_value = make_response(299, "", "")
        client = TeamsClient(session=mock_session)

        with pytest.raises(ProtocolError):
            client.send(SendContext.background(), webhook_url, new_simple_message("x"))

    def test_request_exception_becomes_transport_error(self, mock_session, webhook_url):
        """Test network failures are wrapped."""
        mock_session.post.side_effect = requests.ConnectionError("connection refused")
        client = TeamsClient(session=mock_session)

        with pytest.raises(TransportError) as exc_info:
            client.send(SendContext.background(), webhook_url, new_simple_message("x"))

        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    def test_done_context_skips_request(self, mock_session, webhook_url):
        """Test a cancelled context fails without posting."""
        ctx = SendContext.background()
        ctx.cancel()
        client = TeamsClient(session=mock_session)

        with pytest.raises(CancelledError):
            client.send(ctx, webhook_url, new_simple_message("x"))

        mock_session.post.assert_not_called()

    @patch("send2teams.context.time.monotonic")
    def test_deadline_passing_after_check_skips_request(self, mock_monotonic, mock_session, webhook_url):
        """Test a deadline that lapses between the checks fails without posting."""
        mock_monotonic.side_effect = [0.0, 9.999, 10.5]
        ctx = SendContext.with_timeout(10)
        client = TeamsClient(session=mock_session)

        with pytest.raises(DeadlineExceededError):
            client.post(ctx, webhook_url, b"{}")

        mock_session.post.assert_not_called()

    def test_send_default_uses_timeout(self, mock_session, webhook_url):
        """Test send_default bounds the request by the default timeout."""
        client = TeamsClient(session=mock_session)
        client.send_default(webhook_url, new_simple_message("x"))

        assert 0 < mock_session.post.call_args.kwargs["timeout"] <= 5.0

    def test_context_manager_closes_session(self, mock_session):
        """Test leaving the with block closes the session."""
        with TeamsClient(session=mock_session) as client:
            assert client.session is mock_session

        mock_session.close.assert_called_once()

    @patch("send2teams.delivery.client.requests.Session")
    def test_default_session(self, mock_session_cls):
        """Test a session is created when none is given."""
        mock_session_cls.return_value = MagicMock()
        client = TeamsClient()

        assert client.session is mock_session_cls.return_value
