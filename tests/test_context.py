"""Tests for the send deadline and cancellation context."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from send2teams.context import SendContext
from send2teams.errors import CancelledError, DeadlineExceededError


class TestSendContext:
    """Tests for SendContext."""

    def test_background_never_expires(self):
        """Test a background context has no deadline."""
        ctx = SendContext.background()

        assert ctx.err() is None
        assert ctx.remaining() is None
        assert not ctx.done()

    def test_cancel(self):
        """Test cancelling marks the context done."""
        ctx = SendContext.with_timeout(60)
        ctx.cancel()

        assert isinstance(ctx.err(), CancelledError)
        assert str(ctx.err()) == "context canceled"
        assert ctx.done()

    @patch("send2teams.context.time.monotonic")
    def test_deadline(self, mock_monotonic):
        """Test the context expires once the clock reaches the deadline."""
        mock_monotonic.return_value = 100.0
        ctx = SendContext.with_timeout(10)

        mock_monotonic.return_value = 105.0
        assert ctx.err() is None
        assert ctx.remaining() == 5.0

        mock_monotonic.return_value = 110.0
        assert isinstance(ctx.err(), DeadlineExceededError)
        assert ctx.remaining() == 0.0

    def test_negative_timeout_rejected(self):
        """Test a negative timeout is an error."""
        with pytest.raises(ValueError):
            SendContext.with_timeout(-1)
