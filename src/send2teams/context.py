"""Deadline and cancellation context for message submission.

A :class:`SendContext` bounds the cumulative time spent across every delivery
attempt of a single send. It is checked at attempt boundaries by the retry
orchestrator and converted to a per-request timeout by the delivery client.

Example:
    >>> ctx = SendContext.with_timeout(30)
    >>> ctx.err() is None
    True
    >>> ctx.cancel()
    >>> ctx.err()
    CancelledError('context canceled')
"""

from __future__ import annotations

import threading
import time

from send2teams.errors import CancelledError, ContextError, DeadlineExceededError


class SendContext:
    """Cancellation flag plus an optional monotonic deadline."""

    def __init__(self, deadline: float | None = None) -> None:
        """Initialize the context.

        Args:
            deadline: Absolute ``time.monotonic()`` value after which the
                context is expired. ``None`` means no deadline.
        """
        self._deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> SendContext:
        """Create a context that never expires unless cancelled."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> SendContext:
        """Create a context expiring ``seconds`` from now."""
        if seconds < 0:
            raise ValueError("timeout must be non-negative")
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def cancel(self) -> None:
        """Mark the context as cancelled."""
        self._cancelled.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, ``None`` if there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def err(self) -> ContextError | None:
        """Return the reason the context is done, or ``None`` while live."""
        if self._cancelled.is_set():
            return CancelledError()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError()
        return None

    def done(self) -> bool:
        return self.err() is not None

    def __repr__(self) -> str:
        return f"SendContext(remaining={self.remaining()!r}, cancelled={self._cancelled.is_set()})"
