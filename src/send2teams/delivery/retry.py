"""Bounded constant-delay retry for message submission.

The orchestrator moves through these states::

    ATTEMPTING(1) -> ATTEMPTING(n) -> SUCCEEDED
                                   -> ABORTED    (context done before an attempt)
                                   -> EXHAUSTED  (1 + retries attempts failed)

The context is checked before every attempt, so a cancellation is noticed
even if the previous attempt failed for another reason. The delay between
attempts is not interrupted by cancellation; it is observed at the next
attempt boundary.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from send2teams.context import SendContext
from send2teams.errors import (
    ContextError,
    DeliveryError,
    RetryAbortedError,
    RetryExhaustedError,
)
from send2teams.serialization import TeamsMessage

logger = logging.getLogger(__name__)


class RetryState(str, Enum):
    """States of the retry state machine."""

    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"
    EXHAUSTED = "exhausted"

    def __str__(self) -> str:
        return self.value


@dataclass
class ConstantBackoff:
    """Constant backoff strategy.

    Always returns the same delay.
    """

    delay: float = 2.0

    def get_delay(self, attempt: int) -> float:
        return self.delay


@dataclass
class RetryOutcome:
    """Terminal result of a retry run."""

    state: RetryState
    attempts: int
    max_attempts: int
    last_error: DeliveryError | None = None
    reason: ContextError | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == RetryState.SUCCEEDED

    def raise_for_state(self) -> None:
        """Raise the error matching a failed terminal state.

        Raises:
            RetryAbortedError: The context was done before an attempt.
            RetryExhaustedError: Every attempt failed.
        """
        if self.state == RetryState.ABORTED:
            assert self.reason is not None
            raise RetryAbortedError(
                self.attempts,
                self.max_attempts,
                self.reason,
                self.last_error,
            ) from (self.last_error or self.reason)
        if self.state == RetryState.EXHAUSTED:
            assert self.last_error is not None
            raise RetryExhaustedError(self.attempts, self.last_error) from self.last_error


class RetryOrchestrator:
    """Repeat a delivery attempt up to ``1 + retries`` times.

    Example:
        orchestrator = RetryOrchestrator(retries=2, retries_delay=2)
        orchestrator.send(client, SendContext.with_timeout(30), url, message)
    """

    def __init__(
        self,
        retries: int,
        retries_delay: float,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            retries: Extra attempts after the first one (>= 0).
            retries_delay: Seconds to wait between attempts (>= 0).
            log: Logger for attempt diagnostics.

        Raises:
            ValueError: If retries or retries_delay is negative.
        """
        if retries < 0:
            raise ValueError("retries must be non-negative")
        if retries_delay < 0:
            raise ValueError("retries_delay must be non-negative")

        self._retries = retries
        self._backoff = ConstantBackoff(delay=retries_delay)
        self._logger = log or logger

    @property
    def max_attempts(self) -> int:
        return 1 + self._retries

    def run(self, ctx: SendContext, attempt: Callable[[], None]) -> RetryOutcome:
        """Call ``attempt`` until it succeeds, the budget runs out or ``ctx`` is done.

        Only :class:`DeliveryError` is retried; anything else propagates.
        """
        max_attempts = self.max_attempts
        last_error: DeliveryError | None = None

        for n in range(1, max_attempts + 1):
            ctx_err = ctx.err()
            if ctx_err is not None:
                self._logger.warning(
                    f"Context cancelled or expired: {ctx_err}; aborting message "
                    f"submission after {n - 1} of {max_attempts} attempts"
                )
                return RetryOutcome(RetryState.ABORTED, n - 1, max_attempts, last_error, ctx_err)

            try:
                attempt()
            except ContextError as e:
                self._logger.warning(f"Context done during attempt {n} of {max_attempts}: {e}")
                return RetryOutcome(RetryState.ABORTED, n, max_attempts, last_error, e)
            except DeliveryError as e:
                last_error = e
                self._logger.warning(f"Attempt {n} of {max_attempts} to send message failed: {e}")

                if n == max_attempts:
                    break

                if ctx.err() is None:
                    delay = self._backoff.get_delay(n - 1)
                    self._logger.info(f"Context not cancelled yet, applying retry delay of {delay}s")
                    time.sleep(delay)
                continue

            self._logger.info(f"Successfully sent message after {n} of {max_attempts} attempts")
            return RetryOutcome(RetryState.SUCCEEDED, n, max_attempts)

        return RetryOutcome(RetryState.EXHAUSTED, max_attempts, max_attempts, last_error)

    def send(
        self,
        client,
        ctx: SendContext,
        webhook_url: str,
        message: TeamsMessage,
    ) -> RetryOutcome:
        """Validate and serialize once, then post with retries.

        Args:
            client: :class:`~send2teams.delivery.client.TeamsClient` to post with.
            ctx: Deadline covering every attempt.
            webhook_url: Teams incoming webhook URL.
            message: Message to submit.

        Returns:
            The successful outcome.

        Raises:
            CardError: Invalid message; no attempt is made.
            WebhookURLError: Invalid URL; no attempt is made.
            RetryAbortedError: The context expired or was cancelled.
            RetryExhaustedError: Every attempt failed.
        """
        body = client.prepare(webhook_url, message)
        outcome = self.run(ctx, lambda: client.post(ctx, webhook_url, body))
        outcome.raise_for_state()
        return outcome


def send_with_retry(
    client,
    ctx: SendContext,
    webhook_url: str,
    message: TeamsMessage,
    retries: int,
    retries_delay: float,
) -> RetryOutcome:
    """Functional form of :meth:`RetryOrchestrator.send`."""
    orchestrator = RetryOrchestrator(retries=retries, retries_delay=retries_delay, log=client.logger)
    return orchestrator.send(client, ctx, webhook_url, message)
