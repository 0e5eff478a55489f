"""HTTP delivery of prepared messages to a Teams incoming webhook."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import requests

from send2teams.context import SendContext
from send2teams.errors import DeadlineExceededError, ProtocolError, TransportError
from send2teams.serialization import TeamsMessage
from send2teams.webhook import validate_webhook

if TYPE_CHECKING:
    from send2teams.delivery.retry import RetryOutcome

logger = logging.getLogger(__name__)

# Per-attempt timeout used when the caller supplies no context
DEFAULT_WEBHOOK_SEND_TIMEOUT = 5.0

CONTENT_TYPE = "application/json;charset=utf-8"

# Anything at or above this status is a failed submission
FAILURE_STATUS_THRESHOLD = 299


class TeamsClient:
    """Client posting cards to Teams incoming webhooks.

    One ``requests.Session`` is kept for the lifetime of the client so that
    retried attempts reuse pooled connections.

    Example:
        >>> client = TeamsClient()
        >>> ctx = SendContext.with_timeout(30)
        >>> client.send(ctx, webhook_url, message)
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        log: logging.Logger | None = None,
        validate_webhook_pattern: bool = True,
    ) -> None:
        """Initialize the client.

        Args:
            session: HTTP session to use. A new one is created if omitted.
            log: Logger for delivery diagnostics.
            validate_webhook_pattern: Enforce the full webhook URL pattern.
                When False a mismatch is logged and the URL is still used.
        """
        self._session = session or requests.Session()
        self._logger = log or logger
        self._validate_webhook_pattern = validate_webhook_pattern

    @property
    def session(self) -> requests.Session:
        return self._session

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> TeamsClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def validate_input(self, webhook_url: str, message: TeamsMessage) -> None:
        """Validate the destination URL and then the message.

        Raises:
            WebhookURLError: If the URL is not a Teams webhook URL.
            CardError: If the message is not valid.
        """
        validate_webhook(webhook_url, strict=self._validate_webhook_pattern, log=self._logger)
        message.validate()

    def prepare(self, webhook_url: str, message: TeamsMessage) -> bytes:
        """Validate and serialize a message, returning the wire bytes."""
        self.validate_input(webhook_url, message)
        message.prepare()
        self._logger.debug(f"Payload for Microsoft Teams:\n\n{message.pretty_print()}\n")
        return message.payload().read()

    def send(self, ctx: SendContext, webhook_url: str, message: TeamsMessage) -> None:
        """Validate, serialize and submit a message once.

        Args:
            ctx: Deadline and cancellation for the request.
            webhook_url: Teams incoming webhook URL.
            message: MessageCard or Adaptive Card message.

        Raises:
            WebhookURLError: Invalid webhook URL.
            CardError: Invalid message.
            ContextError: The context was already done.
            TransportError: The request failed before a response arrived.
            ProtocolError: Teams answered with a failure status.
        """
        body = self.prepare(webhook_url, message)
        self.post(ctx, webhook_url, body)

    def send_default(self, webhook_url: str, message: TeamsMessage) -> None:
        """Send once, bounded by :data:`DEFAULT_WEBHOOK_SEND_TIMEOUT`."""
        self.send(SendContext.with_timeout(DEFAULT_WEBHOOK_SEND_TIMEOUT), webhook_url, message)

    def send_with_retry(
        self,
        ctx: SendContext,
        webhook_url: str,
        message: TeamsMessage,
        retries: int,
        retries_delay: float,
    ) -> RetryOutcome:
        """Send with a bounded number of constant-delay retries.

        See :class:`send2teams.delivery.retry.RetryOrchestrator`.
        """
        from send2teams.delivery.retry import RetryOrchestrator

        orchestrator = RetryOrchestrator(retries=retries, retries_delay=retries_delay, log=self._logger)
        return orchestrator.send(self, ctx, webhook_url, message)

    def post(self, ctx: SendContext, webhook_url: str, body: bytes) -> None:
        """POST already serialized bytes to the webhook.

        The response is always closed, whether the submission succeeded or
        not.
        """
        ctx_err = ctx.err()
        if ctx_err is not None:
            raise ctx_err

        # The deadline may pass after err() was checked
        remaining = ctx.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceededError()

        try:
            response = self._session.post(
                webhook_url,
                data=body,
                headers={"Content-Type": CONTENT_TYPE},
                timeout=remaining,
            )
        except requests.RequestException as e:
            self._logger.debug(f"Request to Microsoft Teams failed: {e}")
            raise TransportError(f"error submitting message to Microsoft Teams: {e}") from e

        try:
            response_text = response.text

            if response.status_code >= FAILURE_STATUS_THRESHOLD:
                # Teams explains most rejections in plain text,
                # e.g. "Summary or Text is required."
                error = ProtocolError(response.status_code, response.reason or "", response_text)
                self._logger.debug(str(error))
                raise error
        finally:
            response.close()

        self._logger.debug(f"Response string from Microsoft Teams API: {response_text}")
