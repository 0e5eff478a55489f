"""Exception hierarchy for send2teams.

Every error raised by the library derives from :class:`Send2TeamsError` so
callers can catch the whole family at once. Card construction errors are also
``ValueError`` subclasses since they always describe a bad argument.
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Base
# =============================================================================


class Send2TeamsError(Exception):
    """Base exception for send2teams.

    Attributes:
        message: Error message
        details: Additional error details
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(Send2TeamsError):
    """Raised when configuration values are invalid."""


# =============================================================================
# Card Errors
# =============================================================================


class CardError(Send2TeamsError, ValueError):
    """Base class for card model and validation errors."""


class InvalidTypeError(CardError):
    """A type discriminator holds an unexpected value."""


class InvalidFieldValueError(CardError):
    """A field value is outside its allowed set or pattern."""


class MissingValueError(CardError):
    """A required field is empty or absent."""


class ValueNotFoundError(CardError):
    """A lookup (e.g. element by id) found nothing."""


class CardValidationError(CardError):
    """Aggregate of several card validation errors.

    Raised by ``CardValidator.validate`` when the validator collects every
    violation instead of stopping at the first one.
    """

    def __init__(self, errors: list[CardError]) -> None:
        self.errors = list(errors)
        lines = "; ".join(str(e) for e in self.errors)
        super().__init__(
            f"{len(self.errors)} card validation error(s): {lines}",
            details={"count": len(self.errors)},
        )


# =============================================================================
# Webhook URL Errors
# =============================================================================


class WebhookURLError(Send2TeamsError, ValueError):
    """Base class for webhook URL validation errors."""


class IncompleteWebhookURLError(WebhookURLError):
    """The URL is too short to be a complete webhook URL."""


class InvalidWebhookPrefixError(WebhookURLError):
    """The URL does not start with a known Teams webhook prefix."""


class WebhookURLPatternError(WebhookURLError):
    """The URL does not match the expected webhook path shape."""


# =============================================================================
# Delivery Errors
# =============================================================================


class DeliveryError(Send2TeamsError):
    """Base class for errors raised while submitting a message."""


class TransportError(DeliveryError):
    """Network level failure before an HTTP response was received."""


class ProtocolError(DeliveryError):
    """The webhook answered with a non-success HTTP status.

    Attributes:
        status_code: HTTP status code
        reason: HTTP reason phrase
        response_text: Response body, verbatim
    """

    def __init__(self, status_code: int, reason: str, response_text: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.response_text = response_text
        status = f"{status_code} {reason}".strip()
        super().__init__(
            f"error on notification: {status}, {response_text!r}",
            details={"status_code": status_code, "response_text": response_text},
        )


# =============================================================================
# Context Errors
# =============================================================================


class ContextError(Send2TeamsError):
    """Base class for deadline and cancellation errors."""


class DeadlineExceededError(ContextError):
    """The send context deadline passed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class CancelledError(ContextError):
    """The send context was explicitly cancelled."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class RetryAbortedError(ContextError):
    """The retry loop stopped because its context expired.

    Attributes:
        attempts: Number of delivery attempts made
        max_attempts: Planned attempt budget
        reason: The context error that stopped the loop
        last_error: Last delivery error, if any attempt was made
    """

    def __init__(
        self,
        attempts: int,
        max_attempts: int,
        reason: ContextError,
        last_error: Exception | None = None,
    ) -> None:
        self.attempts = attempts
        self.max_attempts = max_attempts
        self.reason = reason
        self.last_error = last_error
        message = (
            f"context cancelled or expired: {reason}; aborting message submission "
            f"after {attempts} of {max_attempts} attempts"
        )
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(
            message,
            details={"attempts": attempts, "max_attempts": max_attempts},
        )


class RetryExhaustedError(DeliveryError):
    """Raised when all delivery attempts failed.

    Attributes:
        attempts: Number of delivery attempts made
        last_error: Error from the final attempt
    """

    def __init__(self, attempts: int, last_error: DeliveryError) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"all {attempts} attempts to send message failed: {last_error}",
            details={"attempts": attempts},
        )
