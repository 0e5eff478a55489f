"""Teams incoming webhook URL validation."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

from send2teams.errors import (
    IncompleteWebhookURLError,
    InvalidWebhookPrefixError,
    WebhookURLPatternError,
)

logger = logging.getLogger(__name__)

WEBHOOK_URL_OFFICECOM_PREFIX = "https://outlook.office.com"
WEBHOOK_URL_OFFICE365_PREFIX = "https://outlook.office365.com"

WEBHOOK_URL_PREFIXES = (WEBHOOK_URL_OFFICECOM_PREFIX, WEBHOOK_URL_OFFICE365_PREFIX)

# Sample path from the Teams connector documentation
WEBHOOK_URL_SAMPLE_URI = (
    "webhook/a1269812-6d10-44b1-abc5-b84f93580ba0"
    "@9e7b80c7-d1eb-4b52-8582-76f921e416d9"
    "/IncomingWebhook/3fdd6767bae44ac58e5995547d66a4e4"
    "/f332c8d9-3397-4ac5-957b-b8e3fc465a8c"
)

WEBHOOK_URL_PATTERN = re.compile(
    r"^https://outlook\.office(?:365)?\.com/webhook/"
    r"[-a-zA-Z0-9]{32,36}@[-a-zA-Z0-9]{36}"
    r"/IncomingWebhook/[-a-zA-Z0-9]{32}/[-a-zA-Z0-9]{36}$"
)


def validate_webhook_length(url: str) -> None:
    """Reject URLs no longer than the shortest known prefix."""
    if len(url) <= len(WEBHOOK_URL_OFFICECOM_PREFIX):
        raise IncompleteWebhookURLError(
            f"incomplete webhook URL: provided URL {url!r} shorter than or "
            f"equal to just the {WEBHOOK_URL_OFFICECOM_PREFIX!r} URL prefix",
            details={"url": url},
        )


def validate_webhook_prefix(url: str) -> None:
    """Reject URLs that do not start with a known Teams webhook domain."""
    if url.startswith(WEBHOOK_URL_PREFIXES):
        return

    parts = urlsplit(url)
    got = f"{parts.scheme}://{parts.netloc}"
    raise InvalidWebhookPrefixError(
        f"webhook URL does not contain expected prefix; got {got!r}, "
        f"expected one of {WEBHOOK_URL_OFFICECOM_PREFIX!r} or "
        f"{WEBHOOK_URL_OFFICE365_PREFIX!r}",
        details={"url": url, "expected": list(WEBHOOK_URL_PREFIXES)},
    )


def validate_webhook_pattern(url: str) -> None:
    """Reject URLs whose path does not match the incoming webhook shape."""
    if WEBHOOK_URL_PATTERN.match(url):
        return

    raise WebhookURLPatternError(
        "webhook URL does not match expected pattern;\n"
        f"got: {url!r}\n"
        "expected webhook URL in one of these formats:\n"
        f"  * {WEBHOOK_URL_OFFICECOM_PREFIX + '/' + WEBHOOK_URL_SAMPLE_URI!r}\n"
        f"  * {WEBHOOK_URL_OFFICE365_PREFIX + '/' + WEBHOOK_URL_SAMPLE_URI!r}",
        details={"url": url},
    )


def validate_webhook(
    url: str,
    strict: bool = True,
    log: logging.Logger | None = None,
) -> None:
    """Validate a Teams incoming webhook URL.

    Checks run in order: length, prefix, then the full path pattern.

    Args:
        url: Webhook URL to check.
        strict: When False a pattern mismatch is only logged as a warning.
            The pattern is tied to an undocumented URL shape, so callers may
            need to relax it.
        log: Logger used for the relaxed warning path.

    Raises:
        IncompleteWebhookURLError: URL is too short.
        InvalidWebhookPrefixError: URL has an unknown prefix. The message
            lists both accepted prefixes.
        WebhookURLPatternError: URL path has an unexpected shape and
            ``strict`` is True.
    """
    log = log or logger

    validate_webhook_length(url)
    validate_webhook_prefix(url)

    try:
        validate_webhook_pattern(url)
    except WebhookURLPatternError as e:
        if strict:
            raise
        log.warning(f"Accepting webhook URL with unexpected shape: {e}")


def is_valid_webhook(url: str, strict: bool = True) -> bool:
    """Boolean form of :func:`validate_webhook`."""
    try:
        validate_webhook(url, strict=strict)
    except (IncompleteWebhookURLError, InvalidWebhookPrefixError, WebhookURLPatternError):
        return False
    return True
