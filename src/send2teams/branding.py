"""Application identity and the message trailer."""

from __future__ import annotations

from datetime import datetime, timezone

from send2teams import __version__

APP_NAME = "send2teams"
APP_URL = "https://github.com/atc0005/send2teams"

BRANDING_TEXT_PREFIX = "Message delivered by"
BRANDING_TEXT_SUFFIX = "on behalf of"


def branding() -> str:
    """Name, version and project URL, as shown by ``--version``."""
    return f"{APP_NAME} {__version__}\n{APP_URL}"


def message_trailer(sender: str = "", now: datetime | None = None) -> str:
    """Markdown trailer noting which tool delivered the message, and when.

    Args:
        sender: Application the message was sent for, if any.
        now: Timestamp to embed; defaults to the current local time.
    """
    now = now or datetime.now(timezone.utc).astimezone()
    trailer = (
        f"{BRANDING_TEXT_PREFIX} [{APP_NAME}]({APP_URL}) ({__version__}) "
        f"at {now.isoformat(timespec='seconds')}"
    )
    if sender.strip():
        trailer += f" {BRANDING_TEXT_SUFFIX} {sender.strip()}"
    return trailer
