"""Shared fixtures for send2teams tests."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

VALID_WEBHOOK_URL = (
    "https://outlook.office.com/webhook/"
    "a1269812-6d10-44b1-abc5-b84f93580ba0@9e7b80c7-d1eb-4b52-8582-76f921e416d9"
    "/IncomingWebhook/3fdd6767bae44ac58e5995547d66a4e4"
    "/f332c8d9-3397-4ac5-957b-b8e3fc465a8c"
)


@pytest.fixture
def webhook_url() -> str:
    """A webhook URL that passes strict validation."""
    return VALID_WEBHOOK_URL


def _make_response(status_code: int = 200, text: str = "1", reason: str = "OK") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.reason = reason
    return response


@pytest.fixture
def make_response():
    """Factory for mock requests.Response objects."""
    return _make_response


@pytest.fixture
def mock_session() -> MagicMock:
    """A requests.Session whose post() returns HTTP 200."""
    session = MagicMock()
    session.post.return_value = _make_response()
    return session


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo logging changes made by CLI invocations."""
    package_logger = logging.getLogger("send2teams")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
