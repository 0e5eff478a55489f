"""Text helpers for message bodies.

Teams renders a subset of Markdown. These helpers convert line endings into
explicit breaks and wrap arbitrary text (JSON or otherwise) as code.
"""

from __future__ import annotations

import json
import logging
import re

from send2teams.errors import MissingValueError

logger = logging.getLogger(__name__)

BREAK_STATEMENT = "<br>"

CODE_BLOCK_PREFIX = "\n```\n"
CODE_BLOCK_SUFFIX = "```\n"
CODE_SNIPPET_PREFIX = "`"
CODE_SNIPPET_SUFFIX = "`"

# Windows, then old Mac, then Unix endings; each actual and escaped
_EOL_PATTERN = re.compile(r"\r\n|\\r\\n|\r|\\r|\n|\\n")


def convert_eol_to_break(text: str, marker: str = BREAK_STATEMENT) -> str:
    """Replace line endings with an explicit break marker.

    Both real control characters and their escaped textual forms (a literal
    backslash followed by ``r`` or ``n``) are converted, so shell arguments
    like ``'line one\\nline two'`` render on two lines.

    Args:
        text: Input text.
        marker: Replacement for every line ending.

    Returns:
        Text with line endings replaced.
    """
    return _EOL_PATTERN.sub(marker, text)


def _format_as_code(text: str, prefix: str, suffix: str) -> str:
    if not text:
        raise MissingValueError("received empty string, refusing to format as code")

    try:
        # Valid JSON is re-indented instead of being encoded a second time
        formatted = json.dumps(json.loads(text), indent="\t", ensure_ascii=False)
        logger.debug("Input is valid JSON, re-indenting")
    except ValueError:
        formatted = json.dumps(text, ensure_ascii=False)
        logger.debug("Input is not JSON, encoding as JSON string")

    return prefix + formatted.strip('"') + suffix


def format_as_code_block(text: str) -> str:
    """Format text as a multi-line Markdown code block.

    Raises:
        MissingValueError: If text is empty.
    """
    return _format_as_code(text, CODE_BLOCK_PREFIX, CODE_BLOCK_SUFFIX)


def format_as_code_snippet(text: str) -> str:
    """Format text as a single-line Markdown code snippet.

    Raises:
        MissingValueError: If text is empty.
    """
    return _format_as_code(text, CODE_SNIPPET_PREFIX, CODE_SNIPPET_SUFFIX)


def try_to_format_as_code_block(text: str) -> str:
    """Like :func:`format_as_code_block`, returning text unchanged on error."""
    try:
        return format_as_code_block(text)
    except MissingValueError as e:
        logger.debug(f"Returning original string: {e}")
        return text


def try_to_format_as_code_snippet(text: str) -> str:
    """Like :func:`format_as_code_snippet`, returning text unchanged on error."""
    try:
        return format_as_code_snippet(text)
    except MissingValueError as e:
        logger.debug(f"Returning original string: {e}")
        return text
