"""Payload serialization shared by both card formats.

Both the legacy MessageCard and the Adaptive Card ``Message`` expose the same
``validate`` / ``prepare`` / ``payload`` / ``pretty_print`` surface, described
by :class:`TeamsMessage`. The delivery client depends only on that protocol.
"""

from __future__ import annotations

import io
import json
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class TeamsMessage(Protocol):
    """Protocol for anything the delivery client can submit."""

    def validate(self) -> None:
        """Raise a card error if the message is not valid."""
        ...

    def prepare(self) -> None:
        """Serialize the message and keep the bytes for reuse."""
        ...

    def payload(self) -> BinaryIO:
        """Return a readable stream over the prepared bytes."""
        ...

    def pretty_print(self) -> str:
        """Return indented JSON for diagnostics."""
        ...


def compact(data: dict[str, Any], required: tuple[str, ...] = ()) -> dict[str, Any]:
    """Drop empty optional values from a mapping, preserving key order.

    ``None``, empty strings, empty lists and empty dicts are removed unless the
    key is listed in ``required``. ``False`` and ``0`` are kept.
    """
    return {
        key: value
        for key, value in data.items()
        if key in required or not (value is None or (isinstance(value, (str, list, dict)) and not value))
    }


def to_json_bytes(data: dict[str, Any]) -> bytes:
    """Compact UTF-8 JSON encoding used on the wire."""
    return json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


class PreparedPayload(ABC):
    """Mixin holding the serialized form of a message.

    Subclasses implement :meth:`to_dict` and :meth:`validate`.
    """

    _payload: bytes | None = None

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation with empty optional fields omitted."""
        ...

    @abstractmethod
    def validate(self) -> None:
        ...

    def prepare(self) -> None:
        """Marshal to JSON and store the bytes.

        Calling ``prepare`` again after mutating the message refreshes the
        stored payload.
        """
        self._payload = to_json_bytes(self.to_dict())

    @property
    def is_prepared(self) -> bool:
        return self._payload is not None

    def payload_bytes(self) -> bytes:
        if self._payload is None:
            return b""
        return self._payload

    def payload(self) -> BinaryIO:
        return io.BytesIO(self.payload_bytes())

    def pretty_print(self) -> str:
        """Indented copy of the prepared payload, or ``""`` if unprepared."""
        if self._payload is None:
            return ""
        return json.dumps(json.loads(self._payload), indent="\t", ensure_ascii=False)
