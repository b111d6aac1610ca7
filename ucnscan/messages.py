"""Formatting and collection of diagnostic messages."""

from __future__ import annotations

import threading
from enum import IntEnum


class MessageType(IntEnum):
    DEBUG = 0
    WARNING = 1
    CRITICAL = 2
    FATAL = 3


class FatalMessage(RuntimeError):
    """Raised when a fatal message is posted."""


_PREFIXES = {
    MessageType.DEBUG: "Debug: ",
    MessageType.WARNING: "Warning: ",
    MessageType.CRITICAL: "Critical: ",
    MessageType.FATAL: "Fatal: ",
}

_UNRECOGNIZED = "Unrecognized message type: "


def _as_type(kind: int) -> MessageType | None:
    try:
        return MessageType(kind)
    except ValueError:
        return None


def message_text(kind: int, msg: str) -> str:
    """Return ``msg`` prefixed with the name of its message type."""
    known = _as_type(kind)
    prefix = _PREFIXES[known] if known is not None else _UNRECOGNIZED
    return prefix + msg


def decorate_html(kind: int, msg: str) -> str:
    """Return the prefixed message with HTML markup for its severity."""
    text = message_text(kind, msg)
    known = _as_type(kind)
    if known is MessageType.WARNING:
        return '<FONT color="#FF0000">' + text + "</FONT>"
    if known is MessageType.CRITICAL:
        return '<B><FONT color="#FF0000">' + text + "</FONT></B>"
    return text


class MessageLog:
    """Thread-safe collection of decorated messages."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[str] = []

    def post(self, kind: int, msg: str) -> str:
        """Record a message and return the stored text.

        A fatal message is not recorded; :class:`FatalMessage` is raised.
        """
        if _as_type(kind) is MessageType.FATAL:
            raise FatalMessage(message_text(kind, msg))
        text = decorate_html(kind, msg)
        with self._lock:
            self._entries.append(text)
        return text

    def entries(self) -> list[str]:
        with self._lock:
            return list(self._entries)