"""Custom exceptions raised by the conduit client."""

from __future__ import annotations

from typing import Any


class ConduitError(Exception):
    """Base error for all client failures."""

    def __init__(self, message: str, *, context: Any | None = None) -> None:
        super().__init__(message)
        self.context = context


class InvalidConfiguration(ConduitError):
    """Raised when connection options fail validation."""


class InvalidEventKind(ConduitError):
    """Raised for event kinds outside OPEN, DATA, ERROR, COMPLETE, ABORT."""


class TransportError(ConduitError):
    """Raised when a transport is driven out of order."""


class ParseError(ConduitError):
    """Raised when a response cannot be parsed."""


__all__ = [
    "ConduitError",
    "InvalidConfiguration",
    "InvalidEventKind",
    "ParseError",
    "TransportError",
]
