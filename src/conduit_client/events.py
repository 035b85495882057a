"""Connection event vocabulary and the immutable event record."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from .errors import InvalidEventKind

if TYPE_CHECKING:
    from .connection import Connection


class EventKind(str, Enum):
    OPEN = "OPEN"
    DATA = "DATA"
    ERROR = "ERROR"
    COMPLETE = "COMPLETE"
    ABORT = "ABORT"

    @classmethod
    def coerce(cls, kind: Any) -> "EventKind":
        """Return the member matching ``kind`` or raise ``InvalidEventKind``."""
        try:
            return cls(kind)
        except (ValueError, TypeError):
            raise InvalidEventKind(
                f'Unknown ConnectionEvent type: "{kind}". Has to be one of: {", ".join(cls.names())}',
                context=kind,
            ) from None

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ConnectionEvent:
    """A single lifecycle occurrence raised by a connection.

    Events carry no response data. Listeners read ``event.source.status``,
    ``event.source.response`` and ``event.source.state`` instead, which already
    reflect the transition by the time the event is delivered.
    """

    OPEN: ClassVar[EventKind] = EventKind.OPEN
    DATA: ClassVar[EventKind] = EventKind.DATA
    ERROR: ClassVar[EventKind] = EventKind.ERROR
    COMPLETE: ClassVar[EventKind] = EventKind.COMPLETE
    ABORT: ClassVar[EventKind] = EventKind.ABORT
    KINDS: ClassVar[tuple[EventKind, ...]] = tuple(EventKind)

    source: "Connection"
    kind: EventKind
    timestamp: float | None = None

    def __post_init__(self) -> None:
        from .connection import Connection

        object.__setattr__(self, "kind", EventKind.coerce(self.kind))
        if self.timestamp is None:
            object.__setattr__(self, "timestamp", time.time())
        if not isinstance(self.source, Connection):
            raise InvalidEventKind(
                f"Invalid event source {type(self.source).__name__}. Has to be a Connection.",
                context=self.source,
            )

    @staticmethod
    def includes(kind: Any) -> bool:
        try:
            EventKind(kind)
        except (ValueError, TypeError):
            return False
        return True

    def __repr__(self) -> str:
        return f"ConnectionEvent(kind={self.kind.value}, source={self.source!r}, timestamp={self.timestamp:.6f})"


__all__ = ["ConnectionEvent", "EventKind"]
