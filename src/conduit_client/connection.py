"""Connection lifecycle state machine and listener registry."""

from __future__ import annotations

import time
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Mapping

from .errors import InvalidConfiguration
from .events import ConnectionEvent, EventKind
from .logger import BoundLogger, LogLevel, create_logger
from .scheduler import AsyncioScheduler, Scheduler

Listener = Callable[[ConnectionEvent], Any]


class ConnectionState(str, Enum):
    INIT = "INIT"
    """Created; the request has not left the client."""

    OPEN = "OPEN"
    """Request issued and in flight."""

    CLOSED = "CLOSED"
    """Terminal. Completed, failed, timed out or aborted."""

    def __str__(self) -> str:
        return self.value


_TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.INIT: frozenset({ConnectionState.OPEN, ConnectionState.CLOSED}),
    ConnectionState.OPEN: frozenset({ConnectionState.CLOSED}),
    ConnectionState.CLOSED: frozenset(),
}


class Connection:
    """Base class for one request/response exchange.

    Subclasses bind a concrete transport and implement ``open`` and ``close``.
    All state changes go through ``_transition`` so that repeated or racing
    calls collapse into a single forward move, and every user-facing event goes
    through ``_dispatch`` so that listeners run on a later scheduler turn, after
    the state change is already visible.
    """

    INIT: ClassVar[ConnectionState] = ConnectionState.INIT
    OPEN: ClassVar[ConnectionState] = ConnectionState.OPEN
    CLOSED: ClassVar[ConnectionState] = ConnectionState.CLOSED

    def __init__(
        self,
        url: str,
        *,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
        logger: object | None = None,
        log_level: LogLevel = "info",
    ) -> None:
        self._url = url
        self._state = ConnectionState.INIT
        self._opened: float | None = None
        self._closed: float | None = None
        self._listeners: dict[EventKind, list[Listener]] = {kind: [] for kind in EventKind}
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()
        self._clock = clock or time.time
        self._logger: BoundLogger = create_logger(logger=logger, level=log_level).child("connection")

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def opened(self) -> float | None:
        return self._opened

    @property
    def closed(self) -> float | None:
        return self._closed

    @property
    def listeners(self) -> Mapping[EventKind, tuple[Listener, ...]]:
        return MappingProxyType({kind: tuple(callbacks) for kind, callbacks in self._listeners.items()})

    def add_listener(self, kind: EventKind | str, callback: Listener) -> None:
        event_kind = EventKind.coerce(kind)
        if not callable(callback):
            raise InvalidConfiguration(
                f'Invalid callback type "{type(callback).__name__}" for {event_kind}. Has to be callable.',
                context=callback,
            )
        self._listeners[event_kind].append(callback)

    def remove_listener(self, kind: EventKind | str, callback: Listener) -> None:
        callbacks = self._listeners[EventKind.coerce(kind)]
        try:
            callbacks.remove(callback)
        except ValueError:
            pass

    def emit(self, kind: EventKind | str, event: ConnectionEvent) -> None:
        for callback in tuple(self._listeners[EventKind.coerce(kind)]):
            callback(event)

    def open(self) -> "Connection":
        raise NotImplementedError(f"{type(self).__name__} does not implement open()")

    def close(self) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not implement close()")

    def _transition(self, target: ConnectionState) -> bool:
        if target not in _TRANSITIONS[self._state]:
            self._logger.trace("Ignoring transition %s -> %s for %s", self._state, target, self._url)
            return False

        previous, self._state = self._state, target
        if target is ConnectionState.OPEN:
            self._opened = self._clock()
        elif target is ConnectionState.CLOSED:
            self._closed = self._clock()
        self._logger.debug("Connection %s %s -> %s", self._url, previous, target)
        return True

    def _dispatch(self, kind: EventKind) -> None:
        event = ConnectionEvent(self, kind, self._clock())
        self._scheduler.call_soon(self._deliver, event)

    def _deliver(self, event: ConnectionEvent) -> None:
        if event.kind is EventKind.DATA and self._state is not ConnectionState.OPEN:
            self._logger.trace("Dropping DATA for %s in state %s", self._url, self._state)
            return
        self._logger.trace("Dispatching %s for %s", event.kind, self._url)
        for callback in tuple(self._listeners[event.kind]):
            try:
                callback(event)
            except Exception:
                self._logger.exception("Listener for %s on %s raised", event.kind, self._url)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self._url!r}, state={self._state.value})"


__all__ = ["Connection", "ConnectionState", "Listener"]
