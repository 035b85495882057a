"""HTTP request connection bound to a ``RequestTransport``."""

from __future__ import annotations

import json
from collections.abc import Mapping
from functools import partial
from typing import Any, Callable, Sequence

from .connection import Connection, ConnectionState
from .errors import InvalidConfiguration, ParseError
from .events import EventKind
from .logger import LogLevel, create_logger
from .options import ListenerSpec, RequestOptions, validate_options
from .scheduler import Scheduler
from .transport.base import RequestTransport, ResponseType
from .transport.http import HttpRequestTransport

TransportFactory = Callable[[], RequestTransport]


class HttpConnection(Connection):
    """A single HTTP request exposed as an event-emitting connection.

    Options are validated before the transport is created, so a rejected
    configuration never allocates a transport handle. Transport failures do
    not raise; they arrive as ERROR or ABORT events.

    If ``open`` fails to hand the request to the transport (for example when
    no event loop is running), the connection is moved to CLOSED and the
    error is re-raised to the caller.

    Example::

        conn = HttpConnection(
            "https://example.com/api/items",
            listeners=[{"type": "COMPLETE", "callback": on_complete}],
        )
        conn.open({"X-Request-Id": "abc"})
    """

    def __init__(
        self,
        url: str,
        *,
        method: str = "GET",
        body: Any = None,
        headers: Mapping[str, Any] | None = None,
        response_type: ResponseType = "json",
        timeout: int = 0,
        listeners: Sequence[Mapping[str, Any] | ListenerSpec] = (),
        open: bool = False,
        transport_factory: TransportFactory | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
        logger: object | None = None,
        log_level: LogLevel = "info",
    ) -> None:
        if not isinstance(url, str) or not url:
            raise InvalidConfiguration(f'Invalid url "{url}". Has to be a non-empty string.', context=url)

        raw: dict[str, Any] = {
            "method": method,
            "body": body,
            "response_type": response_type,
            "timeout": timeout,
            "listeners": listeners,
            "open": open,
        }
        if headers is not None:
            raw["headers"] = headers
        options = validate_options(**raw).unwrap()

        bound_logger = create_logger(logger=logger, level=log_level)
        super().__init__(url, scheduler=scheduler, clock=clock, logger=bound_logger)
        self._options = options
        for listener in options.listeners:
            self.add_listener(listener.type, listener.callback)

        factory = transport_factory or partial(HttpRequestTransport, logger=bound_logger)
        self._transport: RequestTransport = factory()
        self._logger.debug("Created %s %s response_type=%s", options.method, url, options.response_type)

        if options.open:
            self.open()

    @property
    def options(self) -> RequestOptions:
        return self._options

    @property
    def method(self) -> str:
        return self._options.method

    @property
    def body(self) -> Any:
        return self._options.body

    @property
    def headers(self) -> Mapping[str, Any]:
        return self._options.headers

    @property
    def response_type(self) -> ResponseType:
        return self._options.response_type

    @property
    def timeout(self) -> int:
        return self._options.timeout

    @property
    def transport(self) -> RequestTransport:
        return self._transport

    @property
    def status(self) -> int:
        return self._transport.status or 0

    @property
    def response(self) -> Any:
        raw = self._transport.response
        # Some transports fall back to raw text when they cannot negotiate "json"
        if self.response_type == "json" and raw and self._transport.response_type == "":
            try:
                return json.loads(raw)
            except (TypeError, ValueError) as exc:
                raise ParseError(f"Response from {self.url} is not valid JSON", context=raw) from exc
        return raw

    @property
    def ok(self) -> bool:
        return self.state is ConnectionState.CLOSED and 0 < self.status < 400

    def open(self, extra_headers: Mapping[str, Any] | None = None) -> "HttpConnection":
        if self.state is not ConnectionState.INIT:
            return self

        transport = self._transport
        transport.add_signal_listener("progress", self._on_progress)
        transport.add_signal_listener("load", self._on_load)
        transport.add_signal_listener("abort", partial(self._on_terminal, EventKind.ABORT))
        transport.add_signal_listener("error", partial(self._on_terminal, EventKind.ERROR))
        transport.add_signal_listener("timeout", partial(self._on_terminal, EventKind.ERROR))

        transport.open(self.method, self.url)
        transport.timeout = self.timeout
        self._transition(ConnectionState.OPEN)
        try:
            self._dispatch(EventKind.OPEN)

            layers = [self.headers]
            if isinstance(extra_headers, Mapping):
                layers.append(extra_headers)
            for layer in layers:
                for name, value in layer.items():
                    if value is not None:
                        transport.set_request_header(name, value)

            transport.response_type = self.response_type
            self._logger.debug("Sending %s %s", self.method, self.url)
            transport.send(self.body)
        except Exception:
            # no request is in flight
            self._transition(ConnectionState.CLOSED)
            self._logger.exception("Failed to send %s %s", self.method, self.url)
            raise
        return self

    def close(self) -> None:
        if self.state is ConnectionState.INIT:
            self._transition(ConnectionState.CLOSED)
            self._dispatch(EventKind.ABORT)
        elif self.state is ConnectionState.OPEN:
            # the transport's abort signal performs the transition
            self._transport.abort()

    def _on_progress(self) -> None:
        if self.state is ConnectionState.OPEN:
            self._dispatch(EventKind.DATA)

    def _on_load(self) -> None:
        self._transition(ConnectionState.CLOSED)
        status = self.status
        self._logger.debug("Loaded %s status=%s", self.url, status)
        self._dispatch(EventKind.COMPLETE if status < 400 else EventKind.ERROR)

    def _on_terminal(self, kind: EventKind) -> None:
        self._transition(ConnectionState.CLOSED)
        self._dispatch(kind)


__all__ = ["HttpConnection", "TransportFactory"]
