"""Common transport abstractions."""

from __future__ import annotations

from typing import Any, Callable, Literal, Protocol, runtime_checkable

TransportSignal = Literal["progress", "load", "error", "abort", "timeout"]
ResponseType = Literal["arraybuffer", "blob", "document", "json", "text"]

SignalCallback = Callable[[], Any]


@runtime_checkable
class RequestTransport(Protocol):
    """Low-level handle for a single request, driven by a connection.

    ``response_type`` holds the negotiated type. A transport that cannot honor
    the requested type may report ``""`` and expose the raw text instead.
    """

    timeout: int
    response_type: str

    @property
    def status(self) -> int: ...

    @property
    def response(self) -> Any: ...

    def add_signal_listener(self, signal: TransportSignal, callback: SignalCallback) -> None: ...

    def open(self, method: str, url: str) -> None: ...

    def set_request_header(self, name: str, value: str) -> None: ...

    def send(self, body: Any = None) -> None: ...

    def abort(self) -> None: ...


__all__ = [
    "RequestTransport",
    "ResponseType",
    "SignalCallback",
    "TransportSignal",
]
