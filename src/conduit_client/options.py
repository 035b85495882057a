"""Typed request options and their validation pass."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable

from .errors import InvalidConfiguration, InvalidEventKind
from .events import EventKind
from .transport.base import ResponseType
from .types import ValidationResult

ALLOWED_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE")
ALLOWED_RESPONSE_TYPES: tuple[ResponseType, ...] = ("arraybuffer", "blob", "document", "json", "text")
DEFAULT_HEADERS: Mapping[str, str] = MappingProxyType({"Accept": "application/json"})
MAX_SAFE_INTEGER = 2**53 - 1


@dataclass(frozen=True)
class ListenerSpec:
    type: EventKind
    callback: Callable[..., Any]


@dataclass(frozen=True)
class RequestOptions:
    method: str = "GET"
    body: Any = None
    headers: Mapping[str, Any] = field(default_factory=lambda: DEFAULT_HEADERS)
    response_type: ResponseType = "json"
    timeout: int = 0
    listeners: tuple[ListenerSpec, ...] = ()
    open: bool = False


_OPTION_NAMES = frozenset(RequestOptions.__dataclass_fields__)


def _quoted(values: tuple[str, ...]) -> str:
    return ", ".join(f'"{value}"' for value in values)


def _validate_listener(entry: Any) -> ListenerSpec:
    if isinstance(entry, ListenerSpec):
        kind, callback = entry.type, entry.callback
    elif isinstance(entry, Mapping):
        kind, callback = entry.get("type"), entry.get("callback")
    else:
        raise InvalidConfiguration(
            f'Invalid listener object type "{type(entry).__name__}". Has to be a mapping with "type" and "callback".',
            context=entry,
        )

    try:
        event_kind = EventKind.coerce(kind)
    except InvalidEventKind as exc:
        raise InvalidConfiguration(str(exc), context=entry) from exc

    if not callable(callback):
        raise InvalidConfiguration(
            f'Invalid callback type "{type(callback).__name__}" for {event_kind}. Has to be callable.',
            context=entry,
        )
    return ListenerSpec(type=event_kind, callback=callback)


def _check(raw: Mapping[str, Any]) -> RequestOptions:
    unknown = sorted(set(raw) - _OPTION_NAMES)
    if unknown:
        raise InvalidConfiguration(f"Unknown option(s): {', '.join(unknown)}.", context=unknown)

    method = raw.get("method", "GET")
    if method not in ALLOWED_METHODS:
        raise InvalidConfiguration(
            f'Invalid method "{method}". Valid methods are: {_quoted(ALLOWED_METHODS)}.',
            context=method,
        )

    response_type = raw.get("response_type", "json")
    if response_type not in ALLOWED_RESPONSE_TYPES:
        raise InvalidConfiguration(
            f'Invalid response type "{response_type}". Valid response types are: {_quoted(ALLOWED_RESPONSE_TYPES)}.',
            context=response_type,
        )

    headers = raw.get("headers", DEFAULT_HEADERS)
    if not isinstance(headers, Mapping):
        raise InvalidConfiguration(
            f'Invalid headers. Type must be a mapping, is "{type(headers).__name__}".',
            context=headers,
        )

    timeout = raw.get("timeout", 0)
    if isinstance(timeout, bool) or not isinstance(timeout, int) or not 0 <= timeout <= MAX_SAFE_INTEGER:
        raise InvalidConfiguration(
            f'Invalid timeout. Must be an integer >= 0 and <= {MAX_SAFE_INTEGER}, is "{timeout}".',
            context=timeout,
        )

    listeners = raw.get("listeners", ())
    if not isinstance(listeners, (list, tuple)):
        raise InvalidConfiguration(
            f'Invalid listeners type "{type(listeners).__name__}". Has to be a list or tuple.',
            context=listeners,
        )

    open_now = raw.get("open", False)
    if not isinstance(open_now, bool):
        raise InvalidConfiguration(f'Invalid open flag "{open_now}". Has to be a bool.', context=open_now)

    return RequestOptions(
        method=method,
        body=raw.get("body"),
        headers=MappingProxyType(dict(headers)),
        response_type=response_type,
        timeout=timeout,
        listeners=tuple(_validate_listener(entry) for entry in listeners),
        open=open_now,
    )


def validate_options(**raw: Any) -> ValidationResult[RequestOptions]:
    """Validate keyword options without side effects.

    Returns a failed result carrying an ``InvalidConfiguration`` instead of
    raising, so callers can decide whether to surface or collect the error.
    """
    try:
        return ValidationResult.success(_check(raw))
    except InvalidConfiguration as exc:
        return ValidationResult.failure(exc)


__all__ = [
    "ALLOWED_METHODS",
    "ALLOWED_RESPONSE_TYPES",
    "DEFAULT_HEADERS",
    "ListenerSpec",
    "MAX_SAFE_INTEGER",
    "RequestOptions",
    "validate_options",
]
