"""Public surface for the conduit client."""

from .client import ConduitClient
from .connection import Connection, ConnectionState, Listener
from .errors import (
    ConduitError,
    InvalidConfiguration,
    InvalidEventKind,
    ParseError,
    TransportError,
)
from .events import ConnectionEvent, EventKind
from .http import HttpConnection, TransportFactory
from .logger import configure_logging
from .options import (
    ALLOWED_METHODS,
    ALLOWED_RESPONSE_TYPES,
    DEFAULT_HEADERS,
    ListenerSpec,
    RequestOptions,
    validate_options,
)
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from .transport import HttpRequestTransport, RequestTransport
from .types import ValidationResult
from .version import __version__

__all__ = [
    "__version__",
    "ALLOWED_METHODS",
    "ALLOWED_RESPONSE_TYPES",
    "AsyncioScheduler",
    "ConduitClient",
    "ConduitError",
    "Connection",
    "ConnectionEvent",
    "ConnectionState",
    "DEFAULT_HEADERS",
    "EventKind",
    "HttpConnection",
    "HttpRequestTransport",
    "InvalidConfiguration",
    "InvalidEventKind",
    "Listener",
    "ListenerSpec",
    "ManualScheduler",
    "ParseError",
    "RequestOptions",
    "RequestTransport",
    "Scheduler",
    "TransportError",
    "TransportFactory",
    "ValidationResult",
    "configure_logging",
    "validate_options",
]
