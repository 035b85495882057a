"""Transport implementations exposed to users."""

from .base import RequestTransport, ResponseType, TransportSignal
from .http import HttpRequestTransport

__all__ = [
    "HttpRequestTransport",
    "RequestTransport",
    "ResponseType",
    "TransportSignal",
]
