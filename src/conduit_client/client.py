"""High-level client that builds and awaits HTTP connections."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial
from typing import Any
from urllib.parse import urlparse

import httpx

from .events import ConnectionEvent, EventKind
from .http import HttpConnection
from .logger import LogLevel, create_logger
from .options import DEFAULT_HEADERS
from .scheduler import Scheduler
from .transport.base import ResponseType
from .transport.http import HttpRequestTransport

_TERMINAL_KINDS = (EventKind.COMPLETE, EventKind.ERROR, EventKind.ABORT)


@dataclass
class ClientOptions:
    base_url: str | None = None
    default_headers: Mapping[str, str] | None = None
    timeout: int = 0
    response_type: ResponseType = "json"
    http_client: httpx.AsyncClient | None = None
    scheduler: Scheduler | None = None
    logger: object | None = None
    log_level: LogLevel = "info"


class ConduitClient:
    """Factory for ``HttpConnection`` objects sharing defaults and an httpx client."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        default_headers: Mapping[str, str] | None = None,
        timeout: int = 0,
        response_type: ResponseType = "json",
        http_client: httpx.AsyncClient | None = None,
        scheduler: Scheduler | None = None,
        logger: object | None = None,
        log_level: LogLevel = "info",
    ) -> None:
        options = ClientOptions(
            base_url=base_url,
            default_headers=default_headers,
            timeout=timeout,
            response_type=response_type,
            http_client=http_client,
            scheduler=scheduler,
            logger=logger,
            log_level=log_level,
        )
        self.base_url = options.base_url.rstrip("/") if options.base_url else None
        self._logger = create_logger(logger=options.logger, level=options.log_level)
        self._logger.info("Initializing ConduitClient for %s", self.base_url or "<absolute urls>")
        self._http_client = options.http_client or httpx.AsyncClient()
        self._owns_client = options.http_client is None
        self._scheduler = options.scheduler
        self._timeout = options.timeout
        self._response_type = options.response_type
        self._default_headers = {**DEFAULT_HEADERS, **(options.default_headers or {})}

    def connection(self, url: str, **options: Any) -> HttpConnection:
        """Build an ``HttpConnection`` with the client defaults applied."""
        headers = options.pop("headers", None)
        if headers is None or isinstance(headers, Mapping):
            headers = {**self._default_headers, **(headers or {})}
        options.setdefault("timeout", self._timeout)
        options.setdefault("response_type", self._response_type)

        return HttpConnection(
            self.resolve(url),
            headers=headers,
            transport_factory=partial(HttpRequestTransport, client=self._http_client, logger=self._logger),
            scheduler=self._scheduler,
            logger=self._logger,
            **options,
        )

    async def fetch(
        self,
        url: str,
        *,
        extra_headers: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> HttpConnection:
        """Open a connection and wait for COMPLETE, ERROR or ABORT.

        The returned connection is always CLOSED; inspect ``status`` and
        ``response`` on it. Cancelling the awaiting task closes the connection.
        """
        loop = asyncio.get_running_loop()
        finished: asyncio.Future[ConnectionEvent] = loop.create_future()

        def settle(event: ConnectionEvent) -> None:
            if not finished.done():
                finished.set_result(event)

        options.pop("open", None)
        conn = self.connection(url, **options)
        for kind in _TERMINAL_KINDS:
            conn.add_listener(kind, settle)
        conn.open(extra_headers)

        try:
            event = await finished
        except asyncio.CancelledError:
            conn.close()
            raise
        self._logger.debug("Fetch %s finished with %s status=%s", conn.url, event.kind, conn.status)
        return conn

    def resolve(self, url: str) -> str:
        if not self.base_url or urlparse(url).scheme:
            return url
        return f"{self.base_url}/{url.lstrip('/')}"

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "ConduitClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["ConduitClient", "ClientOptions"]
