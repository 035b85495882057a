"""HTTP transport built on top of httpx."""

from __future__ import annotations

import asyncio
import codecs
import json
from typing import Any
from xml.etree import ElementTree

import httpx

from ..errors import TransportError
from ..logger import BoundLogger, create_logger
from .base import SignalCallback, TransportSignal

_SIGNALS: tuple[TransportSignal, ...] = ("progress", "load", "error", "abort", "timeout")


class HttpRequestTransport:
    """Runs one HTTP exchange as an asyncio task and reports it through signals.

    ``send`` must be called from inside a running event loop. Every received
    body chunk fires ``progress``; exactly one of ``load``, ``error``,
    ``timeout`` or ``abort`` ends the exchange.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._logger = (logger or create_logger()).child("http")
        self._signal_listeners: dict[str, list[SignalCallback]] = {signal: [] for signal in _SIGNALS}
        self.timeout = 0
        self.response_type = ""
        self._method: str | None = None
        self._url: str | None = None
        self._headers: dict[str, str] = {}
        self._status = 0
        self._response: Any = None
        self._response_headers: httpx.Headers = httpx.Headers()
        self._task: asyncio.Task[None] | None = None
        self._finished = False

    @property
    def status(self) -> int:
        return self._status

    @property
    def response(self) -> Any:
        return self._response

    @property
    def response_headers(self) -> httpx.Headers:
        return self._response_headers

    @property
    def done(self) -> bool:
        return self._finished

    def add_signal_listener(self, signal: TransportSignal, callback: SignalCallback) -> None:
        if signal not in self._signal_listeners:
            raise TransportError(f'Unknown transport signal "{signal}"', context=signal)
        self._signal_listeners[signal].append(callback)

    def open(self, method: str, url: str) -> None:
        if self._task is not None:
            raise TransportError("Cannot reopen a transport that has already sent its request")
        self._method = method
        self._url = url
        self._headers = {}

    def set_request_header(self, name: str, value: str) -> None:
        if self._method is None:
            raise TransportError("open() must be called before setting request headers")
        self._headers[name] = str(value)

    def send(self, body: Any = None) -> None:
        if self._method is None or self._url is None:
            raise TransportError("open() must be called before send()")
        if self._task is not None:
            raise TransportError("send() has already been called on this transport")
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._exchange(self._method, self._url, body))

    def abort(self) -> None:
        if self._task is None or self._finished:
            return
        self._logger.debug("HTTP abort %s %s", self._method, self._url)
        self._finish("abort")
        self._task.cancel()

    async def _exchange(self, method: str, url: str, body: Any) -> None:
        client = self._client or httpx.AsyncClient()
        try:
            request = client.build_request(
                method,
                url,
                headers=self._headers,
                timeout=httpx.Timeout(self.timeout / 1000) if self.timeout else None,
                **_encode_body(body),
            )
            self._logger.debug("HTTP %s %s headers=%d", method, url, len(self._headers))
            if self.timeout:
                await asyncio.wait_for(self._stream(client, request), self.timeout / 1000)
            else:
                await self._stream(client, request)
        except asyncio.CancelledError:
            raise
        except (asyncio.TimeoutError, httpx.TimeoutException):
            self._logger.debug("HTTP timeout after %dms for %s", self.timeout, url)
            self._finish("timeout")
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            self._logger.debug("HTTP error for %s: %s", url, exc)
            self._finish("error")
        except Exception:
            self._logger.exception("Unexpected failure during HTTP exchange for %s", url)
            self._finish("error")
        finally:
            if self._owns_client:
                await client.aclose()

    async def _stream(self, client: httpx.AsyncClient, request: httpx.Request) -> None:
        response = await client.send(request, stream=True)
        buffer = bytearray()
        try:
            self._status = response.status_code
            self._response_headers = response.headers
            async for chunk in response.aiter_bytes():
                if not chunk or self._finished:
                    continue
                buffer.extend(chunk)
                self._logger.trace("HTTP chunk bytes=%d total=%d", len(chunk), len(buffer))
                self._fire("progress")
        finally:
            await response.aclose()

        # progress callbacks queued for this turn run while the connection is still open
        await asyncio.sleep(0)
        if self._finished:
            return

        self._response = self._decode(bytes(buffer), response.charset_encoding or "utf-8")
        self._logger.debug(
            "HTTP <- %s status=%s bytes=%d",
            request.url,
            response.status_code,
            len(buffer),
        )
        self._finish("load")

    def _decode(self, content: bytes, encoding: str) -> Any:
        if self.response_type in ("arraybuffer", "blob"):
            return content
        if not content:
            return None if self.response_type in ("json", "document") else ""

        try:
            codecs.lookup(encoding)
        except LookupError:
            encoding = "utf-8"
        text = content.decode(encoding, errors="replace")

        if self.response_type == "json":
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                self._logger.debug("HTTP body is not valid JSON (%d chars)", len(text))
                return None
        if self.response_type == "document":
            try:
                return ElementTree.fromstring(text)
            except ElementTree.ParseError:
                return None
        return text

    def _finish(self, signal: TransportSignal) -> None:
        if self._finished:
            return
        self._finished = True
        if signal != "load":
            self._status = 0
            self._response = None
        self._fire(signal)

    def _fire(self, signal: TransportSignal) -> None:
        for callback in tuple(self._signal_listeners[signal]):
            callback()


def _encode_body(body: Any) -> dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, (bytes, bytearray, str)):
        return {"content": bytes(body) if isinstance(body, bytearray) else body}
    return {"json": body}


__all__ = ["HttpRequestTransport"]
