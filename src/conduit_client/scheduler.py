"""Deferred-callback schedulers used for next-turn event delivery."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class Scheduler(Protocol):
    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None: ...


class AsyncioScheduler:
    """Defers callbacks to the next iteration of an asyncio event loop.

    ``loop.call_soon`` preserves FIFO order, which is what connections rely on
    to deliver OPEN before DATA before COMPLETE.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_soon(callback, *args)


class ManualScheduler:
    """FIFO queue drained explicitly by the caller.

    Useful for deterministic tests and for embedding a connection in a host
    loop that is not asyncio.
    """

    def __init__(self) -> None:
        self._queue: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.append((callback, args))

    def run_once(self) -> bool:
        if not self._queue:
            return False
        callback, args = self._queue.popleft()
        callback(*args)
        return True

    def run_pending(self) -> int:
        ran = 0
        while self.run_once():
            ran += 1
        return ran


__all__ = ["AsyncioScheduler", "ManualScheduler", "Scheduler"]
