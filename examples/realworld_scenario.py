"""End-to-end scenario demonstrating the connection lifecycle API."""

from __future__ import annotations

import asyncio
import os
from typing import Any

from conduit_client import (
    ConduitClient,
    ConnectionEvent,
    EventKind,
    HttpConnection,
    InvalidConfiguration,
    configure_logging,
)

BASE_URL = os.getenv("CONDUIT_DEMO_URL", "https://httpbin.org")


def log_section(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def describe(event: ConnectionEvent) -> None:
    conn = event.source
    print(f"  {event.kind.value:<8} state={conn.state.value:<6} status={getattr(conn, 'status', '-')}")


def trace_listeners() -> list[dict[str, Any]]:
    return [{"type": kind, "callback": describe} for kind in EventKind]


async def wait_closed(conn: HttpConnection) -> None:
    done = asyncio.Event()
    for kind in (EventKind.COMPLETE, EventKind.ERROR, EventKind.ABORT):
        conn.add_listener(kind, lambda event: done.set())
    await done.wait()


async def main() -> None:
    configure_logging("info")

    async with ConduitClient(base_url=BASE_URL, default_headers={"User-Agent": "conduit-demo"}) as client:
        log_section("GET with JSON response")
        conn = await client.fetch("/json", listeners=trace_listeners())
        print(f"  keys: {sorted(conn.response or {})}")

        log_section("404 surfaces as an ERROR event")
        conn = await client.fetch("/status/404", listeners=trace_listeners())
        print(f"  ok={conn.ok} status={conn.status}")

        log_section("POST with a JSON body and per-request headers")
        conn = await client.fetch(
            "/post",
            method="POST",
            body={"hello": "world"},
            extra_headers={"X-Request-Id": "demo-1"},
            listeners=trace_listeners(),
        )
        print(f"  echoed json: {(conn.response or {}).get('json')}")

        log_section("Timeout surfaces as an ERROR event")
        conn = await client.fetch("/delay/3", timeout=500, listeners=trace_listeners())
        print(f"  ok={conn.ok} status={conn.status}")

        log_section("Closing an in-flight request")
        conn = client.connection("/delay/3", listeners=trace_listeners()).open()
        await asyncio.sleep(0.1)
        conn.close()
        await wait_closed(conn)

        log_section("Closing before opening")
        conn = client.connection("/json", listeners=trace_listeners())
        conn.close()
        await wait_closed(conn)

        log_section("Invalid configuration")
        try:
            client.connection("/json", method="PATCH")
        except InvalidConfiguration as exc:
            print(f"  rejected: {exc}")


if __name__ == "__main__":
    asyncio.run(main())
