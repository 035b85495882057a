import asyncio

import pytest

from conduit_client import AsyncioScheduler, ManualScheduler, Scheduler


def test_manual_scheduler_runs_fifo_including_nested_callbacks() -> None:
    scheduler = ManualScheduler()
    calls: list[str] = []

    def first() -> None:
        calls.append("first")
        scheduler.call_soon(calls.append, "nested")

    scheduler.call_soon(first)
    scheduler.call_soon(calls.append, "second")
    assert scheduler.pending == 2
    assert calls == []

    assert scheduler.run_pending() == 3
    assert calls == ["first", "second", "nested"]
    assert scheduler.pending == 0


def test_manual_scheduler_run_once() -> None:
    scheduler = ManualScheduler()
    assert scheduler.run_once() is False
    scheduler.call_soon(lambda: None)
    assert scheduler.run_once() is True
    assert scheduler.pending == 0


def test_asyncio_scheduler_defers_to_next_turn_in_order() -> None:
    async def scenario() -> list[int]:
        calls: list[int] = []
        scheduler = AsyncioScheduler()
        for n in range(3):
            scheduler.call_soon(calls.append, n)
        assert calls == []
        await asyncio.sleep(0)
        return calls

    assert asyncio.run(scenario()) == [0, 1, 2]


def test_asyncio_scheduler_requires_running_loop() -> None:
    with pytest.raises(RuntimeError):
        AsyncioScheduler().call_soon(lambda: None)


def test_schedulers_satisfy_protocol() -> None:
    assert isinstance(ManualScheduler(), Scheduler)
    assert isinstance(AsyncioScheduler(), Scheduler)
