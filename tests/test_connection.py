import itertools
import logging

import pytest

from conduit_client import (
    Connection,
    ConnectionEvent,
    ConnectionState,
    EventKind,
    InvalidConfiguration,
    InvalidEventKind,
    ManualScheduler,
)


class StubConnection(Connection):
    """Drives the base state machine directly, without a transport."""

    def open(self) -> "StubConnection":
        if self._transition(ConnectionState.OPEN):
            self._dispatch(EventKind.OPEN)
        return self

    def close(self) -> None:
        if self._transition(ConnectionState.CLOSED):
            self._dispatch(EventKind.ABORT)

    def finish(self) -> bool:
        return self._transition(ConnectionState.CLOSED)

    def progress(self) -> None:
        self._dispatch(EventKind.DATA)


def make_stub() -> tuple[StubConnection, ManualScheduler]:
    scheduler = ManualScheduler()
    ticks = itertools.count(1)
    conn = StubConnection("https://example.test/a", scheduler=scheduler, clock=lambda: float(next(ticks)))
    return conn, scheduler


def test_base_lifecycle_methods_are_abstract() -> None:
    conn = Connection("https://example.test")
    with pytest.raises(NotImplementedError):
        conn.open()
    with pytest.raises(NotImplementedError):
        conn.close()


def test_initial_state() -> None:
    conn, _ = make_stub()
    assert conn.url == "https://example.test/a"
    assert conn.state is ConnectionState.INIT
    assert conn.opened is None
    assert conn.closed is None
    assert Connection.INIT is ConnectionState.INIT


def test_add_listener_rejects_unknown_kind() -> None:
    conn, _ = make_stub()
    with pytest.raises(InvalidEventKind):
        conn.add_listener("PROGRESS", lambda event: None)


def test_add_listener_rejects_non_callable() -> None:
    conn, _ = make_stub()
    with pytest.raises(InvalidConfiguration):
        conn.add_listener(EventKind.DATA, "not callable")  # type: ignore[arg-type]


def test_emit_runs_listeners_in_registration_order() -> None:
    conn, _ = make_stub()
    calls: list[str] = []
    conn.add_listener("DATA", lambda event: calls.append("first"))
    conn.add_listener(EventKind.DATA, lambda event: calls.append("second"))
    conn.add_listener(EventKind.ERROR, lambda event: calls.append("error"))

    conn.emit(EventKind.DATA, ConnectionEvent(conn, EventKind.DATA))

    assert calls == ["first", "second"]


def test_emit_uses_snapshot_of_listeners() -> None:
    conn, _ = make_stub()
    calls: list[str] = []

    def second(event: ConnectionEvent) -> None:
        calls.append("second")

    def first(event: ConnectionEvent) -> None:
        calls.append("first")
        conn.remove_listener(EventKind.DATA, second)

    conn.add_listener(EventKind.DATA, first)
    conn.add_listener(EventKind.DATA, second)
    conn.emit(EventKind.DATA, ConnectionEvent(conn, EventKind.DATA))
    conn.emit(EventKind.DATA, ConnectionEvent(conn, EventKind.DATA))

    assert calls == ["first", "second", "first"]


def test_remove_listener_is_noop_when_missing() -> None:
    conn, _ = make_stub()
    callback = lambda event: None  # noqa: E731
    conn.remove_listener(EventKind.OPEN, callback)
    conn.add_listener(EventKind.OPEN, callback)
    conn.remove_listener(EventKind.OPEN, callback)
    assert conn.listeners[EventKind.OPEN] == ()


def test_listeners_view_is_read_only() -> None:
    conn, _ = make_stub()
    with pytest.raises(TypeError):
        conn.listeners[EventKind.OPEN] = ()  # type: ignore[index]


def test_transitions_only_move_forward() -> None:
    conn, _ = make_stub()
    conn.open()
    opened = conn.opened
    assert conn.state is ConnectionState.OPEN

    conn.open()
    assert conn.opened == opened

    assert conn.finish() is True
    closed = conn.closed
    assert conn.state is ConnectionState.CLOSED

    assert conn.finish() is False
    conn.open()
    assert conn.state is ConnectionState.CLOSED
    assert conn.closed == closed
    assert conn.opened == opened


def test_init_can_close_directly() -> None:
    conn, _ = make_stub()
    conn.close()
    assert conn.state is ConnectionState.CLOSED
    assert conn.opened is None
    assert conn.closed is not None


def test_dispatch_is_deferred_until_scheduler_runs() -> None:
    conn, scheduler = make_stub()
    seen: list[ConnectionState] = []
    conn.add_listener(EventKind.OPEN, lambda event: seen.append(event.source.state))

    conn.open()
    assert seen == []
    assert scheduler.pending == 1

    scheduler.run_pending()
    assert seen == [ConnectionState.OPEN]


def test_listener_registered_after_transition_still_receives_event() -> None:
    conn, scheduler = make_stub()
    conn.close()
    received: list[EventKind] = []
    conn.add_listener(EventKind.ABORT, lambda event: received.append(event.kind))

    scheduler.run_pending()
    assert received == [EventKind.ABORT]


def test_queued_data_is_dropped_once_closed() -> None:
    conn, scheduler = make_stub()
    received: list[tuple[EventKind, ConnectionState]] = []
    for kind in (EventKind.DATA, EventKind.ABORT):
        conn.add_listener(kind, lambda event: received.append((event.kind, event.source.state)))

    conn.open()
    conn.progress()
    scheduler.run_pending()
    conn.progress()
    conn.close()
    scheduler.run_pending()

    assert received == [
        (EventKind.DATA, ConnectionState.OPEN),
        (EventKind.ABORT, ConnectionState.CLOSED),
    ]


def test_failing_listener_is_logged_and_others_still_run(caplog: pytest.LogCaptureFixture) -> None:
    conn, scheduler = make_stub()
    calls: list[str] = []

    def broken(event: ConnectionEvent) -> None:
        raise RuntimeError("listener failure")

    conn.add_listener(EventKind.OPEN, broken)
    conn.add_listener(EventKind.OPEN, lambda event: calls.append("ok"))
    conn.open()

    with caplog.at_level(logging.ERROR, logger="conduit"):
        scheduler.run_pending()

    assert calls == ["ok"]
    assert "raised" in caplog.text


def test_repr_shows_url_and_state() -> None:
    conn, _ = make_stub()
    assert repr(conn) == "StubConnection(url='https://example.test/a', state=INIT)"
