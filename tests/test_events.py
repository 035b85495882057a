import dataclasses

import pytest

from conduit_client import Connection, ConnectionEvent, EventKind, InvalidEventKind


def test_named_constants_match_event_kinds() -> None:
    assert ConnectionEvent.OPEN is EventKind.OPEN
    assert ConnectionEvent.ABORT is EventKind.ABORT
    assert [kind.value for kind in ConnectionEvent.KINDS] == ["OPEN", "DATA", "ERROR", "COMPLETE", "ABORT"]


@pytest.mark.parametrize("kind", ["OPEN", "DATA", "ERROR", "COMPLETE", "ABORT", EventKind.DATA])
def test_includes_recognized_kinds(kind: object) -> None:
    assert ConnectionEvent.includes(kind)


@pytest.mark.parametrize("kind", ["open", "PROGRESS", "", None, 3, ["OPEN"]])
def test_includes_rejects_unknown_kinds(kind: object) -> None:
    assert not ConnectionEvent.includes(kind)


def test_coerce_raises_with_vocabulary_in_message() -> None:
    with pytest.raises(InvalidEventKind) as info:
        EventKind.coerce("LOAD")
    assert "OPEN, DATA, ERROR, COMPLETE, ABORT" in str(info.value)
    assert info.value.context == "LOAD"


def test_event_normalizes_string_kind() -> None:
    source = Connection("https://example.test")
    event = ConnectionEvent(source, "COMPLETE", 12.5)
    assert event.kind is EventKind.COMPLETE
    assert event.source is source
    assert event.timestamp == 12.5


def test_event_timestamp_defaults_to_creation_time() -> None:
    event = ConnectionEvent(Connection("https://example.test"), EventKind.OPEN)
    assert event.timestamp > 0


def test_explicit_none_timestamp_falls_back_to_now() -> None:
    event = ConnectionEvent(Connection("https://example.test"), "OPEN", None)
    assert isinstance(event.timestamp, float)
    assert "kind=OPEN" in repr(event)


def test_event_rejects_unknown_kind() -> None:
    with pytest.raises(InvalidEventKind):
        ConnectionEvent(Connection("https://example.test"), "FINISHED")


def test_event_requires_connection_source() -> None:
    with pytest.raises(InvalidEventKind):
        ConnectionEvent(object(), EventKind.OPEN)  # type: ignore[arg-type]


def test_event_is_immutable() -> None:
    event = ConnectionEvent(Connection("https://example.test"), EventKind.DATA)
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.kind = EventKind.ERROR  # type: ignore[misc]
