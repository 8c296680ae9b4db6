"""
Contract tests for event vocabulary enforcement and the trace/info/warn logger.

The logging surface must reject unknown event types to keep aggregation stable.
"""

import json

import pytest

from disk_agent.logging import EventLogger, emit_event


def _lines(capsys) -> list[dict]:
    out = capsys.readouterr().out
    return [json.loads(line) for line in out.splitlines() if line.strip()]


def test_emit_event_rejects_invalid_event_type() -> None:
    """
    Unknown event types must raise ValueError.
    """
    with pytest.raises(ValueError, match="invalid event_type"):
        emit_event("not_a_real_event", agent_version="0.1.0")


def test_emit_event_required_fields_and_truncation(capsys) -> None:
    emit_event("agent_tick", agent_version="0.1.0", mode="run", message="x" * 500)

    (payload,) = _lines(capsys)

    assert payload["event_type"] == "agent_tick"
    assert payload["agent_version"] == "0.1.0"
    assert "utc_now" in payload
    assert payload["message"].startswith("x" * 200)
    assert payload["message"].endswith("[truncated 300 chars]")


def test_event_logger_levels_and_fields(capsys) -> None:
    log = EventLogger(agent_version="0.1.0", level="info", mode="oneshot")

    log.trace("discovering disks")
    log.info("disk discovered [/]", event_type="disk_discovered", device="/")
    log.warn("disk device disappeared [/data]", event_type="disk_disappeared", device="/data")

    events = _lines(capsys)

    # trace is below the info threshold
    assert [e["event_type"] for e in events] == ["disk_discovered", "disk_disappeared"]
    assert events[0]["level"] == "info"
    assert events[0]["device"] == "/"
    assert events[0]["mode"] == "oneshot"
    assert events[1]["level"] == "warn"
    assert events[1]["message"] == "disk device disappeared [/data]"


def test_event_logger_trace_level_emits_agent_log(capsys) -> None:
    EventLogger(agent_version="0.1.0", level="trace").trace("discovering disks")

    (payload,) = _lines(capsys)

    assert payload["event_type"] == "agent_log"
    assert payload["level"] == "trace"


def test_event_logger_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="invalid log level"):
        EventLogger(agent_version="0.1.0", level="debug")


@pytest.mark.parametrize("field", ["level", "message", "agent_version", "utc_now"])
def test_event_logger_rejects_reserved_fields(field, capsys) -> None:
    """
    Fields the logger sets itself cannot be overridden by callers.
    """
    log = EventLogger(agent_version="0.1.0", level="trace")

    with pytest.raises(ValueError, match="reserved event fields"):
        log.warn("disk sample failed [/]", event_type="sample_failed", **{field: "x"})

    assert capsys.readouterr().out == ""


def test_event_logger_rejects_reserved_context() -> None:
    with pytest.raises(ValueError, match="reserved event fields"):
        EventLogger(agent_version="0.1.0", message="oops")
