"""
disk_agent.logging
AUTHOR: carter-vin

Structured JSON event logging for ops ingestion

Contract:
- One JSON object per line to stdout
- Stable event vocabulary (allowlist)
- UTC timestamps only
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

# Event types
VALID_EVENT_TYPES = {
    "agent_start",
    "agent_tick",
    "agent_log",
    "disk_discovered",
    "disk_disappeared",
    "discovery_failed",
    "sample_failed",
    "disk_report_emitted",
    "agent_shutdown",
}

# Ordered low -> high
LOG_LEVELS = ("trace", "info", "warn")

# Set by EventLogger itself; callers may not pass them as fields
RESERVED_FIELDS = frozenset({"level", "message", "agent_version", "utc_now"})


def _truncate_message(value: str, *, limit: int = 200) -> str:
    """
    Cap message length to keep events compact
    """
    if len(value) <= limit:
        return value
    return value[:limit] + f"...[truncated {len(value) - limit} chars]"


# Time: current in UTC ISO 8601
def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def emit_event(event_type: str, *, agent_version: str, **fields: Any) -> None:
    """
    Emit structured event line to stdout

    Rules:
    - event_type in VALID_EVENT_TYPES
    - event_type, agent_version, timestamp always present
    - sort_keys + compact separators for format
    """
    if event_type not in VALID_EVENT_TYPES:
        raise ValueError(f"invalid event_type: {event_type}")

    if "message" in fields and isinstance(fields["message"], str):
        # Avoid emitting long strings in event fields
        fields["message"] = _truncate_message(fields["message"])

    payload: dict[str, Any] = {
        "event_type": event_type,
        "utc_now": utc_now_iso(),
        "agent_version": agent_version,
        **fields,
    }

    print(
        json.dumps(
            payload,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
    )


def validate_level(level: str) -> str:
    level = level.strip().lower()
    if level not in LOG_LEVELS:
        raise ValueError(f"invalid log level: {level!r} (expected one of {list(LOG_LEVELS)})")
    return level


class EventLogger:
    """
    trace/info/warn facade over emit_event

    Discovery and the CLI loop only see this object, so tests can pass a
    recorder with the same three methods.

    Extra keyword fields pass through to the event payload; `event_type`
    selects the vocabulary entry (default "agent_log").
    """

    def __init__(self, *, agent_version: str, level: str = "info", **context: Any) -> None:
        self.agent_version = agent_version
        self.level = validate_level(level)
        clash = RESERVED_FIELDS.intersection(context)
        if clash:
            raise ValueError(f"reserved event fields: {sorted(clash)}")
        self.context = context

    def enabled(self, level: str) -> bool:
        return LOG_LEVELS.index(level) >= LOG_LEVELS.index(self.level)

    def _log(self, level: str, message: str, event_type: str, fields: dict[str, Any]) -> None:
        clash = RESERVED_FIELDS.intersection(fields)
        if clash:
            raise ValueError(f"reserved event fields: {sorted(clash)}")
        if not self.enabled(level):
            return
        emit_event(
            event_type,
            agent_version=self.agent_version,
            level=level,
            message=message,
            **{**self.context, **fields},
        )

    def trace(self, message: str, /, *, event_type: str = "agent_log", **fields: Any) -> None:
        self._log("trace", message, event_type, fields)

    def info(self, message: str, /, *, event_type: str = "agent_log", **fields: Any) -> None:
        self._log("info", message, event_type, fields)

    def warn(self, message: str, /, *, event_type: str = "agent_log", **fields: Any) -> None:
        self._log("warn", message, event_type, fields)
