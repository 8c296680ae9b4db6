"""
Shared fakes for disk discovery / sampling tests
"""

from __future__ import annotations

import pytest

from disk_agent.collectors.drives import DriveUsage


class RecordingService:
    """
    Stand-in for EventLogger: records (level, message, fields)
    """

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict]] = []

    def trace(self, message: str, **fields) -> None:
        self.events.append(("trace", message, fields))

    def info(self, message: str, **fields) -> None:
        self.events.append(("info", message, fields))

    def warn(self, message: str, **fields) -> None:
        self.events.append(("warn", message, fields))

    def at(self, level: str) -> list[str]:
        return [message for lvl, message, _ in self.events if lvl == level]

    def clear(self) -> None:
        self.events.clear()


class FakeDrives:
    """
    Async OS device-list query returning whatever `mounts` holds
    """

    def __init__(self, mounts: list[str]) -> None:
        self.mounts = list(mounts)
        self.calls = 0

    async def __call__(self) -> list[str]:
        self.calls += 1
        return list(self.mounts)


def usage(dev: str, available: str, total: str, used: str = "0B") -> DriveUsage:
    return DriveUsage(
        mountpoint=dev,
        drive="/dev/fake",
        total=total,
        used=used,
        available=available,
        used_percent=0.0,
        free_percent=0.0,
    )


@pytest.fixture
def service() -> RecordingService:
    return RecordingService()
