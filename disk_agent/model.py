"""
disk_agent.model
AUTHOR: carter-vin

Report schema + deterministic serialization primitives.

Design goals:
- Versioned, stable report envelope ("schema_version" = "1")
- Explicit structure (no accidental serialization via __dict__)
- Deterministic ordering where it matters (disks by dev, keys)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

import json

from disk_agent.collectors.disk import Disk
from disk_agent.logging import utc_now_iso

# Schema constants
SCHEMA_VERSION = "1"


@dataclass(frozen=True)
class DiskSignal:
    """
    One disk's numbers from its last sample

    Size strings are kept raw alongside the parsed byte counts so consumers
    can see what the OS query returned.
    """

    dev: str
    free_bytes: Optional[int]
    total_bytes: Optional[int]
    ratio: Optional[float]
    available: Optional[str] = None
    used: Optional[str] = None
    total: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "dev": self.dev,
            "free_bytes": self.free_bytes,
            "total_bytes": self.total_bytes,
            "ratio": self.ratio,
            "available": self.available,
            "used": self.used,
            "total": self.total,
        }


@dataclass(frozen=True)
class DiskReport:
    """
    Top-level report
    - node_id: host label (no cross-host aggregation)
    - min_ratio: roll-up across disks, None if any disk lacks a ratio
    """

    node_id: str
    emitted_at: str
    disks: list[DiskSignal]
    min_ratio: Optional[float]
    agent_version: str
    schema_version: str = SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": {"node_id": self.node_id},
            "emitted_at": self.emitted_at,
            "disks": [d.to_dict() for d in sorted(self.disks, key=lambda d: d.dev)],
            "aggregate": {"min_ratio": self.min_ratio},
            "meta": {
                "schema_version": self.schema_version,
                "agent_version": self.agent_version,
            },
        }


def report_to_json(report: DiskReport) -> str:
    """
    Serialize a DiskReport

    Rules:
    - sort_keys=True ensures stable key order
    - separators remove whitespace to avoid formatting drift
    """
    return json.dumps(
        report.to_dict(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def validate_report(report: DiskReport) -> None:
    """
    Validate report structure + content

    Raises ValueError on invalid
    """
    if not report.node_id:
        raise ValueError("identity.node_id is empty")
    if not report.emitted_at:
        raise ValueError("emitted_at is empty")
    if report.schema_version != SCHEMA_VERSION:
        raise ValueError(f"meta.schema_version must be: '{SCHEMA_VERSION}'")
    if not report.agent_version:
        raise ValueError("meta.agent_version must be non-empty")

    devs = [d.dev for d in report.disks]
    if len(devs) != len(set(devs)):
        raise ValueError("disks contains duplicate dev entries")

    for d in report.disks:
        if d.ratio is not None and d.ratio < 0.0:
            raise ValueError(f"disk {d.dev} ratio is negative: {d.ratio}")


def signal_from_disk(disk: Disk) -> DiskSignal:
    sampled = disk.sampled()
    return DiskSignal(
        dev=disk.dev,
        free_bytes=disk.free(),
        total_bytes=disk.total(),
        ratio=disk.ratio(),
        available=sampled.available if sampled else None,
        used=sampled.used if sampled else None,
        total=sampled.total if sampled else None,
    )


def build_report(
    disks: Iterable[Disk],
    *,
    node_id: str,
    agent_version: str,
    min_ratio: Optional[float],
    emitted_at: Optional[str] = None,
) -> DiskReport:
    """
    Assemble a DiskReport from Disk resources
    """
    report = DiskReport(
        node_id=node_id,
        emitted_at=emitted_at or utc_now_iso(),
        disks=[signal_from_disk(d) for d in disks],
        min_ratio=min_ratio,
        agent_version=agent_version,
    )

    # validate before returning
    validate_report(report)
    return report
