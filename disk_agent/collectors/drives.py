"""
disk_agent.collectors.drives
AUTHOR: carter-vin

OS disk queries
- list_drives: mounted filesystem entries (psutil.disk_partitions)
- drive_detail: usage for one mount point (psutil.disk_usage)

Sync functions do the work; async wrappers run each one in a worker thread
(single await, no retry). timeout=None waits forever. On timeout the
await is abandoned but the worker thread is not cancelled: a hung psutil
call keeps running in the background until the OS returns.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

import psutil

from disk_agent.sizes import format_size


@dataclass(frozen=True)
class MountEntry:
    device: str
    mountpoint: str
    fstype: str


@dataclass(frozen=True)
class DriveUsage:
    """
    Usage snapshot for one mount point

    Sizes are human-readable strings ("12.3GB"); parse with sizes.parse_size
    """

    mountpoint: str
    drive: str
    total: str
    used: str
    available: str
    used_percent: float
    free_percent: float


def list_drives() -> list[MountEntry]:
    """
    List mounted physical filesystems (no proc/sysfs/cgroup pseudo mounts)
    """
    return [
        MountEntry(device=part.device, mountpoint=part.mountpoint, fstype=part.fstype)
        for part in psutil.disk_partitions(all=False)
    ]


def _device_for(mountpoint: str) -> str:
    for part in psutil.disk_partitions(all=False):
        if part.mountpoint == mountpoint:
            return part.device
    return ""


def drive_detail(dev: str) -> DriveUsage:
    """
    Collect usage for a mount point

    Raises whatever psutil raises (FileNotFoundError, PermissionError, OSError)
    """
    usage = psutil.disk_usage(dev)

    free_percent = 0.0
    if usage.total > 0:
        free_percent = round(usage.free / usage.total * 100.0, 1)

    return DriveUsage(
        mountpoint=dev,
        drive=_device_for(dev),
        total=format_size(usage.total),
        used=format_size(usage.used),
        available=format_size(usage.free),
        used_percent=float(usage.percent),
        free_percent=free_percent,
    )


async def _in_thread(fn, *args, timeout: Optional[float] = None):
    if timeout is None:
        return await asyncio.to_thread(fn, *args)
    return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=timeout)


async def drives(*, timeout: Optional[float] = None) -> list[str]:
    """
    Mount paths of all mounted filesystems
    """
    entries = await _in_thread(list_drives, timeout=timeout)
    return [entry.mountpoint for entry in entries]


async def drive_usage(dev: str, *, timeout: Optional[float] = None) -> DriveUsage:
    return await _in_thread(drive_detail, dev, timeout=timeout)
