"""
disk_agent.collectors.disk
AUTHOR: carter-vin

Disk resource
- discover(): reconcile OS mount list against a known-device set
- Disk.sample(): take a usage sample for one mount point
- Disk.free() / total() / ratio(): read the last sample

No retries here; OS query errors propagate unchanged to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Protocol

from disk_agent.collectors import drives as os_drives
from disk_agent.collectors.drives import DriveUsage
from disk_agent.sizes import parse_size

DrivesQuery = Callable[[], Awaitable[list[str]]]
DetailQuery = Callable[[str], Awaitable[DriveUsage]]


class Service(Protocol):
    def trace(self, message: str, **fields) -> None: ...

    def info(self, message: str, **fields) -> None: ...

    def warn(self, message: str, **fields) -> None: ...


@dataclass
class DiscoveryContext:
    """
    Known-device set, owned by the caller and passed to every discover()

    dict keys keep insertion order, which is the order discover() returns.
    Callers must not run two discover() calls on one context concurrently.
    """

    known: dict[str, None] = field(default_factory=dict)

    def devices(self) -> list[str]:
        return list(self.known)


def is_posix_mount(path: str) -> bool:
    """
    True for absolute POSIX mount paths (first char is "/")
    """
    return path[:1] == "/"


async def discover(
    service: Service,
    context: DiscoveryContext,
    *,
    drives: Optional[DrivesQuery] = None,
    timeout: Optional[float] = None,
) -> list[str]:
    """
    Discover attached disks

    - removed devices: dropped from context, warn event
    - new devices: added to context, info event
    Returns the full known-device list.
    """
    service.trace("discovering disks")

    if drives is None:
        discovered = await os_drives.drives(timeout=timeout)
    else:
        discovered = await drives()

    discovered = [dev for dev in discovered if is_posix_mount(dev)]
    present = set(discovered)

    # remove known disks which are no longer found
    for dev in [d for d in context.known if d not in present]:
        del context.known[dev]
        service.warn(f"disk device disappeared [{dev}]", event_type="disk_disappeared", device=dev)

    # add discovered disks which were previously unknown
    for dev in discovered:
        if dev in context.known:
            continue
        service.info(f"disk discovered [{dev}]", event_type="disk_discovered", device=dev)
        context.known[dev] = None

    return context.devices()


class Disk:
    """
    One mounted disk, keyed by mount path

    Holds only the most recent sample (None until the first success).
    """

    def __init__(
        self,
        dev: str,
        *,
        detail: Optional[DetailQuery] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.dev = dev
        self._detail = detail
        self._timeout = timeout
        self._sampled: Optional[DriveUsage] = None

    def __repr__(self) -> str:
        return f"Disk({self.dev!r})"

    @classmethod
    async def discover(cls, service: Service, context: DiscoveryContext, **kwargs) -> list[str]:
        return await discover(service, context, **kwargs)

    async def sample(self) -> DriveUsage:
        """
        Take a sample and keep it as the last sample

        On failure the previous sample is kept and the error re-raised as-is.
        """
        if self._detail is None:
            usage = await os_drives.drive_usage(self.dev, timeout=self._timeout)
        else:
            usage = await self._detail(self.dev)

        self._sampled = usage
        return usage

    def sampled(self) -> Optional[DriveUsage]:
        return self._sampled

    def free(self) -> Optional[int]:
        """
        Free bytes from last sample
        """
        if self._sampled is None:
            return None
        return parse_size(self._sampled.available)

    def total(self) -> Optional[int]:
        """
        Total bytes from last sample
        """
        if self._sampled is None:
            return None
        return parse_size(self._sampled.total)

    def ratio(self) -> Optional[float]:
        """
        free / total from last sample

        None if nothing sampled yet, or total is 0 (e.g. empty pseudo fs)
        """
        free = self.free()
        total = self.total()
        if free is None or not total:
            return None
        return free / total
