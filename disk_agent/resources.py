"""
disk_agent.resources
AUTHOR: carter-vin

Minimal resource registry (the framework side of discovery)

- ResourceType: keeps one instance per discovered key in lockstep with the
  discovery context; creates on add, retires on remove
- AggregateResource: named roll-up computed over all instances of a type
- register(): wires the "Disk" type and the "disk" min-ratio aggregate
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, Callable, Optional

from disk_agent.collectors.base import CollectorOutcome, run_collector
from disk_agent.collectors.disk import Disk, DiscoveryContext, Service


class ResourceType:
    """
    Registered resource type

    discover(service, context) -> list of keys
    factory(key) -> instance with an async sample()
    """

    def __init__(self, name: str, discover: Callable, factory: Callable[[str], Any]) -> None:
        self.name = name
        self._discover = discover
        self._factory = factory
        self.context = DiscoveryContext()
        self.instances: dict[str, Any] = {}

    async def refresh(self, service: Service) -> tuple[list[str], list[str]]:
        """
        Run discovery, then add/retire instances to match

        Returns (added, removed). Discovery errors propagate; instances are
        left as they were.
        """
        keys = await self._discover(service, self.context)

        removed = [key for key in self.instances if key not in keys]
        for key in removed:
            del self.instances[key]

        added = [key for key in keys if key not in self.instances]
        for key in added:
            self.instances[key] = self._factory(key)

        return added, removed

    async def sample_all(self) -> list[CollectorOutcome]:
        """
        Sample every instance concurrently; failures come back as outcomes
        """
        return list(
            await asyncio.gather(
                *(run_collector(key, inst.sample) for key, inst in self.instances.items())
            )
        )


class AggregateResource:
    """
    Roll-up over all instances of one resource type

    fn receives the aggregate and reads members through resources()
    """

    def __init__(self, fn: Callable[["AggregateResource"], Any], *, members: str) -> None:
        self._fn = fn
        self.members = members
        self._registry: Optional["ResourceRegistry"] = None

    def bind(self, registry: "ResourceRegistry") -> None:
        self._registry = registry

    def resources(self) -> list[Any]:
        if self._registry is None:
            return []
        return list(self._registry.types[self.members].instances.values())

    def value(self) -> Any:
        return self._fn(self)


class ResourceRegistry:
    def __init__(self) -> None:
        self.types: dict[str, ResourceType] = {}
        self.aggregates: dict[str, AggregateResource] = {}

    def resource(
        self,
        name: str,
        cls: Any,
        *,
        discover: Optional[Callable] = None,
        factory: Optional[Callable[[str], Any]] = None,
    ) -> ResourceType:
        if name in self.types:
            raise ValueError(f"resource type already registered: {name}")

        rtype = ResourceType(
            name,
            discover if discover is not None else cls.discover,
            factory if factory is not None else cls,
        )
        self.types[name] = rtype
        return rtype

    def attach_resource(self, name: str, aggregate: AggregateResource) -> None:
        if name in self.aggregates:
            raise ValueError(f"aggregate already attached: {name}")
        if aggregate.members not in self.types:
            raise ValueError(f"unknown resource type: {aggregate.members}")

        aggregate.bind(self)
        self.aggregates[name] = aggregate


def min_ratio(group: AggregateResource) -> Optional[float]:
    """
    Lowest free/total ratio across disks

    Any disk without a ratio (unsampled, zero total) makes the whole roll-up
    None, so a disk that never sampled cannot hide behind healthy ones.
    No disks -> None.
    """
    ratios = [disk.ratio() for disk in group.resources()]
    if any(r is None for r in ratios):
        return None
    return min(ratios, default=None)


def register(
    registry: ResourceRegistry,
    *,
    timeout: Optional[float] = None,
    drives: Optional[Callable] = None,
    detail: Optional[Callable] = None,
) -> AggregateResource:
    """
    Register the Disk resource type and the "disk" aggregate

    drives/detail override the OS queries (tests, dry runs)
    """
    registry.resource(
        "Disk",
        Disk,
        discover=partial(Disk.discover, drives=drives, timeout=timeout),
        factory=partial(Disk, detail=detail, timeout=timeout),
    )

    group = AggregateResource(min_ratio, members="Disk")
    registry.attach_resource("disk", group)
    return group
