"""
disk_agent.collectors.base
AUTHOR: carter-vin

Light result wrapper -> prevent collector errors from crashing agent
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

@dataclass(frozen=True)
class CollectorOutcome:
    """
    Normalized collector result
    - ok: false=failure, error details in error field
    - value: collector result object if ok=true
    """

    name: str
    ok: bool
    value: Optional[Any] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None


async def run_collector(name: str, fn, *args, **kwargs) -> CollectorOutcome:
    """
    Await collector coroutine & collect failure as data
    """
    try:
        v = await fn(*args, **kwargs)
        return CollectorOutcome(name=name, ok=True, value=v, error_type=None, error_message=None)
    except Exception as e:
        return CollectorOutcome(
            name=name,
            ok=False,
            value=None,
            error_type=type(e).__name__,
            error_message=str(e),
        )
