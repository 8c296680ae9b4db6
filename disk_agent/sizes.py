"""
disk_agent.sizes
AUTHOR: carter-vin

Human-readable size strings <-> byte counts.

Convention (kept for compatibility with existing consumers):
- format_size renders with 1024-based divisors but plain suffixes ("12.3GB")
- parse_size reads a trailing plain "B" as binary, so "10MB" -> 10 * 2**20
- explicit binary suffixes ("10MiB") parse the same way
"""

from __future__ import annotations

import re

_UNITS = ["B", "KB", "MB", "GB", "TB", "PB", "EB"]

_PREFIX_POWER = {
    "": 0,
    "K": 1,
    "M": 2,
    "G": 3,
    "T": 4,
    "P": 5,
    "E": 6,
}

_SIZE_RE = re.compile(
    r"^\s*(?P<number>\d+(?:\.\d+)?|\.\d+)\s*(?P<prefix>[KMGTPE]?)(?P<binary>i?)(?P<unit>B?)\s*$",
    re.IGNORECASE,
)


def normalize_suffix(value: str) -> str:
    """
    Rewrite a trailing plain "B" as "iB"

    "10GB" -> "10GiB", "512000B" -> "512000iB", "10GiB" unchanged
    """
    if value.endswith("B") and not value.endswith("iB"):
        return value[:-1] + "iB"
    return value


def parse_size(value: str) -> int:
    """
    Parse a size string into bytes (binary units)

    Raises ValueError on anything that is not <number>[<prefix>][i][B]
    """
    match = _SIZE_RE.match(normalize_suffix(value.strip()))
    if match is None:
        raise ValueError(f"invalid size string: {value!r}")

    number = float(match.group("number"))
    power = _PREFIX_POWER[match.group("prefix").upper()]
    return int(round(number * (1024 ** power)))


def format_size(num_bytes: int) -> str:
    """
    Render bytes as "<n><unit>" with one decimal when scaled

    1024-based divisors, plain suffixes: 1536 -> "1.5KB"
    """
    if num_bytes < 0:
        raise ValueError(f"size must be >= 0: {num_bytes}")

    if num_bytes < 1024:
        return f"{int(num_bytes)}B"

    value = float(num_bytes)
    unit = _UNITS[0]
    for unit in _UNITS[1:]:
        value /= 1024
        if value < 1024:
            break

    return f"{value:.1f}".rstrip("0").rstrip(".") + unit
