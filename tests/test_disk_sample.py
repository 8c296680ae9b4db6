"""
Contract tests for Disk sampling and derived accessors.
"""

import pytest

from conftest import usage
from disk_agent.collectors.disk import Disk


def _detail_returning(record):
    async def detail(dev: str):
        return record

    return detail


@pytest.mark.asyncio
async def test_accessors_use_binary_units() -> None:
    """
    "10GB" of "20GB" reads as 10 GiB of 20 GiB, ratio 0.5.
    """
    disk = Disk("/data", detail=_detail_returning(usage("/data", "10GB", "20GB")))

    await disk.sample()

    assert disk.free() == 10 * 2**30
    assert disk.total() == 20 * 2**30
    assert disk.ratio() == 0.5


def test_no_sample_yields_none() -> None:
    """
    Before the first sample every accessor is None, not 0 and not an error.
    """
    disk = Disk("/data")

    assert disk.sampled() is None
    assert disk.free() is None
    assert disk.total() is None
    assert disk.ratio() is None


@pytest.mark.asyncio
async def test_sample_returns_raw_record_and_replaces_previous() -> None:
    records = [usage("/", "1GB", "4GB"), usage("/", "3GB", "4GB")]

    async def detail(dev: str):
        return records.pop(0)

    disk = Disk("/", detail=detail)

    first = await disk.sample()
    assert first.available == "1GB"
    assert disk.ratio() == 0.25

    second = await disk.sample()
    assert disk.sampled() is second
    assert disk.ratio() == 0.75


@pytest.mark.asyncio
async def test_sample_passes_device_id() -> None:
    seen = []

    async def detail(dev: str):
        seen.append(dev)
        return usage(dev, "1KB", "2KB")

    await Disk("/mnt/x", detail=detail).sample()

    assert seen == ["/mnt/x"]


@pytest.mark.asyncio
async def test_sample_error_propagates_and_keeps_last_sample() -> None:
    ok = usage("/", "5GB", "10GB")
    boom = PermissionError("denied")
    calls = {"n": 0}

    async def detail(dev: str):
        calls["n"] += 1
        if calls["n"] > 1:
            raise boom
        return ok

    disk = Disk("/", detail=detail)
    await disk.sample()

    with pytest.raises(PermissionError) as excinfo:
        await disk.sample()

    assert excinfo.value is boom
    assert disk.sampled() is ok
    assert disk.ratio() == 0.5


@pytest.mark.asyncio
async def test_zero_total_ratio_is_none() -> None:
    disk = Disk("/proc", detail=_detail_returning(usage("/proc", "0B", "0B")))

    await disk.sample()

    assert disk.total() == 0
    assert disk.ratio() is None


@pytest.mark.asyncio
async def test_sample_uses_os_query_by_default(monkeypatch) -> None:
    from disk_agent.collectors import drives

    monkeypatch.setattr(drives, "drive_detail", lambda dev: usage(dev, "2MB", "8MB"))

    disk = Disk("/")
    await disk.sample()

    assert disk.ratio() == 0.25
