"""Tests for KeyedLock."""

import asyncio

import pytest

from area_realtime.application.services import KeyedLock


@pytest.mark.asyncio
async def test_same_key_is_serialized() -> None:
    """Given two holders of one key, when both run, then their critical sections do not overlap."""
    locks = KeyedLock()
    trace: list[str] = []

    async def work(name: str) -> None:
        async with locks.hold("room"):
            trace.append(f"{name}-in")
            await asyncio.sleep(0)
            trace.append(f"{name}-out")

    await asyncio.gather(work("a"), work("b"))

    assert trace == ["a-in", "a-out", "b-in", "b-out"]


@pytest.mark.asyncio
async def test_different_keys_run_concurrently() -> None:
    """Given two keys, when both are held, then neither waits for the other."""
    locks = KeyedLock()
    both_inside = asyncio.Event()
    inside = 0

    async def work(key: str) -> None:
        nonlocal inside
        async with locks.hold(key):
            inside += 1
            if inside == 2:
                both_inside.set()
            await asyncio.wait_for(both_inside.wait(), timeout=1)

    await asyncio.gather(work("a"), work("b"))

    assert both_inside.is_set()


@pytest.mark.asyncio
async def test_entries_are_released_after_use() -> None:
    """Given a finished holder, when checking active keys, then none remain, even after an error."""
    locks = KeyedLock()

    async with locks.hold("a"):
        assert locks.active_keys() == {"a"}
    with pytest.raises(RuntimeError):
        async with locks.hold("b"):
            raise RuntimeError("boom")

    assert locks.active_keys() == set()
