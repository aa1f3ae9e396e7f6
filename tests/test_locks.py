import asyncio

import pytest

from auction_site.core.locks import KeyedLock

pytestmark = pytest.mark.asyncio


async def test_same_key_is_exclusive():
    locks = KeyedLock()
    order = []

    async def worker(name):
        async with locks.hold("auction-1"):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert order == ["a-in", "a-out", "b-in", "b-out"]


async def test_different_keys_do_not_block():
    locks = KeyedLock()
    entered = asyncio.Event()

    async def holder():
        async with locks.hold(1):
            await asyncio.wait_for(entered.wait(), timeout=1)

    async def other():
        async with locks.hold(2):
            entered.set()

    await asyncio.gather(holder(), other())


async def test_idle_keys_are_dropped():
    locks = KeyedLock()

    async with locks.hold("k"):
        assert locks.locked("k")
        assert len(locks) == 1

    assert not locks.locked("k")
    assert len(locks) == 0


async def test_lock_released_on_error():
    locks = KeyedLock()

    with pytest.raises(RuntimeError):
        async with locks.hold("k"):
            raise RuntimeError("boom")

    assert len(locks) == 0
    async with locks.hold("k"):
        pass
