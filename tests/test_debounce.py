# File: /tests/test_debounce.py
import asyncio

from viewengine.engine.debounce import Debouncer


def test_burst_coalesces_into_latest_generation():
    fired = []

    async def scenario():
        d = Debouncer(0.01, fired.append)
        for gen in (1, 2, 3):
            d.schedule(gen)
        assert d.pending
        await asyncio.sleep(0.05)
        assert not d.pending

    asyncio.run(scenario())
    assert fired == [3]


def test_cancel_drops_pending_call():
    fired = []

    async def scenario():
        d = Debouncer(0.01, fired.append)
        d.schedule(1)
        d.cancel()
        await asyncio.sleep(0.03)

    asyncio.run(scenario())
    assert fired == []


def test_flush_without_a_loop():
    fired = []
    d = Debouncer(10, fired.append)
    assert not d.flush()
    d.schedule(7)
    assert d.pending
    assert d.flush()
    assert fired == [7]
    assert not d.pending
