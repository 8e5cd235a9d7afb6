import asyncio

import pytest

from reviewtui.core import events
from reviewtui.core.bus import Bus
from reviewtui.core.producer import TICK_FPS, EventProducer
from reviewtui.ui_ptk.keys import press


def test_default_rate():
    producer = EventProducer(Bus(), asyncio.Queue())
    assert TICK_FPS == 30
    assert producer.interval == pytest.approx(1 / 30)


@pytest.mark.asyncio
async def test_forwards_input_in_order():
    bus, inputs = Bus(), asyncio.Queue()
    producer = EventProducer(bus, inputs, tick_rate=None)
    task = producer.start()
    for ch in "abc":
        inputs.put_nowait(press(ch))
    got = [(await asyncio.wait_for(bus.next(), 1)).event.key for _ in range(3)]
    assert got == ["a", "b", "c"]
    bus.close()
    await asyncio.wait_for(task, 1)


@pytest.mark.asyncio
async def test_emits_ticks():
    bus = Bus()
    producer = EventProducer(bus, asyncio.Queue(), tick_rate=200)
    task = producer.start()
    await asyncio.sleep(0.1)
    bus.close()
    await asyncio.wait_for(task, 1)
    ticks = 0
    while True:
        ev = bus.try_next() if bus.has_pending() else None
        if ev is None:
            break
        if isinstance(ev, events.Tick):
            ticks += 1
    # 20 boundaries passed; allow for scheduler jitter
    assert ticks >= 10


@pytest.mark.asyncio
async def test_ticks_do_not_starve_input():
    bus, inputs = Bus(), asyncio.Queue()
    producer = EventProducer(bus, inputs, tick_rate=1000)
    task = producer.start()
    await asyncio.sleep(0.02)
    inputs.put_nowait(press("x"))
    seen_input = False
    for _ in range(1000):
        ev = await asyncio.wait_for(bus.next(), 1)
        if isinstance(ev, events.Input):
            seen_input = True
            break
    assert seen_input
    bus.close()
    await asyncio.wait_for(task, 1)


@pytest.mark.asyncio
async def test_stops_when_bus_closes():
    bus = Bus()
    producer = EventProducer(bus, asyncio.Queue(), tick_rate=None)
    task = producer.start()
    await asyncio.sleep(0)
    bus.close()
    await asyncio.wait_for(task, 1)
    assert task.done()


@pytest.mark.asyncio
async def test_stop_cancels():
    bus = Bus()
    producer = EventProducer(bus, asyncio.Queue(), tick_rate=None)
    producer.start()
    await asyncio.sleep(0)
    await producer.stop()
    await producer.stop()
