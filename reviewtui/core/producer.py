# reviewtui/core/producer.py
import asyncio
import logging
from typing import Optional

from reviewtui.core.bus import Bus
from reviewtui.core.events import Input, Tick

log = logging.getLogger(__name__)

TICK_FPS = 30.0


class EventProducer:
    """Background task feeding ticks and raw terminal input into the bus.

    Each turn races three wake sources: the bus closing (stop), the next
    tick boundary (``Tick``) and the next item on ``inputs`` (``Input``).
    Boundaries missed while the loop was busy are emitted back to back, one
    ``Tick`` each. A ``tick_rate`` of None or 0 disables ticks.
    """

    def __init__(self, bus: Bus, inputs: asyncio.Queue, tick_rate: Optional[float] = TICK_FPS):
        self.bus = bus
        self.inputs = inputs
        self.interval = (1.0 / tick_rate) if tick_rate else None
        self._task: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.ensure_future(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval if self.interval else None
        closed_task = asyncio.ensure_future(self.bus.wait_closed())
        input_task: Optional[asyncio.Future] = None
        log.debug("producer started (interval=%s)", self.interval)
        try:
            while True:
                if input_task is None:
                    input_task = asyncio.ensure_future(self.inputs.get())
                timeout = None
                if next_tick is not None:
                    timeout = max(0.0, next_tick - loop.time())
                done, _ = await asyncio.wait(
                    {closed_task, input_task}, timeout=timeout,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if closed_task in done:
                    break
                if input_task in done:
                    self.bus.send(Input(input_task.result()))
                    input_task = None
                if next_tick is not None:
                    now = loop.time()
                    while now >= next_tick:
                        self.bus.send(Tick())
                        next_tick += self.interval
        finally:
            for t in (closed_task, input_task):
                if t is not None and not t.done():
                    t.cancel()
            log.debug("producer stopped")
