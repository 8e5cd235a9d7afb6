# reviewtui/core/bus.py
import asyncio
from typing import Any, AsyncGenerator, Optional

from reviewtui.core.errors import ChannelClosed
from reviewtui.core.events import App, Event, Input

_CLOSED = object()


class Bus:
    """Unbounded FIFO between the producers and the single event processor.

    Any number of senders, exactly one consumer. Sending never blocks; after
    ``close()`` sends are dropped and the consumer gets ``ChannelClosed``
    once the remaining events are drained.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = asyncio.Event()

    # senders
    def send(self, event: Event) -> None:
        if self._closed.is_set():
            return
        self._queue.put_nowait(event)

    def send_app(self, event: Any) -> None:
        self.send(App(event))

    def send_key(self, press: Any) -> None:
        self.send(Input(press))

    async def emit(self, event: Event) -> None:
        self.send(event)

    # consumer
    async def next(self) -> Event:
        ev = await self._queue.get()
        if ev is _CLOSED:
            # leave the marker for whoever asks next
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed("event bus closed")
        return ev

    def try_next(self) -> Optional[Event]:
        """Non-blocking dequeue; None when nothing is pending."""
        try:
            ev = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        if ev is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed("event bus closed")
        return ev

    def has_pending(self) -> bool:
        return not self._queue.empty() and not (self._queue.qsize() == 1 and self.closed)

    async def listen(self) -> AsyncGenerator[Event, None]:
        while True:
            try:
                ev = await self.next()
            except ChannelClosed:
                return
            yield ev

    # lifecycle
    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._queue.put_nowait(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def wait_closed(self) -> None:
        await self._closed.wait()
