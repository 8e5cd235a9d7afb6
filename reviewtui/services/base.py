# reviewtui/services/base.py
import asyncio
import logging
from typing import Any, Callable

log = logging.getLogger(__name__)


class ServiceContext:
    """What a service may touch while handling one event.

    Built by the processor for a single dispatch; services must not keep it.
    """

    def __init__(self, database, repo_path: str, bus):
        self.database = database
        self.repo_path = repo_path
        self.bus = bus

    def send(self, app_event: Any) -> None:
        self.bus.send_app(app_event)

    async def call(self, fn: Callable, *args) -> Any:
        """Run a blocking storage/VCS call in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(*args))


class Service:
    """Reacts to app events; anything it wants to happen next goes on the bus."""

    name = "service"

    async def handle(self, event: Any, ctx: ServiceContext) -> None:
        pass
