# reviewtui/core/processor.py
"""The single consumer of the event bus.

Per event: services in registration order, then the active view, then the
fixed global transitions (navigation and quit). Follow-up events are queued
behind everything already pending; nothing is processed inline.
"""
import logging
from typing import Callable, List, Optional

from reviewtui.core import events
from reviewtui.core.bus import Bus
from reviewtui.core.errors import ChannelClosed
from reviewtui.core.view_stack import ViewStack
from reviewtui.services import Service, ServiceContext, StateService
from reviewtui.ui_ptk import keys
from reviewtui.ui_ptk.base import View, ViewContext
from reviewtui.ui_ptk.comments import CommentsView
from reviewtui.ui_ptk.dialogs import ConfirmationDialogView, HelpModalView, ReviewRefreshDialogView
from reviewtui.ui_ptk.review_details import ReviewDetailsView
from reviewtui.ui_ptk.views import MainView, ReviewCreateView

log = logging.getLogger(__name__)


class EventProcessor:
    def __init__(self, bus: Bus, database, repo_path: str, services: List[Service],
                 root: Optional[View] = None, on_render: Optional[Callable[[], None]] = None):
        self.bus = bus
        self.database = database
        self.repo_path = repo_path
        self.services = list(services)
        self.views: ViewStack[View] = ViewStack(root or MainView())
        self.on_render = on_render
        self.running = False
        self._state_service = next((s for s in self.services if isinstance(s, StateService)), None)

    # ---------- contexts ----------

    @property
    def state(self):
        return self._state_service.state if self._state_service is not None else None

    def view_context(self) -> ViewContext:
        return ViewContext(self.bus, self.state)

    def service_context(self) -> ServiceContext:
        return ServiceContext(self.database, self.repo_path, self.bus)

    # ---------- loop ----------

    async def run(self) -> None:
        """Process events until ``Quit``. ``ChannelClosed`` propagates to the caller."""
        self.running = True
        self.render()
        try:
            while self.running:
                ev = await self.bus.next()
                await self.process(ev)
                self.render()
        except ChannelClosed:
            log.error("event bus closed while the processor was running")
            raise
        finally:
            self.running = False
        log.info("event processor stopped")

    async def drain(self) -> int:
        """Process whatever is queued, including follow-ups; returns the count.

        Stops early on ``Quit``.
        """
        count = 0
        self.running = True
        while self.running and self.bus.has_pending():
            ev = self.bus.try_next()
            if ev is None:
                break
            await self.process(ev)
            count += 1
        return count

    def render(self) -> None:
        if self.on_render is not None:
            try:
                self.on_render()
            except Exception:
                log.exception("render callback failed")

    # ---------- dispatch ----------

    async def process(self, ev) -> None:
        if isinstance(ev, events.Tick):
            self.tick()
        elif isinstance(ev, events.Input):
            self._handle_input(ev.event)
        elif isinstance(ev, events.App):
            await self._handle_app(ev.event)
        else:
            log.warning("unknown event on bus: %r", ev)

    def tick(self) -> None:
        pass

    def _handle_input(self, raw) -> None:
        key = getattr(raw, "key", None)
        if key is None or key in keys.IGNORED:
            return
        view = self.views.current()
        try:
            view.handle_key(raw, self.view_context())
        except Exception:
            log.exception("%r failed to handle key %r", view, key)

    async def _handle_app(self, app_event) -> None:
        ctx = self.service_context()
        for service in self.services:
            try:
                await service.handle(app_event, ctx)
            except Exception:
                log.exception("service %s failed on %r", getattr(service, "name", service), app_event)

        view = self.views.current()
        try:
            view.handle_app_event(app_event, self.view_context())
        except Exception:
            log.exception("%r failed on %r", view, app_event)

        self._global_transition(app_event)

    def _global_transition(self, ev) -> None:
        if isinstance(ev, events.Quit):
            log.info("quit requested")
            self.running = False
        elif isinstance(ev, events.ViewClose):
            if self.views.pop() is not None:
                self._resume_current()
        elif isinstance(ev, events.ReviewCreateOpen):
            self.views.push(ReviewCreateView())
            self.bus.send_app(events.GitBranchesLoad())
        elif isinstance(ev, events.ReviewDeleteConfirm):
            self.views.push(ConfirmationDialogView(
                "Delete review",
                "Delete this review with all its comments and viewed files?",
                on_confirm=events.ReviewDelete(ev.review_id),
            ))
        elif isinstance(ev, events.ReviewDetailsOpen):
            self.views.push(ReviewDetailsView(ev.review_id))
            self.bus.send_app(events.ReviewLoad(ev.review_id))
        elif isinstance(ev, events.ReviewRefreshOpen):
            self.views.push(ReviewRefreshDialogView(ev.review_id))
        elif isinstance(ev, events.CommentsOpen):
            self.views.push(CommentsView(ev.target))
            self.bus.send_app(events.CommentsLoad(ev.target))
        elif isinstance(ev, events.HelpOpen):
            self.views.push(HelpModalView(ev.bindings))
        elif isinstance(ev, events.HelpKeySelected):
            self.bus.send_app(events.ViewClose())
            self.bus.send_key(ev.key)

    def _resume_current(self) -> None:
        view = self.views.current()
        try:
            view.on_resume(self.view_context())
        except Exception:
            log.exception("%r failed to resume", view)

    # ---------- drawing ----------

    def paint(self, buf) -> None:
        """Compose the view stack into ``buf``: the first opaque view, then overlays above it."""
        buf.clear()
        ctx = self.view_context()
        for view in self.views.render_order():
            try:
                view.render(buf, ctx)
            except Exception:
                log.exception("%r failed to render", view)
