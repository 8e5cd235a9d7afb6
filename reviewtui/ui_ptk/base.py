# reviewtui/ui_ptk/base.py
from typing import Any, Tuple

from reviewtui.core import events
from reviewtui.ui_ptk.frame import FrameBuffer
from reviewtui.ui_ptk.keys import KeyBinding


class ViewContext:
    """Per-dispatch handle given to views: the current state snapshot and a sender."""

    def __init__(self, bus, state):
        self.bus = bus
        self.state = state

    def send(self, app_event: Any) -> None:
        self.bus.send_app(app_event)

    def send_key(self, press) -> None:
        self.bus.send_key(press)


class View:
    view_type = "view"
    is_overlay = False

    def render(self, buf: FrameBuffer, ctx: ViewContext) -> None:
        pass

    def handle_key(self, press, ctx: ViewContext) -> None:
        pass

    def handle_app_event(self, event, ctx: ViewContext) -> None:
        pass

    def on_resume(self, ctx: ViewContext) -> None:
        """Called when the view above this one closes and this one is active again."""
        pass

    def keybindings(self) -> Tuple[KeyBinding, ...]:
        return ()

    def open_help(self, ctx: ViewContext) -> None:
        ctx.send(events.HelpOpen(self.keybindings()))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.view_type}>"
