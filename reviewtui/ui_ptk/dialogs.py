# reviewtui/ui_ptk/dialogs.py
from typing import Any, Tuple

from reviewtui.core import events
from reviewtui.ui_ptk import keys
from reviewtui.ui_ptk.base import View, ViewContext
from reviewtui.ui_ptk.frame import FrameBuffer
from reviewtui.ui_ptk.keys import KeyBinding, binding
from reviewtui.ui_ptk.text_sanitize import truncate
from reviewtui.ui_ptk.views import draw_hints, scroll_start


def _wrap(text: str, width: int):
    words, line, out = text.split(), "", []
    for word in words:
        if line and len(line) + 1 + len(word) > width:
            out.append(line)
            line = word
        else:
            line = f"{line} {word}" if line else word
    if line:
        out.append(line)
    return out or [""]


class ConfirmationDialogView(View):
    """Yes/no prompt. Confirming sends ``on_confirm`` and closes the dialog."""

    view_type = "confirmation"
    is_overlay = True

    def __init__(self, title: str, message: str, on_confirm: Any, on_cancel: Any = None):
        self.title = title
        self.message = message
        self.on_confirm = on_confirm
        self.on_cancel = on_cancel if on_cancel is not None else events.ViewClose()

    def keybindings(self) -> Tuple[KeyBinding, ...]:
        return (
            binding("y", "Confirm"),
            binding(keys.ENTER, "Confirm"),
            binding("n", "Cancel"),
            binding(keys.ESCAPE, "Cancel"),
        )

    def handle_key(self, press, ctx: ViewContext) -> None:
        ch = keys.char(press)
        if ch in ("y", "Y") or keys.is_key(press, keys.ENTER):
            ctx.send(self.on_confirm)
            ctx.send(events.ViewClose())
        elif ch in ("n", "N", "q") or keys.is_key(press, keys.ESCAPE, keys.CTRL_C):
            ctx.send(self.on_cancel)
            if not isinstance(self.on_cancel, events.ViewClose):
                ctx.send(events.ViewClose())
        elif ch == "?":
            self.open_help(ctx)

    def render(self, buf: FrameBuffer, ctx: ViewContext) -> None:
        width = max(30, min(60, buf.width - 4))
        lines = _wrap(self.message, width - 4)
        rect = buf.area.centered(width, len(lines) + 4)
        buf.box(rect, title=self.title, style="class:warning")
        inner = rect.inner()
        for i, line in enumerate(lines[:max(0, inner.height - 1)]):
            buf.put(inner.x + 1, inner.y + i, line)
        draw_hints(buf, inner.bottom - 1, [("y", "yes"), ("n", "no")], x=inner.x + 1)


class HelpModalView(View):
    """Lists the bindings of the view underneath; Enter replays the selected one."""

    view_type = "help"
    is_overlay = True

    def __init__(self, bindings: Tuple[KeyBinding, ...]):
        self.bindings = tuple(bindings)
        self.selected = 0

    def keybindings(self) -> Tuple[KeyBinding, ...]:
        return (
            binding("j", "Next"),
            binding("k", "Previous"),
            binding(keys.ENTER, "Run selected"),
            binding(keys.ESCAPE, "Close"),
        )

    def handle_key(self, press, ctx: ViewContext) -> None:
        ch = keys.char(press)
        count = len(self.bindings)
        if keys.is_key(press, keys.ESCAPE, keys.CTRL_C) or ch in ("q", "?"):
            ctx.send(events.ViewClose())
        elif ch == "j" or keys.is_key(press, keys.DOWN):
            if count:
                self.selected = (self.selected + 1) % count
        elif ch == "k" or keys.is_key(press, keys.UP):
            if count:
                self.selected = (self.selected - 1) % count
        elif keys.is_key(press, keys.ENTER):
            if count:
                ctx.send(events.HelpKeySelected(self.bindings[self.selected].key))

    def render(self, buf: FrameBuffer, ctx: ViewContext) -> None:
        key_width = max([len(b.display) for b in self.bindings] + [3])
        desc_width = max([len(b.description) for b in self.bindings] + [10])
        rect = buf.area.centered(key_width + desc_width + 8, len(self.bindings) + 4)
        buf.box(rect, title="Help")
        inner = rect.inner()
        height = max(0, inner.height - 1)
        start = scroll_start(self.selected, len(self.bindings), height)
        for row, b in enumerate(self.bindings[start:start + height]):
            y = inner.y + row
            selected = start + row == self.selected
            style = "class:selected" if selected else ""
            buf.put(inner.x + 1, y, b.display.ljust(key_width), style or "class:key")
            buf.put(inner.x + 3 + key_width, y, truncate(b.description, inner.width - key_width - 4), style)
        draw_hints(buf, inner.bottom - 1, [("Enter", "run"), ("Esc", "close")], x=inner.x + 1)


class ReviewRefreshDialogView(View):
    """Choose which branch heads of a review to re-capture."""

    view_type = "review_refresh"
    is_overlay = True

    def __init__(self, review_id: str):
        self.review_id = review_id

    def keybindings(self) -> Tuple[KeyBinding, ...]:
        return (
            binding("b", "Refresh base branch"),
            binding("t", "Refresh target branch"),
            binding("a", "Refresh both branches"),
            binding(keys.ESCAPE, "Cancel"),
        )

    def handle_key(self, press, ctx: ViewContext) -> None:
        ch = keys.char(press)
        choice = {"b": (True, False), "t": (False, True), "a": (True, True)}.get(ch)
        if choice is not None:
            ctx.send(events.ReviewRefresh(self.review_id, base=choice[0], target=choice[1]))
            ctx.send(events.ViewClose())
        elif ch == "q" or keys.is_key(press, keys.ESCAPE, keys.CTRL_C):
            ctx.send(events.ViewClose())
        elif ch == "?":
            self.open_help(ctx)

    def render(self, buf: FrameBuffer, ctx: ViewContext) -> None:
        rect = buf.area.centered(44, 8)
        buf.box(rect, title="Refresh review")
        inner = rect.inner()
        buf.put(inner.x + 1, inner.y, "Re-capture the branch heads of this review:")
        for i, (key, text) in enumerate((("b", "base branch"), ("t", "target branch"), ("a", "both"))):
            x = buf.put(inner.x + 3, inner.y + 1 + i, key, "class:key")
            buf.put(x + 2, inner.y + 1 + i, text)
        draw_hints(buf, inner.bottom - 1, [("Esc", "cancel")], x=inner.x + 1)
