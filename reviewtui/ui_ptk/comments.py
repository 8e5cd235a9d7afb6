# reviewtui/ui_ptk/comments.py
from typing import Optional, Tuple

from reviewtui.core import events
from reviewtui.core.loading import INIT, Error, Loaded, LoadingState, advance, loaded_data
from reviewtui.model import Comment, CommentTarget
from reviewtui.ui_ptk import keys
from reviewtui.ui_ptk.base import View, ViewContext
from reviewtui.ui_ptk.frame import FrameBuffer
from reviewtui.ui_ptk.keys import KeyBinding, binding
from reviewtui.ui_ptk.text_sanitize import truncate
from reviewtui.ui_ptk.views import draw_hints, scroll_start

INPUT = "input"
LIST = "list"

MAX_INPUT = 1000


def target_title(target: CommentTarget) -> str:
    if target.is_file_level:
        return f"Comments on {target.file_path}"
    return f"Comments on {target.file_path}:{target.line_number + 1}"


class CommentsView(View):
    """Comment thread for one file or diff line, with an input field."""

    view_type = "comments"
    is_overlay = True

    def __init__(self, target: CommentTarget):
        self.target = target
        self.state: LoadingState = INIT
        self.focus = INPUT
        self.input_text = ""
        self.selected: Optional[int] = None
        self.message: Optional[str] = None

    @property
    def comments(self) -> Tuple[Comment, ...]:
        return loaded_data(self.state, ())

    def selected_comment(self) -> Optional[Comment]:
        if self.selected is None or not self.comments:
            return None
        return self.comments[min(self.selected, len(self.comments) - 1)]

    def keybindings(self) -> Tuple[KeyBinding, ...]:
        return (
            binding(keys.TAB, "Switch between input and comment list"),
            binding(keys.ENTER, "Add comment / toggle resolved"),
            binding("j", "Next comment"),
            binding("k", "Previous comment"),
            binding("r", "Toggle resolved on selected comment"),
            binding("R", "Toggle resolved on all comments"),
            binding(keys.ESCAPE, "Close"),
        )

    def handle_key(self, press, ctx: ViewContext) -> None:
        ch = keys.char(press)
        if keys.is_key(press, keys.ESCAPE, keys.CTRL_C):
            ctx.send(events.ViewClose())
        elif keys.is_key(press, keys.TAB, keys.BACKTAB):
            self._switch_focus()
        elif keys.is_key(press, keys.UP):
            self._move(-1)
        elif keys.is_key(press, keys.DOWN):
            self._move(1)
        elif keys.is_key(press, keys.ENTER):
            if self.focus == INPUT:
                self._submit(ctx)
            else:
                self._toggle_selected(ctx)
        elif self.focus == INPUT:
            if keys.is_key(press, keys.BACKSPACE):
                self.input_text = self.input_text[:-1]
            elif ch is not None and len(self.input_text) < MAX_INPUT:
                self.input_text += ch
        elif ch == "j":
            self._move(1)
        elif ch == "k":
            self._move(-1)
        elif ch == "r":
            self._toggle_selected(ctx)
        elif ch == "R":
            ctx.send(events.CommentsToggleAllResolved(self.target))
        elif ch == "?":
            self.open_help(ctx)

    def _switch_focus(self) -> None:
        if self.focus == INPUT:
            self.focus = LIST
            self.selected = 0 if self.comments else None
        else:
            self.focus = INPUT
            self.selected = None

    def _move(self, step: int) -> None:
        if self.focus != LIST or not self.comments:
            return
        current = self.selected if self.selected is not None else 0
        self.selected = max(0, min(current + step, len(self.comments) - 1))

    def _submit(self, ctx: ViewContext) -> None:
        content = self.input_text.strip()
        if not content:
            return
        ctx.send(events.CommentCreate(self.target, content))
        self.input_text = ""

    def _toggle_selected(self, ctx: ViewContext) -> None:
        comment = self.selected_comment()
        if comment is not None:
            ctx.send(events.CommentToggleResolved(comment.id, self.target))

    def handle_app_event(self, event, ctx: ViewContext) -> None:
        if isinstance(event, events.CommentsLoadingState) and event.target == self.target:
            self.state = advance(self.state, event.state, "comments")
            if isinstance(event.state, Loaded) and self.selected is not None:
                count = len(event.state.data)
                self.selected = min(self.selected, count - 1) if count else None
        elif isinstance(event, events.CommentCreated) and event.comment.target == self.target:
            self.message = None
        elif isinstance(event, events.CommentCreateError) and event.target == self.target:
            self.message = event.reason
        elif isinstance(event, events.CommentToggleResolvedError):
            self.message = event.reason
        elif isinstance(event, events.CommentsToggleAllResolvedError) and event.target == self.target:
            self.message = event.reason

    def on_resume(self, ctx: ViewContext) -> None:
        ctx.send(events.CommentsLoad(self.target))

    def render(self, buf: FrameBuffer, ctx: ViewContext) -> None:
        rect = buf.area.centered(max(50, buf.width * 3 // 4), max(12, buf.height * 3 // 4))
        buf.box(rect, title=target_title(self.target))
        inner = rect.inner()
        if inner.height < 4:
            return
        listing = inner.rows(0, inner.height - 4)
        state = self.state
        if isinstance(state, Error):
            buf.put(listing.x + 1, listing.y, f"Error: {state.reason}", "class:error",
                    max_width=listing.width - 2)
        elif not isinstance(state, Loaded):
            buf.put(listing.x + 1, listing.y, "Loading comments...", "class:muted")
        elif not state.data:
            buf.put(listing.x + 1, listing.y, "No comments yet.", "class:muted")
        else:
            self._render_comments(buf, listing)

        input_y = inner.bottom - 3
        label_style = "class:title" if self.focus == INPUT else "class:muted"
        x = buf.put(inner.x + 1, input_y, "New:", label_style)
        style = "class:input.focused" if self.focus == INPUT else "class:input"
        text = self.input_text + ("_" if self.focus == INPUT else "")
        width = inner.width - (x - inner.x) - 2
        if len(text) > width:
            text = text[len(text) - width:]
        buf.put(x + 1, input_y, text.ljust(width), style)
        if self.message:
            buf.put(inner.x + 1, inner.bottom - 2, self.message, "class:error", max_width=inner.width - 2)
        draw_hints(buf, inner.bottom - 1, [("Tab", "focus"), ("Enter", "add/resolve"),
                                           ("R", "resolve all"), ("Esc", "close")], x=inner.x + 1)

    def _render_comments(self, buf: FrameBuffer, rect) -> None:
        comments = self.comments
        selected = self.selected if self.focus == LIST else None
        start = scroll_start(selected or 0, len(comments), rect.height)
        for row, comment in enumerate(comments[start:start + rect.height]):
            idx = start + row
            y = rect.y + row
            style = "class:selected" if idx == selected else ("class:resolved" if comment.resolved else "")
            mark = "✓" if comment.resolved else "•"
            stamp = comment.created_at.strftime("%m-%d %H:%M")
            x = buf.put(rect.x + 1, y, f"{mark} {stamp} ", style or "class:muted")
            buf.put(x, y, truncate(comment.content, rect.right - x - 1), style)
