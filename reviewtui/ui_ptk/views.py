# reviewtui/ui_ptk/views.py
from typing import List, Optional, Tuple

from reviewtui.core import events
from reviewtui.core.loading import Error, Init, Loaded, Loading, loaded_data
from reviewtui.model import Review, ReviewCreateData
from reviewtui.ui_ptk import keys
from reviewtui.ui_ptk.base import View, ViewContext
from reviewtui.ui_ptk.frame import FrameBuffer, Rect
from reviewtui.ui_ptk.keys import KeyBinding, binding
from reviewtui.ui_ptk.text_sanitize import truncate

# -------- Helpers ---------------------------------------------------------


def scroll_start(selected: int, count: int, height: int) -> int:
    """First visible row so that ``selected`` stays on screen."""
    if height <= 0 or count <= height:
        return 0
    start = selected - height // 2
    return max(0, min(start, count - height))


def draw_hints(buf: FrameBuffer, y: int, hints: List[Tuple[str, str]], x: int = 1) -> None:
    for key, text in hints:
        x = buf.put(x, y, key, "class:key")
        x = buf.put(x + 1, y, text, "class:hint") + 2


def format_age(review: Review) -> str:
    return review.created_at.strftime("%Y-%m-%d %H:%M")


def branch_label(review: Review) -> str:
    if not review.base_branch and not review.target_branch:
        return ""
    return f"{review.base_branch or '?'} → {review.target_branch or '?'}"


# -------- Views -----------------------------------------------------------


class MainView(View):
    """List of reviews; the root of the view stack."""

    view_type = "main"

    def __init__(self):
        self.selected = 0
        self.message: Optional[str] = None

    def _reviews(self, ctx: ViewContext) -> Tuple[Review, ...]:
        return loaded_data(ctx.state.reviews, ()) if ctx.state is not None else ()

    def selected_review(self, ctx: ViewContext) -> Optional[Review]:
        reviews = self._reviews(ctx)
        if not reviews:
            return None
        self.selected = max(0, min(self.selected, len(reviews) - 1))
        return reviews[self.selected]

    def keybindings(self) -> Tuple[KeyBinding, ...]:
        return (
            binding("n", "Create a new review"),
            binding("j", "Select next review"),
            binding("k", "Select previous review"),
            binding(keys.ENTER, "Open review details"),
            binding("d", "Delete selected review"),
            binding("q", "Quit"),
            binding("?", "Show help"),
        )

    def handle_key(self, press, ctx: ViewContext) -> None:
        self.message = None
        reviews = self._reviews(ctx)
        ch = keys.char(press)
        if ch == "q" or keys.is_key(press, keys.CTRL_C):
            ctx.send(events.Quit())
        elif ch == "n":
            ctx.send(events.ReviewCreateOpen())
        elif ch == "j" or keys.is_key(press, keys.DOWN):
            if reviews:
                self.selected = min(self.selected + 1, len(reviews) - 1)
        elif ch == "k" or keys.is_key(press, keys.UP):
            self.selected = max(0, self.selected - 1)
        elif ch == "d":
            review = self.selected_review(ctx)
            if review is not None:
                ctx.send(events.ReviewDeleteConfirm(review.id))
        elif ch in ("o", " ") or keys.is_key(press, keys.ENTER):
            review = self.selected_review(ctx)
            if review is not None:
                ctx.send(events.ReviewDetailsOpen(review.id))
        elif ch == "?":
            self.open_help(ctx)

    def handle_app_event(self, event, ctx: ViewContext) -> None:
        if isinstance(event, events.ReviewsLoadingState) and isinstance(event.state, Loaded):
            count = len(event.state.data)
            self.selected = max(0, min(self.selected, count - 1))
        elif isinstance(event, events.ReviewCreated):
            self.selected = 0
            self.message = None
        elif isinstance(event, events.ReviewDeletedError):
            self.message = f"Failed to delete review: {event.reason}"
        elif isinstance(event, events.ReviewCreatedError):
            self.message = f"Failed to create review: {event.reason}"
        elif isinstance(event, events.ReviewsBranchStatusCheckError):
            self.message = f"Branch status check failed: {event.reason}"

    def render(self, buf: FrameBuffer, ctx: ViewContext) -> None:
        area = buf.area
        buf.fill(Rect(0, 0, area.width, 1), "class:header")
        buf.put(1, 0, "Reviews", "class:header")
        body = Rect(0, 1, area.width, max(0, area.height - 2))
        state = ctx.state.reviews if ctx.state is not None else Init()

        if isinstance(state, (Init, Loading)):
            buf.put(2, body.y + 1, "Loading reviews...", "class:muted")
        elif isinstance(state, Error):
            buf.put(2, body.y + 1, f"Error loading reviews: {state.reason}", "class:error")
        elif isinstance(state, Loaded):
            reviews = state.data
            if not reviews:
                buf.put(2, body.y + 1, "No reviews yet. Press 'n' to create one.", "class:muted")
            else:
                self._render_list(buf, body, reviews)

        footer_y = area.height - 1
        if self.message:
            buf.put(1, footer_y, self.message, "class:error")
        else:
            draw_hints(buf, footer_y, [("n", "new"), ("Enter", "open"), ("d", "delete"),
                                       ("?", "help"), ("q", "quit")])

    def _render_list(self, buf: FrameBuffer, body: Rect, reviews) -> None:
        self.selected = max(0, min(self.selected, len(reviews) - 1))
        start = scroll_start(self.selected, len(reviews), body.height)
        for row, review in enumerate(reviews[start:start + body.height]):
            idx = start + row
            y = body.y + row
            style = "class:selected" if idx == self.selected else ""
            if style:
                buf.fill(Rect(0, y, body.width, 1), style)
            x = buf.put(1, y, "> " if style else "  ", style)
            x = buf.put(x, y, truncate(review.title, max(10, body.width // 2)), style)
            label = branch_label(review)
            if label:
                x = buf.put(x + 2, y, label, style or "class:muted")
            if review.has_missing_branch:
                x = buf.put(x + 2, y, "✗ branch missing", style or "class:marker.missing")
            elif review.has_changes:
                x = buf.put(x + 2, y, "● branch moved", style or "class:marker.changed")
            stamp = format_age(review)
            if body.width - len(stamp) - 1 > x + 1:
                buf.put(body.width - len(stamp) - 1, y, stamp, style or "class:muted")


class ReviewCreateView(View):
    """Overlay with a title field and base/target branch pickers."""

    view_type = "review_create"
    is_overlay = True

    FIELDS = ("title", "base", "target")

    def __init__(self):
        self.title = ""
        self.focus = 0
        self.closed = False
        self.base_index: Optional[int] = None
        self.target_index: Optional[int] = None

    def _branches(self, ctx: ViewContext) -> Tuple[str, ...]:
        return loaded_data(ctx.state.git_branches, ()) if ctx.state is not None else ()

    def _ensure_defaults(self, branches) -> None:
        if not branches:
            return
        if self.base_index is None:
            self.base_index = 0
            for name in ("main", "master"):
                if name in branches:
                    self.base_index = branches.index(name)
                    break
        if self.target_index is None:
            others = [i for i in range(len(branches)) if i != self.base_index]
            self.target_index = others[0] if others else 0

    def selected_branches(self, ctx: ViewContext) -> Tuple[str, str]:
        branches = self._branches(ctx)
        self._ensure_defaults(branches)
        if not branches:
            return "", ""
        base = branches[min(self.base_index, len(branches) - 1)]
        target = branches[min(self.target_index, len(branches) - 1)]
        return base, target

    def keybindings(self) -> Tuple[KeyBinding, ...]:
        return (
            binding(keys.TAB, "Next field"),
            binding(keys.UP, "Previous branch"),
            binding(keys.DOWN, "Next branch"),
            binding(keys.ENTER, "Create review"),
            binding(keys.ESCAPE, "Cancel"),
        )

    def handle_key(self, press, ctx: ViewContext) -> None:
        branches = self._branches(ctx)
        self._ensure_defaults(branches)
        field = self.FIELDS[self.focus]
        ch = keys.char(press)
        if keys.is_key(press, keys.ESCAPE, keys.CTRL_C):
            ctx.send(events.ViewClose())
        elif keys.is_key(press, keys.TAB):
            self.focus = (self.focus + 1) % len(self.FIELDS)
        elif keys.is_key(press, keys.BACKTAB):
            self.focus = (self.focus - 1) % len(self.FIELDS)
        elif keys.is_key(press, keys.ENTER):
            base, target = self.selected_branches(ctx)
            ctx.send(events.ReviewCreateSubmit(ReviewCreateData(self.title, base, target)))
        elif field == "title":
            if keys.is_key(press, keys.BACKSPACE):
                self.title = self.title[:-1]
            elif ch is not None:
                self.title += ch
        elif branches:
            step = 0
            if ch == "j" or keys.is_key(press, keys.DOWN):
                step = 1
            elif ch == "k" or keys.is_key(press, keys.UP):
                step = -1
            if step and field == "base":
                self.base_index = (self.base_index + step) % len(branches)
            elif step and field == "target":
                self.target_index = (self.target_index + step) % len(branches)

    def handle_app_event(self, event, ctx: ViewContext) -> None:
        if isinstance(event, (events.ReviewCreated, events.ReviewCreatedError)) and not self.closed:
            # replayed once this overlay is gone so the list underneath can react
            self.closed = True
            ctx.send(events.ViewClose())
            ctx.send(event)

    def render(self, buf: FrameBuffer, ctx: ViewContext) -> None:
        rect = buf.area.centered(max(40, buf.width * 2 // 3), max(12, buf.height * 2 // 3))
        buf.box(rect, title="New review")
        inner = rect.inner()
        if inner.width <= 0 or inner.height <= 0:
            return
        focused = self.FIELDS[self.focus]
        buf.put(inner.x + 1, inner.y, "Title:", "class:title")
        style = "class:input.focused" if focused == "title" else "class:input"
        text = self.title + ("_" if focused == "title" else "")
        buf.put(inner.x + 8, inner.y, truncate(text.ljust(inner.width - 10), inner.width - 9), style)

        lists = inner.rows(2, inner.height - 3)
        left, right = lists.split_columns(lists.width // 2)
        state = ctx.state.git_branches if ctx.state is not None else Init()
        if isinstance(state, Loaded):
            branches = state.data
            self._ensure_defaults(branches)
            self._render_branches(buf, left, "Base branch", branches, self.base_index, focused == "base")
            self._render_branches(buf, right, "Target branch", branches, self.target_index,
                                  focused == "target")
        elif isinstance(state, Error):
            buf.put(lists.x + 1, lists.y, f"Error loading branches: {state.reason}", "class:error",
                    max_width=lists.width - 2)
        else:
            buf.put(lists.x + 1, lists.y, "Loading branches...", "class:muted")
        draw_hints(buf, inner.bottom - 1, [("Tab", "field"), ("Enter", "create"), ("Esc", "cancel")],
                   x=inner.x + 1)

    def _render_branches(self, buf, rect: Rect, title: str, branches, selected, focused: bool) -> None:
        buf.put(rect.x + 1, rect.y, title, "class:title" if focused else "class:muted")
        if not branches:
            buf.put(rect.x + 1, rect.y + 1, "(no branches)", "class:muted")
            return
        height = max(0, rect.height - 1)
        start = scroll_start(selected or 0, len(branches), height)
        for row, name in enumerate(branches[start:start + height]):
            idx = start + row
            style = "class:selected" if idx == selected and focused else ""
            marker = "> " if idx == selected else "  "
            buf.put(rect.x + 1, rect.y + 1 + row, truncate(marker + name, rect.width - 2), style)
