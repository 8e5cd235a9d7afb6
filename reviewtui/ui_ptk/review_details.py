# reviewtui/ui_ptk/review_details.py
from typing import FrozenSet, List, Optional, Tuple

from reviewtui.core import events
from reviewtui.core.loading import INIT, Error, Loaded, LoadingState, loaded_data
from reviewtui.model import CommentMetadata, CommentTarget, Diff, DiffFile, Review
from reviewtui.ui_ptk import keys
from reviewtui.ui_ptk.base import View, ViewContext
from reviewtui.ui_ptk.frame import FrameBuffer, Rect
from reviewtui.ui_ptk.keys import KeyBinding, binding
from reviewtui.ui_ptk.text_sanitize import truncate
from reviewtui.ui_ptk.views import branch_label, draw_hints, scroll_start

FILES = "files"
LINES = "lines"

NOT_VIEWED = "not_viewed"
VIEWED = "viewed"


def diff_line_style(line: str) -> str:
    if line.startswith("@@"):
        return "class:diff.hunk"
    if line.startswith("+"):
        return "class:diff.add"
    if line.startswith("-"):
        return "class:diff.del"
    return ""


class ReviewDetailsView(View):
    """Files of a review split into not-viewed/viewed lists, next to the diff."""

    view_type = "review_details"

    def __init__(self, review_id: str):
        self.review_id = review_id
        self.review_state: LoadingState = INIT
        self.diff_state: LoadingState = INIT
        self.diff_key: Optional[Tuple[str, str]] = None
        self.viewed_state: LoadingState = INIT
        self._seen_review: Optional[Review] = None
        self.message: Optional[str] = None
        self._reset_navigation()

    def _reset_navigation(self) -> None:
        self.mode = FILES
        self.active_list = NOT_VIEWED
        self.selected_file = 0
        self.selected_line = 0

    # ---------- derived state ----------

    @property
    def review(self) -> Optional[Review]:
        return loaded_data(self.review_state)

    @property
    def diff(self) -> Diff:
        return loaded_data(self.diff_state, Diff())

    @property
    def viewed(self) -> FrozenSet[str]:
        return loaded_data(self.viewed_state, frozenset())

    def file_list(self, which: str = None) -> List[DiffFile]:
        which = which or self.active_list
        viewed = self.viewed
        if which == VIEWED:
            return [f for f in self.diff.files if f.path in viewed]
        return [f for f in self.diff.files if f.path not in viewed]

    def current_file(self) -> Optional[DiffFile]:
        files = self.file_list()
        if not files:
            return None
        self.selected_file = max(0, min(self.selected_file, len(files) - 1))
        return files[self.selected_file]

    def _metadata(self, ctx: ViewContext) -> Optional[CommentMetadata]:
        if ctx.state is None:
            return None
        return loaded_data(ctx.state.metadata_for(self.review_id))

    # ---------- shared state ----------

    def _pull(self, state) -> None:
        if state is None:
            return
        self.review_state = state.review_for(self.review_id)
        self.viewed_state = state.file_views_for(self.review_id)
        if self.diff_key is not None:
            self.diff_state = state.diff_for(*self.diff_key)

    def sync(self, ctx: ViewContext) -> None:
        """Read this review's loading states from the cache.

        A review that differs from the last one seen resets navigation and
        requests its diff, file views and comment metadata. Results that
        arrived while an overlay was on top are picked up here too.
        """
        self._pull(ctx.state)
        review = self.review
        if review is not None and review != self._seen_review:
            self._seen_review = review
            self._on_review(review, ctx)
            self._pull(ctx.state)
        if isinstance(self.viewed_state, Loaded) and self.mode == FILES:
            self.selected_file = max(0, min(self.selected_file, len(self.file_list()) - 1))

    def on_resume(self, ctx: ViewContext) -> None:
        self.sync(ctx)

    # ---------- input ----------

    def keybindings(self) -> Tuple[KeyBinding, ...]:
        return (
            binding("j", "Next file / line"),
            binding("k", "Previous file / line"),
            binding("h", "Show files not yet viewed"),
            binding("l", "Show viewed files"),
            binding(keys.ENTER, "Switch between files and diff lines"),
            binding(" ", "Toggle file viewed"),
            binding("c", "Comments on file or line"),
            binding("r", "Refresh branch heads"),
            binding(keys.ESCAPE, "Back"),
            binding("?", "Show help"),
        )

    def handle_key(self, press, ctx: ViewContext) -> None:
        self.message = None
        self.sync(ctx)
        ch = keys.char(press)
        if ch == "k" or keys.is_key(press, keys.UP):
            self._move(-1)
        elif ch == "j" or keys.is_key(press, keys.DOWN):
            self._move(1)
        elif ch == "h" or keys.is_key(press, keys.LEFT):
            self._switch_list(NOT_VIEWED)
        elif ch == "l" or keys.is_key(press, keys.RIGHT):
            self._switch_list(VIEWED)
        elif keys.is_key(press, keys.ENTER):
            if self.mode == FILES:
                if self.current_file() is not None:
                    self.mode = LINES
                    self.selected_line = 0
            else:
                self.mode = FILES
        elif ch == " ":
            f = self.current_file()
            if f is not None and self.review is not None:
                ctx.send(events.FileViewToggle(self.review_id, f.path))
        elif ch == "c":
            f = self.current_file()
            if f is not None and self.review is not None:
                line = self.selected_line if self.mode == LINES else None
                ctx.send(events.CommentsOpen(CommentTarget(self.review_id, f.path, line)))
        elif ch == "r":
            if self.review is not None:
                ctx.send(events.ReviewRefreshOpen(self.review_id))
        elif keys.is_key(press, keys.ESCAPE):
            if self.mode == LINES:
                self.mode = FILES
            else:
                ctx.send(events.ViewClose())
        elif ch == "q" and self.mode == FILES:
            ctx.send(events.ViewClose())
        elif ch == "?":
            self.open_help(ctx)

    def _move(self, step: int) -> None:
        if self.mode == FILES:
            files = self.file_list()
            new = max(0, min(self.selected_file + step, len(files) - 1))
            if new != self.selected_file:
                self.selected_file = new
                self.selected_line = 0
        else:
            f = self.current_file()
            count = len(f.lines()) if f is not None else 0
            self.selected_line = max(0, min(self.selected_line + step, count - 1))

    def _switch_list(self, which: str) -> None:
        if self.mode == FILES and self.active_list != which:
            self.active_list = which
            self.selected_file = 0
            self.selected_line = 0

    # ---------- app events ----------

    def handle_app_event(self, event, ctx: ViewContext) -> None:
        self.sync(ctx)
        if isinstance(event, events.FileViewToggleError) and event.review_id == self.review_id:
            self.message = f"Failed to toggle {event.file_path}: {event.reason}"
        elif isinstance(event, events.ReviewRefreshError) and event.review_id == self.review_id:
            self.message = f"Refresh failed: {event.reason}"

    def _on_review(self, review: Review, ctx: ViewContext) -> None:
        self._reset_navigation()
        if review.base_sha and review.target_sha:
            self.diff_key = (review.base_sha, review.target_sha)
            self.diff_state = INIT
            ctx.send(events.GitDiffLoad(review.base_sha, review.target_sha))
        else:
            self.diff_key = None
            self.diff_state = Error("Missing SHA information - cannot generate diff.")
        ctx.send(events.FileViewsLoad(self.review_id))
        ctx.send(events.CommentMetadataLoad(self.review_id))

    # ---------- rendering ----------

    def render(self, buf: FrameBuffer, ctx: ViewContext) -> None:
        area = buf.area
        self._pull(ctx.state)
        buf.fill(Rect(0, 0, area.width, 1), "class:header")
        review = self.review
        if isinstance(self.review_state, Error):
            buf.put(1, 0, "Review", "class:header")
            buf.put(2, 2, f"Error: {self.review_state.reason}", "class:error")
            draw_hints(buf, area.height - 1, [("Esc", "back")])
            return
        if review is None:
            buf.put(1, 0, "Review", "class:header")
            buf.put(2, 2, "Loading review...", "class:muted")
            return

        x = buf.put(1, 0, truncate(review.title, area.width // 2), "class:header")
        buf.put(x + 2, 0, branch_label(review), "class:header")
        if review.has_missing_branch:
            buf.put(1, 1, "A branch of this review no longer exists.", "class:marker.missing")
        elif review.has_changes:
            buf.put(1, 1, "Branch heads moved since this review was created; press r to refresh.",
                    "class:marker.changed")

        body = Rect(0, 2, area.width, max(0, area.height - 3))
        left, right = body.split_columns(max(20, area.width // 3))
        metadata = self._metadata(ctx)
        self._render_files(buf, left, metadata)
        self._render_diff(buf, right, metadata)

        footer_y = area.height - 1
        if self.message:
            buf.put(1, footer_y, self.message, "class:error")
        else:
            draw_hints(buf, footer_y, [("Enter", "diff/files"), ("Space", "viewed"), ("c", "comment"),
                                       ("h/l", "lists"), ("?", "help"), ("Esc", "back")])

    def _render_files(self, buf: FrameBuffer, rect: Rect, metadata: Optional[CommentMetadata]) -> None:
        not_viewed = len(self.file_list(NOT_VIEWED))
        viewed = len(self.file_list(VIEWED))
        x = buf.put(rect.x + 1, rect.y, f" Not viewed ({not_viewed}) ",
                    "class:selected" if self.active_list == NOT_VIEWED else "class:muted")
        buf.put(x + 1, rect.y, f" Viewed ({viewed}) ",
                "class:selected" if self.active_list == VIEWED else "class:muted")
        listing = rect.rows(2, rect.height - 2)
        if isinstance(self.diff_state, Error):
            return
        if not isinstance(self.diff_state, Loaded):
            buf.put(listing.x + 1, listing.y, "Loading files...", "class:muted")
            return
        files = self.file_list()
        if not files:
            buf.put(listing.x + 1, listing.y, "(none)", "class:muted")
            return
        current = self.current_file()
        start = scroll_start(self.selected_file, len(files), listing.height)
        for row, f in enumerate(files[start:start + listing.height]):
            y = listing.y + row
            is_selected = f is current
            style = "class:selected" if is_selected and self.mode == FILES else ""
            marker = "✓" if f.path in self.viewed else " "
            buf.put(listing.x + 1, y, marker, style or "class:marker.viewed")
            if metadata is not None and metadata.file_has_comments(f.path):
                buf.put(listing.x + 2, y, "●", style or "class:marker.comment")
            prefix = ">" if is_selected else " "
            buf.put(listing.x + 3, y, truncate(f"{prefix}{f.path}", listing.width - 4), style)

    def _render_diff(self, buf: FrameBuffer, rect: Rect, metadata: Optional[CommentMetadata]) -> None:
        state = self.diff_state
        if isinstance(state, Error):
            buf.put(rect.x + 1, rect.y, f"Error: {state.reason}", "class:error", max_width=rect.width - 2)
            return
        if not isinstance(state, Loaded):
            buf.put(rect.x + 1, rect.y, "Loading diff...", "class:muted")
            return
        if self.diff.is_empty():
            buf.put(rect.x + 1, rect.y, "No changes between the recorded commits.", "class:muted")
            return
        f = self.current_file()
        if f is None:
            buf.put(rect.x + 1, rect.y, "No file selected.", "class:muted")
            return
        buf.put(rect.x + 1, rect.y, truncate(f.path, rect.width - 2), "class:title")
        lines = f.lines()
        view = rect.rows(1, rect.height - 1)
        anchor = self.selected_line if self.mode == LINES else 0
        start = scroll_start(anchor, len(lines), view.height)
        for row, line in enumerate(lines[start:start + view.height]):
            idx = start + row
            y = view.y + row
            selected = self.mode == LINES and idx == self.selected_line
            if metadata is not None and metadata.line_has_comments(f.path, idx):
                buf.put(view.x, y, "●", "class:marker.comment")
            style = "class:selected" if selected else diff_line_style(line)
            buf.put(view.x + 2, y, truncate(line, view.width - 3), style)
