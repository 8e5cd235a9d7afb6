from datetime import datetime, timezone

import pytest
from prompt_toolkit.key_binding.key_processor import KeyPress

from reviewtui.core import events
from reviewtui.core.bus import Bus
from reviewtui.core.loading import LOADING, Error, Loaded
from reviewtui.model import (Comment, CommentMetadata, CommentTarget, Diff, DiffFile, Review,
                             ReviewCreateData)
from reviewtui.services.state import AppState, apply_event
from reviewtui.ui_ptk import keys
from reviewtui.ui_ptk.base import ViewContext
from reviewtui.ui_ptk.comments import CommentsView, target_title
from reviewtui.ui_ptk.dialogs import ConfirmationDialogView, HelpModalView, ReviewRefreshDialogView
from reviewtui.ui_ptk.frame import FrameBuffer
from reviewtui.ui_ptk.keys import binding, press
from reviewtui.ui_ptk.review_details import FILES, LINES, VIEWED, ReviewDetailsView
from reviewtui.ui_ptk.views import MainView, ReviewCreateView

from helpers import drain, of_type

T0 = datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)


def ctx_for(state=None):
    return ViewContext(Bus(), state or AppState())


def keys_into(view, ctx, *presses):
    for p in presses:
        view.handle_key(p if isinstance(p, KeyPress) else press(p), ctx)
    return drain(ctx.bus)


def paint(view, ctx, width=100, height=30):
    buf = FrameBuffer(width, height)
    view.render(buf, ctx)
    return buf.text()


def _reviews(*titles):
    return tuple(Review(id=f"r{i}", title=t, base_branch="main", target_branch="feature",
                        base_sha="a" * 40, target_sha="b" * 40, created_at=T0, updated_at=T0)
                 for i, t in enumerate(titles))


class TestMainView:
    def test_loading_and_empty_states(self):
        view = MainView()
        assert "Loading reviews..." in paint(view, ctx_for(AppState(reviews=LOADING)))
        assert "No reviews yet" in paint(view, ctx_for(AppState(reviews=Loaded(()))))
        text = paint(view, ctx_for(AppState(reviews=Error("disk gone"))))
        assert "Error loading reviews: disk gone" in text

    def test_list_and_navigation(self):
        reviews = _reviews("first", "second")
        ctx = ctx_for(AppState(reviews=Loaded(reviews)))
        view = MainView()
        text = paint(view, ctx)
        assert "> first" in text
        assert "main → feature" in text

        assert keys_into(view, ctx, "j", "j", keys.ENTER) == [events.ReviewDetailsOpen("r1")]
        assert keys_into(view, ctx, "k", "d") == [events.ReviewDeleteConfirm("r0")]

    def test_global_keys(self):
        ctx = ctx_for()
        sent = keys_into(MainView(), ctx, "n", "q", keys.CTRL_C)
        assert sent == [events.ReviewCreateOpen(), events.Quit(), events.Quit()]

    def test_enter_without_reviews_does_nothing(self):
        ctx = ctx_for(AppState(reviews=Loaded(())))
        assert keys_into(MainView(), ctx, keys.ENTER, "d") == []

    def test_branch_markers(self):
        moved = Review(id="m", title="moved", created_at=T0, base_sha_changed="c" * 40)
        gone = Review(id="g", title="gone", created_at=T0, target_branch_exists=False)
        text = paint(MainView(), ctx_for(AppState(reviews=Loaded((moved, gone)))))
        assert "branch moved" in text
        assert "branch missing" in text

    def test_help_lists_bindings(self):
        view = MainView()
        ctx = ctx_for()
        (sent,) = keys_into(view, ctx, "?")
        assert isinstance(sent, events.HelpOpen)
        assert sent.bindings == view.keybindings()

    def test_errors_show_in_footer(self):
        view = MainView()
        ctx = ctx_for(AppState(reviews=Loaded(())))
        view.handle_app_event(events.ReviewDeletedError("r0", "locked"), ctx)
        assert "Failed to delete review: locked" in paint(view, ctx)


class TestReviewCreateView:
    def test_defaults_and_submit(self):
        ctx = ctx_for(AppState(git_branches=Loaded(("dev", "feature", "main"))))
        view = ReviewCreateView()
        sent = keys_into(view, ctx, "F", "i", "x", keys.ENTER)
        assert sent == [events.ReviewCreateSubmit(ReviewCreateData("Fix", "main", "dev"))]

    def test_branch_pickers(self):
        ctx = ctx_for(AppState(git_branches=Loaded(("dev", "feature", "main"))))
        view = ReviewCreateView()
        sent = keys_into(view, ctx, "a", "b", press(keys.BACKSPACE), press(keys.TAB), "j",
                         press(keys.TAB), press(keys.DOWN), keys.ENTER)
        assert sent == [events.ReviewCreateSubmit(ReviewCreateData("a", "dev", "feature"))]

    def test_escape_and_result_close(self):
        ctx = ctx_for()
        view = ReviewCreateView()
        assert keys_into(view, ctx, keys.ESCAPE) == [events.ViewClose()]
        error = events.ReviewCreatedError("Review title cannot be empty")
        view.handle_app_event(error, ctx)
        assert drain(ctx.bus) == [events.ViewClose(), error]
        view.handle_app_event(error, ctx)
        assert drain(ctx.bus) == []

    def test_branch_error_is_shown(self):
        ctx = ctx_for(AppState(git_branches=Error("Not a git repository: /tmp")))
        assert "Error loading branches: Not a git repository" in paint(ReviewCreateView(), ctx)


class TestDialogs:
    def test_confirm(self):
        ctx = ctx_for()
        dialog = ConfirmationDialogView("Delete", "Sure?", on_confirm=events.ReviewDelete("r0"))
        assert keys_into(dialog, ctx, "y") == [events.ReviewDelete("r0"), events.ViewClose()]
        assert keys_into(dialog, ctx, keys.ENTER) == [events.ReviewDelete("r0"), events.ViewClose()]

    @pytest.mark.parametrize("key", ["n", "N", "q", keys.ESCAPE])
    def test_cancel(self, key):
        ctx = ctx_for()
        dialog = ConfirmationDialogView("Delete", "Sure?", on_confirm=events.ReviewDelete("r0"))
        assert keys_into(dialog, ctx, key) == [events.ViewClose()]

    def test_custom_cancel_event_also_closes(self):
        ctx = ctx_for()
        dialog = ConfirmationDialogView("Leave", "Sure?", on_confirm=events.Quit(),
                                        on_cancel=events.ReviewsLoad())
        assert keys_into(dialog, ctx, "n") == [events.ReviewsLoad(), events.ViewClose()]

    def test_confirmation_renders_message(self):
        dialog = ConfirmationDialogView("Delete review", "Delete this review?", events.Quit())
        text = paint(dialog, ctx_for())
        assert "Delete review" in text and "Delete this review?" in text

    def test_help_wraps_and_replays(self):
        bindings = (binding("a", "Alpha"), binding("b", "Beta"))
        ctx = ctx_for()
        view = HelpModalView(bindings)
        assert keys_into(view, ctx, "k", keys.ENTER) == [events.HelpKeySelected(press("b"))]
        assert keys_into(view, ctx, "j", keys.ENTER) == [events.HelpKeySelected(press("a"))]
        assert keys_into(view, ctx, "?") == [events.ViewClose()]
        assert "Beta" in paint(view, ctx)

    def test_empty_help(self):
        ctx = ctx_for()
        assert keys_into(HelpModalView(()), ctx, "j", keys.ENTER) == []

    @pytest.mark.parametrize("key, base, target", [("b", True, False), ("t", False, True),
                                                   ("a", True, True)])
    def test_refresh_choices(self, key, base, target):
        ctx = ctx_for()
        sent = keys_into(ReviewRefreshDialogView("r0"), ctx, key)
        assert sent == [events.ReviewRefresh("r0", base=base, target=target), events.ViewClose()]


DIFF = Diff(files=(
    DiffFile("README.md", "@@ -1 +1,2 @@\n hello\n+world\n"),
    DiffFile("src/app.py", "@@ -0,0 +1 @@\n+print('hi')\n"),
))


def deliver(view, ctx, *evs):
    """Feed events the way the processor does: cache first, then the view."""
    for ev in evs:
        ctx.state = apply_event(ctx.state, ev)
        view.handle_app_event(ev, ctx)


def review_loaded(review):
    return (events.ReviewLoadingState(review.id, LOADING),
            events.ReviewLoadingState(review.id, Loaded(review)))


def loaded_details(viewed=frozenset()):
    review = _reviews("Fix bug")[0]
    view = ReviewDetailsView(review.id)
    ctx = ctx_for()
    deliver(view, ctx, *review_loaded(review))
    requested = drain(ctx.bus)
    deliver(view, ctx,
            events.GitDiffLoadingState(review.base_sha, review.target_sha, LOADING),
            events.GitDiffLoadingState(review.base_sha, review.target_sha, Loaded(DIFF)),
            events.FileViewsLoadingState(review.id, LOADING),
            events.FileViewsLoadingState(review.id, Loaded(frozenset(viewed))))
    return view, ctx, requested


class TestReviewDetailsView:
    def test_loaded_review_requests_dependents(self):
        _, ctx, requested = loaded_details()
        assert requested == [events.GitDiffLoad("a" * 40, "b" * 40), events.FileViewsLoad("r0"),
                             events.CommentMetadataLoad("r0")]
        assert drain(ctx.bus) == []

    def test_missing_shas_is_an_error(self):
        view = ReviewDetailsView("x")
        ctx = ctx_for()
        review = Review(id="x", title="no shas", created_at=T0)
        deliver(view, ctx, *review_loaded(review))
        assert not of_type(drain(ctx.bus), events.GitDiffLoad)
        assert "Missing SHA information" in paint(view, ctx)

    def test_not_found(self):
        view = ReviewDetailsView("x")
        ctx = ctx_for()
        deliver(view, ctx, events.ReviewLoadingState("x", LOADING),
                events.ReviewLoadingState("x", Error("Review not found: x")))
        assert "Review not found: x" in paint(view, ctx)

    def test_stale_diff_is_ignored(self):
        view, ctx, _ = loaded_details()
        deliver(view, ctx, events.GitDiffLoadingState("c" * 40, "d" * 40, Error("nope")))
        assert view.diff == DIFF

    def test_results_under_an_overlay_are_picked_up_on_resume(self):
        review = _reviews("Fix bug")[0]
        view = ReviewDetailsView(review.id)
        ctx = ctx_for()
        deliver(view, ctx, events.ReviewLoadingState(review.id, LOADING))
        # an overlay is active: the cache moves on, the view hears nothing
        for ev in review_loaded(review)[1:]:
            ctx.state = apply_event(ctx.state, ev)
        assert "Loading review..." in paint(view, ctx)
        assert drain(ctx.bus) == []

        view.on_resume(ctx)
        assert isinstance(view.review_state, Loaded)
        assert of_type(drain(ctx.bus), events.GitDiffLoad) == [events.GitDiffLoad("a" * 40, "b" * 40)]
        ctx.state = apply_event(ctx.state, events.GitDiffLoadingState("a" * 40, "b" * 40, LOADING))
        ctx.state = apply_event(ctx.state, events.GitDiffLoadingState("a" * 40, "b" * 40, Loaded(DIFF)))
        assert "+world" in paint(view, ctx)

    def test_same_review_again_keeps_navigation(self):
        view, ctx, _ = loaded_details()
        keys_into(view, ctx, "j")
        deliver(view, ctx, *review_loaded(_reviews("Fix bug")[0]))
        assert view.selected_file == 1
        assert drain(ctx.bus) == []

    def test_file_and_line_navigation(self):
        view, ctx, _ = loaded_details()
        assert view.current_file().path == "README.md"
        keys_into(view, ctx, "j", keys.ENTER, "j", "j", "j")
        assert view.mode == LINES
        assert view.current_file().path == "src/app.py"
        assert view.selected_line == 1
        sent = keys_into(view, ctx, "c")
        assert sent == [events.CommentsOpen(CommentTarget("r0", "src/app.py", 1))]
        keys_into(view, ctx, keys.ESCAPE)
        assert view.mode == FILES
        assert keys_into(view, ctx, "c") == [events.CommentsOpen(CommentTarget("r0", "src/app.py"))]

    def test_viewed_lists(self):
        view, ctx, _ = loaded_details(viewed={"README.md"})
        assert [f.path for f in view.file_list()] == ["src/app.py"]
        keys_into(view, ctx, "l")
        assert view.active_list == VIEWED
        assert view.current_file().path == "README.md"
        assert keys_into(view, ctx, " ") == [events.FileViewToggle("r0", "README.md")]
        text = paint(view, ctx)
        assert "Not viewed (1)" in text and "Viewed (1)" in text

    def test_keys_without_files(self):
        view, ctx, _ = loaded_details(viewed={"README.md", "src/app.py"})
        assert keys_into(view, ctx, keys.ENTER, " ", "c") == []
        assert view.mode == FILES

    def test_refresh_and_close(self):
        view, ctx, _ = loaded_details()
        assert keys_into(view, ctx, "r") == [events.ReviewRefreshOpen("r0")]
        assert keys_into(view, ctx, "q") == [events.ViewClose()]

    def test_render_marks_comments(self):
        view, ctx, _ = loaded_details()
        meta = CommentMetadata("r0", file_level=frozenset({"README.md"}), lines={"README.md": frozenset({2})})
        deliver(view, ctx, events.CommentMetadataLoadingState("r0", LOADING),
                events.CommentMetadataLoadingState("r0", Loaded(meta)))
        text = paint(view, ctx)
        assert "Fix bug" in text
        assert "●" in text
        assert "+world" in text

    def test_toggle_error_message(self):
        view, ctx, _ = loaded_details()
        view.handle_app_event(events.FileViewToggleError("r0", "README.md", "locked"), ctx)
        assert "Failed to toggle README.md: locked" in paint(view, ctx)


def _comment(content, resolved=False, line=3):
    return Comment(id=content, review_id="r0", file_path="a.py", line_number=line, content=content,
                   resolved=resolved, created_at=T0)


class TestCommentsView:
    target = CommentTarget("r0", "a.py", 3)

    def loaded(self, *comments):
        view = CommentsView(self.target)
        ctx = ctx_for()
        view.handle_app_event(events.CommentsLoadingState(self.target, Loaded(tuple(comments))), ctx)
        return view, ctx

    def test_title_is_one_based(self):
        assert target_title(self.target) == "Comments on a.py:4"
        assert target_title(CommentTarget("r0", "a.py")) == "Comments on a.py"

    def test_submit_trims_and_clears(self):
        view, ctx = self.loaded()
        sent = keys_into(view, ctx, " ", "o", "k", " ", keys.ENTER)
        assert sent == [events.CommentCreate(self.target, "ok")]
        assert view.input_text == ""
        assert keys_into(view, ctx, " ", keys.ENTER) == []

    def test_list_focus_toggles(self):
        view, ctx = self.loaded(_comment("newer"), _comment("older", resolved=True))
        sent = keys_into(view, ctx, press(keys.TAB), "j", keys.ENTER, "k", "r", "R")
        assert sent == [
            events.CommentToggleResolved("older", self.target),
            events.CommentToggleResolved("newer", self.target),
            events.CommentsToggleAllResolved(self.target),
        ]

    def test_other_targets_are_ignored(self):
        view, ctx = self.loaded(_comment("mine"))
        other = CommentTarget("r0", "a.py")
        view.handle_app_event(events.CommentsLoadingState(other, Loaded(())), ctx)
        assert [c.id for c in view.comments] == ["mine"]

    def test_render(self):
        view, ctx = self.loaded(_comment("looks wrong"), _comment("fixed", resolved=True))
        text = paint(view, ctx)
        assert "looks wrong" in text
        assert "✓" in text
        view.handle_app_event(events.CommentCreateError(self.target, "Comment cannot be empty"), ctx)
        assert "Comment cannot be empty" in paint(view, ctx)

    def test_escape_closes(self):
        view, ctx = self.loaded()
        assert keys_into(view, ctx, keys.ESCAPE) == [events.ViewClose()]

    def test_reloads_when_active_again(self):
        view, ctx = self.loaded(_comment("mine"))
        view.on_resume(ctx)
        assert drain(ctx.bus) == [events.CommentsLoad(self.target)]
