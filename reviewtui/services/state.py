# reviewtui/services/state.py
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Tuple

from reviewtui.core import events
from reviewtui.core.loading import INIT, LoadingState, advance
from reviewtui.services.base import Service, ServiceContext


@dataclass(frozen=True)
class AppState:
    reviews: LoadingState = INIT
    git_branches: LoadingState = INIT
    comment_metadata: Dict[str, LoadingState] = field(default_factory=dict)
    # keyed by review id
    review_details: Dict[str, LoadingState] = field(default_factory=dict)
    file_views: Dict[str, LoadingState] = field(default_factory=dict)
    # keyed by (base_sha, target_sha)
    diffs: Dict[Tuple[str, str], LoadingState] = field(default_factory=dict)

    def metadata_for(self, review_id: str) -> LoadingState:
        return self.comment_metadata.get(review_id, INIT)

    def review_for(self, review_id: str) -> LoadingState:
        return self.review_details.get(review_id, INIT)

    def file_views_for(self, review_id: str) -> LoadingState:
        return self.file_views.get(review_id, INIT)

    def diff_for(self, base_sha: str, target_sha: str) -> LoadingState:
        return self.diffs.get((base_sha, target_sha), INIT)


def _keyed(table: dict, key, nxt: LoadingState, what: str) -> dict:
    out = dict(table)
    out[key] = advance(table.get(key, INIT), nxt, what)
    return out


def apply_event(state: AppState, ev) -> AppState:
    """Next snapshot after ``ev``; unrelated events return ``state`` itself."""
    if isinstance(ev, events.ReviewsLoadingState):
        return replace(state, reviews=advance(state.reviews, ev.state, "reviews"))
    elif isinstance(ev, events.GitBranchesLoadingState):
        return replace(state, git_branches=advance(state.git_branches, ev.state, "git branches"))
    elif isinstance(ev, events.CommentMetadataLoadingState):
        return replace(state, comment_metadata=_keyed(
            state.comment_metadata, ev.review_id, ev.state, "comment metadata"))
    elif isinstance(ev, events.ReviewLoadingState):
        return replace(state, review_details=_keyed(state.review_details, ev.review_id, ev.state, "review"))
    elif isinstance(ev, events.FileViewsLoadingState):
        return replace(state, file_views=_keyed(state.file_views, ev.review_id, ev.state, "file views"))
    elif isinstance(ev, events.GitDiffLoadingState):
        return replace(state, diffs=_keyed(state.diffs, (ev.base_sha, ev.target_sha), ev.state, "diff"))
    return state


class StateService(Service):
    """Caches the loading states views read while rendering.

    The snapshot is swapped under a lock and handed out as an immutable
    value, so readers never need the lock.
    """

    name = "state"

    def __init__(self, initial: AppState = None):
        self._lock = threading.RLock()
        self._state = initial or AppState()

    @property
    def state(self) -> AppState:
        return self._state

    async def handle(self, event, ctx: ServiceContext) -> None:
        with self._lock:
            self._state = apply_event(self._state, event)
