# reviewtui/core/events.py
"""Event taxonomy.

``Event`` is what travels on the bus: a ``Tick``, an ``Input`` carrying a raw
terminal event, or an ``App`` wrapping one of the domain ``AppEvent`` classes
below. All of them are frozen and shared by reference.

Every asynchronous load comes in three shapes: ``XLoad`` (request),
``XLoading`` (in flight, the service performs the fetch when it sees it) and
``XLoadingState`` (propagates the current ``LoadingState``).
"""
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from reviewtui.core.loading import LoadingState
from reviewtui.model import Comment, CommentTarget, Review, ReviewCreateData


# ---------- bus envelope ----------

@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Input:
    event: Any  # prompt_toolkit KeyPress, or anything else the terminal reports


@dataclass(frozen=True)
class App:
    event: "AppEvent"


# ---------- navigation ----------

@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class ViewClose:
    pass


@dataclass(frozen=True)
class HelpOpen:
    bindings: Tuple[Any, ...]  # KeyBinding


@dataclass(frozen=True)
class HelpKeySelected:
    key: Any  # KeyPress


@dataclass(frozen=True)
class ReviewCreateOpen:
    pass


@dataclass(frozen=True)
class ReviewDeleteConfirm:
    review_id: str


@dataclass(frozen=True)
class ReviewDetailsOpen:
    review_id: str


@dataclass(frozen=True)
class ReviewRefreshOpen:
    review_id: str


@dataclass(frozen=True)
class CommentsOpen:
    target: CommentTarget


# ---------- reviews ----------

@dataclass(frozen=True)
class ReviewsLoad:
    pass


@dataclass(frozen=True)
class ReviewsLoading:
    pass


@dataclass(frozen=True)
class ReviewsLoadingState:
    state: LoadingState


@dataclass(frozen=True)
class ReviewLoad:
    review_id: str


@dataclass(frozen=True)
class ReviewLoading:
    review_id: str


@dataclass(frozen=True)
class ReviewLoadingState:
    review_id: str
    state: LoadingState


@dataclass(frozen=True)
class ReviewCreateSubmit:
    data: ReviewCreateData


@dataclass(frozen=True)
class ReviewCreated:
    review: Review


@dataclass(frozen=True)
class ReviewCreatedError:
    reason: str


@dataclass(frozen=True)
class ReviewDelete:
    review_id: str


@dataclass(frozen=True)
class ReviewDeleted:
    review_id: str


@dataclass(frozen=True)
class ReviewDeletedError:
    review_id: str
    reason: str


@dataclass(frozen=True)
class ReviewRefresh:
    review_id: str
    base: bool = True
    target: bool = True


@dataclass(frozen=True)
class ReviewRefreshed:
    review_id: str


@dataclass(frozen=True)
class ReviewRefreshError:
    review_id: str
    reason: str


@dataclass(frozen=True)
class ReviewsBranchStatusCheck:
    pass


@dataclass(frozen=True)
class ReviewsBranchStatusCheckError:
    reason: str


# ---------- git ----------

@dataclass(frozen=True)
class GitBranchesLoad:
    pass


@dataclass(frozen=True)
class GitBranchesLoading:
    pass


@dataclass(frozen=True)
class GitBranchesLoadingState:
    state: LoadingState


@dataclass(frozen=True)
class GitDiffLoad:
    base_sha: str
    target_sha: str


@dataclass(frozen=True)
class GitDiffLoading:
    base_sha: str
    target_sha: str


@dataclass(frozen=True)
class GitDiffLoadingState:
    base_sha: str
    target_sha: str
    state: LoadingState


# ---------- file views ----------

@dataclass(frozen=True)
class FileViewsLoad:
    review_id: str


@dataclass(frozen=True)
class FileViewsLoading:
    review_id: str


@dataclass(frozen=True)
class FileViewsLoadingState:
    review_id: str
    state: LoadingState  # Loaded(frozenset of paths)


@dataclass(frozen=True)
class FileViewToggle:
    review_id: str
    file_path: str


@dataclass(frozen=True)
class FileViewToggled:
    review_id: str
    file_path: str
    is_viewed: bool


@dataclass(frozen=True)
class FileViewToggleError:
    review_id: str
    file_path: str
    reason: str


# ---------- comments ----------

@dataclass(frozen=True)
class CommentsLoad:
    target: CommentTarget


@dataclass(frozen=True)
class CommentsLoading:
    target: CommentTarget


@dataclass(frozen=True)
class CommentsLoadingState:
    target: CommentTarget
    state: LoadingState


@dataclass(frozen=True)
class CommentCreate:
    target: CommentTarget
    content: str


@dataclass(frozen=True)
class CommentCreated:
    comment: Comment


@dataclass(frozen=True)
class CommentCreateError:
    target: CommentTarget
    reason: str


@dataclass(frozen=True)
class CommentToggleResolved:
    comment_id: str
    target: CommentTarget


@dataclass(frozen=True)
class CommentToggledResolved:
    comment_id: str
    resolved: bool


@dataclass(frozen=True)
class CommentToggleResolvedError:
    comment_id: str
    reason: str


@dataclass(frozen=True)
class CommentsToggleAllResolved:
    target: CommentTarget


@dataclass(frozen=True)
class CommentsToggledAllResolved:
    target: CommentTarget
    resolved: bool


@dataclass(frozen=True)
class CommentsToggleAllResolvedError:
    target: CommentTarget
    reason: str


@dataclass(frozen=True)
class CommentMetadataLoad:
    review_id: str


@dataclass(frozen=True)
class CommentMetadataLoading:
    review_id: str


@dataclass(frozen=True)
class CommentMetadataLoadingState:
    review_id: str
    state: LoadingState  # Loaded(CommentMetadata)


AppEvent = Union[
    Quit, ViewClose, HelpOpen, HelpKeySelected,
    ReviewCreateOpen, ReviewDeleteConfirm, ReviewDetailsOpen, ReviewRefreshOpen, CommentsOpen,
    ReviewsLoad, ReviewsLoading, ReviewsLoadingState,
    ReviewLoad, ReviewLoading, ReviewLoadingState,
    ReviewCreateSubmit, ReviewCreated, ReviewCreatedError,
    ReviewDelete, ReviewDeleted, ReviewDeletedError,
    ReviewRefresh, ReviewRefreshed, ReviewRefreshError,
    ReviewsBranchStatusCheck, ReviewsBranchStatusCheckError,
    GitBranchesLoad, GitBranchesLoading, GitBranchesLoadingState,
    GitDiffLoad, GitDiffLoading, GitDiffLoadingState,
    FileViewsLoad, FileViewsLoading, FileViewsLoadingState,
    FileViewToggle, FileViewToggled, FileViewToggleError,
    CommentsLoad, CommentsLoading, CommentsLoadingState,
    CommentCreate, CommentCreated, CommentCreateError,
    CommentToggleResolved, CommentToggledResolved, CommentToggleResolvedError,
    CommentsToggleAllResolved, CommentsToggledAllResolved, CommentsToggleAllResolvedError,
    CommentMetadataLoad, CommentMetadataLoading, CommentMetadataLoadingState,
]

Event = Union[Tick, Input, App]


def is_key_press(event: Optional[Any]) -> bool:
    return isinstance(event, Input) and hasattr(event.event, "key") and hasattr(event.event, "data")
