# reviewtui/services/__init__.py
from typing import List

from .base import Service, ServiceContext
from .branch_status import BranchStatusService
from .comment import CommentService
from .file_view import FileViewService
from .git import GitService
from .review import ReviewService
from .state import AppState, StateService


def default_services(state: StateService = None) -> List[Service]:
    """Registry in dispatch order: the state cache sees every event first."""
    return [
        state or StateService(),
        ReviewService(),
        GitService(),
        FileViewService(),
        CommentService(),
        BranchStatusService(),
    ]


__all__ = [
    "AppState", "BranchStatusService", "CommentService", "FileViewService", "GitService",
    "ReviewService", "Service", "ServiceContext", "StateService", "default_services",
]
