# reviewtui/model.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Optional, Tuple
import uuid

from reviewtui.core import clock


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Review:
    title: str
    base_branch: str = ""
    target_branch: str = ""
    base_sha: Optional[str] = None
    target_sha: Optional[str] = None
    base_sha_changed: Optional[str] = None
    target_sha_changed: Optional[str] = None
    base_branch_exists: Optional[bool] = None
    target_branch_exists: Optional[bool] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=clock.now)
    updated_at: datetime = field(default_factory=clock.now)

    @property
    def has_changes(self) -> bool:
        return bool(self.base_sha_changed or self.target_sha_changed)

    @property
    def has_missing_branch(self) -> bool:
        return self.base_branch_exists is False or self.target_branch_exists is False


@dataclass(frozen=True)
class ReviewCreateData:
    title: str
    base_branch: str = ""
    target_branch: str = ""


@dataclass(frozen=True)
class CommentTarget:
    review_id: str
    file_path: str
    line_number: Optional[int] = None  # None for file-level comments

    @property
    def is_file_level(self) -> bool:
        return self.line_number is None


@dataclass(frozen=True)
class Comment:
    review_id: str
    file_path: str
    content: str
    line_number: Optional[int] = None
    resolved: bool = False
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=clock.now)

    @property
    def target(self) -> CommentTarget:
        return CommentTarget(self.review_id, self.file_path, self.line_number)


@dataclass(frozen=True)
class CommentMetadata:
    """Which files and lines of a review carry comments."""
    review_id: str
    lines: Dict[str, FrozenSet[int]] = field(default_factory=dict)
    file_level: FrozenSet[str] = frozenset()

    def file_has_comments(self, path: str) -> bool:
        return path in self.file_level or bool(self.lines.get(path))

    def line_has_comments(self, path: str, line_number: int) -> bool:
        return line_number in self.lines.get(path, frozenset())


@dataclass(frozen=True)
class FileView:
    review_id: str
    file_path: str
    id: int = 0  # assigned by the database
    created_at: datetime = field(default_factory=clock.now)


@dataclass(frozen=True)
class DiffFile:
    path: str
    content: str

    def lines(self) -> Tuple[str, ...]:
        return tuple(self.content.splitlines())


@dataclass(frozen=True)
class Diff:
    files: Tuple[DiffFile, ...] = ()

    def is_empty(self) -> bool:
        return not self.files

    def file_count(self) -> int:
        return len(self.files)
