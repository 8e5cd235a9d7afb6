# reviewtui/core/storage.py
"""SQLite persistence for reviews, viewed files and comments.

Plain ``sqlite3``; every public method is one independent call that either
succeeds or raises ``StorageError``. The connection is opened with
``check_same_thread=False`` because calls are dispatched to the default
executor.
"""
import logging
import os
import sqlite3
import threading
from datetime import datetime
from typing import Dict, List, Optional, Set

from reviewtui.core import clock
from reviewtui.core.errors import StorageError
from reviewtui.model import Comment, CommentMetadata, CommentTarget, FileView, Review

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS reviews (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    base_branch TEXT NOT NULL DEFAULT '',
    target_branch TEXT NOT NULL DEFAULT '',
    base_sha TEXT,
    target_sha TEXT,
    base_sha_changed TEXT,
    target_sha_changed TEXT,
    base_branch_exists INTEGER,
    target_branch_exists INTEGER
);

CREATE TABLE IF NOT EXISTS file_views (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    review_id TEXT NOT NULL,
    file_path TEXT NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE (review_id, file_path),
    FOREIGN KEY (review_id) REFERENCES reviews (id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS comments (
    id TEXT PRIMARY KEY,
    review_id TEXT NOT NULL,
    file_path TEXT NOT NULL,
    line_number INTEGER,
    content TEXT NOT NULL,
    created_at TEXT NOT NULL,
    resolved INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (review_id) REFERENCES reviews (id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_file_views_review ON file_views (review_id);
CREATE INDEX IF NOT EXISTS idx_comments_target ON comments (review_id, file_path, line_number);
"""


def _ts(value: datetime) -> str:
    return value.isoformat()


def _parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _opt_bool(value) -> Optional[bool]:
    return None if value is None else bool(value)


def _opt_int(value: Optional[bool]) -> Optional[int]:
    return None if value is None else int(value)


class Database:
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None

    # ---------- lifecycle ----------

    @classmethod
    def open(cls, path: str) -> "Database":
        db = cls(path)
        db.connect()
        return db

    def connect(self) -> None:
        try:
            if self.path != ":memory:":
                parent = os.path.dirname(os.path.abspath(self.path))
                os.makedirs(parent, exist_ok=True)
            conn = sqlite3.connect(self.path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            conn.executescript(SCHEMA)
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"cannot open database {self.path}: {e}") from e
        self._conn = conn
        log.info("database opened at %s", self.path)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _execute(self, sql: str, params=(), commit: bool = False) -> List[sqlite3.Row]:
        with self._lock:
            if self._conn is None:
                raise StorageError("database is not open")
            try:
                cur = self._conn.execute(sql, params)
                rows = cur.fetchall()
                if commit:
                    self._conn.commit()
                return rows
            except sqlite3.Error as e:
                if commit:
                    self._conn.rollback()
                raise StorageError(str(e)) from e

    # ---------- reviews ----------

    @staticmethod
    def _review(row: sqlite3.Row) -> Review:
        return Review(
            id=row["id"],
            title=row["title"],
            base_branch=row["base_branch"],
            target_branch=row["target_branch"],
            base_sha=row["base_sha"],
            target_sha=row["target_sha"],
            base_sha_changed=row["base_sha_changed"],
            target_sha_changed=row["target_sha_changed"],
            base_branch_exists=_opt_bool(row["base_branch_exists"]),
            target_branch_exists=_opt_bool(row["target_branch_exists"]),
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
        )

    def create_review(self, review: Review) -> Review:
        self._execute(
            "INSERT INTO reviews (id, title, created_at, updated_at, base_branch, target_branch,"
            " base_sha, target_sha, base_sha_changed, target_sha_changed,"
            " base_branch_exists, target_branch_exists)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (review.id, review.title, _ts(review.created_at), _ts(review.updated_at),
             review.base_branch, review.target_branch, review.base_sha, review.target_sha,
             review.base_sha_changed, review.target_sha_changed,
             _opt_int(review.base_branch_exists), _opt_int(review.target_branch_exists)),
            commit=True,
        )
        return review

    def get_review(self, review_id: str) -> Optional[Review]:
        rows = self._execute("SELECT * FROM reviews WHERE id = ?", (review_id,))
        return self._review(rows[0]) if rows else None

    def list_reviews(self) -> List[Review]:
        rows = self._execute("SELECT * FROM reviews ORDER BY created_at DESC, rowid DESC")
        return [self._review(r) for r in rows]

    def delete_review(self, review_id: str) -> bool:
        with self._lock:
            existed = bool(self._execute("SELECT 1 FROM reviews WHERE id = ?", (review_id,)))
            self._execute("DELETE FROM reviews WHERE id = ?", (review_id,), commit=True)
        return existed

    def update_branch_status(self, review_id: str, base_sha_changed: Optional[str],
                             target_sha_changed: Optional[str], base_branch_exists: Optional[bool],
                             target_branch_exists: Optional[bool]) -> None:
        self._execute(
            "UPDATE reviews SET base_sha_changed = ?, target_sha_changed = ?,"
            " base_branch_exists = ?, target_branch_exists = ?, updated_at = ? WHERE id = ?",
            (base_sha_changed, target_sha_changed, _opt_int(base_branch_exists),
             _opt_int(target_branch_exists), _ts(clock.now()), review_id),
            commit=True,
        )

    def update_review_shas(self, review_id: str, base_sha: Optional[str] = None,
                           target_sha: Optional[str] = None) -> None:
        """Store new head SHAs; the matching changed marker is cleared and the branch marked present."""
        sets, params = [], []
        if base_sha is not None:
            sets += ["base_sha = ?", "base_sha_changed = NULL", "base_branch_exists = 1"]
            params.append(base_sha)
        if target_sha is not None:
            sets += ["target_sha = ?", "target_sha_changed = NULL", "target_branch_exists = 1"]
            params.append(target_sha)
        if not sets:
            return
        sets.append("updated_at = ?")
        params += [_ts(clock.now()), review_id]
        self._execute(f"UPDATE reviews SET {', '.join(sets)} WHERE id = ?", tuple(params), commit=True)

    # ---------- file views ----------

    def is_file_viewed(self, review_id: str, file_path: str) -> bool:
        rows = self._execute(
            "SELECT 1 FROM file_views WHERE review_id = ? AND file_path = ?", (review_id, file_path))
        return bool(rows)

    def mark_file_viewed(self, review_id: str, file_path: str) -> None:
        self._execute(
            "INSERT OR IGNORE INTO file_views (review_id, file_path, created_at) VALUES (?, ?, ?)",
            (review_id, file_path, _ts(clock.now())), commit=True)

    def mark_file_unviewed(self, review_id: str, file_path: str) -> None:
        self._execute("DELETE FROM file_views WHERE review_id = ? AND file_path = ?",
                      (review_id, file_path), commit=True)

    def toggle_file_view(self, review_id: str, file_path: str) -> bool:
        """Flip the viewed flag of a file; returns the new state."""
        with self._lock:
            if self.is_file_viewed(review_id, file_path):
                self.mark_file_unviewed(review_id, file_path)
                return False
            self.mark_file_viewed(review_id, file_path)
            return True

    def list_file_views(self, review_id: str) -> List[FileView]:
        rows = self._execute(
            "SELECT * FROM file_views WHERE review_id = ? ORDER BY file_path", (review_id,))
        return [FileView(review_id=r["review_id"], file_path=r["file_path"], id=r["id"],
                         created_at=_parse_ts(r["created_at"])) for r in rows]

    def viewed_files(self, review_id: str) -> Set[str]:
        return {fv.file_path for fv in self.list_file_views(review_id)}

    # ---------- comments ----------

    @staticmethod
    def _comment(row: sqlite3.Row) -> Comment:
        return Comment(
            id=row["id"],
            review_id=row["review_id"],
            file_path=row["file_path"],
            line_number=row["line_number"],
            content=row["content"],
            resolved=bool(row["resolved"]),
            created_at=_parse_ts(row["created_at"]),
        )

    def create_comment(self, comment: Comment) -> Comment:
        self._execute(
            "INSERT INTO comments (id, review_id, file_path, line_number, content, created_at, resolved)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (comment.id, comment.review_id, comment.file_path, comment.line_number,
             comment.content, _ts(comment.created_at), int(comment.resolved)),
            commit=True,
        )
        return comment

    def get_comment(self, comment_id: str) -> Optional[Comment]:
        rows = self._execute("SELECT * FROM comments WHERE id = ?", (comment_id,))
        return self._comment(rows[0]) if rows else None

    def list_comments(self, target: CommentTarget) -> List[Comment]:
        if target.line_number is None:
            rows = self._execute(
                "SELECT * FROM comments WHERE review_id = ? AND file_path = ? AND line_number IS NULL"
                " ORDER BY created_at DESC, rowid DESC",
                (target.review_id, target.file_path))
        else:
            rows = self._execute(
                "SELECT * FROM comments WHERE review_id = ? AND file_path = ? AND line_number = ?"
                " ORDER BY created_at DESC, rowid DESC",
                (target.review_id, target.file_path, target.line_number))
        return [self._comment(r) for r in rows]

    def toggle_comment_resolved(self, comment_id: str) -> bool:
        """Flip ``resolved``; returns the new value."""
        with self._lock:
            comment = self.get_comment(comment_id)
            if comment is None:
                raise StorageError(f"Comment not found: {comment_id}")
            resolved = not comment.resolved
            self._execute("UPDATE comments SET resolved = ? WHERE id = ?",
                          (int(resolved), comment_id), commit=True)
        return resolved

    def toggle_all_resolved(self, target: CommentTarget) -> bool:
        """Resolve every comment on ``target``, or reopen them all when none is open.

        Returns the new resolved value.
        """
        with self._lock:
            comments = self.list_comments(target)
            resolved = any(not c.resolved for c in comments)
            for c in comments:
                self._execute("UPDATE comments SET resolved = ? WHERE id = ?",
                              (int(resolved), c.id), commit=True)
        return resolved

    def comment_metadata(self, review_id: str) -> CommentMetadata:
        rows = self._execute(
            "SELECT DISTINCT file_path, line_number FROM comments WHERE review_id = ?", (review_id,))
        lines: Dict[str, Set[int]] = {}
        file_level: Set[str] = set()
        for r in rows:
            if r["line_number"] is None:
                file_level.add(r["file_path"])
            else:
                lines.setdefault(r["file_path"], set()).add(r["line_number"])
        return CommentMetadata(
            review_id=review_id,
            lines={path: frozenset(nums) for path, nums in lines.items()},
            file_level=frozenset(file_level),
        )
