# reviewtui/core/vcs.py
"""Read-only queries against the local Git repository (GitPython)."""
import logging
from typing import List, Optional

from git import BadName, BadObject, GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.exc import GitError as GitPythonError

from reviewtui.core.errors import VcsError
from reviewtui.model import Diff, DiffFile

log = logging.getLogger(__name__)


def _get_repo(repo_path: str) -> Repo:
    try:
        return Repo(repo_path)
    except (InvalidGitRepositoryError, NoSuchPathError):
        raise VcsError(f"Not a git repository: {repo_path}")
    except GitPythonError as e:
        raise VcsError(f"Failed to access repository: {e}") from e


def list_branches(repo_path: str) -> List[str]:
    """Local branch names, sorted."""
    repo = _get_repo(repo_path)
    try:
        return sorted(head.name for head in repo.heads)
    except GitPythonError as e:
        raise VcsError(f"Failed to list branches: {e}") from e
    finally:
        repo.close()


def branch_head_sha(repo_path: str, branch: str) -> Optional[str]:
    """SHA of ``refs/heads/<branch>``, or None when the branch does not exist."""
    repo = _get_repo(repo_path)
    try:
        for head in repo.heads:
            if head.name == branch:
                return head.commit.hexsha
        return None
    except (GitPythonError, ValueError) as e:
        raise VcsError(f"Failed to resolve branch {branch}: {e}") from e
    finally:
        repo.close()


def _decode(raw) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return str(raw)


def diff(repo_path: str, base_sha: str, target_sha: str) -> Diff:
    """Changes from ``base_sha`` to ``target_sha``, one ``DiffFile`` per path.

    The content of each file is the unified patch body: hunk headers followed
    by lines prefixed with ``+``, ``-`` or a space.
    """
    repo = _get_repo(repo_path)
    try:
        base = repo.commit(base_sha)
        target = repo.commit(target_sha)
        files = {}
        for d in base.diff(target, create_patch=True):
            path = d.b_path or d.a_path
            files[path] = files.get(path, "") + _decode(d.diff)
    except (BadName, BadObject, ValueError) as e:
        raise VcsError(f"Unknown revision: {e}") from e
    except (GitCommandError, GitPythonError) as e:
        raise VcsError(f"Failed to compute diff: {e}") from e
    finally:
        repo.close()
    log.debug("diff %s..%s: %d files", base_sha[:8], target_sha[:8], len(files))
    return Diff(files=tuple(DiffFile(path=p, content=files[p]) for p in sorted(files)))
