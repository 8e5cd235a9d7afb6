# reviewtui/services/branch_status.py
import logging
from typing import Optional, Tuple

from reviewtui.core import events, vcs
from reviewtui.core.errors import ReviewTuiError, VcsError
from reviewtui.model import Review
from reviewtui.services.base import Service, ServiceContext

log = logging.getLogger(__name__)


def _branch_state(repo_path: str, branch: str, known_sha: Optional[str]) -> Tuple[bool, Optional[str]]:
    """(exists, new head SHA if it moved away from ``known_sha``)."""
    try:
        sha = vcs.branch_head_sha(repo_path, branch) if branch else None
    except VcsError as e:
        log.warning("cannot resolve %s: %s", branch, e)
        sha = None
    if sha is None:
        return False, None
    if known_sha is not None and sha != known_sha:
        return True, sha
    return True, None


def check_review(repo_path: str, review: Review):
    """Branch status of ``review`` or None when nothing changed."""
    base_exists, base_changed = _branch_state(repo_path, review.base_branch, review.base_sha)
    target_exists, target_changed = _branch_state(repo_path, review.target_branch, review.target_sha)
    if (base_changed == review.base_sha_changed and target_changed == review.target_sha_changed
            and review.base_branch_exists is base_exists
            and review.target_branch_exists is target_exists):
        return None
    return base_changed, target_changed, base_exists, target_exists


class BranchStatusService(Service):
    """Compares every review against the current branch heads."""

    name = "branch_status"

    async def handle(self, event, ctx: ServiceContext) -> None:
        if not isinstance(event, events.ReviewsBranchStatusCheck):
            return
        log.info("checking branch status for all reviews")
        try:
            reviews = await ctx.call(ctx.database.list_reviews)
        except ReviewTuiError as e:
            log.error("failed to load reviews for branch status check: %s", e)
            ctx.send(events.ReviewsBranchStatusCheckError(str(e)))
            return
        for review in reviews:
            status = await ctx.call(check_review, ctx.repo_path, review)
            if status is None:
                continue
            try:
                await ctx.call(ctx.database.update_branch_status, review.id, *status)
            except ReviewTuiError as e:
                log.error("failed to update branch status for review %s: %s", review.id, e)
                continue
            log.info("updated branch status for review %s (base_changed=%s, target_changed=%s,"
                     " base_exists=%s, target_exists=%s)", review.id, *status)
        ctx.send(events.ReviewsLoad())
