# reviewtui/services/git.py
import logging

from reviewtui.core import events, vcs
from reviewtui.core.errors import ReviewTuiError
from reviewtui.core.loading import LOADING, Error, Loaded
from reviewtui.services.base import Service, ServiceContext

log = logging.getLogger(__name__)


class GitService(Service):
    name = "git"

    async def handle(self, event, ctx: ServiceContext) -> None:
        if isinstance(event, events.GitBranchesLoad):
            ctx.send(events.GitBranchesLoadingState(LOADING))
            ctx.send(events.GitBranchesLoading())
        elif isinstance(event, events.GitBranchesLoading):
            try:
                branches = await ctx.call(vcs.list_branches, ctx.repo_path)
            except ReviewTuiError as e:
                log.error("failed to list branches in %s: %s", ctx.repo_path, e)
                ctx.send(events.GitBranchesLoadingState(Error(str(e))))
                return
            ctx.send(events.GitBranchesLoadingState(Loaded(tuple(branches))))
        elif isinstance(event, events.GitDiffLoad):
            ctx.send(events.GitDiffLoadingState(event.base_sha, event.target_sha, LOADING))
            ctx.send(events.GitDiffLoading(event.base_sha, event.target_sha))
        elif isinstance(event, events.GitDiffLoading):
            try:
                diff = await ctx.call(vcs.diff, ctx.repo_path, event.base_sha, event.target_sha)
            except ReviewTuiError as e:
                log.error("failed to diff %s..%s: %s", event.base_sha, event.target_sha, e)
                ctx.send(events.GitDiffLoadingState(event.base_sha, event.target_sha, Error(str(e))))
                return
            ctx.send(events.GitDiffLoadingState(event.base_sha, event.target_sha, Loaded(diff)))
