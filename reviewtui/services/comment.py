# reviewtui/services/comment.py
import logging

from reviewtui.core import events
from reviewtui.core.errors import ReviewTuiError
from reviewtui.core.loading import LOADING, Error, Loaded
from reviewtui.model import Comment
from reviewtui.services.base import Service, ServiceContext

log = logging.getLogger(__name__)


class CommentService(Service):
    name = "comments"

    async def handle(self, event, ctx: ServiceContext) -> None:
        if isinstance(event, events.CommentsLoad):
            ctx.send(events.CommentsLoadingState(event.target, LOADING))
            ctx.send(events.CommentsLoading(event.target))
        elif isinstance(event, events.CommentsLoading):
            try:
                comments = await ctx.call(ctx.database.list_comments, event.target)
            except ReviewTuiError as e:
                log.error("failed to load comments for %s: %s", event.target, e)
                ctx.send(events.CommentsLoadingState(event.target, Error(str(e))))
                return
            ctx.send(events.CommentsLoadingState(event.target, Loaded(tuple(comments))))
        elif isinstance(event, events.CommentCreate):
            await self._create(event, ctx)
        elif isinstance(event, events.CommentToggleResolved):
            await self._toggle_resolved(event, ctx)
        elif isinstance(event, events.CommentsToggleAllResolved):
            try:
                resolved = await ctx.call(ctx.database.toggle_all_resolved, event.target)
            except ReviewTuiError as e:
                log.error("failed to toggle comments on %s: %s", event.target, e)
                ctx.send(events.CommentsToggleAllResolvedError(event.target, str(e)))
                return
            ctx.send(events.CommentsToggledAllResolved(event.target, resolved))
            ctx.send(events.CommentsLoad(event.target))
            ctx.send(events.CommentMetadataLoad(event.target.review_id))
        elif isinstance(event, events.CommentMetadataLoad):
            ctx.send(events.CommentMetadataLoadingState(event.review_id, LOADING))
            ctx.send(events.CommentMetadataLoading(event.review_id))
        elif isinstance(event, events.CommentMetadataLoading):
            try:
                metadata = await ctx.call(ctx.database.comment_metadata, event.review_id)
            except ReviewTuiError as e:
                log.error("failed to load comment metadata for %s: %s", event.review_id, e)
                ctx.send(events.CommentMetadataLoadingState(event.review_id, Error(str(e))))
                return
            ctx.send(events.CommentMetadataLoadingState(event.review_id, Loaded(metadata)))

    async def _create(self, event: events.CommentCreate, ctx: ServiceContext) -> None:
        target = event.target
        content = event.content.strip()
        if not content:
            ctx.send(events.CommentCreateError(target, "Comment cannot be empty"))
            return
        comment = Comment(
            review_id=target.review_id,
            file_path=target.file_path,
            line_number=target.line_number,
            content=content,
        )
        try:
            await ctx.call(ctx.database.create_comment, comment)
        except ReviewTuiError as e:
            log.error("failed to create comment on %s: %s", target, e)
            ctx.send(events.CommentCreateError(target, str(e)))
            return
        log.info("created comment %s on %s:%s", comment.id, target.file_path, target.line_number)
        ctx.send(events.CommentCreated(comment))
        ctx.send(events.CommentsLoad(target))
        ctx.send(events.CommentMetadataLoad(target.review_id))

    async def _toggle_resolved(self, event: events.CommentToggleResolved, ctx: ServiceContext) -> None:
        try:
            resolved = await ctx.call(ctx.database.toggle_comment_resolved, event.comment_id)
        except ReviewTuiError as e:
            log.error("failed to toggle comment %s: %s", event.comment_id, e)
            ctx.send(events.CommentToggleResolvedError(event.comment_id, str(e)))
            return
        ctx.send(events.CommentToggledResolved(event.comment_id, resolved))
        ctx.send(events.CommentsLoad(event.target))
        ctx.send(events.CommentMetadataLoad(event.target.review_id))
