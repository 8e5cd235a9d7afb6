# reviewtui/services/file_view.py
import logging

from reviewtui.core import events
from reviewtui.core.errors import ReviewTuiError
from reviewtui.core.loading import LOADING, Error, Loaded
from reviewtui.services.base import Service, ServiceContext

log = logging.getLogger(__name__)


class FileViewService(Service):
    """Tracks which files of a review were marked as viewed."""

    name = "file_views"

    async def handle(self, event, ctx: ServiceContext) -> None:
        if isinstance(event, events.FileViewsLoad):
            ctx.send(events.FileViewsLoadingState(event.review_id, LOADING))
            ctx.send(events.FileViewsLoading(event.review_id))
        elif isinstance(event, events.FileViewsLoading):
            try:
                viewed = await ctx.call(ctx.database.viewed_files, event.review_id)
            except ReviewTuiError as e:
                log.error("failed to load file views for %s: %s", event.review_id, e)
                ctx.send(events.FileViewsLoadingState(event.review_id, Error(str(e))))
                return
            ctx.send(events.FileViewsLoadingState(event.review_id, Loaded(frozenset(viewed))))
        elif isinstance(event, events.FileViewToggle):
            try:
                is_viewed = await ctx.call(ctx.database.toggle_file_view, event.review_id, event.file_path)
            except ReviewTuiError as e:
                log.error("failed to toggle %s in %s: %s", event.file_path, event.review_id, e)
                ctx.send(events.FileViewToggleError(event.review_id, event.file_path, str(e)))
                return
            log.info("file %s in review %s marked %s", event.file_path, event.review_id,
                     "viewed" if is_viewed else "unviewed")
            ctx.send(events.FileViewToggled(event.review_id, event.file_path, is_viewed))
            ctx.send(events.FileViewsLoad(event.review_id))
