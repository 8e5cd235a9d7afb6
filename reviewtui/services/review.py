# reviewtui/services/review.py
import logging

from reviewtui.core import events, vcs
from reviewtui.core.errors import ReviewTuiError
from reviewtui.core.loading import LOADING, Error, Loaded
from reviewtui.model import Review
from reviewtui.services.base import Service, ServiceContext

log = logging.getLogger(__name__)


class ReviewService(Service):
    name = "reviews"

    async def handle(self, event, ctx: ServiceContext) -> None:
        if isinstance(event, events.ReviewsLoad):
            ctx.send(events.ReviewsLoadingState(LOADING))
            ctx.send(events.ReviewsLoading())
        elif isinstance(event, events.ReviewsLoading):
            await self._load_reviews(ctx)
        elif isinstance(event, events.ReviewLoad):
            ctx.send(events.ReviewLoadingState(event.review_id, LOADING))
            ctx.send(events.ReviewLoading(event.review_id))
        elif isinstance(event, events.ReviewLoading):
            await self._load_review(event.review_id, ctx)
        elif isinstance(event, events.ReviewCreateSubmit):
            await self._create(event, ctx)
        elif isinstance(event, events.ReviewDelete):
            await self._delete(event.review_id, ctx)
        elif isinstance(event, events.ReviewRefresh):
            await self._refresh(event, ctx)

    async def _load_reviews(self, ctx: ServiceContext) -> None:
        try:
            reviews = await ctx.call(ctx.database.list_reviews)
        except ReviewTuiError as e:
            log.error("failed to load reviews: %s", e)
            ctx.send(events.ReviewsLoadingState(Error(str(e))))
            return
        ctx.send(events.ReviewsLoadingState(Loaded(tuple(reviews))))

    async def _load_review(self, review_id: str, ctx: ServiceContext) -> None:
        try:
            review = await ctx.call(ctx.database.get_review, review_id)
        except ReviewTuiError as e:
            log.error("failed to load review %s: %s", review_id, e)
            ctx.send(events.ReviewLoadingState(review_id, Error(str(e))))
            return
        if review is None:
            ctx.send(events.ReviewLoadingState(review_id, Error(f"Review not found: {review_id}")))
        else:
            ctx.send(events.ReviewLoadingState(review_id, Loaded(review)))

    async def _create(self, event: events.ReviewCreateSubmit, ctx: ServiceContext) -> None:
        data = event.data
        title = data.title.strip()
        if not title:
            ctx.send(events.ReviewCreatedError("Review title cannot be empty"))
            return
        try:
            base_sha = None
            target_sha = None
            if data.base_branch:
                base_sha = await ctx.call(vcs.branch_head_sha, ctx.repo_path, data.base_branch)
            if data.target_branch:
                target_sha = await ctx.call(vcs.branch_head_sha, ctx.repo_path, data.target_branch)
            review = Review(
                title=title,
                base_branch=data.base_branch,
                target_branch=data.target_branch,
                base_sha=base_sha,
                target_sha=target_sha,
            )
            await ctx.call(ctx.database.create_review, review)
        except ReviewTuiError as e:
            log.error("failed to create review %r: %s", title, e)
            ctx.send(events.ReviewCreatedError(str(e)))
            return
        log.info("created review %s (%s)", review.id, review.title)
        ctx.send(events.ReviewCreated(review))
        ctx.send(events.ReviewsLoad())

    async def _delete(self, review_id: str, ctx: ServiceContext) -> None:
        try:
            await ctx.call(ctx.database.delete_review, review_id)
        except ReviewTuiError as e:
            log.error("failed to delete review %s: %s", review_id, e)
            ctx.send(events.ReviewDeletedError(review_id, str(e)))
            return
        log.info("deleted review %s", review_id)
        ctx.send(events.ReviewDeleted(review_id))
        ctx.send(events.ReviewsLoad())

    async def _refresh(self, event: events.ReviewRefresh, ctx: ServiceContext) -> None:
        review_id = event.review_id
        try:
            review = await ctx.call(ctx.database.get_review, review_id)
            if review is None:
                raise ReviewTuiError(f"Review not found: {review_id}")
            base_sha = target_sha = None
            if event.base:
                base_sha = await ctx.call(vcs.branch_head_sha, ctx.repo_path, review.base_branch)
                if base_sha is None:
                    raise ReviewTuiError(f"Branch not found: {review.base_branch}")
            if event.target:
                target_sha = await ctx.call(vcs.branch_head_sha, ctx.repo_path, review.target_branch)
                if target_sha is None:
                    raise ReviewTuiError(f"Branch not found: {review.target_branch}")
            await ctx.call(ctx.database.update_review_shas, review_id, base_sha, target_sha)
        except ReviewTuiError as e:
            log.error("failed to refresh review %s: %s", review_id, e)
            ctx.send(events.ReviewRefreshError(review_id, str(e)))
            return
        log.info("refreshed review %s (base=%s, target=%s)", review_id, event.base, event.target)
        ctx.send(events.ReviewRefreshed(review_id))
        ctx.send(events.ReviewLoad(review_id))
        ctx.send(events.ReviewsLoad())
