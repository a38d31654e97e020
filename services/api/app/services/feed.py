"""
Feed pagination.

Every post leaving this service goes through `enriched_post_query`, which
outer-joins the author and the career and attaches two correlated COUNT
subqueries (comments, likes). Saved-post listing builds on the same query so
all consumers see identical counter semantics.

Ordering is created_at DESC with post_id DESC as the tie breaker, which gives
a total order: consecutive `skip`/`take` windows never overlap or skip rows
while the underlying data is unchanged.
"""
import logging
import time
from typing import Optional

from opentelemetry import trace
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import store_operation
from app.errors import POST_NOT_FOUND, NotFoundError, ValidationError
from app.models import Career, Comment, Post, PostLike, PostType, User
from app.schemas import EnrichedPost
from app.telemetry import FEED_LATENCY, FEED_PAGE_ITEMS

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def enriched_post_query() -> Select:
    comment_count = (
        select(func.count(Comment.comment_id))
        .where(Comment.post_id == Post.post_id)
        .correlate(Post)
        .scalar_subquery()
    )
    like_count = (
        select(func.count(PostLike.user_id))
        .where(PostLike.post_id == Post.post_id)
        .correlate(Post)
        .scalar_subquery()
    )
    return (
        select(
            Post,
            User.username,
            User.display_name,
            User.avatar_url,
            Career.name.label("career_name"),
            Career.slug.label("career_slug"),
            comment_count.label("comment_count"),
            like_count.label("like_count"),
        )
        .select_from(Post)
        .outerjoin(User, User.user_id == Post.user_id)
        .outerjoin(Career, Career.career_id == Post.career_id)
    )


def to_enriched_post(row) -> EnrichedPost:
    post: Post = row.Post
    return EnrichedPost(
        post_id=post.post_id,
        user_id=post.user_id,
        career_id=post.career_id,
        post_type=PostType(post.post_type),
        body=post.body,
        created_at=post.created_at,
        username=row.username,
        display_name=row.display_name,
        avatar_url=row.avatar_url,
        career_name=row.career_name,
        career_slug=row.career_slug,
        comment_count=row.comment_count or 0,
        like_count=row.like_count or 0,
    )


def validate_window(take: int, skip: int) -> None:
    if take < 0:
        raise ValidationError(f"take must be >= 0, got {take}")
    if skip < 0:
        raise ValidationError(f"skip must be >= 0, got {skip}")
    if take > settings.feed_max_page_size:
        raise ValidationError(
            f"take must be <= {settings.feed_max_page_size}, got {take}"
        )


def validate_post_type(post_type) -> Optional[PostType]:
    if post_type is None:
        return None
    try:
        return PostType(post_type)
    except ValueError:
        raise ValidationError(f"unknown post_type {post_type!r}") from None


@store_operation
async def list_posts(
    db: AsyncSession,
    take: int,
    skip: int = 0,
    post_type: Optional[PostType] = None,
    career_slug: Optional[str] = None,
    author_id: Optional[str] = None,
) -> list[EnrichedPost]:
    """
    Return one window of the feed, most recent first.

    Filters are applied before OFFSET/LIMIT so page boundaries stay stable
    under a fixed filter. `skip` past the end yields an empty list.
    """
    validate_window(take, skip)
    post_type = validate_post_type(post_type)
    if take == 0:
        return []

    with tracer.start_as_current_span("list_posts") as span:
        span.set_attribute("feed.take", take)
        span.set_attribute("feed.skip", skip)

        query = enriched_post_query()
        if post_type is not None:
            query = query.where(Post.post_type == post_type.value)
            span.set_attribute("feed.post_type", post_type.value)
        if career_slug is not None:
            # Inner filter on the joined career; unknown slugs just match nothing
            query = query.where(Career.slug == career_slug)
        if author_id is not None:
            query = query.where(Post.user_id == author_id)

        query = (
            query.order_by(Post.created_at.desc(), Post.post_id.desc())
            .offset(skip)
            .limit(take)
        )

        start = time.perf_counter()
        rows = await db.execute(query)
        posts = [to_enriched_post(row) for row in rows.all()]
        FEED_LATENCY.observe(time.perf_counter() - start)
        FEED_PAGE_ITEMS.observe(len(posts))

        span.set_attribute("feed.posts_returned", len(posts))
        logger.debug("Feed window take=%s skip=%s → %s posts", take, skip, len(posts))
        return posts


@store_operation
async def get_post(db: AsyncSession, post_id: str) -> EnrichedPost:
    rows = await db.execute(enriched_post_query().where(Post.post_id == post_id))
    row = rows.first()
    if row is None:
        raise NotFoundError(f"Post {post_id} not found", code=POST_NOT_FOUND)
    return to_enriched_post(row)
