"""
Bookmarked posts (user × post set).

Listing returns full enriched posts, not ids: the saved relation is joined to
posts and then enriched exactly like a feed page. A saved row whose post has
since been deleted simply drops out of the inner join.
"""
import logging

from opentelemetry import trace
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import insert_ignore, store_operation
from app.errors import POST_NOT_FOUND, NotFoundError
from app.models import Post, SavedPost
from app.schemas import EnrichedPost
from app.services.feed import enriched_post_query, to_enriched_post
from app.services.profiles import require_user
from app.telemetry import SAVED_TOGGLES_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@store_operation
async def list_saved_posts(db: AsyncSession, user_id: str) -> list[EnrichedPost]:
    """Most recently bookmarked first (not feed recency)."""
    with tracer.start_as_current_span("list_saved_posts") as span:
        span.set_attribute("user.id", user_id)
        rows = await db.execute(
            enriched_post_query()
            .join(SavedPost, SavedPost.post_id == Post.post_id)
            .where(SavedPost.user_id == user_id)
            .order_by(SavedPost.saved_at.desc(), SavedPost.id.desc())
        )
        posts = [to_enriched_post(row) for row in rows.all()]
        span.set_attribute("saved_posts.count", len(posts))
        return posts


@store_operation
async def save_post(db: AsyncSession, user_id: str, post_id: str) -> bool:
    await require_user(db, user_id)
    if await db.get(Post, post_id) is None:
        raise NotFoundError(f"Post {post_id} not found", code=POST_NOT_FOUND)

    result = await db.execute(insert_ignore(SavedPost, user_id=user_id, post_id=post_id))
    created = result.rowcount > 0
    SAVED_TOGGLES_TOTAL.labels(resource="post", action="save", changed=str(created)).inc()
    logger.info("User %s saved post %s (new=%s)", user_id, post_id, created)
    return created


@store_operation
async def unsave_post(db: AsyncSession, user_id: str, post_id: str) -> bool:
    result = await db.execute(
        delete(SavedPost).where(
            SavedPost.user_id == user_id,
            SavedPost.post_id == post_id,
        )
    )
    removed = result.rowcount > 0
    SAVED_TOGGLES_TOTAL.labels(resource="post", action="unsave", changed=str(removed)).inc()
    logger.info("User %s unsaved post %s (removed=%s)", user_id, post_id, removed)
    return removed
