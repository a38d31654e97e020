"""
Post endpoints:
  POST   /posts/                    — create a testimony or question
  GET    /posts/{id}                — fetch a single enriched post
  POST   /posts/{id}/like           — like a post (idempotent)
  DELETE /posts/{id}/like           — remove a like (idempotent)
  POST   /posts/{id}/comments       — comment on a post
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from opentelemetry import trace
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, insert_ignore
from app.models import Career, Comment, Post, PostLike, User
from app.schemas import CommentCreate, CommentResponse, EnrichedPost, LikeRequest, PostCreate
from app.services.feed import get_post as fetch_post
from app.telemetry import POSTS_CREATED_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


async def _require_post(db: AsyncSession, post_id: str) -> Post:
    post = await db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("/", response_model=EnrichedPost, status_code=status.HTTP_201_CREATED)
async def create_post(body: PostCreate, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("create_post") as span:
        if not await db.get(User, body.user_id):
            raise HTTPException(status_code=404, detail="Author not found")
        if not await db.get(Career, body.career_id):
            raise HTTPException(status_code=404, detail="Career not found")

        post = Post(
            user_id=body.user_id,
            career_id=body.career_id,
            post_type=body.post_type.value,
            body=body.body,
        )
        db.add(post)
        await db.flush()        # materialise post_id
        await db.refresh(post)  # load server-generated fields (created_at)

        span.set_attribute("post.id", post.post_id)
        span.set_attribute("post.type", post.post_type)
        POSTS_CREATED_TOTAL.labels(post_type=post.post_type).inc()
        logger.info("Post created: %s by user %s", post.post_id, post.user_id)
        return await fetch_post(db, post.post_id)


@router.get("/{post_id}", response_model=EnrichedPost)
async def get_post(post_id: str, db: AsyncSession = Depends(get_db)):
    return await fetch_post(db, post_id)


@router.post("/{post_id}/like", status_code=status.HTTP_204_NO_CONTENT)
async def like_post(post_id: str, body: LikeRequest, db: AsyncSession = Depends(get_db)):
    """Like a post — idempotent. The like count is derived, nothing to bump."""
    with tracer.start_as_current_span("like_post"):
        await _require_post(db, post_id)
        if not await db.get(User, body.user_id):
            raise HTTPException(status_code=404, detail="User not found")
        await db.execute(insert_ignore(PostLike, user_id=body.user_id, post_id=post_id))


@router.delete("/{post_id}/like", status_code=status.HTTP_204_NO_CONTENT)
async def unlike_post(post_id: str, body: LikeRequest, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("unlike_post"):
        await db.execute(
            delete(PostLike).where(
                PostLike.user_id == body.user_id,
                PostLike.post_id == post_id,
            )
        )


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(post_id: str, body: CommentCreate, db: AsyncSession = Depends(get_db)):
    await _require_post(db, post_id)
    if not await db.get(User, body.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    comment = Comment(post_id=post_id, user_id=body.user_id, body=body.body)
    db.add(comment)
    await db.flush()
    await db.refresh(comment)  # load server-generated created_at
    return comment
