"""
Feed retrieval endpoint — GET /feed/?take=&skip=&post_type=&career_slug=

Plain recency feed: the caller pages through it by advancing `skip` by `take`
(the response carries `next_skip` for convenience). No cursor state is kept
server-side, so every call is independent.

  post_type   — TESTIMONY | QUESTION (career forum tabs)
  career_slug — restrict to one career's forum
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models import PostType
from app.schemas import FeedPage
from app.services.feed import list_posts

logger = logging.getLogger(__name__)
router = APIRouter()


def build_page(posts, take: int, skip: int) -> FeedPage:
    next_skip = skip + take if take and len(posts) == take else None
    return FeedPage(posts=posts, take=take, skip=skip, next_skip=next_skip)


@router.get("/", response_model=FeedPage)
async def get_feed(
    take: int = Query(settings.feed_page_size, description="Page size"),
    skip: int = Query(0, description="Zero-based offset into the feed"),
    post_type: Optional[PostType] = Query(None),
    career_slug: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    posts = await list_posts(
        db, take=take, skip=skip, post_type=post_type, career_slug=career_slug
    )
    return build_page(posts, take, skip)
