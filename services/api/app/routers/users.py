"""
User endpoints:
  POST /users/                               — register a student or aspirant
  GET  /users/{id}/profile                   — profile + career (tagged result)
  GET  /users/by-username/{username}/profile — same, addressed by username
  GET  /users/{id}/posts                     — posts authored by the user
  GET  /users/{id}/menu                      — career label + saved careers/posts
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.database import get_db, get_session_factory
from app.errors import ErrorKind, ValidationError
from app.models import Career, PostType, Role, User
from app.routers.feed import build_page
from app.schemas import FeedPage, MenuContext, ProfileError, ProfileResult, UserCreate, UserResponse
from app.services.feed import list_posts
from app.services.menu import get_menu_context
from app.services.profiles import get_user_by_username, get_user_data

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


def validate_role_fields(body: UserCreate) -> None:
    """Students carry career + semester; aspirants carry neither."""
    if body.role == Role.STUDENT:
        if body.career_id is None or body.semester is None:
            raise ValidationError("Students must provide career_id and semester")
    elif body.career_id is not None or body.semester is not None:
        raise ValidationError("Aspirants cannot have a career or semester")


def _profile_response(result: ProfileResult):
    # A missing user is a hard 404; an unresolved career still returns the
    # user payload with 200 so the caller can degrade.
    if isinstance(result, ProfileError) and result.kind == ErrorKind.NOT_FOUND:
        return JSONResponse(status_code=404, content=result.model_dump(mode="json"))
    return result


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("create_user"):
        validate_role_fields(body)

        existing = await db.execute(
            select(User).where(User.username == body.username)
        )
        if existing.scalar_one_or_none():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Username '{body.username}' already taken",
            )

        if body.career_id is not None and not await db.get(Career, body.career_id):
            raise HTTPException(status_code=404, detail="Career not found")

        user = User(
            username=body.username,
            display_name=body.display_name,
            avatar_url=body.avatar_url,
            role=body.role.value,
            career_id=body.career_id,
            semester=body.semester,
        )
        db.add(user)
        await db.flush()  # get user_id before commit
        await db.refresh(user)

        logger.info("Created %s %s (id=%s)", user.role.lower(), user.username, user.user_id)
        return user


@router.get("/by-username/{username}/profile", response_model=ProfileResult)
async def get_profile_by_username(username: str, db: AsyncSession = Depends(get_db)):
    return _profile_response(await get_user_by_username(db, username))


@router.get("/{user_id}/profile", response_model=ProfileResult)
async def get_profile(user_id: str, db: AsyncSession = Depends(get_db)):
    return _profile_response(await get_user_data(db, user_id))


@router.get("/{user_id}/posts", response_model=FeedPage)
async def list_user_posts(
    user_id: str,
    take: int = Query(settings.feed_page_size),
    skip: int = Query(0),
    post_type: Optional[PostType] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Profile tabs: the user's testimonies / questions, newest first."""
    posts = await list_posts(db, take=take, skip=skip, post_type=post_type, author_id=user_id)
    return build_page(posts, take, skip)


@router.get("/{user_id}/menu", response_model=MenuContext)
async def get_menu(
    user_id: str,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    return await get_menu_context(session_factory, user_id)
