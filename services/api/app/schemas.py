"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.

Service functions return these types directly, so the same shapes are seen
by HTTP callers and by in-process callers.
"""
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from app.errors import ErrorKind
from app.models import PostType, Role


# ──────────────────────────── Careers ─────────────────────────────────────

class CareerCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    slug: str = Field(..., max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    faculty_name: Optional[str] = None
    tags: list[str] = []


class CareerSummary(BaseModel):
    career_id: str
    name: str
    slug: str
    faculty_id: Optional[str] = None
    faculty_name: Optional[str] = None
    tags: list[str] = []


# ──────────────────────────── Users ───────────────────────────────────────

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Role = Role.ASPIRANT
    career_id: Optional[str] = None
    semester: Optional[int] = Field(None, ge=1, le=20)


class UserResponse(BaseModel):
    user_id: str
    username: str
    display_name: Optional[str]
    avatar_url: Optional[str] = None
    role: Role
    career_id: Optional[str] = None
    semester: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ──────────────────────────── Profile resolution ──────────────────────────

class ProfileFound(BaseModel):
    outcome: Literal["ok"] = "ok"
    user: UserResponse
    # Always None for aspirants
    career: Optional[CareerSummary] = None


class ProfileError(BaseModel):
    outcome: Literal["error"] = "error"
    kind: ErrorKind
    code: str
    details: str
    # Present when the user row exists but a reference could not be resolved
    user: Optional[UserResponse] = None


ProfileResult = Annotated[Union[ProfileFound, ProfileError], Field(discriminator="outcome")]


# ──────────────────────────── Posts ───────────────────────────────────────

class PostCreate(BaseModel):
    user_id: str
    career_id: str
    post_type: PostType
    body: str = Field(..., min_length=1)


class EnrichedPost(BaseModel):
    """A post joined with author + career summaries and live counters."""
    post_id: str
    user_id: str
    career_id: str
    post_type: PostType
    body: str
    created_at: datetime
    # Author summary; None when the author row is gone
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    # Career summary; None when the career row is gone
    career_name: Optional[str] = None
    career_slug: Optional[str] = None
    comment_count: int = 0
    like_count: int = 0


class LikeRequest(BaseModel):
    user_id: str


class CommentCreate(BaseModel):
    user_id: str
    body: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    comment_id: str
    post_id: str
    user_id: str
    body: str
    created_at: datetime

    class Config:
        from_attributes = True


# ──────────────────────────── Feed ────────────────────────────────────────

class FeedPage(BaseModel):
    posts: list[EnrichedPost]
    take: int
    skip: int
    # Offset of the following window, or None once a short page was returned
    next_skip: Optional[int] = None


# ──────────────────────────── Menu ────────────────────────────────────────

class MenuError(BaseModel):
    source: Literal["profile", "saved_careers", "saved_posts"]
    kind: ErrorKind
    details: str


class MenuContext(BaseModel):
    user_id: str
    career_label: str
    # None when that sub-fetch failed; see `errors`
    saved_careers: Optional[list[CareerSummary]] = None
    saved_posts: Optional[list[EnrichedPost]] = None
    errors: list[MenuError] = []
