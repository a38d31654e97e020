"""
SQLAlchemy ORM models for TiDB.

Tables:
  faculties     — academic faculties grouping careers
  careers       — career catalog (slug is the URL key)
  users         — community members; students carry career + semester
  posts         — testimonies and questions, each tied to a career
  comments      — replies on posts (only counted by this service)
  post_likes    — user × post endorsement
  saved_posts   — user × post bookmark (distinct from a like)
  saved_careers — user × career bookmark

Social counters are never stored: they are COUNT()ed from comments and
post_likes whenever a post is read.
"""
import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Role(str, enum.Enum):
    STUDENT = "STUDENT"
    ASPIRANT = "ASPIRANT"


class PostType(str, enum.Enum):
    TESTIMONY = "TESTIMONY"
    QUESTION = "QUESTION"


class Faculty(Base):
    __tablename__ = "faculties"

    faculty_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)


class Career(Base):
    __tablename__ = "careers"

    career_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    faculty_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("faculties.faculty_id")
    )
    # Serialised list[str]
    tags: Mapped[Optional[list]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(255))
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500))
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Role.ASPIRANT.value
    )  # 'STUDENT' | 'ASPIRANT'
    # Both set iff role == STUDENT; enforced on the create path, not here
    career_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("careers.career_id")
    )
    semester: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )


class Post(Base):
    __tablename__ = "posts"

    post_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), nullable=False
    )
    career_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("careers.career_id"), nullable=False
    )
    post_type: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # 'TESTIMONY' | 'QUESTION'
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_posts_user", "user_id"),
        Index("idx_posts_career", "career_id"),
        # Feed order: created_at DESC, post_id DESC
        Index("idx_posts_created", "created_at", "post_id"),
    )


class Comment(Base):
    __tablename__ = "comments"

    comment_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("posts.post_id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), nullable=False
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("idx_comments_post", "post_id"),)


class PostLike(Base):
    __tablename__ = "post_likes"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), primary_key=True
    )
    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("posts.post_id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("idx_post_likes_post", "post_id"),)


class SavedPost(Base):
    __tablename__ = "saved_posts"

    # Autoincrement id doubles as the save-order tie breaker
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), nullable=False
    )
    post_id: Mapped[str] = mapped_column(String(36), nullable=False)
    saved_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_saved_posts_user_post"),
        Index("idx_saved_posts_user", "user_id", "saved_at"),
    )


class SavedCareer(Base):
    __tablename__ = "saved_careers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), nullable=False
    )
    career_id: Mapped[str] = mapped_column(String(36), nullable=False)
    saved_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "career_id", name="uq_saved_careers_user_career"),
        Index("idx_saved_careers_user", "user_id", "saved_at"),
    )
