"""
Profile resolution: user row + (for students) the career they are enrolled in.

The result is a tagged union rather than an exception because display
surfaces must keep rendering when the career cannot be resolved:

  ProfileFound(user, career)          — career is None for aspirants
  ProfileError(kind, code, user?)     — USER_NOT_FOUND (no user payload) or
                                        CAREER_NOT_FOUND (user payload kept)
"""
import logging
from typing import Optional

from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import store_operation
from app.errors import CAREER_NOT_FOUND, USER_NOT_FOUND, ErrorKind, NotFoundError
from app.models import Career, Faculty, Role, User
from app.schemas import CareerSummary, ProfileError, ProfileFound, ProfileResult, UserResponse
from app.telemetry import PROFILE_RESOLUTIONS_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


async def fetch_career_summary(db: AsyncSession, career_id: str) -> Optional[CareerSummary]:
    rows = await db.execute(
        select(Career, Faculty.name.label("faculty_name"))
        .outerjoin(Faculty, Faculty.faculty_id == Career.faculty_id)
        .where(Career.career_id == career_id)
    )
    row = rows.first()
    if row is None:
        return None
    return career_summary(row.Career, row.faculty_name)


def career_summary(career: Career, faculty_name: Optional[str]) -> CareerSummary:
    return CareerSummary(
        career_id=career.career_id,
        name=career.name,
        slug=career.slug,
        faculty_id=career.faculty_id,
        faculty_name=faculty_name,
        tags=list(career.tags or []),
    )


async def require_user(db: AsyncSession, user_id: str) -> User:
    """Write paths fail loudly on unknown users instead of storing a phantom row."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found", code=USER_NOT_FOUND)
    return user


@store_operation
async def get_user_data(db: AsyncSession, user_id: str) -> ProfileResult:
    with tracer.start_as_current_span("get_user_data") as span:
        span.set_attribute("user.id", user_id)

        user = await db.get(User, user_id)
        if user is None:
            PROFILE_RESOLUTIONS_TOTAL.labels(outcome=USER_NOT_FOUND).inc()
            return ProfileError(
                kind=ErrorKind.NOT_FOUND,
                code=USER_NOT_FOUND,
                details=f"User {user_id} not found",
            )

        payload = UserResponse.model_validate(user)

        # Aspirants never expose a career, stale reference or not
        if user.role == Role.ASPIRANT.value or user.career_id is None:
            PROFILE_RESOLUTIONS_TOTAL.labels(outcome="ok").inc()
            return ProfileFound(user=payload, career=None)

        career = await fetch_career_summary(db, user.career_id)
        if career is None:
            logger.warning(
                "User %s references missing career %s", user_id, user.career_id
            )
            PROFILE_RESOLUTIONS_TOTAL.labels(outcome=CAREER_NOT_FOUND).inc()
            return ProfileError(
                kind=ErrorKind.ORPHANED_REFERENCE,
                code=CAREER_NOT_FOUND,
                details=f"Career {user.career_id} referenced by user {user_id} not found",
                user=payload,
            )

        PROFILE_RESOLUTIONS_TOTAL.labels(outcome="ok").inc()
        return ProfileFound(user=payload, career=career)


@store_operation
async def get_user_by_username(db: AsyncSession, username: str) -> ProfileResult:
    """Profile pages are addressed by username; resolve it, then delegate."""
    rows = await db.execute(select(User.user_id).where(User.username == username))
    user_id = rows.scalar_one_or_none()
    if user_id is None:
        PROFILE_RESOLUTIONS_TOTAL.labels(outcome=USER_NOT_FOUND).inc()
        return ProfileError(
            kind=ErrorKind.NOT_FOUND,
            code=USER_NOT_FOUND,
            details=f"User '{username}' not found",
        )
    return await get_user_data(db, user_id)
