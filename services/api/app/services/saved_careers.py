"""Bookmarked careers (user × career set)."""
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import insert_ignore, store_operation
from app.errors import CAREER_NOT_FOUND, NotFoundError
from app.models import Career, Faculty, SavedCareer
from app.schemas import CareerSummary
from app.services.profiles import career_summary, require_user
from app.telemetry import SAVED_TOGGLES_TOTAL

logger = logging.getLogger(__name__)


@store_operation
async def list_saved_careers(db: AsyncSession, user_id: str) -> list[CareerSummary]:
    """Most recently saved first. Rows whose career was deleted are skipped."""
    rows = await db.execute(
        select(Career, Faculty.name.label("faculty_name"))
        .join(SavedCareer, SavedCareer.career_id == Career.career_id)
        .outerjoin(Faculty, Faculty.faculty_id == Career.faculty_id)
        .where(SavedCareer.user_id == user_id)
        .order_by(SavedCareer.saved_at.desc(), SavedCareer.id.desc())
    )
    return [career_summary(row.Career, row.faculty_name) for row in rows.all()]


@store_operation
async def save_career(db: AsyncSession, user_id: str, career_id: str) -> bool:
    """
    Add the career to the user's saved set. Returns False when it was
    already there; that is still a success.
    """
    await require_user(db, user_id)
    if await db.get(Career, career_id) is None:
        raise NotFoundError(f"Career {career_id} not found", code=CAREER_NOT_FOUND)

    result = await db.execute(
        insert_ignore(SavedCareer, user_id=user_id, career_id=career_id)
    )
    created = result.rowcount > 0
    SAVED_TOGGLES_TOTAL.labels(resource="career", action="save", changed=str(created)).inc()
    logger.info("User %s saved career %s (new=%s)", user_id, career_id, created)
    return created


@store_operation
async def unsave_career(db: AsyncSession, user_id: str, career_id: str) -> bool:
    result = await db.execute(
        delete(SavedCareer).where(
            SavedCareer.user_id == user_id,
            SavedCareer.career_id == career_id,
        )
    )
    removed = result.rowcount > 0
    SAVED_TOGGLES_TOTAL.labels(resource="career", action="unsave", changed=str(removed)).inc()
    logger.info("User %s unsaved career %s (removed=%s)", user_id, career_id, removed)
    return removed
