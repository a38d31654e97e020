"""
Career catalog endpoints:
  GET  /careers/           — list careers (optionally one faculty)
  GET  /careers/{slug}     — single career by slug
  POST /careers/           — add a career; the faculty is created on first use
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import Career, Faculty
from app.schemas import CareerCreate, CareerSummary
from app.services.profiles import career_summary

logger = logging.getLogger(__name__)
router = APIRouter()


def _catalog_query():
    return select(Career, Faculty.name.label("faculty_name")).outerjoin(
        Faculty, Faculty.faculty_id == Career.faculty_id
    )


@router.get("/", response_model=list[CareerSummary])
async def list_careers(
    faculty: Optional[str] = Query(None, description="Faculty name"),
    db: AsyncSession = Depends(get_db),
):
    query = _catalog_query()
    if faculty:
        query = query.where(Faculty.name == faculty)
    rows = await db.execute(query.order_by(Career.name, Career.slug))
    return [career_summary(row.Career, row.faculty_name) for row in rows.all()]


@router.get("/{slug}", response_model=CareerSummary)
async def get_career(slug: str, db: AsyncSession = Depends(get_db)):
    rows = await db.execute(_catalog_query().where(Career.slug == slug))
    row = rows.first()
    if row is None:
        raise HTTPException(status_code=404, detail="Career not found")
    return career_summary(row.Career, row.faculty_name)


@router.post("/", response_model=CareerSummary, status_code=status.HTTP_201_CREATED)
async def create_career(body: CareerCreate, db: AsyncSession = Depends(get_db)):
    existing = await db.execute(select(Career).where(Career.slug == body.slug))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Slug '{body.slug}' already taken",
        )

    faculty = None
    if body.faculty_name:
        found = await db.execute(select(Faculty).where(Faculty.name == body.faculty_name))
        faculty = found.scalar_one_or_none()
        if faculty is None:
            faculty = Faculty(name=body.faculty_name)
            db.add(faculty)
            await db.flush()
            logger.info("Created faculty %s", faculty.name)

    career = Career(
        name=body.name,
        slug=body.slug,
        faculty_id=faculty.faculty_id if faculty else None,
        tags=body.tags,
    )
    db.add(career)
    await db.flush()

    logger.info("Created career %s (id=%s)", career.slug, career.career_id)
    return career_summary(career, faculty.name if faculty else None)
