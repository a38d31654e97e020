"""
Bookmark endpoints (mounted under /users):
  GET    /users/{id}/saved-careers               — saved careers, newest first
  PUT    /users/{id}/saved-careers/{career_id}   — save (idempotent)
  DELETE /users/{id}/saved-careers/{career_id}   — unsave (idempotent)
  GET    /users/{id}/saved-posts                 — saved posts, enriched
  PUT    /users/{id}/saved-posts/{post_id}       — save (idempotent)
  DELETE /users/{id}/saved-posts/{post_id}       — unsave (idempotent)

PUT/DELETE answer 204 whether or not the relation changed.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas import CareerSummary, EnrichedPost
from app.services import saved_careers, saved_posts

router = APIRouter()


@router.get("/{user_id}/saved-careers", response_model=list[CareerSummary])
async def list_saved_careers(user_id: str, db: AsyncSession = Depends(get_db)):
    return await saved_careers.list_saved_careers(db, user_id)


@router.put("/{user_id}/saved-careers/{career_id}", status_code=status.HTTP_204_NO_CONTENT)
async def save_career(user_id: str, career_id: str, db: AsyncSession = Depends(get_db)):
    await saved_careers.save_career(db, user_id, career_id)


@router.delete("/{user_id}/saved-careers/{career_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unsave_career(user_id: str, career_id: str, db: AsyncSession = Depends(get_db)):
    await saved_careers.unsave_career(db, user_id, career_id)


@router.get("/{user_id}/saved-posts", response_model=list[EnrichedPost])
async def list_saved_posts(user_id: str, db: AsyncSession = Depends(get_db)):
    return await saved_posts.list_saved_posts(db, user_id)


@router.put("/{user_id}/saved-posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def save_post(user_id: str, post_id: str, db: AsyncSession = Depends(get_db)):
    await saved_posts.save_post(db, user_id, post_id)


@router.delete("/{user_id}/saved-posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unsave_post(user_id: str, post_id: str, db: AsyncSession = Depends(get_db)):
    await saved_posts.unsave_post(db, user_id, post_id)
