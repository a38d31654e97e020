"""
User menu aggregation: career label + saved careers + saved posts.

Owns no state. The three sub-fetches are independent, each gets its own
session and they run concurrently; a failure in one only blanks its own part
of the response.
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.errors import CoreError, ErrorKind
from app.models import Role
from app.schemas import MenuContext, MenuError, ProfileFound, ProfileResult
from app.services.profiles import get_user_data
from app.services.saved_careers import list_saved_careers
from app.services.saved_posts import list_saved_posts

logger = logging.getLogger(__name__)

ASPIRANT_LABEL = "Aspirant"
NO_CAREER_LABEL = "No career specified"
CAREER_ERROR_LABEL = "Error loading career"


def career_label(result: ProfileResult) -> str:
    if not isinstance(result, ProfileFound):
        return CAREER_ERROR_LABEL
    if result.user.role == Role.ASPIRANT:
        return ASPIRANT_LABEL
    if result.career is None:
        return NO_CAREER_LABEL
    return result.career.name


def _menu_error(source: str, user_id: str, exc: BaseException) -> MenuError:
    if isinstance(exc, CoreError):
        logger.warning("Menu %s fetch failed for %s: %s", source, user_id, exc)
        return MenuError(source=source, kind=exc.kind, details=exc.details)
    logger.error("Menu %s fetch crashed for %s", source, user_id, exc_info=exc)
    # Untranslated driver errors still count against the store
    return MenuError(
        source=source,
        kind=ErrorKind.STORE_UNAVAILABLE,
        details=f"{type(exc).__name__}: {exc}",
    )


async def get_menu_context(session_factory: async_sessionmaker, user_id: str) -> MenuContext:
    async def run(operation):
        async with session_factory() as session:
            return await operation(session, user_id)

    profile, careers, posts = await asyncio.gather(
        run(get_user_data),
        run(list_saved_careers),
        run(list_saved_posts),
        return_exceptions=True,
    )
    for result in (profile, careers, posts):
        # Cancellation is not a fetch failure
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result

    errors: list[MenuError] = []

    if isinstance(profile, Exception):
        errors.append(_menu_error("profile", user_id, profile))
        label = CAREER_ERROR_LABEL
    else:
        label = career_label(profile)
        if not isinstance(profile, ProfileFound):
            errors.append(MenuError(source="profile", kind=profile.kind, details=profile.details))

    if isinstance(careers, Exception):
        errors.append(_menu_error("saved_careers", user_id, careers))
        careers = None

    if isinstance(posts, Exception):
        errors.append(_menu_error("saved_posts", user_id, posts))
        posts = None

    return MenuContext(
        user_id=user_id,
        career_label=label,
        saved_careers=careers,
        saved_posts=posts,
        errors=errors,
    )
