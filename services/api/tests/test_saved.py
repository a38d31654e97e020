import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.errors import (
    CAREER_NOT_FOUND,
    POST_NOT_FOUND,
    USER_NOT_FOUND,
    NotFoundError,
    StoreUnavailableError,
)
from app.services.saved_careers import list_saved_careers, save_career, unsave_career
from app.services.saved_posts import list_saved_posts, save_post, unsave_post

from factories import add_like, make_career, make_post, make_user


@pytest.fixture
async def career(db):
    return await make_career(db, "software-engineering", faculty="Engineering", tags=["code"])


@pytest.fixture
async def user(db):
    return await make_user(db, "u1")


# ──────────────────────────── Saved posts ─────────────────────────────────

async def test_repeated_save_lists_post_once(db, career, user):
    post = await make_post(db, user, career.career_id)

    first = await save_post(db, user.user_id, post.post_id)
    again = [await save_post(db, user.user_id, post.post_id) for _ in range(3)]
    saved = await list_saved_posts(db, user.user_id)

    assert first is True
    assert again == [False, False, False]
    assert [p.post_id for p in saved] == [post.post_id]


async def test_save_two_unsave_first(db, career, user):
    p1 = await make_post(db, user, career.career_id, minutes=0)
    p2 = await make_post(db, user, career.career_id, minutes=1)
    await save_post(db, user.user_id, p1.post_id)
    await save_post(db, user.user_id, p2.post_id)

    assert await unsave_post(db, user.user_id, p1.post_id) is True
    assert [p.post_id for p in await list_saved_posts(db, user.user_id)] == [p2.post_id]


async def test_unsave_of_unsaved_post_is_a_noop(db, career, user):
    kept = await make_post(db, user, career.career_id, minutes=0)
    other = await make_post(db, user, career.career_id, minutes=1)
    await save_post(db, user.user_id, kept.post_id)

    assert await unsave_post(db, user.user_id, other.post_id) is False
    assert [p.post_id for p in await list_saved_posts(db, user.user_id)] == [kept.post_id]


async def test_saved_posts_ordered_by_save_time_not_post_time(db, career, user):
    older = await make_post(db, user, career.career_id, minutes=0)
    newer = await make_post(db, user, career.career_id, minutes=30)
    await save_post(db, user.user_id, newer.post_id)
    await save_post(db, user.user_id, older.post_id)

    saved = await list_saved_posts(db, user.user_id)

    assert [p.post_id for p in saved] == [older.post_id, newer.post_id]


async def test_saving_missing_post_fails(db, user):
    with pytest.raises(NotFoundError) as excinfo:
        await save_post(db, user.user_id, "no-such-post")
    assert excinfo.value.code == POST_NOT_FOUND


async def test_saving_post_for_unknown_user_fails(db, career, user):
    post = await make_post(db, user, career.career_id)

    with pytest.raises(NotFoundError) as excinfo:
        await save_post(db, "no-such-user", post.post_id)

    assert excinfo.value.code == USER_NOT_FOUND
    assert await list_saved_posts(db, "no-such-user") == []


async def test_deleted_post_drops_out_of_saved_list(db, career, user):
    gone = await make_post(db, user, career.career_id, minutes=0)
    kept = await make_post(db, user, career.career_id, minutes=1)
    await save_post(db, user.user_id, gone.post_id)
    await save_post(db, user.user_id, kept.post_id)
    await db.delete(gone)
    await db.flush()

    saved = await list_saved_posts(db, user.user_id)

    assert [p.post_id for p in saved] == [kept.post_id]


async def test_saved_posts_are_enriched(db, career, user):
    fan = await make_user(db, "fan")
    post = await make_post(db, user, career.career_id)
    await add_like(db, post, fan)
    await save_post(db, fan.user_id, post.post_id)

    (saved,) = await list_saved_posts(db, fan.user_id)

    assert saved.like_count == 1
    assert saved.comment_count == 0
    assert saved.username == "u1"
    assert saved.career_name == "Software Engineering"


async def test_saved_sets_are_per_user(db, career, user):
    other = await make_user(db, "u2")
    post = await make_post(db, user, career.career_id)
    await save_post(db, user.user_id, post.post_id)

    assert await list_saved_posts(db, other.user_id) == []


# ──────────────────────────── Saved careers ───────────────────────────────

async def test_saved_careers_empty_for_new_user(db, user):
    assert await list_saved_careers(db, user.user_id) == []


async def test_save_and_unsave_career_idempotently(db, career, user):
    law = await make_career(db, "law")

    assert await save_career(db, user.user_id, career.career_id) is True
    assert await save_career(db, user.user_id, career.career_id) is False
    await save_career(db, user.user_id, law.career_id)

    saved = await list_saved_careers(db, user.user_id)
    assert [c.slug for c in saved] == ["law", "software-engineering"]
    engineering = saved[1]
    assert engineering.faculty_name == "Engineering"
    assert engineering.tags == ["code"]

    assert await unsave_career(db, user.user_id, law.career_id) is True
    assert await unsave_career(db, user.user_id, law.career_id) is False
    assert [c.slug for c in await list_saved_careers(db, user.user_id)] == ["software-engineering"]


async def test_saving_missing_career_fails(db, user):
    with pytest.raises(NotFoundError) as excinfo:
        await save_career(db, user.user_id, "no-such-career")
    assert excinfo.value.code == CAREER_NOT_FOUND


async def test_saving_career_for_unknown_user_fails(db, career):
    with pytest.raises(NotFoundError) as excinfo:
        await save_career(db, "no-such-user", career.career_id)

    assert excinfo.value.code == USER_NOT_FOUND
    assert await list_saved_careers(db, "no-such-user") == []


# ──────────────────────────── Concurrency ─────────────────────────────────

async def test_concurrent_saves_of_same_pair_store_one_row(db, session_factory, career, user):
    post = await make_post(db, user, career.career_id)
    await db.commit()

    async def save_in_own_session(save, target_id):
        async with session_factory() as session:
            created = await save(session, user.user_id, target_id)
            await session.commit()
            return created

    career_results = await asyncio.gather(
        save_in_own_session(save_career, career.career_id),
        save_in_own_session(save_career, career.career_id),
    )
    post_results = await asyncio.gather(
        save_in_own_session(save_post, post.post_id),
        save_in_own_session(save_post, post.post_id),
    )

    assert sorted(career_results) == [False, True]
    assert sorted(post_results) == [False, True]
    assert [c.career_id for c in await list_saved_careers(db, user.user_id)] == [career.career_id]
    assert [p.post_id for p in await list_saved_posts(db, user.user_id)] == [post.post_id]


# ──────────────────────────── Store failures ──────────────────────────────

async def test_unreachable_store_surfaces_as_store_unavailable(tmp_path):
    broken = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'x.db'}")
    factory = async_sessionmaker(bind=broken, class_=AsyncSession)
    try:
        async with factory() as session:
            with pytest.raises(StoreUnavailableError):
                await list_saved_posts(session, "u1")
    finally:
        await broken.dispose()
