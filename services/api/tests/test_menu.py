from sqlalchemy.exc import ProgrammingError

from app.errors import ErrorKind, StoreUnavailableError
from app.models import Role
from app.services import menu
from app.services.menu import ASPIRANT_LABEL, CAREER_ERROR_LABEL, get_menu_context
from app.services.saved_careers import save_career
from app.services.saved_posts import save_post

from factories import make_career, make_post, make_user


async def _seed_student(db):
    career = await make_career(db, "civil-engineering", name="Civil Engineering")
    student = await make_user(db, "luis", Role.STUDENT, career.career_id, semester=3)
    post = await make_post(db, student, career.career_id)
    await save_career(db, student.user_id, career.career_id)
    await save_post(db, student.user_id, post.post_id)
    await db.commit()
    return career, student, post


async def test_student_menu(db, session_factory):
    career, student, post = await _seed_student(db)

    context = await get_menu_context(session_factory, student.user_id)

    assert context.career_label == "Civil Engineering"
    assert [c.career_id for c in context.saved_careers] == [career.career_id]
    assert [p.post_id for p in context.saved_posts] == [post.post_id]
    assert context.errors == []


async def test_aspirant_menu_label(db, session_factory):
    aspirant = await make_user(db, "elena")
    await db.commit()

    context = await get_menu_context(session_factory, aspirant.user_id)

    assert context.career_label == ASPIRANT_LABEL
    assert context.saved_careers == []
    assert context.saved_posts == []


async def test_orphaned_career_degrades_label_only(db, session_factory):
    career, student, post = await _seed_student(db)
    await db.delete(career)
    await db.commit()

    context = await get_menu_context(session_factory, student.user_id)

    assert context.career_label == CAREER_ERROR_LABEL
    assert [p.post_id for p in context.saved_posts] == [post.post_id]
    # Saved career row now dangles and is skipped
    assert context.saved_careers == []
    assert [e.kind for e in context.errors] == [ErrorKind.ORPHANED_REFERENCE]


async def test_profile_failure_does_not_block_saved_lists(db, session_factory, monkeypatch):
    career, student, post = await _seed_student(db)

    async def unavailable(session, user_id):
        raise StoreUnavailableError("Database unavailable during get_user_data")

    monkeypatch.setattr(menu, "get_user_data", unavailable)

    context = await get_menu_context(session_factory, student.user_id)

    assert context.career_label == CAREER_ERROR_LABEL
    assert len(context.saved_careers) == 1
    assert len(context.saved_posts) == 1
    assert context.errors[0].source == "profile"
    assert context.errors[0].kind == ErrorKind.STORE_UNAVAILABLE


async def test_failed_saved_list_is_blank_but_rest_returned(db, session_factory, monkeypatch):
    career, student, post = await _seed_student(db)

    async def unavailable(session, user_id):
        raise StoreUnavailableError("Database unavailable during list_saved_posts")

    monkeypatch.setattr(menu, "list_saved_posts", unavailable)

    context = await get_menu_context(session_factory, student.user_id)

    assert context.career_label == "Civil Engineering"
    assert context.saved_posts is None
    assert len(context.saved_careers) == 1
    assert [e.source for e in context.errors] == ["saved_posts"]


async def test_unexpected_profile_error_degrades_label_only(db, session_factory, monkeypatch):
    career, student, post = await _seed_student(db)

    async def broken_query(session, user_id):
        raise ProgrammingError("SELECT career_label FROM users", {}, Exception("no such column"))

    monkeypatch.setattr(menu, "get_user_data", broken_query)

    context = await get_menu_context(session_factory, student.user_id)

    assert context.career_label == CAREER_ERROR_LABEL
    assert [c.career_id for c in context.saved_careers] == [career.career_id]
    assert [p.post_id for p in context.saved_posts] == [post.post_id]
    assert [(e.source, e.kind) for e in context.errors] == [("profile", ErrorKind.STORE_UNAVAILABLE)]
