"""
Async SQLAlchemy engine + session factory for TiDB (MySQL-protocol).

TiDB is wire-compatible with MySQL 5.7, so we use the aiomysql driver.
The engine is created once at startup and reused across all requests.

Two helpers shared by every service module live here as well:
  • store_operation — maps driver/connection failures to StoreUnavailableError
  • insert_ignore   — single-statement idempotent insert for set-like
                      relation tables (saved posts, saved careers, likes)
"""
import functools
import logging

from sqlalchemy import insert
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.errors import StoreUnavailableError
from app.telemetry import STORE_ERRORS_TOTAL

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    options = {"pool_pre_ping": True, "echo": False}
    # SQLite pools do not take sizing arguments
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    return options


engine = create_async_engine(settings.sqlalchemy_url, **_engine_options(settings.sqlalchemy_url))

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def init_db() -> None:
    """Create all tables if they don't exist (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def get_db():
    """FastAPI dependency that yields an async DB session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker:
    """FastAPI dependency for handlers that open several independent sessions."""
    return AsyncSessionLocal


def store_operation(func):
    """
    Wrap an async service call so connection-level failures surface as
    StoreUnavailableError. Nothing is retried here.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            STORE_ERRORS_TOTAL.labels(operation=func.__name__).inc()
            logger.error("Store unavailable during %s: %s", func.__name__, exc)
            raise StoreUnavailableError(
                f"Database unavailable during {func.__name__}"
            ) from exc

    return wrapper


def insert_ignore(model, **values):
    """
    INSERT that silently skips rows violating a unique constraint.
    The relation's unique key is the source of truth for set membership,
    so a duplicate is a no-op rather than a conflict. IGNORE also hides FK
    failures, so callers verify the referenced rows exist first.
    """
    return (
        insert(model)
        .values(**values)
        .prefix_with("IGNORE", dialect="mysql")
        .prefix_with("IGNORE", dialect="mariadb")
        .prefix_with("OR IGNORE", dialect="sqlite")
    )
