"""
Async SQLAlchemy engine and per-request sessions for the orders store.

DATABASE_URL may be given in its sync form (sqlite:///, postgresql://,
postgres://); it is rewritten to the matching async driver. Tables are
created on startup by init_db(); there are no migrations.
"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from config import settings

logger = logging.getLogger(__name__)

_ASYNC_DRIVERS = (
    ("sqlite:///", "sqlite+aiosqlite:///"),
    ("postgresql://", "postgresql+asyncpg://"),
    ("postgres://", "postgresql+asyncpg://"),
)


class Base(DeclarativeBase):
    pass


def async_database_url(url: str) -> str:
    """Swap a sync driver prefix for its async counterpart; other URLs pass through."""
    for sync_prefix, async_prefix in _ASYNC_DRIVERS:
        if url.startswith(sync_prefix):
            return async_prefix + url[len(sync_prefix):]
    return url


_url = async_database_url(settings.database_url)

engine = create_async_engine(
    _url,
    echo=False,
    # aiosqlite connections hop threads inside the driver
    connect_args={"check_same_thread": False} if _url.startswith("sqlite") else {},
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    """Create the users / organizations / orders tables if missing."""
    import db_models  # noqa: F401  (registers tables on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Tables ready on {engine.url.render_as_string(hide_password=True)}")


async def ping_db(db: AsyncSession) -> bool:
    await db.execute(text("SELECT 1"))
    return True


async def get_db():
    """FastAPI dependency: one AsyncSession per request, rolled back if the handler raises."""
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
