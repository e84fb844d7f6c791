"""
Workforce Hub – Async SQLAlchemy engine, session factory, and declarative base.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from workforce.config import settings

IS_SQLITE = settings.DATABASE_URL.startswith("sqlite")

# ── Engine ──
engine_kwargs = {
    "echo": settings.DEBUG,
    "future": True,
}

if IS_SQLITE:
    # aiosqlite connections belong to the event loop that opened them,
    # so never hand a pooled one to another loop.
    engine_kwargs["poolclass"] = NullPool
elif "postgresql" in settings.DATABASE_URL:
    # PgBouncer in transaction mode cannot use prepared statement caching.
    engine_kwargs["connect_args"] = {"statement_cache_size": 0}

engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)


if IS_SQLITE:
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# ── Session factory ──
async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Declarative base ──
class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


async def create_tables() -> None:
    """Create any missing tables for the registered models."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Dependency for FastAPI routes ──
async def get_db() -> AsyncSession:  # type: ignore[misc]
    """
    Yield the request's session. Whatever the handler left pending is
    committed on success and rolled back if the handler raised.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
