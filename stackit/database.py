"""
StackIt Backend — Database Session Management
===============================================

What:  The async engine, the session factory and the per-request session dependency.

Transaction Boundary:
    One request = one session = one transaction. Multi-step forum rules
    (accepting an answer clears the previous acceptance, marks the new one,
    and flags the question) therefore commit together or not at all.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from stackit.config import settings


def _engine_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())

# Services return schemas built from rows after commit; keep attributes loaded
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base; its metadata drives Alembic and the test schema."""


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Per-request session. Commits when the handler returns, rolls back when
    it raises (including the 4xx StackItErrors), and the context manager
    hands the connection back to the pool either way.

    Services flush but never commit, so everything a handler does through
    this session lands in one transaction.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    await engine.dispose()
