"""
DevCamper Backend — Database Engine and Session Management
============================================================

What:  Async SQLAlchemy engine/session factory builders, the declarative
       Base, and the per-request session dependency.
How:   build_engine() creates the engine from Settings; the application
       context owns the engine and its session factory. get_db_session()
       pulls the factory from the context attached to the running app.
When:  Engine is created once per application (create_app); sessions are
       created per request.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from Settings for server
    databases. SQLite URLs (tests, local experiments) use SQLAlchemy's
    default pool for that dialect and skip the sizing arguments.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from devcamper.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, used by Alembic migrations and by the
    test suite's create_all().
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for settings.database_url."""
    url = make_url(settings.database_url)
    options = {"echo": settings.log_level == "DEBUG"}

    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )

    return create_async_engine(url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: objects stay readable after the request commits
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def ping(engine: AsyncEngine) -> None:
    """Run SELECT 1; raises whatever the driver raises when unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the context's factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the exception handlers
        5. Always: closes the session (returns connection to pool)

    Services flush explicitly after writes so constraint violations surface
    inside the handler rather than at commit time.
    """
    factory = request.app.state.context.session_factory
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
