"""
Alembic Migration Environment
===============================

What:  Runs DevCamper migrations.
How:   Online runs use the application's own engine factory
       (devcamper.database.build_engine) so migrations see the same URL and
       pool settings as the API. Importing devcamper.models registers every
       table on Base.metadata for --autogenerate.

SQLite URLs run in batch mode so ALTER-style operations work there too.
"""

import asyncio
from logging.config import fileConfig

from alembic import context

from devcamper.config import Settings
from devcamper.database import Base, build_engine
import devcamper.models  # noqa: F401

alembic_config = context.config
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

settings = Settings()
target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=settings.database_url.startswith("sqlite"),
        **kwargs,
    )


def run_offline() -> None:
    """`alembic upgrade --sql`: print the DDL instead of executing it."""
    _configure(url=settings.database_url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    engine = build_engine(settings)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())
