# alembic/env.py
import asyncio
from logging.config import fileConfig

from alembic import context

from app.core.config import get_settings
from app.core.db import Base, Database
import app.models  # noqa: F401  (registers users, clinics, slots, appointments, followups)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = get_settings()
target_metadata = Base.metadata


def offline_url(url: str) -> str:
    # SQL rendering needs the dialect only, not the async driver
    return url.replace("+aiomysql", "+pymysql").replace("+aiosqlite", "")


def do_migrations(connection) -> None:
    # batch mode lets the same scripts run on SQLite, which cannot ALTER constraints
    context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)
    with context.begin_transaction():
        context.run_migrations()


def run_offline() -> None:
    context.configure(
        url=offline_url(settings.database.url),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    database = Database(settings.database)
    try:
        async with database.engine.connect() as connection:
            await connection.run_sync(do_migrations)
    finally:
        await database.dispose()


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())
