"""
Alembic environment for the InterviewAI schema.

Run from ``interviewai/`` (where alembic.ini lives). The URL always comes
from ``settings.database_url`` so migrations and the API share one database.
SQLite runs in batch mode because it cannot ALTER most constraints in place.
"""
import sys
from logging.config import fileConfig
from pathlib import Path

# interviewai/alembic/env.py -> repository root on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from alembic import context
from sqlalchemy import create_engine, pool

from interviewai.app.core.config import settings
from interviewai.app.db.base import Base
import interviewai.app.models  # noqa: F401  registers users, resumes, sessions, questions

config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL for ``alembic upgrade --sql`` without a connection."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = config.get_main_option("sqlalchemy.url")
    connectable = create_engine(url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
