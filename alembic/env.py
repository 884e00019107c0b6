"""
Alembic environment for the reference tables.

The database URL is never read from alembic.ini; it comes from
NEPAL_LOCATIONS_DATABASE_URL through nl_backend.config, so migrations run
against the same database the API and the loader use.
"""

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy.engine import Engine

from alembic import context
from nl_backend import models  # noqa: F401  (registers the tables on Base.metadata)
from nl_backend.config import get_database_config
from nl_backend.db import Base, get_engine

config = context.config

# Logging sections of alembic.ini, when run through the alembic CLI.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Provinces, districts, municipalities and wards; used by --autogenerate.
target_metadata = Base.metadata


def _get_url() -> str:
    """
    Resolve the database URL from the project configuration.

    Honours NEPAL_LOCATIONS_DATABASE_URL and falls back to the SQLite file
    in the repository root.
    """
    return get_database_config().database_url


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    No connection is opened; the DDL is rendered as SQL for the configured
    URL's dialect (useful for reviewing a migration before applying it).
    """
    context.configure(
        url=_get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode.

    Uses the engine built by nl_backend.db so connection arguments match
    the ones the application runs with.
    """
    connectable: Engine = get_engine()

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
