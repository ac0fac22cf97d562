"""Alembic environment for the otassess schema.

Migrations run synchronously over psycopg2 (``get_sync_url()``), even
though the application itself talks to Postgres through asyncpg.  Column
type changes are compared during autogenerate so a money column drifting
away from ``Numeric(12, 2)`` shows up in the generated revision.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from otassess_db.config import get_sync_url

# Importing the models package registers every table on Base.metadata.
from otassess_db.models import Base

config = context.config
config.set_main_option("sqlalchemy.url", get_sync_url())

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

CONFIGURE_OPTS = {
    "target_metadata": target_metadata,
    "compare_type": True,
    "compare_server_default": True,
}


def run_migrations_offline() -> None:
    """Write the migration SQL to stdout (``alembic upgrade --sql``)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **CONFIGURE_OPTS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **CONFIGURE_OPTS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
