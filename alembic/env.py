"""Alembic environment for the posada schema (roles, users, sessions)."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from posada.core.config import get_config
from posada.models import Base

alembic_config = context.config

# alembic.ini carries no logging sections; only configure logging when a full ini is supplied.
if alembic_config.config_file_name is not None and alembic_config.file_config.has_section(
    "formatters"
):
    fileConfig(alembic_config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    """URL passed in by posada.server, or the db_source of the POSADA_ENV config record."""
    return alembic_config.get_main_option("sqlalchemy.url") or get_config().db_source


def run_migrations_offline() -> None:
    context.configure(
        url=database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(database_url(), poolclass=NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
