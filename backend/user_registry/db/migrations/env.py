"""Alembic environment.

The app passes its own connection through ``config.attributes["connection"]``.
Plain ``alembic`` CLI runs fall back to the DB_* environment variables.
"""

from alembic import context
from sqlalchemy.pool import NullPool

from user_registry.config import load_database_settings
from user_registry.core.database import Base, build_database_url, create_db_engine
from user_registry.core import models  # noqa: F401

config = context.config
target_metadata = Base.metadata


def run_migrations_offline():
    url = build_database_url(load_database_settings())
    context.configure(
        url=url.render_as_string(hide_password=False),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connection = config.attributes.get("connection")

    if connection is not None:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()
        return

    engine = create_db_engine(load_database_settings(), poolclass=NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=target_metadata)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
