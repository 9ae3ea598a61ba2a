"""
Schema migrations, applied with Alembic before the API starts serving.
"""

import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from user_registry.config import MIGRATIONS_DIR, DatabaseSettings
from user_registry.core.database import create_db_engine

logger = logging.getLogger(__name__)


class MigrationError(RuntimeError):
    """Pending migrations could not be applied."""


def build_alembic_config(
    connection: Optional[Connection] = None,
    script_location: Path = MIGRATIONS_DIR,
) -> Config:
    """
    Build an Alembic config without an alembic.ini file.

    :param connection: Connection that env.py should run the migrations on
    :param script_location: Directory with env.py and versions/
    """
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(script_location))
    if connection is not None:
        alembic_cfg.attributes["connection"] = connection
    return alembic_cfg


def run_migrations(
    settings: DatabaseSettings,
    *,
    engine: Optional[Engine] = None,
    script_location: Path = MIGRATIONS_DIR,
) -> str:
    """
    Apply every migration that has not been applied yet.

    Uses its own engine (separate from the request pool) unless one is passed in.
    Having nothing to apply counts as success.

    :param settings: Database settings
    :param engine: Engine to migrate instead of a new one built from ``settings``
    :param script_location: Migrations directory
    :return: Head revision the database is now at
    :raises MigrationError: if the migration scripts or the database fail
    """
    owns_engine = engine is None
    if owns_engine:
        engine = create_db_engine(settings, poolclass=NullPool)

    try:
        with engine.begin() as connection:
            alembic_cfg = build_alembic_config(connection, script_location)
            head = ScriptDirectory.from_config(alembic_cfg).get_current_head()
            current = MigrationContext.configure(connection).get_current_revision()

            if current == head:
                logger.info("No pending migrations, database is at revision %s", current)
                return head

            logger.info("Applying migrations: %s -> %s", current or "base", head)
            command.upgrade(alembic_cfg, "head")
    except (SQLAlchemyError, CommandError) as e:
        logger.error("Migration failed: %s", e, exc_info=True)
        raise MigrationError(f"An error occurred while running the migrations: {e}") from e
    finally:
        if owns_engine:
            engine.dispose()

    logger.info("Migrations ran successfully")
    return head


def downgrade_migrations(
    settings: DatabaseSettings,
    revision: str = "base",
    *,
    engine: Optional[Engine] = None,
    script_location: Path = MIGRATIONS_DIR,
) -> None:
    """Roll the schema back to ``revision`` (everything by default)."""
    owns_engine = engine is None
    if owns_engine:
        engine = create_db_engine(settings, poolclass=NullPool)

    try:
        with engine.begin() as connection:
            command.downgrade(build_alembic_config(connection, script_location), revision)
    except (SQLAlchemyError, CommandError) as e:
        logger.error("Downgrade failed: %s", e, exc_info=True)
        raise MigrationError(f"An error occurred while downgrading to {revision}: {e}") from e
    finally:
        if owns_engine:
            engine.dispose()

    logger.info("Database downgraded to %s", revision)
