"""
Database connection setup.
"""

import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from user_registry.config import DatabaseSettings

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def build_database_url(settings: DatabaseSettings) -> URL:
    """Assemble the PostgreSQL URL from the loaded settings"""
    return URL.create(
        "postgresql+psycopg",
        username=settings.user,
        password=settings.password,
        host=settings.host,
        port=settings.port,
        database=settings.name,
        query={"sslmode": settings.sslmode},
    )


def create_db_engine(settings: DatabaseSettings, **kwargs) -> Engine:
    """
    Create the pooled engine used by the request handlers.

    :param settings: Database settings
    :param kwargs: Extra arguments for ``create_engine`` (e.g. ``poolclass``)
    :return: SQLAlchemy engine
    """
    url = build_database_url(settings)
    logger.info("Database: %s", url.render_as_string(hide_password=True))
    return create_engine(url, pool_pre_ping=True, **kwargs)


def check_connection(engine: Engine) -> None:
    """Open one connection and run a trivial query; raises on failure."""
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    Dependency that yields a DB session for an endpoint.

    Usage:
        @app.post("/api/user")
        def register(db: Session = Depends(get_db)):
            ...
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
