import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from user_registry.config import DatabaseSettings
from user_registry.core.migrations import run_migrations
from user_registry.main import create_application

DB_ENV = {
    "DB_HOST": "localhost",
    "DB_PORT": "5432",
    "DB_USER": "registry",
    "DB_PASSWORD": "registry",
    "DB_NAME": "testdb",
}


@pytest.fixture
def db_env():
    return dict(DB_ENV)


@pytest.fixture
def db_settings():
    return DatabaseSettings(host="localhost", port=5432, user="registry", password="registry", name="testdb")


@pytest.fixture
def raw_engine(tmp_path):
    """SQLite engine with an empty database (no migrations applied)."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture
def engine(raw_engine, db_settings):
    """SQLite engine migrated to head with the real migration scripts."""
    run_migrations(db_settings, engine=raw_engine)
    return raw_engine


@pytest.fixture
def client(engine):
    return TestClient(create_application(engine))
