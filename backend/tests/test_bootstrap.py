# File: tests/test_bootstrap.py

"""
Startup sequence: config -> connection -> migrations -> serve.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from user_registry import main
from user_registry.config import REQUIRED_DB_VARS
from user_registry.core.migrations import MigrationError, run_migrations


@pytest.fixture
def served(monkeypatch):
    """Stub out logging setup and the HTTP server; records what would be served."""
    calls = []
    monkeypatch.setattr(main, "setup_logging", lambda: None)
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    return calls


@pytest.fixture
def full_env(monkeypatch, db_env):
    for name, value in db_env.items():
        monkeypatch.setenv(name, value)


@pytest.mark.parametrize("name", REQUIRED_DB_VARS)
def test_missing_variable_exits_before_serving(monkeypatch, served, full_env, name):
    monkeypatch.delenv(name)
    engines = []
    monkeypatch.setattr(main, "create_db_engine", lambda settings: engines.append(settings))

    with pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 1
    assert engines == []
    assert served == []


def test_unreachable_database_exits_before_serving(monkeypatch, served, full_env, tmp_path):
    unreachable = create_engine(f"sqlite:///{tmp_path / 'no' / 'such' / 'dir' / 'test.db'}")
    monkeypatch.setattr(main, "create_db_engine", lambda settings: unreachable)

    with pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 1
    assert served == []


def test_failed_migration_exits_before_serving(monkeypatch, served, full_env, raw_engine):
    def failing_migrations(settings):
        raise MigrationError("boom")

    monkeypatch.setattr(main, "create_db_engine", lambda settings: raw_engine)
    monkeypatch.setattr(main, "run_migrations", failing_migrations)

    with pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 1
    assert served == []


def test_startup_migrates_and_serves(monkeypatch, served, full_env, raw_engine):
    seen_settings = []

    def migrate_test_db(settings):
        seen_settings.append(settings)
        return run_migrations(settings, engine=raw_engine)

    monkeypatch.setattr(main, "create_db_engine", lambda settings: raw_engine)
    monkeypatch.setattr(main, "run_migrations", migrate_test_db)

    main.run()

    assert len(served) == 1
    assert seen_settings[0].name == "testdb"
    app, kwargs = served[0]
    assert kwargs["port"] == main.config.API_PORT

    client = TestClient(app)
    assert client.post("/api/user", json={"email": "a@b.com", "password": "secret"}).status_code == 200
    assert client.get("/api/users").json()[0]["email"] == "a@b.com"


def test_second_startup_on_migrated_database(monkeypatch, served, full_env, engine):
    monkeypatch.setattr(main, "create_db_engine", lambda settings: engine)
    monkeypatch.setattr(main, "run_migrations", lambda settings: run_migrations(settings, engine=engine))

    main.run()

    assert len(served) == 1
