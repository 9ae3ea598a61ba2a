import manage
from user_registry.config import REQUIRED_DB_VARS


def test_command_without_config_fails(monkeypatch, capsys):
    monkeypatch.setattr(manage, "setup_logging", lambda: None)
    for name in REQUIRED_DB_VARS:
        monkeypatch.delenv(name, raising=False)

    assert manage.main(["migrate"]) == 1
    assert "DB_HOST" in capsys.readouterr().err


def test_check_db_lists_users(monkeypatch, capsys, engine, db_settings):
    with engine.begin() as conn:
        conn.exec_driver_sql("INSERT INTO users (email, password) VALUES ('a@b.com', 'secret')")
    monkeypatch.setattr(manage, "create_db_engine", lambda settings: engine)

    manage.check_db(db_settings)

    out = capsys.readouterr().out
    assert "Users in database: 1" in out
    assert "a@b.com" in out
    assert "secret" not in out


def test_reset_db_needs_confirmation(monkeypatch, capsys, db_settings):
    calls = []
    monkeypatch.setattr("builtins.input", lambda prompt: "no")
    monkeypatch.setattr(manage, "downgrade_migrations", lambda *args, **kwargs: calls.append("down"))
    monkeypatch.setattr(manage, "run_migrations", lambda *args, **kwargs: calls.append("up"))

    manage.reset_db(db_settings)

    assert calls == []
    assert "Cancelled" in capsys.readouterr().out
