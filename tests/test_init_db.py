import logging

import pytest
from sqlalchemy import create_engine, inspect

from db_migrate import init_db
from db_migrate.models import Player
from db_migrate.server_config import default_server_config


@pytest.fixture
def no_db(monkeypatch):
    calls = []

    def fake_init_mysql(config):
        calls.append(config)
        raise AssertionError("база данных не должна открываться")

    monkeypatch.setattr(init_db, "init_mysql", fake_init_mysql)
    return calls


def _player_columns(url):
    engine = create_engine(url)
    try:
        return {c["name"] for c in inspect(engine).get_columns("players")}
    finally:
        engine.dispose()


def test_parse_args_default():
    assert init_db.parse_args([]).config_file == "../etc/db.yaml"
    assert init_db.parse_args(["-f", "conf.yaml"]).config_file == "conf.yaml"


def test_missing_config_is_fatal(tmp_path, caplog, no_db):
    code = init_db.main(["-f", str(tmp_path / "missing.yaml")])

    assert code == 1
    assert no_db == []
    fatal = [r for r in caplog.records if r.levelno == logging.CRITICAL]
    assert len(fatal) == 1
    assert "load-config" in fatal[0].getMessage()
    assert "ConfigError" in fatal[0].getMessage()


def test_unknown_log_level_is_fatal(sqlite_url, write_config, caplog, no_db):
    path = write_config(sqlite_url, level="chatty")

    assert init_db.main(["-f", str(path)]) == 1
    assert no_db == []
    fatal = [r.getMessage() for r in caplog.records if r.levelno == logging.CRITICAL]
    assert any("configure-logs" in m and "LogSetupError" in m for m in fatal)


def test_creates_schema_on_empty_database(tmp_path, sqlite_url, write_config):
    log_file = tmp_path / "logs" / "dbmig.log"
    path = write_config(sqlite_url, log_file=log_file)

    assert init_db.main(["-f", str(path)]) == 0

    assert _player_columns(sqlite_url) == set(Player.__table__.columns.keys())
    content = log_file.read_text(encoding="utf-8")
    assert "Миграция завершена" in content
    assert str(default_server_config()) in content
    assert "успешно" in content


def test_rerun_is_idempotent(sqlite_url, write_config):
    path = write_config(sqlite_url)

    assert init_db.main(["-f", str(path)]) == 0
    columns = _player_columns(sqlite_url)
    assert init_db.run(str(path)) == {"Player": []}
    assert init_db.main(["-f", str(path)]) == 0
    assert _player_columns(sqlite_url) == columns


def test_default_config_path(tmp_path, sqlite_url, write_config, monkeypatch):
    write_config(sqlite_url, path=tmp_path / "etc" / "db.yaml")
    workdir = tmp_path / "bin"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    assert init_db.main([]) == 0
    assert _player_columns(sqlite_url) == set(Player.__table__.columns.keys())


def test_unreachable_database(tmp_path, write_config):
    log_file = tmp_path / "dbmig.log"
    path = write_config("user:pw@tcp(127.0.0.1:1)/gamedb", log_file=log_file)

    assert init_db.main(["-f", str(path)]) == 1

    content = log_file.read_text(encoding="utf-8")
    assert "CRITICAL" in content
    assert "MigrationError" in content
    assert "Player" in content


def test_bad_dsn_is_fatal(tmp_path, write_config, caplog):
    path = write_config("user:pw@udp(127.0.0.1:3306)/gamedb")

    assert init_db.main(["-f", str(path)]) == 1
    fatal = [r.getMessage() for r in caplog.records if r.levelno == logging.CRITICAL]
    assert any("open-db" in m and "DBOpenError" in m for m in fatal)


def test_success_writes_two_info_lines(sqlite_url, write_config, caplog):
    path = write_config(sqlite_url, level="info")

    assert init_db.main(["-f", str(path)]) == 0

    info = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
    assert len(info) == 2
    assert "Миграция завершена" in info[0]
    assert "успешно" in info[1]
