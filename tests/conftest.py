import logging

import pytest
import yaml


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    orm_levels = {name: logging.getLogger(name).level for name in ("sqlalchemy.engine", "sqlalchemy.pool", "alembic")}
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    for name, orm_level in orm_levels.items():
        logging.getLogger(name).setLevel(orm_level)


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'game.db'}"


@pytest.fixture
def write_config(tmp_path):
    """Пишет YAML-конфиг и возвращает путь к нему"""

    def _write(mysql, level="info", log_file=None, path=None):
        path = path or tmp_path / "db.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "MySQL": mysql,
            "Logs": {
                "LogLevel": level,
                "LogFile": str(log_file or tmp_path / "logs" / "dbmig.log"),
            },
        }
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write
