"""
Скрипт для инициализации базы данных.
Запускается один раз при деплое, до старта игровых серверов:
создаёт недостающие таблицы и колонки, ничего не удаляет.

    db-migrate -f ../etc/db.yaml
"""
import argparse
import logging
import sys

from db_migrate.config import DEFAULT_CONFIG_FILE, load_config
from db_migrate.database import init_mysql
from db_migrate.errors import MigrateError
from db_migrate.logs import setup_logging
from db_migrate.migrator import auto_migrate
from db_migrate.registry import get_entities
from db_migrate.server_config import default_server_config

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="db-migrate", description="Миграция схемы базы данных")
    parser.add_argument("-f", dest="config_file", default=DEFAULT_CONFIG_FILE, help="the config file")
    return parser.parse_args(argv)


def run(config_file: str):
    """config -> логи -> БД -> миграции. Любая ошибка прерывает запуск"""
    config = load_config(config_file)
    setup_logging(config.get_string("Logs.LogLevel"), config.get_string("Logs.LogFile"))
    logger.debug("Инициализация базы данных (конфиг %s)...", config_file)

    engine = init_mysql(config)
    try:
        report = auto_migrate(engine, *get_entities())
    finally:
        engine.dispose()

    changes = sum(len(applied) for applied in report.values())
    logger.info("Миграция завершена, изменений: %d; конфигурация сервера по умолчанию: %s",
                changes, default_server_config())
    logger.info("✅ Модели базы данных успешно сгенерированы")
    return report


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        run(args.config_file)
    except MigrateError as e:
        logger.critical("❌ Фаза %s завершилась ошибкой: %s: %s", e.phase, type(e).__name__, e)
        return 1
    except Exception as e:
        logger.exception("❌ Ошибка инициализации базы данных: %s", e)
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
