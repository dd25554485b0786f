"""Ошибки утилиты миграции. Каждая ошибка привязана к фазе запуска."""


class MigrateError(Exception):
    """Базовая ошибка: любая из них завершает процесс"""

    phase = "unknown"


class ConfigError(MigrateError):
    phase = "load-config"


class LogSetupError(MigrateError):
    phase = "configure-logs"


class DBOpenError(MigrateError):
    phase = "open-db"


class RegistryError(MigrateError):
    phase = "run-migrations"


class MigrationError(MigrateError):
    """DDL отклонён базой или соединение потеряно во время миграции"""

    phase = "run-migrations"

    def __init__(self, entity: str, cause: Exception):
        self.entity = entity
        self.cause = cause
        super().__init__(f"{entity}: {cause}")
