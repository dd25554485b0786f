"""
Загрузка конфигурации утилиты из YAML-файла.

Ключи не зависят от регистра, вложенные ключи адресуются через точку:
``config.get_string("Logs.LogLevel")``.
"""
import copy
import logging

import yaml

from db_migrate.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "../etc/db.yaml"


def _lower_keys(value):
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(v) for v in value]
    return value


class Config:
    """Снимок конфигурации. После загрузки не меняется"""

    def __init__(self, data: dict, path: str = None):
        self._data = _lower_keys(data)
        self.path = path

    def get(self, key: str, default=None):
        node = self._data
        for part in key.lower().split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return copy.deepcopy(node)

    def get_string(self, key: str) -> str:
        """Пустая строка для отсутствующего ключа, как у viper"""
        value = self.get(key)
        if value is None:
            return ""
        return str(value)

    def __contains__(self, key):
        marker = object()
        return self.get(key, marker) is not marker


def load_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """Читает и разбирает файл конфигурации (YAML или JSON)"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"не удалось прочитать файл конфигурации {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"файл конфигурации {path} повреждён: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"файл конфигурации {path} должен содержать словарь, получено {type(data).__name__}"
        )

    logger.debug("Конфигурация загружена из %s", path)
    return Config(data, path=path)
