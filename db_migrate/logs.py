"""
Настройка логирования: уровень из конфига и файл с ротацией.

Ротация: файл больше 10 МиБ переименовывается в ``<file>.1.gz`` (со сжатием),
хранится не больше трёх архивов, архивы старше 28 дней удаляются.
"""
import glob
import gzip
import logging
import os
import shutil
import time
from logging.handlers import RotatingFileHandler

from db_migrate.errors import LogSetupError

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 3
LOG_MAX_AGE_DAYS = 28
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


def parse_level(name: str) -> int:
    """Имя уровня -> числовой уровень logging"""
    level = LEVELS.get((name or "").strip().lower())
    if level is None:
        raise LogSetupError(f"неизвестный уровень логирования: {name!r}")
    return level


def _gzip_namer(name):
    return name + ".gz"


def _gzip_rotator(source, dest):
    with open(source, "rb") as src, gzip.open(dest, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.remove(source)


class CompressedRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler со сжатием архивов и сроком их хранения"""

    def __init__(self, filename, max_bytes=LOG_MAX_BYTES, backup_count=LOG_BACKUP_COUNT,
                 max_age_days=LOG_MAX_AGE_DAYS, encoding="utf-8"):
        super().__init__(filename, maxBytes=max_bytes, backupCount=backup_count, encoding=encoding)
        self.max_age_days = max_age_days
        self.namer = _gzip_namer
        self.rotator = _gzip_rotator
        # утилита пишет мало и ротация редка, поэтому старые архивы чистятся и при открытии
        self.remove_expired()

    def backups(self):
        """Существующие архивы текущего файла"""
        return sorted(glob.glob(glob.escape(self.baseFilename) + ".*.gz"))

    def shouldRollover(self, record):
        """Размер считается в байтах, а не в символах: кириллица занимает по два байта"""
        if self.maxBytes <= 0:
            return False
        if self.stream is None:
            self.stream = self._open()
        pos = self.stream.tell()
        if not pos:
            return False
        size = len(self.format(record).encode(self.encoding or "utf-8")) + len(self.terminator)
        if pos + size > self.maxBytes:
            return os.path.isfile(self.baseFilename)
        return False

    def doRollover(self):
        super().doRollover()
        self.remove_expired()

    def remove_expired(self):
        if not self.max_age_days:
            return
        cutoff = time.time() - self.max_age_days * 24 * 3600
        for path in self.backups():
            if os.path.getmtime(path) < cutoff:
                os.remove(path)


def setup_logging(level_name: str, log_file: str) -> logging.Logger:
    """
    Направляет корневой логгер в файл с ротацией.
    Повторный вызов заменяет ранее установленный обработчик.
    """
    level = parse_level(level_name)
    if not log_file:
        raise LogSetupError("не задан путь к файлу логов (Logs.LogFile)")

    try:
        log_dir = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(log_dir, exist_ok=True)
        handler = CompressedRotatingFileHandler(log_file)
    except OSError as e:
        raise LogSetupError(f"не удалось открыть файл логов {log_file}: {e}") from e

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root = logging.getLogger()
    for old in [h for h in root.handlers if isinstance(h, CompressedRotatingFileHandler)]:
        root.removeHandler(old)
        old.close()
    root.addHandler(handler)
    root.setLevel(level)
    return root
