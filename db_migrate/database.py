"""
Подключение к базе данных.

Строка подключения берётся из ключа ``MySQL``. Поддерживаются URL SQLAlchemy
(``mysql+pymysql://user:pw@host/db``) и DSN в формате Go-драйвера MySQL
(``user:pw@tcp(127.0.0.1:3306)/gamedb?charset=utf8mb4&parseTime=True``).
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, NoSuchModuleError
from sqlalchemy.pool import QueuePool

from db_migrate.errors import DBOpenError
from db_migrate.logs import TRACE

logger = logging.getLogger(__name__)

# -------------------- Пул соединений --------------------
POOL_MAX_IDLE = 10
POOL_MAX_OPEN = 100
POOL_MAX_LIFETIME = 4 * 3600  # секунды

MYSQL_DRIVER = "mysql+pymysql"
MYSQL_DEFAULT_HOST = "127.0.0.1"
MYSQL_DEFAULT_PORT = 3306

# Параметры Go-драйвера, которые передаются в PyMySQL
PASSTHROUGH_PARAMS = {"charset"}


def _split_host_port(addr: str):
    if not addr:
        return MYSQL_DEFAULT_HOST, MYSQL_DEFAULT_PORT
    host, sep, port = addr.rpartition(":")
    if not sep:
        return addr, MYSQL_DEFAULT_PORT
    try:
        return host or MYSQL_DEFAULT_HOST, int(port)
    except ValueError as e:
        raise DBOpenError(f"некорректный порт в адресе {addr!r}") from e


def _parse_go_dsn(dsn: str) -> URL:
    """[user[:password]@][net[(addr)]]/dbname[?param1=value1&...]"""
    slash = dsn.rfind("/")
    if slash < 0:
        raise DBOpenError("некорректный DSN: нет '/' перед именем базы")

    head, tail = dsn[:slash], dsn[slash + 1:]
    creds, at, location = head.rpartition("@")
    username = password = None
    if at:
        username, colon, pwd = creds.partition(":")
        if colon:
            password = pwd

    net, addr = location, ""
    if "(" in location:
        if not location.endswith(")"):
            raise DBOpenError("некорректный DSN: адрес не закрыт скобкой")
        net, _, addr = location[:-1].partition("(")

    database, _, params = tail.partition("?")
    query = {}
    for pair in filter(None, params.split("&")):
        name, eq, value = pair.partition("=")
        if not eq:
            raise DBOpenError(f"некорректный DSN: параметр без значения {name!r}")
        if name in PASSTHROUGH_PARAMS:
            query[name] = value.split(",")[0]
        else:
            logger.debug("Параметр DSN %s не поддерживается PyMySQL и пропущен", name)

    host, port = None, None
    if net in ("", "tcp", "tcp6"):
        host, port = _split_host_port(addr)
    elif net == "unix":
        if not addr:
            raise DBOpenError("некорректный DSN: не указан путь к сокету")
        host = "localhost"
        query["unix_socket"] = addr
    else:
        raise DBOpenError(f"некорректный DSN: неизвестная сеть {net!r}")

    return URL.create(
        MYSQL_DRIVER,
        username=username or None,
        password=password,
        host=host,
        port=port,
        database=database or None,
        query=query,
    )


def parse_dsn(dsn: str) -> URL:
    """Строка подключения -> URL SQLAlchemy"""
    if not dsn:
        raise DBOpenError("не задана строка подключения (MySQL)")
    if "://" in dsn:
        try:
            return make_url(dsn)
        except ArgumentError as e:
            raise DBOpenError(f"некорректный URL базы данных: {e}") from e
    return _parse_go_dsn(dsn)


def _bridge_orm_logging():
    # SQL-запросы видны только на уровне trace, иначе только предупреждения ORM
    root_level = logging.getLogger().getEffectiveLevel()
    orm_level = logging.INFO if root_level <= TRACE else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(orm_level)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(orm_level)


def init_mysql(config):
    """Создаёт engine с пулом соединений. Соединение не проверяется"""
    url = parse_dsn(config.get_string("MySQL"))
    _bridge_orm_logging()

    try:
        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=POOL_MAX_IDLE,
            max_overflow=POOL_MAX_OPEN - POOL_MAX_IDLE,
            pool_recycle=POOL_MAX_LIFETIME,
            pool_pre_ping=True,
        )
    except (ArgumentError, NoSuchModuleError, ImportError) as e:
        raise DBOpenError(f"не удалось создать подключение к {url.render_as_string()}: {e}") from e

    logger.debug(
        "Пул соединений %s: max_idle=%d max_open=%d lifetime=%ds",
        url.render_as_string(), POOL_MAX_IDLE, POOL_MAX_OPEN, POOL_MAX_LIFETIME,
    )
    return engine
