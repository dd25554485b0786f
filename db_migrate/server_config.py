"""Конфигурация игрового сервера по умолчанию, выводится в лог для сверки оператором."""
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class ServerConfig:
    server_type: str = "db"
    heartbeat_interval: int = 30  # секунды
    agent_messages_buffer: int = 100
    handler_local_buffer: int = 20
    handler_remote_buffer: int = 20
    handler_dispatch_concurrency: int = 25
    session_unique: bool = True
    serializer: str = "json"
    metrics_period: int = 15  # секунды

    def __str__(self):
        return " ".join(f"{key}={value}" for key, value in asdict(self).items())


def default_server_config() -> ServerConfig:
    return ServerConfig()
