"""Утилита начальной настройки схемы базы данных игрового сервера."""

__version__ = "0.1.0"
