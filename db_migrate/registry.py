"""
Список сущностей, таблицы которых должны существовать в базе.
Новая сущность добавляется в ENTITIES; порядок сохраняется при миграции.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from sqlalchemy import Table

from db_migrate.errors import RegistryError
from db_migrate.models import Player

ENTITIES = (
    Player,
)


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    type: str
    nullable: bool
    default: Optional[str]
    primary_key: bool
    indexed: bool
    unique: bool


@dataclass(frozen=True)
class EntityDescriptor:
    name: str
    table: str
    columns: Tuple[ColumnDescriptor, ...]


def _column_default(column) -> Optional[str]:
    if column.server_default is not None:
        return str(column.server_default.arg)
    if column.default is not None:
        arg = column.default.arg
        return getattr(arg, "__name__", None) or str(arg)
    return None


def describe(entity) -> EntityDescriptor:
    """Описание таблицы сущности: имя, колонки, ключи и индексы"""
    table = entity.__table__
    indexed = {col.name for index in table.indexes for col in index.columns}
    unique = {col.name for index in table.indexes if index.unique for col in index.columns}
    columns = tuple(
        ColumnDescriptor(
            name=col.name,
            type=str(col.type),
            nullable=bool(col.nullable),
            default=_column_default(col),
            primary_key=col.primary_key,
            indexed=col.name in indexed,
            unique=col.name in unique or bool(col.unique),
        )
        for col in table.columns
    )
    return EntityDescriptor(name=entity.__name__, table=table.name, columns=columns)


def get_entities():
    """Сущности для миграции в объявленном порядке"""
    if not ENTITIES:
        raise RegistryError("список сущностей для миграции пуст")
    for entity in ENTITIES:
        if not isinstance(getattr(entity, "__table__", None), Table):
            raise RegistryError(f"{entity!r} не является моделью SQLAlchemy")
    return list(ENTITIES)
