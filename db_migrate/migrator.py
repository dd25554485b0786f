"""
Автомиграция схемы: только добавление.

Для каждой сущности таблица модели сравнивается с живой схемой (alembic
``compare_metadata``). Создаются недостающие таблицы, колонки, индексы,
уникальные ограничения и внешние ключи. Удаления и изменения типов,
nullability и значений по умолчанию не применяются, только логируются.
"""
import logging

from alembic.autogenerate import compare_metadata
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.exc import SQLAlchemyError

from db_migrate.errors import MigrationError
from db_migrate.registry import describe

logger = logging.getLogger(__name__)


def _only_table(table_name):
    def include_name(name, type_, parent_names):
        if type_ == "table":
            return name == table_name
        return True

    def include_object(obj, name, type_, reflected, compare_to):
        if type_ == "table":
            return name == table_name
        return True

    return include_name, include_object


def _diff_table_name(diff):
    kind = diff[0]
    if kind in ("add_column", "remove_column"):
        return diff[2]
    obj = diff[1]
    table = getattr(obj, "table", None)
    if table is not None:
        return table.name
    return getattr(obj, "name", None)


def _add_column(op, schema, table_name, column):
    # индекс по колонке придёт отдельным add_index
    new_column = column._copy()
    new_column.index = None
    new_column.unique = None
    op.add_column(table_name, new_column, schema=schema)


def _apply(conn, op, diff, table):
    kind = diff[0]
    if kind == "add_table":
        # diff содержит копию таблицы, создаём исходную из модели
        table.create(conn)
        return f"create table {table.name}"
    if kind == "add_column":
        _, schema, table_name, column = diff
        _add_column(op, schema, table_name, column)
        return f"add column {table_name}.{column.name}"
    if kind == "add_index":
        index = diff[1]
        index.create(conn)
        return f"create index {index.name} on {index.table.name}"
    if kind == "add_constraint":
        constraint = diff[1]
        op.create_unique_constraint(
            constraint.name, constraint.table.name, [col.name for col in constraint.columns]
        )
        return f"create unique constraint {constraint.name} on {constraint.table.name}"
    if kind == "add_fk":
        fk = diff[1]
        op.create_foreign_key(
            fk.name,
            fk.table.name,
            fk.referred_table.name,
            [col.name for col in fk.columns],
            [element.column.name for element in fk.elements],
        )
        return f"create foreign key {fk.name} on {fk.table.name}"
    return None


def reconcile(conn, table):
    """Приводит одну таблицу к модели. Возвращает список применённых изменений"""
    include_name, include_object = _only_table(table.name)
    context = MigrationContext.configure(
        connection=conn,
        opts={"include_name": include_name, "include_object": include_object},
    )
    op = Operations(context)

    applied = []
    created = set()
    for diff in compare_metadata(context, table.metadata):
        if isinstance(diff, list):
            # modify_type, modify_nullable, modify_default, ...
            for change in diff:
                logger.warning("Пропущено изменение %s для %s.%s", change[0], change[2], change[3])
            continue

        if diff[0] != "add_table" and _diff_table_name(diff) in created:
            continue

        change = _apply(conn, op, diff, table)
        if change is None:
            logger.warning("Пропущено деструктивное изменение %s для %s", diff[0], _diff_table_name(diff))
            continue
        if diff[0] == "add_table":
            created.add(table.name)
        logger.debug("Применено: %s", change)
        applied.append(change)
    return applied


def auto_migrate(engine, *entities):
    """
    Согласует схему для каждой сущности по очереди, каждую в своей транзакции.
    Возвращает {имя сущности: [применённые изменения]}.
    Первая ошибка прерывает миграцию с MigrationError.
    """
    report = {}
    for entity in entities:
        descriptor = describe(entity)
        logger.debug(
            "Сущность %s -> таблица %s, колонок: %d",
            descriptor.name, descriptor.table, len(descriptor.columns),
        )
        try:
            with engine.begin() as conn:
                report[descriptor.name] = reconcile(conn, entity.__table__)
        except (SQLAlchemyError, NotImplementedError) as e:
            raise MigrationError(descriptor.name, e) from e
        if not report[descriptor.name]:
            logger.debug("Таблица %s уже соответствует модели %s", descriptor.table, descriptor.name)
    return report
