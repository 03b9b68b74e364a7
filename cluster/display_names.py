"""Column display names shared by field resolution, aggregation and axis titles.

A column is shown under its configured display name, or its raw name when none
is configured. When the same name occurs in more than one table it also gets a
qualified form prefixed with the table's source identifier, so a column can be
addressed unambiguously across tables. Resolution accepts either form.
"""

from collections import Counter
from collections.abc import Sequence

import config
from types_models import DataField, DataFrame


def base_display_name(field: DataField) -> str:
    """Configured display name, else the raw column name."""
    return field.display_name or field.name


def _colliding_names(tables: Sequence[DataFrame]) -> set[str]:
    """Names that appear in more than one table."""
    counts: Counter[str] = Counter()
    for table in tables:
        counts.update({base_display_name(field) for field in table.fields})
    return {name for name, count in counts.items() if count > 1}


def _qualified(name: str, table: DataFrame, table_index: int) -> str:
    return f"{table.source_id(table_index)}{config.SERIES_KEY_SEPARATOR}{name}"


def field_display_name(
    field: DataField,
    table: DataFrame,
    table_index: int,
    tables: Sequence[DataFrame],
) -> str:
    """Return the qualified display name of one column in the context of all tables."""
    name = base_display_name(field)
    if len(tables) > 1 and name in _colliding_names(tables):
        return _qualified(name, table, table_index)
    return name


def display_names(tables: Sequence[DataFrame]) -> list[list[str]]:
    """Return qualified display names for every column of every table."""
    collisions = _colliding_names(tables) if len(tables) > 1 else set()
    names: list[list[str]] = []
    for table_index, table in enumerate(tables):
        table_names: list[str] = []
        for field in table.fields:
            name = base_display_name(field)
            if name in collisions:
                name = _qualified(name, table, table_index)
            table_names.append(name)
        names.append(table_names)
    return names


__all__ = ["base_display_name", "display_names", "field_display_name"]
