"""Project every table down to its X, Y, Z and cluster-label columns."""

import logging
from collections.abc import Sequence
from numbers import Real
from typing import Any

import numpy as np

from cluster.field_resolver import InsufficientFieldsError
from types_models import DataField, DataFrame, FieldType, ResolvedMapping

logger = logging.getLogger(__name__)


def sanitize_number(value: Any) -> Any:
    """Return *value* if it is a finite number or None, otherwise None."""
    if value is None:
        return None
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (Real, np.number)):
        return None
    if isinstance(value, int):
        return value
    if not np.isfinite(value):
        return None
    # numpy scalars become plain Python numbers so results stay JSON friendly.
    return value.item() if isinstance(value, np.generic) else value


def sanitize_field(field: DataField) -> DataField:
    """Copy a column, nulling non-finite values when it is numeric."""
    if field.type != FieldType.NUMBER:
        return field
    return field.model_copy(
        update={"values": [sanitize_number(value) for value in field.values]}
    )


def project_tables(
    tables: Sequence[DataFrame], mapping: ResolvedMapping
) -> list[DataFrame]:
    """Build one four-column table per input table, in (X, Y, Z, label) order.

    Rows are neither dropped nor reordered and the inputs are not mutated.
    """
    projected: list[DataFrame] = []
    for table_index, table in enumerate(tables):
        if max(mapping.indices) >= len(table.fields):
            raise InsufficientFieldsError(
                f"Table {table.source_id(table_index)} has no column "
                + f"{max(mapping.indices)}"
            )

        fields = [sanitize_field(table.fields[index]) for index in mapping.indices]
        projected.append(table.model_copy(update={"fields": fields}))

    logger.debug(
        "Projected %d tables onto columns %s", len(projected), mapping.indices
    )
    return projected


__all__ = ["project_tables", "sanitize_field", "sanitize_number"]
