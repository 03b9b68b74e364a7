"""Choose which columns serve as X, Y, Z and cluster label.

Resolution runs against the first table. Each configured name is matched
exactly against each column's display name, or its source-qualified
form when the name repeats across tables; X/Y/Z only match numeric columns
while the cluster label may be numeric or string. In Auto mode the fixed
default names are used, and any slot still unresolved takes the first column
not already claimed. In Manual mode an unresolved slot fails the whole
mapping.
"""

import logging
from collections.abc import Sequence
from typing import cast

import config
from cluster.display_names import base_display_name, display_names
from types_models import (
    DataField,
    DataFrame,
    FieldType,
    ResolvedMapping,
    SeriesConfig,
    SeriesMapping,
)

logger = logging.getLogger(__name__)

SLOT_NAMES = ("x", "y", "z", "clusterLabel")

_COORDINATE_KINDS = frozenset({FieldType.NUMBER})
_LABEL_KINDS = frozenset({FieldType.NUMBER, FieldType.STRING})

DEFAULT_SERIES_CONFIG = SeriesConfig(
    x=config.DEFAULT_X_FIELD,
    y=config.DEFAULT_Y_FIELD,
    z=config.DEFAULT_Z_FIELD,
    cluster_label=config.DEFAULT_CLUSTER_LABEL_FIELD,
)


class FieldResolutionError(ValueError):
    """Raised when the input tables cannot be mapped to X/Y/Z/label."""


class InsufficientFieldsError(FieldResolutionError):
    """No tables, or a table with fewer columns than required."""


class UnresolvedFieldError(FieldResolutionError):
    """A configured column name was not found (Manual mode only)."""

    def __init__(self, slot: str, name: str | None) -> None:
        super().__init__(f"No suitable column named {name!r} for {slot}")
        self.slot = slot
        self.name = name


def _accepted_kinds(slot_index: int) -> frozenset[FieldType]:
    return _LABEL_KINDS if slot_index == 3 else _COORDINATE_KINDS


def _kind_matches(field: DataField, slot_index: int) -> bool:
    return field.type in _accepted_kinds(slot_index)


def check_field_count(tables: Sequence[DataFrame]) -> None:
    """Raise InsufficientFieldsError unless every table has enough columns."""
    if not tables:
        raise InsufficientFieldsError("No tables to map")

    for index, table in enumerate(tables):
        if len(table.fields) < config.REQUIRED_FIELD_COUNT:
            raise InsufficientFieldsError(
                f"Table {table.source_id(index)} has {len(table.fields)} columns, "
                + f"at least {config.REQUIRED_FIELD_COUNT} are required"
            )


def resolve_fields(
    tables: Sequence[DataFrame],
    series: SeriesConfig | None = None,
    mapping: SeriesMapping = SeriesMapping.AUTO,
    *,
    strict_kinds: bool = False,
) -> ResolvedMapping:
    """Resolve the four column indices for the given tables.

    Args:
        tables: Input tables; resolution uses the first one.
        series: Configured column names (ignored in Auto mode).
        mapping: Auto or Manual resolution.
        strict_kinds: In Auto mode, only fall back to columns whose kind
            suits the slot.

    Returns:
        The resolved mapping with four distinct indices.

    Raises:
        InsufficientFieldsError: No tables, or a table has too few columns.
        UnresolvedFieldError: Manual mode and a name was not found, or no
            column is left for an Auto fallback.
    """
    check_field_count(tables)

    if mapping == SeriesMapping.AUTO or series is None:
        series = DEFAULT_SERIES_CONFIG
    wanted = series.names()

    first = tables[0]
    names = [base_display_name(field) for field in first.fields]
    qualified = display_names(tables)[0]
    resolved: list[int | None] = [None, None, None, None]

    # Single scan; a later column with the same display name wins. A column
    # fills at most one slot so the indices stay distinct.
    for column_index, field in enumerate(first.fields):
        for slot_index, wanted_name in enumerate(wanted):
            if wanted_name is None or wanted_name not in (
                names[column_index],
                qualified[column_index],
            ):
                continue
            if _kind_matches(field, slot_index):
                resolved[slot_index] = column_index
                break

    claimed = [False] * len(first.fields)
    for column_index in resolved:
        if column_index is not None:
            claimed[column_index] = True

    for slot_index, column_index in enumerate(resolved):
        if column_index is not None:
            continue

        if mapping == SeriesMapping.MANUAL:
            logger.warning(
                "Manual mapping failed: column %r for %s not found",
                wanted[slot_index],
                SLOT_NAMES[slot_index],
            )
            raise UnresolvedFieldError(SLOT_NAMES[slot_index], wanted[slot_index])

        fallback = _first_unclaimed(first, claimed, slot_index, strict_kinds)
        if fallback is None:
            raise UnresolvedFieldError(SLOT_NAMES[slot_index], wanted[slot_index])

        logger.debug(
            "Auto mapping: %s falls back to column %d (%s)",
            SLOT_NAMES[slot_index],
            fallback,
            names[fallback],
        )
        resolved[slot_index] = fallback
        claimed[fallback] = True

    x, y, z, label = cast(list[int], resolved)
    return ResolvedMapping(
        x=x,
        y=y,
        z=z,
        cluster_label=label,
        field_names=(names[x], names[y], names[z], names[label]),
    )


def _first_unclaimed(
    table: DataFrame, claimed: list[bool], slot_index: int, strict_kinds: bool
) -> int | None:
    for column_index, is_claimed in enumerate(claimed):
        if is_claimed:
            continue
        if strict_kinds and not _kind_matches(table.fields[column_index], slot_index):
            continue
        return column_index
    return None


__all__ = [
    "FieldResolutionError",
    "InsufficientFieldsError",
    "UnresolvedFieldError",
    "check_field_count",
    "resolve_fields",
]
