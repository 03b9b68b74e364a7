"""Group mapped rows into clusters keyed by their label."""

import logging
import math
import re
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import config
from types_models import Cluster, DataFrame

logger = logging.getLogger(__name__)

_EXPONENT_ABOVE = 1e21
_EXPONENT_BELOW = 1e-6
_EXPONENT_PADDING = re.compile(r"e([+-])0*(\d)")


def label_to_str(value: Any) -> str:
    """Stringify a cluster label the way the dashboard host displays it.

    None becomes ``"null"`` and booleans are lower-case. Floats follow the
    host's number formatting: integral values below 1e21 drop their trailing
    ``.0`` (so ``1.0`` and ``1`` land in the same cluster), non-finite values
    read ``NaN``/``Infinity`` and exponents carry no zero padding.
    """
    if value is None:
        return config.NULL_LABEL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _float_to_str(value)
    return str(value)


def _float_to_str(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < _EXPONENT_ABOVE:
        return str(int(value))
    if _EXPONENT_BELOW <= abs(value) < _EXPONENT_ABOVE:
        # Shortest round-trip digits, laid out without an exponent.
        return format(Decimal(repr(float(value))), "f")
    return _EXPONENT_PADDING.sub(r"e\1\2", repr(float(value)))


def cluster_key(label: Any, source_id: str | None = None) -> str:
    """Return the grouping key of a label, optionally salted by its table."""
    key = label_to_str(label)
    if source_id is None:
        return key
    return f"{source_id}{config.SERIES_KEY_SEPARATOR}{key}"


def aggregate_clusters(
    tables: Sequence[DataFrame],
    *,
    separate_by_series: bool = False,
    drop_null_labels: bool = False,
) -> list[Cluster]:
    """Group the rows of projected tables into clusters.

    Each table must hold exactly the projected (X, Y, Z, label) columns.
    Points keep their row scan order, concatenated across tables that share
    a key; the returned clusters are sorted ascending by key.

    Args:
        tables: Output of ``project_tables``.
        separate_by_series: Prefix keys with the table's source identifier so
            equal labels from different tables stay apart.
        drop_null_labels: Skip rows whose label is null instead of grouping
            them under ``"null"``.
    """
    clusters: dict[str, Cluster] = {}
    dropped = 0

    for table_index, table in enumerate(tables):
        x_field, y_field, z_field, label_field = table.fields[:4]
        source_id = table.source_id(table_index) if separate_by_series else None

        for row, label in enumerate(label_field.values):
            if label is None and drop_null_labels:
                dropped += 1
                continue

            key = cluster_key(label, source_id)
            cluster = clusters.get(key)
            if cluster is None:
                cluster = Cluster(label=key)
                clusters[key] = cluster

            cluster.x.append(_value_at(x_field.values, row))
            cluster.y.append(_value_at(y_field.values, row))
            cluster.z.append(_value_at(z_field.values, row))
            cluster.origins.append((table_index, row))

    if dropped:
        logger.debug("Dropped %d rows without a cluster label", dropped)

    return [clusters[key] for key in sorted(clusters)]


def _value_at(values: Sequence[Any], row: int) -> Any:
    # Ragged tables read as null past the end of a shorter column.
    return values[row] if row < len(values) else None


__all__ = ["aggregate_clusters", "cluster_key", "label_to_str"]
