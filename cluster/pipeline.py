"""End-to-end mapping from host tables and options to chart-ready data.

``build_chart_data`` is a pure function of its inputs. ``RenderCache`` puts a
memoisation boundary in front of it, keyed by a fingerprint of the tables,
options and field config, so hosts can call it on every change notification.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict
from collections.abc import Sequence

import config
from cluster.aggregator import aggregate_clusters
from cluster.field_resolver import FieldResolutionError, resolve_fields
from cluster.overrides import resolve_display_colors, resolve_visibility
from cluster.projector import to_chart_series, to_legend
from cluster.series_mapper import project_tables
from types_models import ChartData, DataFrame, FieldConfigSource, PanelOptions

logger = logging.getLogger(__name__)


def empty_chart_data(error: str | None = None) -> ChartData:
    """The "no valid data" result."""
    return ChartData(valid=False, error=error)


def build_chart_data(
    tables: Sequence[DataFrame],
    options: PanelOptions | None = None,
    field_config: FieldConfigSource | None = None,
) -> ChartData:
    """Resolve, project, aggregate and style the input tables.

    Mapping failures (too few columns, unresolved Manual names) are reported
    through ``ChartData.error`` with ``valid=False`` instead of raising.
    """
    options = options or PanelOptions()
    field_config = field_config or FieldConfigSource()

    try:
        mapping = resolve_fields(
            tables,
            options.series,
            options.series_mapping,
            strict_kinds=options.strict_field_kinds,
        )
        projected = project_tables(tables, mapping)
    except FieldResolutionError as exc:
        logger.warning("No valid data: %s", exc)
        return empty_chart_data(str(exc))

    clusters = aggregate_clusters(
        projected,
        separate_by_series=options.separate_by_series,
        drop_null_labels=options.drop_null_labels,
    )
    labels = [cluster.label for cluster in clusters]

    colors = resolve_display_colors(field_config, labels)
    visibility = resolve_visibility(field_config.overrides, labels)
    series = to_chart_series(
        clusters, colors, visibility, options.fill_opacity, options.point_size
    )

    total_points = sum(cluster.size for cluster in clusters)
    logger.debug(
        "Built %d clusters (%d points) from %d tables",
        len(clusters),
        total_points,
        len(tables),
    )

    return ChartData(
        valid=True,
        clusters=clusters,
        series=series,
        legend=to_legend(series, options.legend),
        field_names=list(mapping.field_names),
        colors_by_label=dict(zip(labels, colors)),
        hidden_from_tooltip=[
            label for label, entry in visibility.items() if entry.hide_from.tooltip
        ],
        total_points=total_points,
    )


def fingerprint(
    tables: Sequence[DataFrame],
    options: PanelOptions,
    field_config: FieldConfigSource,
) -> str:
    """Stable digest of everything ``build_chart_data`` depends on.

    Python reprs are hashed instead of JSON, which would write None, NaN and
    Infinity all as ``null``.
    """
    digest = hashlib.sha256()
    for model in (*tables, options, field_config):
        digest.update(repr(model.model_dump()).encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()


class RenderCache:
    """Small LRU cache of chart data keyed by input fingerprint."""

    def __init__(self, max_entries: int = config.RENDER_CACHE_SIZE) -> None:
        super().__init__()
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._entries: OrderedDict[str, ChartData] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_build(
        self,
        tables: Sequence[DataFrame],
        options: PanelOptions | None = None,
        field_config: FieldConfigSource | None = None,
    ) -> ChartData:
        """Return cached chart data for these inputs, building it on a miss."""
        options = options or PanelOptions()
        field_config = field_config or FieldConfigSource()
        key = fingerprint(tables, options, field_config)

        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                logger.debug("Render cache hit %s", key[:12])
                return cached

        chart = build_chart_data(tables, options, field_config)

        with self._lock:
            self.misses += 1
            self._entries[key] = chart
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

        return chart

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


__all__ = [
    "RenderCache",
    "build_chart_data",
    "empty_chart_data",
    "fingerprint",
]
