"""Data mapping and aggregation pipeline for the cluster 3D panel.

Tables and options flow through field resolution, projection, aggregation,
override resolution and projection to renderer series. The helpers below are
re-exported lazily so importing the package does not pull in matplotlib
until colors are actually needed.
"""

from __future__ import annotations

import importlib
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .aggregator import aggregate_clusters, cluster_key, label_to_str
    from .field_resolver import (
        FieldResolutionError,
        InsufficientFieldsError,
        UnresolvedFieldError,
        resolve_fields,
    )
    from .overrides import (
        PALETTE,
        resolve_color,
        resolve_display_colors,
        resolve_visibility,
    )
    from .pipeline import RenderCache, build_chart_data
    from .projector import to_chart_series, to_figure, to_legend, to_tooltip
    from .series_mapper import project_tables, sanitize_number

__all__ = [
    "FieldResolutionError",
    "InsufficientFieldsError",
    "PALETTE",
    "RenderCache",
    "UnresolvedFieldError",
    "aggregate_clusters",
    "build_chart_data",
    "cluster_key",
    "label_to_str",
    "project_tables",
    "resolve_color",
    "resolve_display_colors",
    "resolve_fields",
    "resolve_visibility",
    "sanitize_number",
    "to_chart_series",
    "to_figure",
    "to_legend",
    "to_tooltip",
]

_IMPORT_MAP = {
    "aggregate_clusters": ("cluster.aggregator", "aggregate_clusters"),
    "cluster_key": ("cluster.aggregator", "cluster_key"),
    "label_to_str": ("cluster.aggregator", "label_to_str"),
    "FieldResolutionError": ("cluster.field_resolver", "FieldResolutionError"),
    "InsufficientFieldsError": ("cluster.field_resolver", "InsufficientFieldsError"),
    "UnresolvedFieldError": ("cluster.field_resolver", "UnresolvedFieldError"),
    "resolve_fields": ("cluster.field_resolver", "resolve_fields"),
    "PALETTE": ("cluster.overrides", "PALETTE"),
    "resolve_color": ("cluster.overrides", "resolve_color"),
    "resolve_display_colors": ("cluster.overrides", "resolve_display_colors"),
    "resolve_visibility": ("cluster.overrides", "resolve_visibility"),
    "RenderCache": ("cluster.pipeline", "RenderCache"),
    "build_chart_data": ("cluster.pipeline", "build_chart_data"),
    "to_chart_series": ("cluster.projector", "to_chart_series"),
    "to_figure": ("cluster.projector", "to_figure"),
    "to_legend": ("cluster.projector", "to_legend"),
    "to_tooltip": ("cluster.projector", "to_tooltip"),
    "project_tables": ("cluster.series_mapper", "project_tables"),
    "sanitize_number": ("cluster.series_mapper", "sanitize_number"),
}


def __getattr__(name: str) -> Any:
    """Lazily resolve re-exported names."""
    try:
        module_name, attr_name = _IMPORT_MAP[name]
    except KeyError as exc:  # pragma: no cover - unknown attrs
        raise AttributeError(f"module 'cluster' has no attribute '{name}'") from exc

    module = importlib.import_module(module_name)
    attr = getattr(module, attr_name)
    globals()[name] = attr
    return attr


def __dir__() -> list[str]:
    return sorted(__all__)
