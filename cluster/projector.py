"""Turn aggregated clusters into renderer series, tooltips and a figure dict."""

from collections.abc import Mapping, Sequence
from typing import Any

import config
from cluster.colors import opaque, with_alpha
from types_models import (
    CameraState,
    ChartData,
    Cluster,
    HideFrom,
    HoverEvent,
    Legend,
    LegendItem,
    LegendOptions,
    RenderableSeries,
    TooltipField,
    TooltipPayload,
    VisibilityEntry,
)


def to_chart_series(
    clusters: Sequence[Cluster],
    colors: Sequence[str],
    visibility: Mapping[str, VisibilityEntry],
    fill_opacity: float,
    point_size: float,
) -> list[RenderableSeries]:
    """Build one renderable series per cluster, keeping cluster order.

    ``colors[i]`` is the display color of ``clusters[i]``; a missing entry
    falls back to the fallback color.
    """
    series: list[RenderableSeries] = []
    for index, cluster in enumerate(clusters):
        color = colors[index] if index < len(colors) else config.FALLBACK_COLOR
        entry = visibility.get(cluster.label)
        hide_from = entry.hide_from if entry is not None else HideFrom()

        series.append(
            RenderableSeries(
                label=cluster.label,
                x=list(cluster.x),
                y=list(cluster.y),
                z=list(cluster.z),
                color=color,
                fill_color=with_alpha(color, fill_opacity / 100),
                border_color=opaque(color),
                marker_size=point_size,
                visible=not hide_from.viz,
                hide_from=hide_from,
            )
        )
    return series


def to_legend(
    series: Sequence[RenderableSeries], options: LegendOptions
) -> Legend | None:
    """Build legend items; series hidden from the legend are left out."""
    if not options.show_legend or options.display_mode == "hidden":
        return None

    items = [
        LegendItem(
            label=entry.label,
            color=entry.color or config.FALLBACK_COLOR,
            disabled=not entry.visible,
        )
        for entry in series
        if not entry.hide_from.legend
    ]
    return Legend(
        items=items, placement=options.placement, display_mode=options.display_mode
    )


def to_tooltip(
    event: HoverEvent,
    colors_by_label: Mapping[str, str],
    field_names: Sequence[str],
) -> TooltipPayload:
    """Reshape a hover event into tooltip content. Never fails on a missing color."""
    label = str(event.series_name)
    names = list(field_names) + [""] * (3 - len(field_names))

    return TooltipPayload(
        color=colors_by_label.get(label, config.FALLBACK_COLOR),
        label=label,
        x=TooltipField(field_name=names[0], value=event.x),
        y=TooltipField(field_name=names[1], value=event.y),
        z=TooltipField(field_name=names[2], value=event.z),
    )


def to_figure(
    chart: ChartData,
    *,
    camera: CameraState | None = None,
    axis_color: str | None = None,
    width: int | None = None,
    height: int | None = None,
) -> dict[str, Any]:
    """Return a plotly-compatible figure dict for a 3D scatter renderer.

    The legend is drawn by the host, so the renderer's own legend is off.
    ``uirevision`` is fixed so user camera changes survive re-renders.
    """
    traces = [
        {
            "type": "scatter3d",
            "name": series.label,
            "x": series.x,
            "y": series.y,
            "z": series.z,
            "mode": "markers",
            "visible": series.visible,
            "marker": {
                "color": series.fill_color,
                "size": series.marker_size,
                "line": {
                    "color": series.border_color,
                    "width": config.MARKER_LINE_WIDTH,
                },
            },
            "hoverinfo": "none",
        }
        for series in chart.series
    ]

    axis_settings: dict[str, Any] = {}
    if axis_color is not None:
        axis_settings["color"] = axis_color

    titles = list(chart.field_names[:3]) + [""] * (3 - len(chart.field_names[:3]))
    scene: dict[str, Any] = {
        "xaxis": {"title": titles[0], **axis_settings},
        "yaxis": {"title": titles[1], **axis_settings},
        "zaxis": {"title": titles[2], **axis_settings},
    }
    if camera is not None:
        scene["camera"] = dict(camera)

    layout: dict[str, Any] = {
        "autosize": True,
        "paper_bgcolor": "transparent",
        "uirevision": "true",
        "showlegend": False,
        "margin": {"t": 0, "r": 0, "b": 0, "l": 0},
        "scene": scene,
    }
    if width is not None:
        layout["width"] = width
    if height is not None:
        layout["height"] = height

    return {"data": traces, "layout": layout, "config": {"displayModeBar": False}}


__all__ = ["to_chart_series", "to_figure", "to_legend", "to_tooltip"]
