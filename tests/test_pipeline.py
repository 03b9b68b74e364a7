from __future__ import annotations

import math
from typing import Any

from cluster.example_data import generate_example_tables
from cluster.pipeline import RenderCache, build_chart_data, fingerprint
from types_models import (
    DataField,
    DataFrame,
    FieldConfigSource,
    FieldType,
    PanelOptions,
    SeriesConfig,
    SeriesMapping,
)


def _table(ref_id: str, labels: list[Any]) -> DataFrame:
    rows = range(len(labels))
    return DataFrame(
        ref_id=ref_id,
        fields=[
            DataField(name="x", type=FieldType.NUMBER, values=[float(i) for i in rows]),
            DataField(name="y", type=FieldType.NUMBER, values=[float(i) * 2 for i in rows]),
            DataField(name="z", type=FieldType.NUMBER, values=[float(i) * 3 for i in rows]),
            DataField(name="clusterLabel", type=FieldType.STRING, values=labels),
        ],
    )


def test_two_tables_merge_into_one_cluster_per_label() -> None:
    tables = [_table("A", ["a", "b", "a"]), _table("B", ["b", "c", "a"])]

    chart = build_chart_data(tables, PanelOptions(separate_clusters_by_series=False))

    assert chart.valid
    assert [cluster.label for cluster in chart.clusters] == ["a", "b", "c"]
    assert [cluster.size for cluster in chart.clusters] == [3, 2, 1]
    assert chart.total_points == 6
    assert [series.label for series in chart.series] == ["a", "b", "c"]


def test_separate_by_series_splits_clusters() -> None:
    tables = [_table("A", ["a", "b"]), _table("B", ["a"])]

    chart = build_chart_data(tables, PanelOptions(separate_clusters_by_series=True))

    assert [cluster.label for cluster in chart.clusters] == ["A a", "A b", "B a"]


def test_legend_option_alias_also_separates() -> None:
    tables = [_table("A", ["a"]), _table("B", ["a"])]
    options = PanelOptions.model_validate({"legend": {"separateLegendBySeries": True}})

    chart = build_chart_data(tables, options)

    assert len(chart.clusters) == 2


def test_axis_titles_are_resolved_display_names() -> None:
    chart = build_chart_data([_table("A", ["a"])])

    assert chart.field_names == ["x", "y", "z", "clusterLabel"]


def test_insufficient_fields_gives_empty_result() -> None:
    table = DataFrame(fields=[DataField(name="x", type=FieldType.NUMBER, values=[1.0])])

    chart = build_chart_data([table])

    assert not chart.valid
    assert chart.clusters == [] and chart.series == []
    assert chart.legend is None
    assert chart.error is not None


def test_unresolved_manual_mapping_gives_empty_result() -> None:
    options = PanelOptions(
        series_mapping=SeriesMapping.MANUAL,
        series=SeriesConfig(x="x", y="y", z="missing", cluster_label="clusterLabel"),
    )

    chart = build_chart_data([_table("A", ["a"])], options)

    assert not chart.valid
    assert "missing" in (chart.error or "")


def test_non_finite_coordinates_become_null() -> None:
    table = DataFrame(
        fields=[
            DataField(name="x", type=FieldType.NUMBER, values=[math.nan, 1.0]),
            DataField(name="y", type=FieldType.NUMBER, values=[math.inf, 2.0]),
            DataField(name="z", type=FieldType.NUMBER, values=[None, 3.0]),
            DataField(name="clusterLabel", type=FieldType.STRING, values=["a", "a"]),
        ]
    )

    chart = build_chart_data([table])

    assert chart.clusters[0].x == [None, 1.0]
    assert chart.clusters[0].y == [None, 2.0]
    assert chart.clusters[0].z == [None, 3.0]


def test_overrides_flow_into_series_legend_and_tooltip_lists() -> None:
    field_config = FieldConfigSource.model_validate(
        {
            "overrides": [
                {
                    "matcher": {"id": "byName", "options": "b"},
                    "properties": [{"id": "color", "value": "#112233"}],
                },
                {
                    "matcher": {"id": "byNames", "options": {"names": ["c"]}},
                    "properties": [
                        {"id": "custom.hideFrom", "value": {"viz": True, "tooltip": True}}
                    ],
                },
            ]
        }
    )

    chart = build_chart_data([_table("A", ["a", "b", "c"])], None, field_config)

    assert chart.colors_by_label["b"] == "#112233"
    assert chart.series[2].visible is False
    assert chart.hidden_from_tooltip == ["c"]
    assert chart.legend is not None
    assert [item.disabled for item in chart.legend.items] == [False, False, True]


def test_build_is_idempotent() -> None:
    tables = generate_example_tables()

    first = build_chart_data(tables).model_dump()
    second = build_chart_data(tables).model_dump()

    assert first == second


def test_fingerprint_tracks_inputs() -> None:
    tables = [_table("A", ["a"])]
    options = PanelOptions()
    field_config = FieldConfigSource()

    assert fingerprint(tables, options, field_config) == fingerprint(
        [_table("A", ["a"])], PanelOptions(), FieldConfigSource()
    )
    assert fingerprint(tables, options, field_config) != fingerprint(
        tables, PanelOptions(point_size=5), field_config
    )


def test_render_cache_reuses_results() -> None:
    cache = RenderCache(max_entries=2)
    tables = [_table("A", ["a"])]

    first = cache.get_or_build(tables)
    second = cache.get_or_build([_table("A", ["a"])])

    assert first is second
    assert cache.hits == 1 and cache.misses == 1


def test_render_cache_evicts_oldest_entry() -> None:
    cache = RenderCache(max_entries=2)

    for label in ("a", "b", "c"):
        _ = cache.get_or_build([_table("A", [label])])

    assert len(cache) == 2
    _ = cache.get_or_build([_table("A", ["a"])])
    assert cache.misses == 4


def test_example_tables_produce_three_clusters() -> None:
    chart = build_chart_data(generate_example_tables(n_tables=2, rows_per_table=50))

    assert chart.valid
    assert [cluster.label for cluster in chart.clusters] == ["setosa", "versicolor", "virginica"]
    assert chart.total_points == 100


def test_tables_sharing_a_schema_resolve_by_name() -> None:
    def table(ref_id: str, labels: list[str]) -> DataFrame:
        rows = range(len(labels))
        return DataFrame(
            ref_id=ref_id,
            fields=[
                DataField(name="clusterLabel", type=FieldType.STRING, values=labels),
                DataField(name="x", type=FieldType.NUMBER, values=[float(i) for i in rows]),
                DataField(name="y", type=FieldType.NUMBER, values=[4.0 for _ in rows]),
                DataField(name="z", type=FieldType.NUMBER, values=[5.0 + i for i in rows]),
            ],
        )

    tables = [table("A", ["a", "b"]), table("B", ["a"])]
    manual = PanelOptions(series_mapping=SeriesMapping.MANUAL)

    for options in (PanelOptions(), manual):
        chart = build_chart_data(tables, options)

        assert chart.valid
        assert chart.field_names == ["x", "y", "z", "clusterLabel"]
        assert [cluster.label for cluster in chart.clusters] == ["a", "b"]
        assert chart.clusters[0].x == [0.0, 0.0]
        assert chart.clusters[0].z == [5.0, 5.0]


def test_render_cache_keeps_null_and_non_finite_labels_apart() -> None:
    def table(label: Any) -> DataFrame:
        return DataFrame(
            fields=[
                DataField(name="x", type=FieldType.NUMBER, values=[1.0]),
                DataField(name="y", type=FieldType.NUMBER, values=[2.0]),
                DataField(name="z", type=FieldType.NUMBER, values=[3.0]),
                DataField(name="clusterLabel", type=FieldType.STRING, values=[label]),
            ]
        )

    cache = RenderCache()
    labels = [None, math.inf, math.nan]

    charts = [cache.get_or_build([table(label)]) for label in labels]

    assert [chart.clusters[0].label for chart in charts] == ["null", "Infinity", "NaN"]
    assert cache.hits == 0 and cache.misses == 3
    assert len({fingerprint([table(label)], PanelOptions(), FieldConfigSource()) for label in labels}) == 3
