from __future__ import annotations

from cluster.overrides import resolve_visibility
from panel.legend import (
    EXCLUDE_PREFIX,
    VisibilityChangeMode,
    create_hide_series_override,
    is_hide_series_override,
    toggle_series_visibility,
)
from types_models import ByNamesOptions, ConfigOverrideRule, FieldConfigSource

LABELS = ["a", "b", "c"]
TOGGLE = VisibilityChangeMode.TOGGLE_SELECTION
APPEND = VisibilityChangeMode.APPEND_TO_SELECTION


def _names(field_config: FieldConfigSource) -> list[str]:
    rule = next(rule for rule in field_config.overrides if is_hide_series_override(rule))
    options = rule.matcher.options
    assert isinstance(options, ByNamesOptions)
    return options.names


def _hidden(field_config: FieldConfigSource) -> list[str]:
    visibility = resolve_visibility(field_config.overrides, LABELS)
    return [label for label in LABELS if visibility[label].hide_from.viz]


def test_created_rule_shape() -> None:
    rule = create_hide_series_override(["a"])
    options = rule.matcher.options

    assert rule.matcher.id == "byNames"
    assert isinstance(options, ByNamesOptions)
    assert options.mode == "exclude"
    assert options.prefix == EXCLUDE_PREFIX
    assert options.read_only is True
    assert rule.properties[0].id == "custom.hideFrom"
    assert rule.properties[0].value == {"legend": False, "tooltip": False, "viz": True}
    assert is_hide_series_override(rule)


def test_user_written_rules_are_not_legend_rules() -> None:
    rule = ConfigOverrideRule.model_validate(
        {
            "matcher": {"id": "byNames", "options": {"names": ["a"], "mode": "exclude"}},
            "properties": [{"id": "custom.hideFrom", "value": {"viz": True}}],
        }
    )

    assert not is_hide_series_override(rule)


def test_click_isolates_cluster() -> None:
    field_config = toggle_series_visibility("a", TOGGLE, FieldConfigSource(), LABELS)

    assert _names(field_config) == ["a"]
    assert _hidden(field_config) == ["b", "c"]


def test_click_on_isolated_cluster_shows_all() -> None:
    isolated = toggle_series_visibility("a", TOGGLE, FieldConfigSource(), LABELS)

    restored = toggle_series_visibility("a", TOGGLE, isolated, LABELS)

    assert restored.overrides == []
    assert _hidden(restored) == []


def test_click_on_other_cluster_moves_isolation() -> None:
    isolated = toggle_series_visibility("a", TOGGLE, FieldConfigSource(), LABELS)

    moved = toggle_series_visibility("b", TOGGLE, isolated, LABELS)

    assert len(moved.overrides) == 1
    assert _names(moved) == ["b"]


def test_append_click_hides_one_cluster() -> None:
    field_config = toggle_series_visibility("a", APPEND, FieldConfigSource(), LABELS)

    assert _names(field_config) == ["b", "c"]
    assert _hidden(field_config) == ["a"]


def test_append_click_adds_to_selection() -> None:
    isolated = toggle_series_visibility("a", TOGGLE, FieldConfigSource(), LABELS)

    both = toggle_series_visibility("c", APPEND, isolated, LABELS)

    assert _names(both) == ["a", "c"]
    assert _hidden(both) == ["b"]


def test_append_click_removing_from_selection() -> None:
    isolated = toggle_series_visibility("a", TOGGLE, FieldConfigSource(), LABELS)
    both = toggle_series_visibility("c", APPEND, isolated, LABELS)

    single = toggle_series_visibility("a", APPEND, both, LABELS)

    assert _names(single) == ["c"]


def test_append_click_that_shows_everything_drops_rule() -> None:
    hidden_a = toggle_series_visibility("a", APPEND, FieldConfigSource(), LABELS)

    restored = toggle_series_visibility("a", APPEND, hidden_a, LABELS)

    assert restored.overrides == []


def test_other_rules_are_kept_in_order() -> None:
    color_rule = ConfigOverrideRule.model_validate(
        {
            "matcher": {"id": "byName", "options": "a"},
            "properties": [{"id": "color", "value": "red"}],
        }
    )
    field_config = FieldConfigSource(overrides=[color_rule])

    toggled = toggle_series_visibility("b", TOGGLE, field_config, LABELS)
    toggled = toggle_series_visibility("c", TOGGLE, toggled, LABELS)

    assert toggled.overrides[0] == color_rule
    assert len(toggled.overrides) == 2
    assert _names(toggled) == ["c"]
    assert field_config.overrides == [color_rule]
