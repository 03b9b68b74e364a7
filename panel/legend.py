"""Legend clicks rewritten as visibility overrides.

A legend click never mutates panel state directly; it produces a new field
config whose overrides the host persists and feeds back into the next render.
The rule written here is a read-only ``byNames`` matcher in ``exclude`` mode,
so its name list is the set of clusters that stay visible.
"""

from collections.abc import Sequence
from enum import Enum
from typing import cast

from cluster.overrides import BY_NAMES, HIDE_FROM_PROPERTY
from types_models import (
    ByNamesOptions,
    ConfigOverrideRule,
    DynamicConfigValue,
    FieldConfigSource,
    HideFrom,
    MatcherConfig,
)

EXCLUDE_PREFIX = "All except:"


class VisibilityChangeMode(str, Enum):
    """Modifier state of a legend click."""

    TOGGLE_SELECTION = "toggle-selection"  # plain click: isolate
    APPEND_TO_SELECTION = "append-to-selection"  # ctrl/meta click: toggle one


def is_hide_series_override(rule: ConfigOverrideRule) -> bool:
    """True for the rule a legend click writes."""
    options = rule.matcher.options
    if rule.matcher.id != BY_NAMES or not isinstance(options, ByNamesOptions):
        return False
    if not options.read_only:
        return False
    for prop in rule.properties:
        if prop.id != HIDE_FROM_PROPERTY:
            continue
        value = prop.value
        if isinstance(value, HideFrom):
            return value.viz
        if isinstance(value, dict):
            return bool(value.get("viz"))
    return False


def create_hide_series_override(names: Sequence[str]) -> ConfigOverrideRule:
    """Build the override that hides every cluster except *names*."""
    return ConfigOverrideRule(
        matcher=MatcherConfig(
            id=BY_NAMES,
            options=ByNamesOptions(
                mode="exclude",
                names=list(names),
                prefix=EXCLUDE_PREFIX,
                read_only=True,
            ),
        ),
        properties=[
            DynamicConfigValue(
                id=HIDE_FROM_PROPERTY,
                value=HideFrom(viz=True, legend=False, tooltip=False).model_dump(),
            )
        ],
    )


def _visible_names(rule: ConfigOverrideRule, labels: Sequence[str]) -> list[str]:
    options = cast(ByNamesOptions, rule.matcher.options)
    if options.mode == "exclude":
        return [label for label in labels if label in options.names]
    return [label for label in labels if label not in options.names]


def toggle_series_visibility(
    label: str,
    mode: VisibilityChangeMode,
    field_config: FieldConfigSource,
    labels: Sequence[str],
) -> FieldConfigSource:
    """Return the field config after a legend click on *label*.

    Args:
        label: Cluster label of the clicked legend item.
        mode: Plain click isolates the cluster (or shows everything again when
            it is already the only one visible); append click toggles it.
        field_config: Current field config; other rules are kept in order.
        labels: All cluster labels currently in the chart.
    """
    overrides = list(field_config.overrides)
    current_index = next(
        (i for i, rule in enumerate(overrides) if is_hide_series_override(rule)), None
    )

    if current_index is None:
        if mode == VisibilityChangeMode.TOGGLE_SELECTION:
            rule = create_hide_series_override([label])
        else:
            rule = create_hide_series_override([name for name in labels if name != label])
        return field_config.model_copy(update={"overrides": overrides + [rule]})

    current = overrides.pop(current_index)
    visible = _visible_names(current, labels)

    if mode == VisibilityChangeMode.TOGGLE_SELECTION:
        if visible == [label]:
            return field_config.model_copy(update={"overrides": overrides})
        rule = create_hide_series_override([label])
        return field_config.model_copy(update={"overrides": overrides + [rule]})

    if label in visible:
        visible = [name for name in visible if name != label]
    else:
        visible = [name for name in labels if name in visible or name == label]

    if set(labels) <= set(visible):
        return field_config.model_copy(update={"overrides": overrides})

    rule = create_hide_series_override(visible)
    return field_config.model_copy(update={"overrides": overrides + [rule]})


__all__ = [
    "EXCLUDE_PREFIX",
    "VisibilityChangeMode",
    "create_hide_series_override",
    "is_hide_series_override",
    "toggle_series_visibility",
]
