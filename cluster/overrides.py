"""Resolve per-cluster visibility and color from field-config overrides.

Override rules are applied in list order. A ``byNames`` matcher in
``include`` mode names the clusters it hides; in ``exclude`` mode it hides
every cluster except the named ones (the form a legend click writes). A
``byName`` matcher targets one cluster. Clusters no rule matches stay visible.

Colors come from the first ``byName`` rule carrying a ``color`` property for
the exact cluster label. Without one, the palette sentinel is returned and the
cluster's display color is assigned from the palette by cluster index.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Any

from pydantic import ValidationError

from cluster.colors import palette_color, to_hex_color
from types_models import (
    ByNamesOptions,
    ConfigOverrideRule,
    FieldColor,
    FieldColorMode,
    FieldConfigSource,
    HideFrom,
    MatcherConfig,
    VisibilityEntry,
)

BY_NAME = "byName"
BY_NAMES = "byNames"
COLOR_PROPERTY = "color"
HIDE_FROM_PROPERTY = "custom.hideFrom"


class PaletteSentinel(str, Enum):
    """Marker meaning "assign the next palette color by cluster index"."""

    PALETTE = "palette"


PALETTE = PaletteSentinel.PALETTE
ColorAssignment = str | PaletteSentinel


def matched_labels(matcher: MatcherConfig, labels: Sequence[str]) -> list[str]:
    """Return the labels a matcher selects, in *labels* order."""
    options = matcher.options

    if matcher.id == BY_NAME and isinstance(options, str):
        return [label for label in labels if label == options]

    if matcher.id == BY_NAMES and isinstance(options, ByNamesOptions):
        names = set(options.names)
        if options.mode == "exclude":
            return [label for label in labels if label not in names]
        return [label for label in labels if label in names]

    return []


def _property_value(rule: ConfigOverrideRule, property_id: str) -> Any:
    for prop in rule.properties:
        if prop.id == property_id and prop.value:
            return prop.value
    return None


def _hide_from(rule: ConfigOverrideRule) -> HideFrom | None:
    value = _property_value(rule, HIDE_FROM_PROPERTY)
    if value is None:
        return None
    if isinstance(value, HideFrom):
        return value
    try:
        return HideFrom.model_validate(value)
    except ValidationError:
        return None


def resolve_visibility(
    overrides: Sequence[ConfigOverrideRule], labels: Sequence[str]
) -> dict[str, VisibilityEntry]:
    """Map every cluster label to where it is hidden (defaults: nowhere)."""
    entries = {label: VisibilityEntry(label=label) for label in labels}

    for rule in overrides:
        hide_from = _hide_from(rule)
        if hide_from is None:
            continue
        for label in matched_labels(rule.matcher, labels):
            entries[label] = VisibilityEntry(label=label, hide_from=hide_from)

    return entries


def _color_value(value: Any) -> ColorAssignment | None:
    if isinstance(value, str):
        return value
    try:
        color = FieldColor.model_validate(value)
    except ValidationError:
        return None
    if color.mode == FieldColorMode.FIXED and color.fixed_color:
        return color.fixed_color
    return PALETTE


def resolve_color(
    overrides: Sequence[ConfigOverrideRule], label: str
) -> ColorAssignment:
    """Return the override color for *label*, or the palette sentinel."""
    for rule in overrides:
        matcher = rule.matcher
        if matcher.id != BY_NAME or matcher.options != str(label):
            continue
        value = _property_value(rule, COLOR_PROPERTY)
        if value is None:
            continue
        color = _color_value(value)
        if color is not None:
            return color
    return PALETTE


def resolve_display_colors(
    field_config: FieldConfigSource, labels: Sequence[str]
) -> list[str]:
    """Return one ``#RRGGBB`` display color per label, index-aligned."""
    default_color = field_config.defaults.color
    colors: list[str] = []

    for index, label in enumerate(labels):
        color = resolve_color(field_config.overrides, label)
        if color is PALETTE:
            if default_color.mode == FieldColorMode.FIXED and default_color.fixed_color:
                color = default_color.fixed_color
            else:
                color = palette_color(index)
        colors.append(to_hex_color(color))

    return colors


__all__ = [
    "BY_NAME",
    "BY_NAMES",
    "COLOR_PROPERTY",
    "HIDE_FROM_PROPERTY",
    "PALETTE",
    "ColorAssignment",
    "PaletteSentinel",
    "matched_labels",
    "resolve_color",
    "resolve_display_colors",
    "resolve_visibility",
]
