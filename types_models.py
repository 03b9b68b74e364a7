"""
Type definitions and Pydantic models for the cluster 3D panel.

This module provides validated type definitions for everything that flows
through the panel: the tables a host query layer pushes in, the options and
field overrides the host persists, and the chart-ready results handed to the
renderer, legend and tooltip.
"""

from enum import Enum
from typing import Any, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

import config

# Opaque camera payload passed through from the renderer.
CameraState = dict[str, Any]


# ===============================
# Input tables
# ===============================
class FieldType(str, Enum):
    """Value kind of a column as reported by the host."""

    NUMBER = "number"
    STRING = "string"
    TIME = "time"
    BOOLEAN = "boolean"
    OTHER = "other"


class DataField(BaseModel):
    """A named, typed column of raw (nullable) values."""

    name: str = Field(description="Column name as returned by the query")
    type: FieldType = Field(default=FieldType.OTHER, description="Value kind")
    values: list[Any] = Field(default_factory=list, description="Raw values")
    display_name: str | None = Field(
        default=None,
        alias="displayName",
        description="Explicit display name configured on the column",
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("values", mode="before")
    @classmethod
    def _to_python_values(cls, v: Any) -> Any:
        """Accept numpy arrays and scalars, storing plain Python values."""
        if isinstance(v, np.ndarray):
            return v.tolist()
        if isinstance(v, (list, tuple)):
            return [item.item() if isinstance(item, np.generic) else item for item in v]
        return v


class DataFrame(BaseModel):
    """One table of columns sharing a row count."""

    ref_id: str | None = Field(
        default=None, alias="refId", description="Query identifier of the table"
    )
    name: str | None = Field(default=None, description="Optional table name")
    fields: list[DataField] = Field(default_factory=list, description="Columns")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def length(self) -> int:
        """Row count, taken from the first column."""
        if not self.fields:
            return 0
        return len(self.fields[0].values)

    def source_id(self, index: int) -> str:
        """Identifier used to tell this table apart from its siblings."""
        if self.ref_id:
            return self.ref_id
        if self.name:
            return self.name
        return str(index)


# ===============================
# Panel options
# ===============================
class SeriesMapping(str, Enum):
    """How the X/Y/Z/label columns are chosen."""

    AUTO = "auto"
    MANUAL = "manual"


class SeriesConfig(BaseModel):
    """Column display names used as X, Y, Z and cluster label."""

    x: str | None = Field(default=config.DEFAULT_X_FIELD)
    y: str | None = Field(default=config.DEFAULT_Y_FIELD)
    z: str | None = Field(default=config.DEFAULT_Z_FIELD)
    cluster_label: str | None = Field(
        default=config.DEFAULT_CLUSTER_LABEL_FIELD, alias="clusterLabel"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def names(self) -> tuple[str | None, str | None, str | None, str | None]:
        """Return the configured names in (X, Y, Z, label) order."""
        return (self.x, self.y, self.z, self.cluster_label)


LegendPlacement = Literal["left", "right", "bottom"]
LegendDisplayMode = Literal["list", "table", "hidden"]


class LegendOptions(BaseModel):
    """Legend layout options."""

    show_legend: bool = Field(default=True, alias="showLegend")
    placement: LegendPlacement = Field(default="right")
    display_mode: LegendDisplayMode = Field(default="list", alias="displayMode")
    separate_legend_by_series: bool = Field(
        default=False,
        alias="separateLegendBySeries",
        description="Older location of the separate-by-series switch",
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class TooltipMode(str, Enum):
    NONE = "none"
    SINGLE = "single"
    MULTI = "multi"


class TooltipOptions(BaseModel):
    mode: TooltipMode = Field(default=TooltipMode.SINGLE)

    model_config = ConfigDict(frozen=True)


class PanelOptions(BaseModel):
    """Panel options with full validation."""

    series_mapping: SeriesMapping = Field(
        default=SeriesMapping.AUTO, alias="seriesMapping"
    )
    series: SeriesConfig = Field(default_factory=SeriesConfig)
    separate_clusters_by_series: bool = Field(
        default=False,
        alias="separateClustersBySeries",
        description="Keep identical labels from different tables apart",
    )
    point_size: int = Field(
        default=config.DEFAULT_POINT_SIZE,
        ge=config.MIN_POINT_SIZE,
        le=config.MAX_POINT_SIZE,
        alias="pointSize",
    )
    fill_opacity: float = Field(
        default=config.DEFAULT_FILL_OPACITY,
        ge=config.MIN_FILL_OPACITY,
        le=config.MAX_FILL_OPACITY,
        alias="fillOpacity",
    )
    legend: LegendOptions = Field(default_factory=LegendOptions)
    tooltip: TooltipOptions = Field(default_factory=TooltipOptions)
    strict_field_kinds: bool = Field(
        default=False,
        alias="strictFieldKinds",
        description="Only fall back to columns whose kind suits the slot",
    )
    drop_null_labels: bool = Field(
        default=False,
        alias="dropNullLabels",
        description="Drop rows without a cluster label instead of grouping them",
    )

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    @property
    def separate_by_series(self) -> bool:
        return self.separate_clusters_by_series or self.legend.separate_legend_by_series


# ===============================
# Field config and overrides
# ===============================
class FieldColorMode(str, Enum):
    PALETTE_CLASSIC = "palette-classic"
    FIXED = "fixed"


class FieldColor(BaseModel):
    mode: FieldColorMode = Field(default=FieldColorMode.PALETTE_CLASSIC)
    fixed_color: str | None = Field(default=None, alias="fixedColor")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class FieldDefaults(BaseModel):
    color: FieldColor = Field(default_factory=FieldColor)
    custom: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class ByNamesOptions(BaseModel):
    """Options of a matcher that targets a list of names."""

    mode: Literal["include", "exclude"] = Field(default="include")
    names: list[str] = Field(default_factory=list)
    prefix: str | None = Field(default=None)
    read_only: bool = Field(default=False, alias="readOnly")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class MatcherConfig(BaseModel):
    """Selects which clusters an override rule applies to."""

    id: str = Field(description="Matcher identifier, e.g. byName or byNames")
    options: ByNamesOptions | str | None = Field(default=None)

    model_config = ConfigDict(frozen=True)


class DynamicConfigValue(BaseModel):
    id: str = Field(description="Property identifier, e.g. color")
    value: Any = Field(default=None)

    model_config = ConfigDict(frozen=True)


class ConfigOverrideRule(BaseModel):
    matcher: MatcherConfig
    properties: list[DynamicConfigValue] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class FieldConfigSource(BaseModel):
    """Field defaults plus the ordered list of override rules."""

    defaults: FieldDefaults = Field(default_factory=FieldDefaults)
    overrides: list[ConfigOverrideRule] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class HideFrom(BaseModel):
    """Where a cluster is hidden."""

    legend: bool = Field(default=False)
    tooltip: bool = Field(default=False)
    viz: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)

    @property
    def hides_anything(self) -> bool:
        return self.legend or self.tooltip or self.viz


# ===============================
# Pipeline results
# ===============================
class ResolvedMapping(BaseModel):
    """Column indices chosen for X, Y, Z and cluster label."""

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    z: int = Field(ge=0)
    cluster_label: int = Field(ge=0)
    field_names: tuple[str, str, str, str] = Field(
        description="Display names of the four columns, same order"
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_distinct(self) -> "ResolvedMapping":
        if len(set(self.indices)) != len(self.indices):
            raise ValueError(f"Resolved column indices must be distinct: {self.indices}")
        return self

    @property
    def indices(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.z, self.cluster_label)


class Point(BaseModel):
    x: Any = None
    y: Any = None
    z: Any = None

    model_config = ConfigDict(frozen=True)


class Cluster(BaseModel):
    """Points sharing one cluster key, in scan order."""

    label: str = Field(description="Cluster key")
    x: list[Any] = Field(default_factory=list)
    y: list[Any] = Field(default_factory=list)
    z: list[Any] = Field(default_factory=list)
    origins: list[tuple[int, int]] = Field(
        default_factory=list, description="(table index, row index) of each point"
    )

    @property
    def points(self) -> list[Point]:
        return [Point(x=x, y=y, z=z) for x, y, z in zip(self.x, self.y, self.z)]

    @property
    def size(self) -> int:
        return len(self.x)


class VisibilityEntry(BaseModel):
    label: str
    hide_from: HideFrom = Field(default_factory=HideFrom)

    model_config = ConfigDict(frozen=True)

    @property
    def hidden(self) -> bool:
        return self.hide_from.hides_anything


class RenderableSeries(BaseModel):
    """One chart trace, ready for the 3D scatter renderer."""

    label: str
    x: list[Any]
    y: list[Any]
    z: list[Any]
    color: str = Field(description="Resolved display color")
    fill_color: str = Field(description="Marker fill, display color with opacity applied")
    border_color: str = Field(description="Marker outline, display color opaque")
    marker_size: float = Field(gt=0)
    visible: bool = Field(default=True)
    hide_from: HideFrom = Field(default_factory=HideFrom)

    model_config = ConfigDict(frozen=True)


class LegendItem(BaseModel):
    label: str
    color: str
    disabled: bool = False
    y_axis: int = 1

    model_config = ConfigDict(frozen=True)


class Legend(BaseModel):
    items: list[LegendItem] = Field(default_factory=list)
    placement: LegendPlacement = "right"
    display_mode: LegendDisplayMode = "list"

    model_config = ConfigDict(frozen=True)


class TooltipField(BaseModel):
    field_name: str
    value: Any = None

    model_config = ConfigDict(frozen=True)


class TooltipPayload(BaseModel):
    """Content of the hover tooltip for one point."""

    color: str
    label: str
    x: TooltipField
    y: TooltipField
    z: TooltipField

    model_config = ConfigDict(frozen=True)


class ChartData(BaseModel):
    """Complete chart dataset for the renderer, legend and tooltip."""

    valid: bool = Field(description="False when the input could not be mapped")
    clusters: list[Cluster] = Field(default_factory=list)
    series: list[RenderableSeries] = Field(default_factory=list)
    legend: Legend | None = Field(default=None)
    field_names: list[str] = Field(
        default_factory=list, description="Display names of X, Y, Z and label"
    )
    colors_by_label: dict[str, str] = Field(default_factory=dict)
    hidden_from_tooltip: list[str] = Field(default_factory=list)
    total_points: int = Field(default=0, ge=0)
    error: str | None = Field(default=None, description="Error message if failed")


# ===============================
# Renderer events
# ===============================
class BoundingBox(BaseModel):
    x0: float
    x1: float
    y0: float
    y1: float

    model_config = ConfigDict(frozen=True)


class HoverEvent(BaseModel):
    """A point-hover notification from the renderer."""

    curve_number: int = Field(ge=0, alias="curveNumber")
    point_number: int = Field(ge=0, alias="pointNumber")
    series_name: Any = Field(alias="seriesName")
    x: Any = None
    y: Any = None
    z: Any = None
    bbox: BoundingBox | None = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def point_id(self) -> tuple[int, int]:
        return (self.curve_number, self.point_number)
