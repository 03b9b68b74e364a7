# ======================================
# Web API Models
# - Pydantic v2 request/response models for the panel host API
# - Type-safe data structures for frontend/backend
# ======================================

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from panel.legend import VisibilityChangeMode
from panel.state import PanelState, TooltipUpdate
from types_models import (
    CameraState,
    ChartData,
    DataFrame,
    FieldConfigSource,
    HoverEvent,
    PanelOptions,
)


class RenderRequest(BaseModel):
    """Tables pushed by the host plus the panel's persisted configuration."""

    tables: list[DataFrame] = Field(default_factory=list)
    options: PanelOptions = Field(default_factory=PanelOptions)
    field_config: FieldConfigSource = Field(
        default_factory=FieldConfigSource, alias="fieldConfig"
    )
    instance_id: str | None = Field(
        default=None,
        alias="instanceId",
        description="Panel instance to attach the chart to for hover handling",
    )
    include_figure: bool = Field(default=False, alias="includeFigure")
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)

    model_config = ConfigDict(populate_by_name=True)


class RenderResponse(BaseModel):
    chart: ChartData
    figure: dict[str, Any] | None = None
    success: bool
    error: str | None = None


class PointerRequest(BaseModel):
    inside: bool = Field(description="Pointer entered (true) or left (false)")


class HoverRequest(BaseModel):
    source_instance_id: str = Field(
        alias="sourceInstanceId",
        description="Instance whose render surface emitted the event",
    )
    event: HoverEvent

    model_config = ConfigDict(populate_by_name=True)


class UnhoverRequest(BaseModel):
    source_instance_id: str = Field(alias="sourceInstanceId")

    model_config = ConfigDict(populate_by_name=True)


class CameraRequest(BaseModel):
    camera: CameraState = Field(description="Opaque camera payload from the renderer")


class HoverResponse(BaseModel):
    update: TooltipUpdate | None = None
    state: PanelState


class PanelStateResponse(BaseModel):
    state: PanelState


class LegendToggleRequest(BaseModel):
    label: str
    mode: VisibilityChangeMode = Field(default=VisibilityChangeMode.TOGGLE_SELECTION)
    labels: list[str] = Field(description="All cluster labels in the chart")
    field_config: FieldConfigSource = Field(
        default_factory=FieldConfigSource, alias="fieldConfig"
    )

    model_config = ConfigDict(populate_by_name=True)


class LegendToggleResponse(BaseModel):
    field_config: FieldConfigSource


class HealthResponse(BaseModel):
    status: str
    version: str
    panels: int = Field(ge=0)
    cache_entries: int = Field(ge=0)
