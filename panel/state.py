"""Per-panel-instance interaction state and its event handlers.

Each handler takes the current ``PanelState`` and returns a new one, so every
panel instance carries its own hover and camera state and nothing is shared
between the instances a dashboard shows at once (for example a view and an
edit copy of the same panel).
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, Field

import config
from cluster.projector import to_tooltip
from types_models import CameraState, ChartData, HoverEvent, TooltipMode, TooltipPayload

logger = logging.getLogger(__name__)


class PanelState(BaseModel):
    """Interaction state owned by one panel instance."""

    instance_id: str = Field(description="Identifier of the render surface")
    pointer_over: bool = Field(
        default=False, description="Whether the pointer is over this instance"
    )
    last_hovered: tuple[int, int] | None = Field(
        default=None, description="(curve, point) of the last hovered point"
    )
    tooltip: TooltipPayload | None = Field(default=None)
    tooltip_left: float | None = Field(default=None)
    tooltip_top: float | None = Field(default=None)
    initial_camera: CameraState | None = Field(default=None)
    camera: CameraState | None = Field(default=None)

    model_config = ConfigDict(frozen=True)

    def with_updates(self, **update: object) -> "PanelState":
        """Return a copy with the supplied state updates."""
        return cast("PanelState", self.model_copy(update=update))


class TooltipUpdate(BaseModel):
    """What the host should do with its tooltip after an event."""

    action: Literal["show", "hide"]
    payload: TooltipPayload | None = None
    left: float | None = None
    top: float | None = None

    model_config = ConfigDict(frozen=True)


_HIDE = TooltipUpdate(action="hide")


def handle_pointer(state: PanelState, inside: bool) -> PanelState:
    """Track whether the pointer is over this instance's render surface."""
    if inside:
        return state.with_updates(pointer_over=True)
    return state.with_updates(
        pointer_over=False,
        last_hovered=None,
        tooltip=None,
        tooltip_left=None,
        tooltip_top=None,
    )


def handle_hover(
    state: PanelState,
    event: HoverEvent,
    chart: ChartData,
    tooltip_mode: TooltipMode,
    *,
    source_instance_id: str,
) -> tuple[PanelState, TooltipUpdate | None]:
    """React to a point hover.

    Returns the new state and a tooltip update, or ``None`` when nothing needs
    to change: the event belongs to another instance, the pointer is not over
    this one, or the same point is still hovered.
    """
    if source_instance_id != state.instance_id or not state.pointer_over:
        logger.debug(
            "Ignoring hover from %s on instance %s", source_instance_id, state.instance_id
        )
        return state, None

    if event.point_id == state.last_hovered:
        return state, None

    label = str(event.series_name)
    if tooltip_mode == TooltipMode.NONE or label in chart.hidden_from_tooltip:
        new_state = state.with_updates(
            last_hovered=event.point_id, tooltip=None, tooltip_left=None, tooltip_top=None
        )
        return new_state, _HIDE if state.tooltip is not None else None

    payload = to_tooltip(event, chart.colors_by_label, chart.field_names)
    left = event.bbox.x0 if event.bbox is not None else None
    top = event.bbox.y0 if event.bbox is not None else None

    new_state = state.with_updates(
        last_hovered=event.point_id, tooltip=payload, tooltip_left=left, tooltip_top=top
    )
    return new_state, TooltipUpdate(action="show", payload=payload, left=left, top=top)


def handle_unhover(
    state: PanelState, *, source_instance_id: str
) -> tuple[PanelState, TooltipUpdate | None]:
    """Hide the tooltip and forget the hovered point."""
    if source_instance_id != state.instance_id or not state.pointer_over:
        return state, None

    new_state = state.with_updates(
        last_hovered=None, tooltip=None, tooltip_left=None, tooltip_top=None
    )
    return new_state, _HIDE


def handle_camera_change(state: PanelState, camera: CameraState) -> PanelState:
    """Record the renderer's camera; the first one seen becomes the initial camera."""
    initial = state.initial_camera if state.initial_camera is not None else dict(camera)
    return state.with_updates(initial_camera=initial, camera=dict(camera))


def reset_camera(state: PanelState) -> PanelState:
    """Restore the camera recorded on the first render."""
    if state.initial_camera is None:
        return state
    return state.with_updates(camera=dict(state.initial_camera))


class PanelSessions:
    """Registry of panel instances, each with its own state and last chart.

    Holds at most ``max_instances`` instances; registering one more forgets
    the least recently used.
    """

    def __init__(self, max_instances: int = config.MAX_PANEL_SESSIONS) -> None:
        super().__init__()
        if max_instances <= 0:
            raise ValueError("max_instances must be positive")
        self._max_instances = max_instances
        self._states: OrderedDict[str, PanelState] = OrderedDict()
        self._charts: dict[str, ChartData] = {}
        self._tooltip_modes: dict[str, TooltipMode] = {}
        self._lock = threading.Lock()

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def register(
        self, instance_id: str, chart: ChartData, tooltip_mode: TooltipMode
    ) -> PanelState:
        """Store the latest chart for an instance, creating its state if needed."""
        with self._lock:
            state = self._states.get(instance_id) or PanelState(instance_id=instance_id)
            if self._charts.get(instance_id) is not chart:
                # New data invalidates the hovered point.
                state = state.with_updates(
                    last_hovered=None, tooltip=None, tooltip_left=None, tooltip_top=None
                )
            self._states[instance_id] = state
            self._states.move_to_end(instance_id)
            self._charts[instance_id] = chart
            self._tooltip_modes[instance_id] = tooltip_mode

            while len(self._states) > self._max_instances:
                evicted, _ = self._states.popitem(last=False)
                self._charts.pop(evicted, None)
                self._tooltip_modes.pop(evicted, None)
                logger.debug("Forgot least recently used panel instance %s", evicted)
            return state

    def state(self, instance_id: str) -> PanelState:
        """Return the state of a registered instance (KeyError if unknown)."""
        with self._lock:
            return self._states[instance_id]

    def chart(self, instance_id: str) -> ChartData:
        with self._lock:
            return self._charts[instance_id]

    def tooltip_mode(self, instance_id: str) -> TooltipMode:
        with self._lock:
            return self._tooltip_modes[instance_id]

    def update(self, state: PanelState) -> None:
        with self._lock:
            if state.instance_id not in self._states:
                raise KeyError(state.instance_id)
            self._states[state.instance_id] = state
            self._states.move_to_end(state.instance_id)

    def remove(self, instance_id: str) -> None:
        with self._lock:
            self._states.pop(instance_id, None)
            self._charts.pop(instance_id, None)
            self._tooltip_modes.pop(instance_id, None)


__all__ = [
    "PanelSessions",
    "PanelState",
    "TooltipUpdate",
    "handle_camera_change",
    "handle_hover",
    "handle_pointer",
    "handle_unhover",
    "reset_camera",
]
