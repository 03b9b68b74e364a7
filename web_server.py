# ======================================
# Cluster 3D Panel Web Server
# - FastAPI server a dashboard host talks to
# - Render, hover, camera and legend endpoints
# - CORS enabled for local development
# ======================================

# ===============================
# Standard Library
# ===============================

import logging
from contextlib import asynccontextmanager

# ===============================
# Third-party Libraries
# ===============================
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

# ===============================
# Local Imports
# ===============================
import config
from __version__ import __version__
from cluster.pipeline import RenderCache
from cluster.projector import to_figure
from panel.legend import toggle_series_visibility
from panel.state import (
    PanelSessions,
    handle_camera_change,
    handle_hover,
    handle_pointer,
    handle_unhover,
    reset_camera,
)
from web.models import (
    CameraRequest,
    HealthResponse,
    HoverRequest,
    HoverResponse,
    LegendToggleRequest,
    LegendToggleResponse,
    PanelStateResponse,
    PointerRequest,
    RenderRequest,
    RenderResponse,
    UnhoverRequest,
)

logger = logging.getLogger(__name__)


# ===============================
# Global State
# ===============================
sessions = PanelSessions()
render_cache = RenderCache()


# ===============================
# Startup/Shutdown Handlers
# ===============================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start with an empty cache, drop all panel state on shutdown."""
    print("🚀 Cluster 3D panel server ready")
    yield

    print("🔄 Shutting down panel server...")
    render_cache.clear()


# ===============================
# FastAPI App
# ===============================
app = FastAPI(
    title="Cluster 3D Panel API",
    description="Maps tabular data to 3D cluster scatter charts for a dashboard host",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your dashboard domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_panel(instance_id: str) -> None:
    if instance_id not in sessions:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown panel instance '{instance_id}'. Render it first.",
        )


# ===============================
# API Endpoints
# ===============================
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        panels=len(sessions),
        cache_entries=len(render_cache),
    )


@app.post("/render", response_model=RenderResponse)
async def render_endpoint(request: RenderRequest):
    """Map the pushed tables to chart data (and optionally a figure)."""
    chart = render_cache.get_or_build(
        request.tables, request.options, request.field_config
    )

    camera = None
    if request.instance_id:
        state = sessions.register(request.instance_id, chart, request.options.tooltip.mode)
        camera = state.camera

    figure = None
    if request.include_figure:
        figure = to_figure(
            chart, camera=camera, width=request.width, height=request.height
        )

    if not chart.valid:
        logger.info("Render produced no valid data: %s", chart.error)

    return RenderResponse(
        chart=chart,
        figure=figure,
        success=chart.valid,
        error=chart.error,
    )


@app.post("/panels/{instance_id}/pointer", response_model=PanelStateResponse)
async def pointer_endpoint(instance_id: str, request: PointerRequest):
    """Pointer entered or left the panel's render surface."""
    _require_panel(instance_id)
    state = handle_pointer(sessions.state(instance_id), request.inside)
    sessions.update(state)
    return PanelStateResponse(state=state)


@app.post("/panels/{instance_id}/hover", response_model=HoverResponse)
async def hover_endpoint(instance_id: str, request: HoverRequest):
    """Point hover; redundant events for the same point return no update."""
    _require_panel(instance_id)
    state, update = handle_hover(
        sessions.state(instance_id),
        request.event,
        sessions.chart(instance_id),
        sessions.tooltip_mode(instance_id),
        source_instance_id=request.source_instance_id,
    )
    sessions.update(state)
    return HoverResponse(update=update, state=state)


@app.post("/panels/{instance_id}/unhover", response_model=HoverResponse)
async def unhover_endpoint(instance_id: str, request: UnhoverRequest):
    _require_panel(instance_id)
    state, update = handle_unhover(
        sessions.state(instance_id), source_instance_id=request.source_instance_id
    )
    sessions.update(state)
    return HoverResponse(update=update, state=state)


@app.post("/panels/{instance_id}/camera", response_model=PanelStateResponse)
async def camera_endpoint(instance_id: str, request: CameraRequest):
    """Record a camera change reported by the renderer."""
    _require_panel(instance_id)
    state = handle_camera_change(sessions.state(instance_id), request.camera)
    sessions.update(state)
    return PanelStateResponse(state=state)


@app.post("/panels/{instance_id}/camera/reset", response_model=PanelStateResponse)
async def camera_reset_endpoint(instance_id: str):
    _require_panel(instance_id)
    state = reset_camera(sessions.state(instance_id))
    sessions.update(state)
    return PanelStateResponse(state=state)


@app.delete("/panels/{instance_id}", status_code=204)
async def remove_panel_endpoint(instance_id: str):
    """Forget a panel instance (panel removed from the dashboard)."""
    _require_panel(instance_id)
    sessions.remove(instance_id)


@app.post("/legend/toggle", response_model=LegendToggleResponse)
async def legend_toggle_endpoint(request: LegendToggleRequest):
    """Turn a legend click into the field config the host should persist."""
    if not request.label:
        raise HTTPException(status_code=400, detail="Label cannot be empty")

    field_config = toggle_series_visibility(
        request.label, request.mode, request.field_config, request.labels
    )
    return LegendToggleResponse(field_config=field_config)


# ===============================
# Server Entry Point
# ===============================
def main() -> None:
    """Run the FastAPI server."""
    logging.basicConfig(level=config.LOG_LEVEL)
    print("🌐 Starting Cluster 3D Panel Server...")
    print(f"🔍 API docs available at: http://localhost:{config.WEB_PORT}/docs")

    uvicorn.run(
        app,
        host=config.WEB_HOST,
        port=config.WEB_PORT,
        reload=False,  # Set to True for development
        access_log=True,
    )


if __name__ == "__main__":
    main()
