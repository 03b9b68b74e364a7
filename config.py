# ======================================
# Config for the cluster 3D panel
# Defaults mirror the options a dashboard host persists for a new panel
# ======================================

from typing import Literal

# Type definitions
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

# Field mapping
REQUIRED_FIELD_COUNT: int = 4
DEFAULT_X_FIELD: str = "x"
DEFAULT_Y_FIELD: str = "y"
DEFAULT_Z_FIELD: str = "z"
DEFAULT_CLUSTER_LABEL_FIELD: str = "clusterLabel"

# Graph styles
DEFAULT_POINT_SIZE: int = 2
MIN_POINT_SIZE: int = 1
MAX_POINT_SIZE: int = 20
DEFAULT_FILL_OPACITY: int = 90
MIN_FILL_OPACITY: int = 0
MAX_FILL_OPACITY: int = 100
MARKER_LINE_WIDTH: int = 1  # the renderer ignores other widths for 3D markers

# Colors and labels
FALLBACK_COLOR: str = "gray"
NULL_LABEL: str = "null"
SERIES_KEY_SEPARATOR: str = " "

# Render cache (entries keyed by input + options fingerprint)
RENDER_CACHE_SIZE: int = 16

# Panel instances tracked by the server; the least recently used is forgotten
MAX_PANEL_SESSIONS: int = 256

# Web server
WEB_HOST: str = "0.0.0.0"
WEB_PORT: int = 8000

# Logging
LOG_LEVEL: LogLevel = "INFO"


def validate_config() -> None:
    """Validate configuration values at startup."""
    positive_int_configs = [
        ("REQUIRED_FIELD_COUNT", REQUIRED_FIELD_COUNT),
        ("MIN_POINT_SIZE", MIN_POINT_SIZE),
        ("MAX_POINT_SIZE", MAX_POINT_SIZE),
        ("MARKER_LINE_WIDTH", MARKER_LINE_WIDTH),
        ("RENDER_CACHE_SIZE", RENDER_CACHE_SIZE),
        ("MAX_PANEL_SESSIONS", MAX_PANEL_SESSIONS),
        ("WEB_PORT", WEB_PORT),
    ]

    for config_name, config_val in positive_int_configs:
        if not isinstance(config_val, int) or config_val <= 0:
            raise ValueError(
                f"{config_name} must be a positive integer, got: {config_val}"
            )

    if not MIN_POINT_SIZE <= DEFAULT_POINT_SIZE <= MAX_POINT_SIZE:
        raise ValueError(
            f"DEFAULT_POINT_SIZE must be between {MIN_POINT_SIZE} and "
            + f"{MAX_POINT_SIZE}, got: {DEFAULT_POINT_SIZE}"
        )

    if not MIN_FILL_OPACITY <= DEFAULT_FILL_OPACITY <= MAX_FILL_OPACITY:
        raise ValueError(
            f"DEFAULT_FILL_OPACITY must be between {MIN_FILL_OPACITY} and "
            + f"{MAX_FILL_OPACITY}, got: {DEFAULT_FILL_OPACITY}"
        )

    # String configs
    string_configs = [
        ("DEFAULT_X_FIELD", DEFAULT_X_FIELD),
        ("DEFAULT_Y_FIELD", DEFAULT_Y_FIELD),
        ("DEFAULT_Z_FIELD", DEFAULT_Z_FIELD),
        ("DEFAULT_CLUSTER_LABEL_FIELD", DEFAULT_CLUSTER_LABEL_FIELD),
        ("FALLBACK_COLOR", FALLBACK_COLOR),
        ("NULL_LABEL", NULL_LABEL),
        ("WEB_HOST", WEB_HOST),
    ]

    for config_name, config_val in string_configs:
        if not isinstance(config_val, str) or not config_val.strip():
            raise ValueError(
                f"{config_name} must be a non-empty string, got: {config_val}"
            )

    default_names = {
        DEFAULT_X_FIELD,
        DEFAULT_Y_FIELD,
        DEFAULT_Z_FIELD,
        DEFAULT_CLUSTER_LABEL_FIELD,
    }
    if len(default_names) != REQUIRED_FIELD_COUNT:
        raise ValueError("Default field names must be distinct")

    valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR"}
    if LOG_LEVEL not in valid_log_levels:
        raise ValueError(
            f"LOG_LEVEL must be one of {valid_log_levels}, got: {LOG_LEVEL}"
        )


# Validate on import
validate_config()
