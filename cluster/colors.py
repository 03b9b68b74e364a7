"""Color names, the classic series palette and alpha composition.

Colors arrive from overrides as dashboard color names ("semi-dark-red"),
hex strings, CSS color names or ``rgb()``/``rgba()`` strings. Everything is
normalised through matplotlib's color parser after dashboard names have been
mapped to their hex values.
"""

import logging
import re

from matplotlib.colors import to_hex, to_rgba

import config

logger = logging.getLogger(__name__)

RGBA = tuple[float, float, float, float]

# Dashboard hue names (dark theme variants).
NAMED_COLORS: dict[str, str] = {
    "dark-red": "#C4162A",
    "semi-dark-red": "#E02F44",
    "red": "#F2495C",
    "light-red": "#FF7383",
    "super-light-red": "#FFA6B0",
    "dark-orange": "#FA6400",
    "semi-dark-orange": "#FF780A",
    "orange": "#FF9830",
    "light-orange": "#FFB357",
    "super-light-orange": "#FFCB7D",
    "dark-yellow": "#E0B400",
    "semi-dark-yellow": "#F2CC0C",
    "yellow": "#FADE2A",
    "light-yellow": "#FFEE52",
    "super-light-yellow": "#FFF899",
    "dark-green": "#37872D",
    "semi-dark-green": "#56A64B",
    "green": "#73BF69",
    "light-green": "#96D98D",
    "super-light-green": "#C8F2C2",
    "dark-blue": "#1F60C4",
    "semi-dark-blue": "#3274D9",
    "blue": "#5794F2",
    "light-blue": "#8AB8FF",
    "super-light-blue": "#C0D8FF",
    "dark-purple": "#8F3BB8",
    "semi-dark-purple": "#A352CC",
    "purple": "#B877D9",
    "light-purple": "#CA95E5",
    "super-light-purple": "#DEB6F2",
}

# Classic palette, assigned to clusters by index.
CLASSIC_PALETTE: tuple[str, ...] = (
    "#7EB26D", "#EAB839", "#6ED0E0", "#EF843C", "#E24D42", "#1F78C1",
    "#BA43A9", "#705DA0", "#508642", "#CCA300", "#447EBC", "#C15C17",
    "#890F02", "#0A437C", "#6D1F62", "#584477", "#B7DBAB", "#F4D598",
    "#70DBED", "#F9BA8F", "#F29191", "#82B5D8", "#E5A8E2", "#AEA2E0",
    "#629E51", "#E5AC0E", "#64B0C8", "#E0752D", "#BF1B00", "#0A50A1",
    "#962D82", "#614D93", "#9AC48A", "#F2C96D", "#65C5DB", "#F9934E",
    "#EA6460", "#5195CE", "#D683CE", "#806EB7", "#3F6833", "#967302",
    "#2F575E", "#99440A", "#58140C", "#052B51", "#511749", "#3F2B5B",
    "#E0F9D7", "#FCEACA", "#CFFAFF", "#F9E2D2", "#FCE2DE", "#BADFF4",
    "#F9D9F9", "#DEDAF7",
)

_CSS_RGB = re.compile(
    r"^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)$",
    re.IGNORECASE,
)


def palette_color(index: int) -> str:
    """Return the palette color for the cluster at *index*."""
    return CLASSIC_PALETTE[index % len(CLASSIC_PALETTE)]


def parse_color(color: str) -> RGBA:
    """Parse any supported color string into an RGBA tuple of floats in [0, 1].

    Raises:
        ValueError: The string is not a color.
    """
    value = NAMED_COLORS.get(color.strip().lower(), color.strip())

    match = _CSS_RGB.match(value)
    if match:
        red, green, blue, alpha = match.groups()
        rgb = [min(float(channel), 255.0) / 255.0 for channel in (red, green, blue)]
        return (rgb[0], rgb[1], rgb[2], min(float(alpha), 1.0) if alpha else 1.0)

    return to_rgba(value)


def safe_parse_color(color: str | None) -> RGBA:
    """Parse *color*, falling back to the fallback color when it is unusable."""
    if color:
        try:
            return parse_color(color)
        except ValueError:
            logger.warning("Unrecognised color %r, using %s", color, config.FALLBACK_COLOR)
    return to_rgba(config.FALLBACK_COLOR)


def to_css(rgba: RGBA) -> str:
    """Format an RGBA tuple as ``rgb(r, g, b)`` or ``rgba(r, g, b, a)``."""
    red, green, blue = (round(channel * 255) for channel in rgba[:3])
    alpha = round(rgba[3], 4)
    if alpha >= 1:
        return f"rgb({red}, {green}, {blue})"
    return f"rgba({red}, {green}, {blue}, {alpha:g})"


def with_alpha(color: str | None, alpha: float) -> str:
    """Return *color* with its alpha replaced by *alpha* (clamped to [0, 1])."""
    red, green, blue, _ = safe_parse_color(color)
    return to_css((red, green, blue, min(max(alpha, 0.0), 1.0)))


def opaque(color: str | None) -> str:
    return with_alpha(color, 1.0)


def to_hex_color(color: str | None) -> str:
    """Normalise *color* to ``#rrggbb`` (alpha dropped)."""
    return to_hex(safe_parse_color(color), keep_alpha=False).upper()


__all__ = [
    "CLASSIC_PALETTE",
    "NAMED_COLORS",
    "opaque",
    "palette_color",
    "parse_color",
    "safe_parse_color",
    "to_css",
    "to_hex_color",
    "with_alpha",
]
