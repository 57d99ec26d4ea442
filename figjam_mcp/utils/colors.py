"""
Colour preset resolution for FigJam elements.
"""

import re

from figjam_mcp.config import FIGJAM_COLORS

_HEX_PATTERN = re.compile(r"^#?[0-9A-Fa-f]{6}$")


def resolve_color(color: str) -> str:
    """Resolve a named preset or raw hex string to a ``#RRGGBB`` value.

    Args:
        color: Preset name (e.g. ``LIGHT_BLUE``) or hex string (``#C2E5FF``)

    Returns:
        Upper-case hex string with a leading ``#``

    Raises:
        ValueError: If the colour is neither a preset nor valid hex
    """
    hex_value = FIGJAM_COLORS.get(color.upper(), color)
    if not _HEX_PATTERN.match(hex_value):
        raise ValueError(f"Unknown color: {color}")
    return "#" + hex_value.lstrip("#").upper()


def hex_to_rgb(hex_value: str) -> dict[str, float]:
    """Convert a hex colour to the 0..1 RGB triple the canvas expects."""
    h = resolve_color(hex_value).lstrip("#")
    return {
        "r": int(h[0:2], 16) / 255,
        "g": int(h[2:4], 16) / 255,
        "b": int(h[4:6], 16) / 255,
    }
