"""
Configuration settings for the FigJam MCP server.
"""

import os

# Board identity and server settings from the environment
BOARD_NAME = os.environ.get("FIGJAM_BOARD_NAME", "Page 1")
LOG_LEVEL = os.environ.get("FIGJAM_MCP_LOG_LEVEL", "INFO").upper()
HTTP_HOST = os.environ.get("FIGJAM_MCP_HOST", "127.0.0.1")
HTTP_PORT = int(os.environ.get("FIGJAM_MCP_PORT", "8080"))

# Layout validation thresholds (canvas pixels unless noted)
LAYOUT_THRESHOLDS = {
    "overlap_ratio": 0.1,  # Fraction of the smaller element's area
    "min_connector_gap": 80.0,  # Room for arrowheads and labels
    "section_header": 40.0,  # Section header height + padding
    "section_inset": 10.0,  # Visual margin on left/right/bottom of a section
    "truncation_padding": 40.0,  # Inner padding of a shape around its text
    "truncation_slack": 20.0,  # Extra height added to a suggested resize
    "bleed_suggestion_margin": 30.0,  # Margin used when suggesting a section size
}

# Character-width heuristic used for text measurement
TEXT_METRICS = {
    "char_width_ratio": 0.55,  # Average glyph width as a fraction of font size
    "line_height_ratio": 1.4,  # Line height as a multiple of font size
    "default_font_size": 14.0,  # Shapes without an explicit size
    "text_node_font_size": 16.0,  # Standalone text nodes
}

# Element creation defaults
ELEMENT_DEFAULTS = {
    "shape_size": (200.0, 100.0),
    "sticky_size": (240.0, 240.0),
    "wide_sticky_size": (440.0, 240.0),
    "section_size": (600.0, 400.0),
    "section_name": "Section",
    "shape_type": "ROUNDED_RECTANGLE",
    "shape_color": "LIGHT_BLUE",
    "sticky_color": "LIGHT_YELLOW",
    "distribution_spacing": 60.0,
}

SHAPE_TYPES = [
    "SQUARE",
    "ELLIPSE",
    "ROUNDED_RECTANGLE",
    "DIAMOND",
    "TRIANGLE_UP",
    "TRIANGLE_DOWN",
    "PARALLELOGRAM_RIGHT",
    "PARALLELOGRAM_LEFT",
    "ENG_DATABASE",
    "ENG_QUEUE",
    "ENG_FILE",
    "ENG_FOLDER",
]

# Named colour presets
FIGJAM_COLORS = {
    # Light variants (readable with dark text)
    "LIGHT_BLUE": "#C2E5FF",
    "LIGHT_GREEN": "#CDF4D3",
    "LIGHT_VIOLET": "#E4CCFF",
    "LIGHT_YELLOW": "#FFECBD",
    "LIGHT_ORANGE": "#FFE0C2",
    "LIGHT_RED": "#FFCDC2",
    "LIGHT_PINK": "#FFC2EC",
    "LIGHT_TEAL": "#C6FAF6",
    "LIGHT_GRAY": "#D9D9D9",
    # Full variants
    "BLUE": "#3DADFF",
    "GREEN": "#66D575",
    "VIOLET": "#9747FF",
    "YELLOW": "#FFC943",
    "ORANGE": "#FF9E42",
    "RED": "#FF7556",
    "PINK": "#F849C1",
    "TEAL": "#5AD8CC",
    "GRAY": "#B3B3B3",
    "DARK_GRAY": "#757575",
    "BLACK": "#1E1E1E",
    "WHITE": "#FFFFFF",
}

# Display constants
DISPLAY_CONSTANTS = {
    "text_preview_length": 40,  # Characters of shape text quoted in issue details
}
