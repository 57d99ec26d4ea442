"""
Element schema reference for FigJam boards.
"""

from fastmcp import FastMCP

from figjam_mcp.config import ELEMENT_DEFAULTS, FIGJAM_COLORS, LAYOUT_THRESHOLDS

# Recommended use and size for each shape type
SHAPE_GUIDE = {
    "ROUNDED_RECTANGLE": ("Services, components, modules, APIs", "200×100"),
    "ENG_DATABASE": ("Databases, data stores, caches", "160×120"),
    "ENG_QUEUE": ("Message queues, event buses, brokers", "160×100"),
    "ENG_FILE": ("Files, documents, configs", "140×120"),
    "ENG_FOLDER": ("Folders, packages, modules", "160×120"),
    "DIAMOND": ("Decisions, conditions, branching", "160×160"),
    "ELLIPSE": ("Start/end points, events, triggers", "160×100"),
    "PARALLELOGRAM_RIGHT": ("Input/output, data flow", "200×100"),
    "SQUARE": ("Generic blocks, steps", "120×120"),
    "TRIANGLE_UP": ("Warnings, alerts, gateways", "140×140"),
}

COLOR_GUIDE = {
    "LIGHT_BLUE": "Default shapes, services",
    "LIGHT_GREEN": "Success states, databases, healthy",
    "LIGHT_VIOLET": "External services, third-party",
    "LIGHT_YELLOW": "Notes, warnings, stickies",
    "LIGHT_ORANGE": "Queues, async, pending",
    "LIGHT_RED": "Errors, critical, alerts",
    "LIGHT_PINK": "User-facing, frontend",
    "LIGHT_TEAL": "Networking, communication",
    "LIGHT_GRAY": "Disabled, inactive, auxiliary",
    "WHITE": "Backgrounds, clean sections",
}


def _size(key: str) -> str:
    width, height = ELEMENT_DEFAULTS[key]
    return f"{width:g}×{height:g}"


def build_schema_markdown() -> str:
    """Render the element schema reference as markdown."""
    gap = LAYOUT_THRESHOLDS["min_connector_gap"]
    padding = LAYOUT_THRESHOLDS["section_header"]

    lines = [
        "# FigJam Element Schema",
        "",
        "## Shape Types",
        "| shape_type | Use for | Suggested size |",
        "|------------|---------|----------------|",
    ]
    for shape_type, (use, size) in SHAPE_GUIDE.items():
        lines.append(f"| {shape_type} | {use} | {size} |")

    lines += [
        "",
        "## Color Palette (always prefer LIGHT_* for readability)",
        "| Name | Hex | Best for |",
        "|------|-----|----------|",
    ]
    for name, use in COLOR_GUIDE.items():
        lines.append(f"| {name} | {FIGJAM_COLORS[name]} | {use} |")
    others = [name for name in FIGJAM_COLORS if name not in COLOR_GUIDE]
    lines.append("")
    lines.append(f"Also available: {', '.join(others)}. Any #RRGGBB hex value is accepted.")

    lines += [
        "",
        "## Element Sizes & Spacing",
        f"- Shapes: default {_size('shape_size')}, resizable to any size",
        f"- Stickies: FIXED {_size('sticky_size')} (wide: {_size('wide_sticky_size')}), NOT resizable",
        f"- Sections: default {_size('section_size')}, use for grouping; "
        f"section header is ~{padding:g}px tall",
        f"- **Minimum gap between connected elements: {gap:g}px** "
        "(so connectors have room for arrows and labels)",
        "- Minimum gap between unconnected elements: 50px",
        f"- Place shapes inside sections with at least {padding:g}px padding from section edges "
        "(60px from top for header)",
        "- When planning positions, always account for connector labels needing visible space between shapes",
        "",
        "## Connectors",
        "- Connect any two shapes/stickies by id",
        '- Use `label` for relationship annotations (e.g. "REST API", "publishes", "reads from")',
        "- Prefer labels on connectors instead of placing stickies next to arrows",
        "",
        "## Text Nodes (create_text)",
        "- Use VERY SPARINGLY; prefer connector labels and shape text instead",
        "- NEVER place a text node on top of or overlapping a shape or connector",
        "- Text nodes are best for board titles or isolated notes far from diagram elements",
        "",
        "## Stickies",
        "- Use SPARINGLY, only for annotations, tradeoffs, or callouts",
        "- Place OUTSIDE the main diagram flow to avoid overlap",
        "",
        "## Sections",
        "- Use for grouping related elements (subsystems, layers, domains)",
        "- Create sections FIRST, then place shapes inside them with `parent_id`",
        "- Children of a section use section-relative x/y",
    ]
    return "\n".join(lines) + "\n"


def register_schema_resources(mcp: FastMCP) -> None:
    """Register the element schema resource with the MCP server.

    Args:
        mcp: The FastMCP server instance
    """

    @mcp.resource("figjam://schema", mime_type="text/markdown")
    def get_schema() -> str:
        """FigJam element schema reference: shape types, colour palette, sizes and layout rules."""
        return build_schema_markdown()
