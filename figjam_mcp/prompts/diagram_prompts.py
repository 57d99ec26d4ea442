"""
Prompt templates for drawing diagrams on FigJam boards.
"""

from fastmcp import FastMCP


def register_diagram_prompts(mcp: FastMCP) -> None:
    """Register diagram prompt templates with the MCP server.

    Args:
        mcp: The FastMCP server instance
    """

    @mcp.prompt(name="draw_diagram")
    def draw_diagram(topic: str) -> str:
        """Step-by-step guide for creating a well-structured FigJam diagram."""
        prompt = f"""
        Create a FigJam diagram about: {topic}

        Follow this workflow:

        1. Plan the layout
           - Identify all nodes (components, services, entities) and their types
           - Identify all connections between nodes with labels
           - Decide on logical groupings (sections)
           - Plan a left-to-right or top-to-bottom flow

        2. Read the schema
           Read the figjam://schema resource to see the available shapes, colors and sizes.

        3. Create sections first
           Width = (shapes across x shape width) + (gaps x 80px) + 120px padding.
           Height = (rows x shape height) + (row gaps x 80px) + 120px padding (60px top for the header).

        4. Create shapes
           - ROUNDED_RECTANGLE for services/components
           - ENG_DATABASE for databases
           - ENG_QUEUE for queues/message brokers
           - DIAMOND for decisions
           - ELLIPSE for start/end points
           Use LIGHT_* colors and place shapes inside their sections with parent_id.
           Size shapes to fit their text (roughly 8px per character).
           Space shapes at least 80px apart: a 200px wide shape at x=100 means the next
           one starts at x=380 or later.

        5. Create connectors with labels
           Use create_connector and always add a label describing the relationship.

        6. Add annotations sparingly
           Only use stickies for important callouts, placed outside the main flow.
           Avoid standalone text nodes near shapes or connectors.

        7. Validate the layout (mandatory)
           Call validate_layout and fix every issue it reports:
           - Truncated text: resize the shape
           - Overlapping elements: reposition them
           - Connectors through shapes: move shapes out of the connector path
           - Section bleed: resize the section or move the element
           - Tight connectors: move connected elements at least 80px apart
           Keep calling validate_layout until zero issues remain.

        8. Final alignment
           Use align_elements and distribute_elements (spacing >= 80 between connected
           elements) to tidy up. Sections grow to fit automatically, but confirm with
           validate_layout.

        You can also describe the whole diagram at once with create_diagram_from_text.
        """
        return prompt.strip()
