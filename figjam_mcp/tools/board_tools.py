"""
Element creation and board management tools for FigJam boards.
"""

import logging
from typing import Any

from fastmcp import Context, FastMCP

from figjam_mcp.utils.board import InMemoryBoard
from figjam_mcp.utils.board_service import get_board
from figjam_mcp.utils.scene import ElementKind

logger = logging.getLogger(__name__)


async def create_sticky(
    text: str,
    x: float = 0,
    y: float = 0,
    wide: bool = False,
    color: str | None = None,
    parent_id: str | None = None,
    ctx: Context = None,
) -> dict[str, Any]:
    """Create a sticky note.

    Args:
        text: Sticky note text
        x: X position (section-relative when parent_id is given)
        y: Y position (section-relative when parent_id is given)
        wide: Use the wide 440x240 format
        color: Colour preset name or hex
        parent_id: Optional section to place the sticky in
        ctx: Context for MCP communication

    Returns:
        Dictionary with the created element
    """
    try:
        element = get_board().create_sticky(text, x, y, wide, color, parent_id)
        if ctx:
            await ctx.info(f"Created sticky {element.id}")
        return {"success": True, "element": element.to_dict()}
    except Exception as e:
        logger.error(f"Error creating sticky: {e}")
        return {"success": False, "error": str(e)}


async def create_shape(
    text: str = "",
    shape_type: str = "ROUNDED_RECTANGLE",
    x: float = 0,
    y: float = 0,
    width: float | None = None,
    height: float | None = None,
    color: str | None = None,
    font_size: float | None = None,
    parent_id: str | None = None,
    ctx: Context = None,
) -> dict[str, Any]:
    """Create a shape with text.

    Args:
        text: Text inside the shape
        shape_type: One of the FigJam shape types (ROUNDED_RECTANGLE, DIAMOND...)
        x: X position
        y: Y position
        width: Width in pixels (default 200)
        height: Height in pixels (default 100)
        color: Colour preset name or hex
        font_size: Font size of the shape text
        parent_id: Optional section to place the shape in
        ctx: Context for MCP communication

    Returns:
        Dictionary with the created element
    """
    try:
        element = get_board().create_shape(
            shape_type, text, x, y, width, height, color, font_size, parent_id
        )
        if ctx:
            await ctx.info(f"Created {element.properties['shape_type']} shape {element.id}")
        return {"success": True, "element": element.to_dict()}
    except Exception as e:
        logger.error(f"Error creating shape: {e}")
        return {"success": False, "error": str(e)}


async def create_text(
    text: str,
    x: float = 0,
    y: float = 0,
    font_size: float | None = None,
    parent_id: str | None = None,
    ctx: Context = None,
) -> dict[str, Any]:
    """Create a standalone text label."""
    try:
        element = get_board().create_text(text, x, y, font_size, parent_id)
        if ctx:
            await ctx.info(f"Created text {element.id}")
        return {"success": True, "element": element.to_dict()}
    except Exception as e:
        logger.error(f"Error creating text: {e}")
        return {"success": False, "error": str(e)}


async def create_connector(
    start_id: str,
    end_id: str,
    label: str | None = None,
    stroke_color: str | None = None,
    ctx: Context = None,
) -> dict[str, Any]:
    """Connect two existing elements with an arrow."""
    try:
        element = get_board().create_connector(start_id, end_id, label, stroke_color)
        if ctx:
            await ctx.info(f"Connected {start_id} -> {end_id} ({element.id})")
        return {"success": True, "element": element.to_dict()}
    except Exception as e:
        logger.error(f"Error creating connector: {e}")
        return {"success": False, "error": str(e)}


async def create_section(
    name: str = "Section",
    x: float = 0,
    y: float = 0,
    width: float | None = None,
    height: float | None = None,
    ctx: Context = None,
) -> dict[str, Any]:
    """Create a section to group related elements."""
    try:
        element = get_board().create_section(name, x, y, width, height)
        if ctx:
            await ctx.info(f"Created section {element.id} '{element.name}'")
        return {"success": True, "element": element.to_dict()}
    except Exception as e:
        logger.error(f"Error creating section: {e}")
        return {"success": False, "error": str(e)}


async def update_element(
    element_id: str,
    x: float | None = None,
    y: float | None = None,
    width: float | None = None,
    height: float | None = None,
    text: str | None = None,
    color: str | None = None,
    ctx: Context = None,
) -> dict[str, Any]:
    """Move, resize, re-text or recolour an existing element.

    This is the tool agents use to resolve issues reported by validate_layout.
    """
    try:
        element = get_board().update_element(element_id, x, y, width, height, text, color)
        if ctx:
            await ctx.info(f"Updated {element_id}")
        return {"success": True, "element": element.to_dict()}
    except Exception as e:
        logger.error(f"Error updating element {element_id}: {e}")
        return {"success": False, "error": str(e)}


async def delete_element(element_id: str, ctx: Context = None) -> dict[str, Any]:
    """Delete an element; deleting a section also deletes its children."""
    try:
        removed = get_board().delete_element(element_id)
        if ctx:
            await ctx.info(f"Deleted {element_id}")
        return {"success": True, "deleted": removed.id, "type": removed.kind.value}
    except Exception as e:
        logger.error(f"Error deleting element {element_id}: {e}")
        return {"success": False, "error": str(e)}


async def query_elements(
    element_type: str | None = None, include_children: bool = False, ctx: Context = None
) -> dict[str, Any]:
    """List elements on the board, optionally filtered by type.

    Args:
        element_type: Optional type filter (SHAPE_WITH_TEXT/shape, STICKY, TEXT, CONNECTOR, SECTION, or ALL)
        include_children: Also list the elements inside sections
        ctx: Context for MCP communication

    Returns:
        Dictionary with the matching elements and their count
    """
    try:
        # "ALL" is the host's explicit no-filter value
        if element_type and element_type.strip().upper() != "ALL":
            kind = ElementKind.parse(element_type)
        else:
            kind = None
        elements = get_board().query_elements(kind, include_children)
        return {
            "success": True,
            "elements": [element.to_dict() for element in elements],
            "count": len(elements),
        }
    except Exception as e:
        logger.error(f"Error querying elements: {e}")
        return {"success": False, "error": str(e)}


async def clear_board(ctx: Context = None) -> dict[str, Any]:
    """Remove every element from the board."""
    try:
        removed = get_board().clear_board()
        if ctx:
            await ctx.info(f"Cleared board ({removed} elements)")
        return {"success": True, "cleared": True, "removed_count": removed}
    except Exception as e:
        logger.error(f"Error clearing board: {e}")
        return {"success": False, "error": str(e)}


async def get_board_info(ctx: Context = None) -> dict[str, Any]:
    """Report the page name and element counts by type."""
    try:
        return {"success": True, **get_board().get_board_info()}
    except Exception as e:
        logger.error(f"Error reading board info: {e}")
        return {"success": False, "error": str(e)}


def create_from_spec(board: InMemoryBoard, spec: dict[str, Any], refs: dict[str, str]):
    """Create one element from a batch spec, resolving ref ids through ``refs``."""

    def resolve(ref: str | None) -> str | None:
        return refs.get(ref, ref) if ref else ref

    element_type = spec.get("type", "")
    parent_id = resolve(spec.get("parent_id"))
    x = spec.get("x", 0)
    y = spec.get("y", 0)

    if element_type == "section":
        return board.create_section(spec.get("name"), x, y, spec.get("width"), spec.get("height"))
    if element_type == "shape":
        return board.create_shape(
            spec.get("shape_type"),
            spec.get("text", ""),
            x,
            y,
            spec.get("width"),
            spec.get("height"),
            spec.get("color"),
            spec.get("font_size"),
            parent_id,
        )
    if element_type == "sticky":
        return board.create_sticky(
            spec.get("text", ""), x, y, spec.get("wide", False), spec.get("color"), parent_id
        )
    if element_type == "text":
        return board.create_text(spec.get("text", ""), x, y, spec.get("font_size"), parent_id)
    if element_type == "connector":
        return board.create_connector(
            resolve(spec.get("start_id")) or "",
            resolve(spec.get("end_id")) or "",
            spec.get("label"),
            spec.get("stroke_color"),
        )
    raise ValueError(f"Unknown element type: {element_type}")


async def batch_create(elements: list[dict[str, Any]], ctx: Context = None) -> dict[str, Any]:
    """Create many elements in one call.

    Elements are created in order. A ``ref_id`` on an element can be used by
    later connectors (``start_id``/``end_id``) and children (``parent_id``)
    in the same batch. Failures are collected per element; the call only
    fails when nothing could be created.

    Args:
        elements: Element specs (``type`` plus the matching create_* fields)
        ctx: Context for MCP communication

    Returns:
        Dictionary with created ids mapped to their ref ids and any errors
    """
    board = get_board()
    refs: dict[str, str] = {}
    created = []
    errors = []

    for index, spec in enumerate(elements):
        ref_id = spec.get("ref_id")
        try:
            element = create_from_spec(board, spec, refs)
        except Exception as e:
            label = f"{spec.get('type', 'element')}" + (f" ({ref_id})" if ref_id else "")
            errors.append(f"{label}: {e}")
            continue
        if ref_id:
            refs[ref_id] = element.id
        created.append({"ref_id": ref_id, "id": element.id, "type": element.kind.value})
        if ctx:
            await ctx.report_progress(index + 1, len(elements))

    if ctx:
        await ctx.info(f"Batch created {len(created)} elements, {len(errors)} errors")

    result: dict[str, Any] = {
        "success": not (errors and not created),
        "created": created,
        "count": len(created),
    }
    if errors:
        result["errors"] = errors
    return result


def register_board_tools(mcp: FastMCP) -> None:
    """Register element creation and board management tools with the MCP server.

    Args:
        mcp: The FastMCP server instance
    """

    @mcp.tool(name="create_sticky")
    async def create_sticky_tool(
        text: str,
        x: float = 0,
        y: float = 0,
        wide: bool = False,
        color: str | None = None,
        parent_id: str | None = None,
        ctx: Context = None,
    ) -> dict[str, Any]:
        """Create a sticky note (240x240, or 440x240 when wide). Stickies cannot be resized."""
        return await create_sticky(text, x, y, wide, color, parent_id, ctx)

    @mcp.tool(name="create_shape")
    async def create_shape_tool(
        text: str = "",
        shape_type: str = "ROUNDED_RECTANGLE",
        x: float = 0,
        y: float = 0,
        width: float | None = None,
        height: float | None = None,
        color: str | None = None,
        font_size: float | None = None,
        parent_id: str | None = None,
        ctx: Context = None,
    ) -> dict[str, Any]:
        """Create a shape with text, the primary building block for diagrams."""
        return await create_shape(
            text, shape_type, x, y, width, height, color, font_size, parent_id, ctx
        )

    @mcp.tool(name="create_text")
    async def create_text_tool(
        text: str,
        x: float = 0,
        y: float = 0,
        font_size: float | None = None,
        parent_id: str | None = None,
        ctx: Context = None,
    ) -> dict[str, Any]:
        """Create a standalone text label."""
        return await create_text(text, x, y, font_size, parent_id, ctx)

    @mcp.tool(name="create_connector")
    async def create_connector_tool(
        start_id: str,
        end_id: str,
        label: str | None = None,
        stroke_color: str | None = None,
        ctx: Context = None,
    ) -> dict[str, Any]:
        """Connect two elements with an arrow, optionally labelled."""
        return await create_connector(start_id, end_id, label, stroke_color, ctx)

    @mcp.tool(name="create_section")
    async def create_section_tool(
        name: str = "Section",
        x: float = 0,
        y: float = 0,
        width: float | None = None,
        height: float | None = None,
        ctx: Context = None,
    ) -> dict[str, Any]:
        """Create a section that groups related elements."""
        return await create_section(name, x, y, width, height, ctx)

    @mcp.tool(name="update_element")
    async def update_element_tool(
        element_id: str,
        x: float | None = None,
        y: float | None = None,
        width: float | None = None,
        height: float | None = None,
        text: str | None = None,
        color: str | None = None,
        ctx: Context = None,
    ) -> dict[str, Any]:
        """Move, resize, re-text or recolour an element."""
        return await update_element(element_id, x, y, width, height, text, color, ctx)

    @mcp.tool(name="delete_element")
    async def delete_element_tool(element_id: str, ctx: Context = None) -> dict[str, Any]:
        """Delete an element (sections take their children with them)."""
        return await delete_element(element_id, ctx)

    @mcp.tool(name="query_elements")
    async def query_elements_tool(
        element_type: str | None = None, include_children: bool = False, ctx: Context = None
    ) -> dict[str, Any]:
        """List elements on the board, optionally filtered by type."""
        return await query_elements(element_type, include_children, ctx)

    @mcp.tool(name="clear_board")
    async def clear_board_tool(ctx: Context = None) -> dict[str, Any]:
        """Remove every element from the board."""
        return await clear_board(ctx)

    @mcp.tool(name="get_board_info")
    async def get_board_info_tool(ctx: Context = None) -> dict[str, Any]:
        """Get the page name and element counts by type."""
        return await get_board_info(ctx)

    @mcp.tool(name="batch_create")
    async def batch_create_tool(elements: list[dict[str, Any]], ctx: Context = None) -> dict[str, Any]:
        """Create many elements at once; use ref_id to wire connectors within the batch."""
        return await batch_create(elements, ctx)
