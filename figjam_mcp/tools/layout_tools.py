"""
Layout validation and arrangement tools for FigJam boards.
"""

import logging
from typing import Any

from fastmcp import Context, FastMCP

from figjam_mcp.utils.arrangement import ArrangementEngine
from figjam_mcp.utils.board_service import get_board
from figjam_mcp.utils.layout_validator import LayoutValidator

logger = logging.getLogger(__name__)


async def validate_layout(ctx: Context = None) -> dict[str, Any]:
    """Check the board for truncated text, overlaps, tight or obstructed connectors and section bleed.

    Args:
        ctx: Context for MCP communication

    Returns:
        Dictionary with the issue list (empty when the layout is clean),
        the issue count and a summary sentence
    """
    try:
        if ctx:
            await ctx.info("Validating board layout")
            await ctx.report_progress(10, 100)

        validator = LayoutValidator()
        report = validator.validate(get_board())

        if ctx:
            await ctx.report_progress(100, 100)
            await ctx.info(validator.generate_report_text(report))

        return {"success": True, **report.to_dict()}

    except Exception as e:
        logger.error(f"Error validating layout: {e}")
        if ctx:
            await ctx.info(f"Error validating layout: {str(e)}")
        return {"success": False, "error": str(e)}


async def align_elements(element_ids: list[str], alignment: str, ctx: Context = None) -> dict[str, Any]:
    """Align elements on a shared edge or centre line, then fit their sections.

    Args:
        element_ids: Ids of the elements to align
        alignment: left, center, right, top, middle or bottom
        ctx: Context for MCP communication

    Returns:
        Dictionary with the aligned count and any resized section ids
    """
    try:
        result = ArrangementEngine(get_board()).align(element_ids, alignment)
        if ctx:
            await ctx.info(f"Aligned {result['count']} elements ({alignment})")
        return {"success": True, **result}
    except Exception as e:
        logger.error(f"Error aligning elements: {e}")
        return {"success": False, "error": str(e)}


async def distribute_elements(
    element_ids: list[str],
    direction: str,
    spacing: float | None = None,
    ctx: Context = None,
) -> dict[str, Any]:
    """Distribute elements evenly along an axis with a minimum gap.

    Args:
        element_ids: Ids of the elements to distribute (at least three)
        direction: horizontal or vertical
        spacing: Minimum gap between elements (default 60)
        ctx: Context for MCP communication

    Returns:
        Dictionary with the distributed count, the gap used and any resized section ids
    """
    try:
        result = ArrangementEngine(get_board()).distribute(element_ids, direction, spacing)
        if ctx:
            if "spacing" in result:
                await ctx.info(f"Distributed {result['count']} elements {direction}, gap {result['spacing']:g}px")
            else:
                await ctx.info(f"Nothing to distribute: {result['count']} element(s) resolved")
        return {"success": True, **result}
    except Exception as e:
        logger.error(f"Error distributing elements: {e}")
        return {"success": False, "error": str(e)}


def register_layout_tools(mcp: FastMCP) -> None:
    """Register layout validation and arrangement tools with the MCP server.

    Args:
        mcp: The FastMCP server instance
    """

    @mcp.tool(name="validate_layout")
    async def validate_layout_tool(ctx: Context = None) -> dict[str, Any]:
        """Validate the board layout. Fix reported issues with update_element and re-run until none remain."""
        return await validate_layout(ctx)

    @mcp.tool(name="align_elements")
    async def align_elements_tool(
        element_ids: list[str], alignment: str, ctx: Context = None
    ) -> dict[str, Any]:
        """Align elements (left/center/right/top/middle/bottom); parent sections grow to fit."""
        return await align_elements(element_ids, alignment, ctx)

    @mcp.tool(name="distribute_elements")
    async def distribute_elements_tool(
        element_ids: list[str],
        direction: str,
        spacing: float | None = None,
        ctx: Context = None,
    ) -> dict[str, Any]:
        """Distribute elements evenly (horizontal/vertical) with a minimum gap; parent sections grow to fit."""
        return await distribute_elements(element_ids, direction, spacing, ctx)
