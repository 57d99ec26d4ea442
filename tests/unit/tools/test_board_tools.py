"""
Unit tests for board_tools.py - element creation and board management.
"""

from unittest.mock import Mock

from fastmcp import FastMCP
import pytest

from figjam_mcp.tools.board_tools import (
    batch_create,
    clear_board,
    create_connector,
    create_section,
    create_shape,
    create_sticky,
    create_text,
    delete_element,
    get_board_info,
    query_elements,
    register_board_tools,
    update_element,
)


class TestBoardTools:
    """Test suite for board tools."""

    @pytest.fixture
    def mock_mcp(self):
        """Create a mock FastMCP server for testing."""
        return Mock(spec=FastMCP)

    def test_register_board_tools(self, mock_mcp):
        """Test that board tools are properly registered with MCP server."""
        registered_tools = []

        def mock_tool(*args, **kwargs):
            def decorator(func):
                tool_name = kwargs.get("name", func.__name__)
                registered_tools.append(tool_name)
                return func

            return decorator

        mock_mcp.tool = mock_tool

        register_board_tools(mock_mcp)

        expected_tools = [
            "create_sticky",
            "create_shape",
            "create_text",
            "create_connector",
            "create_section",
            "update_element",
            "delete_element",
            "query_elements",
            "clear_board",
            "get_board_info",
            "batch_create",
        ]

        for tool in expected_tools:
            assert tool in registered_tools

    @pytest.mark.asyncio
    async def test_create_shape_success(self, mock_context):
        """Test creating a shape reports the element and logs to the context."""
        result = await create_shape("API Gateway", "ROUNDED_RECTANGLE", 10, 20, ctx=mock_context)

        assert result["success"] is True
        element = result["element"]
        assert element["type"] == "SHAPE_WITH_TEXT"
        assert element["text"] == "API Gateway"
        assert (element["x"], element["y"], element["width"], element["height"]) == (10, 20, 200, 100)
        mock_context.info.assert_called()

    @pytest.mark.asyncio
    async def test_create_shape_invalid_type(self):
        """Test that an invalid shape type is reported as an error result."""
        result = await create_shape("x", "HEXAGON")

        assert result["success"] is False
        assert "Unknown shape type" in result["error"]

    @pytest.mark.asyncio
    async def test_create_connector_missing_endpoint(self):
        """Test connector creation with an unknown endpoint."""
        shape = await create_shape("A")

        result = await create_connector(shape["element"]["id"], "1:99")

        assert result["success"] is False
        assert "not found" in result["error"]

    @pytest.mark.asyncio
    async def test_element_lifecycle(self, mock_context):
        """Test create, update, query and delete through the tools."""
        section = await create_section("Backend", 0, 0, 800, 400)
        section_id = section["element"]["id"]
        sticky = await create_sticky("Remember retries", 40, 60, parent_id=section_id)
        text = await create_text("Title", 0, -60)

        assert sticky["element"]["parent_id"] == section_id
        assert text["element"]["type"] == "TEXT"

        updated = await update_element(sticky["element"]["id"], x=100, color="LIGHT_PINK", ctx=mock_context)
        assert updated["element"]["x"] == 100
        assert updated["element"]["color"] == "#FFC2EC"

        queried = await query_elements("sticky", include_children=True)
        assert queried["count"] == 1

        deleted = await delete_element(section_id)
        assert deleted == {"success": True, "deleted": section_id, "type": "SECTION"}

        remaining = await query_elements(include_children=True)
        assert [e["type"] for e in remaining["elements"]] == ["TEXT"]

    @pytest.mark.asyncio
    async def test_query_all_means_no_filter(self):
        """Test that "ALL" lists every kind, like no filter at all."""
        await create_shape("A")
        await create_sticky("Note", x=400)

        for element_type in ("ALL", "all", None):
            result = await query_elements(element_type)
            assert result["success"] is True
            assert result["count"] == 2

    @pytest.mark.asyncio
    async def test_query_unknown_type(self):
        """Test that an unknown element type filter is an error result."""
        result = await query_elements("widget")

        assert result["success"] is False

    @pytest.mark.asyncio
    async def test_board_info_and_clear(self):
        """Test board info counts and clearing."""
        await create_shape("A")
        await create_shape("B", x=400)

        info = await get_board_info()
        assert info["success"] is True
        assert info["element_count"] == 2
        assert info["type_counts"] == {"SHAPE_WITH_TEXT": 2}

        cleared = await clear_board()
        assert cleared == {"success": True, "cleared": True, "removed_count": 2}

    @pytest.mark.asyncio
    async def test_update_missing_element(self):
        """Test updating an element that does not exist."""
        result = await update_element("1:404", x=10)

        assert result["success"] is False
        assert "Element not found: 1:404" in result["error"]


class TestBatchCreate:
    """Test suite for batch creation."""

    @pytest.mark.asyncio
    async def test_refs_resolve_within_batch(self, mock_context):
        """Test that connectors and children can use ref ids from the same batch."""
        result = await batch_create(
            [
                {"type": "section", "ref_id": "api", "name": "API", "x": 0, "y": 0},
                {"type": "shape", "ref_id": "gw", "text": "Gateway", "x": 40, "y": 60, "parent_id": "api"},
                {"type": "shape", "ref_id": "svc", "text": "Service", "x": 340, "y": 60, "parent_id": "api"},
                {"type": "connector", "start_id": "gw", "end_id": "svc", "label": "routes"},
            ],
            ctx=mock_context,
        )

        assert result["success"] is True
        assert result["count"] == 4
        assert "errors" not in result
        ids = {item["ref_id"]: item["id"] for item in result["created"] if item["ref_id"]}
        connector = await query_elements("CONNECTOR")
        assert connector["elements"][0]["start_id"] == ids["gw"]
        assert connector["elements"][0]["end_id"] == ids["svc"]
        mock_context.report_progress.assert_called()

    @pytest.mark.asyncio
    async def test_partial_failure(self):
        """Test that per-element errors are collected without failing the batch."""
        result = await batch_create(
            [
                {"type": "shape", "ref_id": "a", "text": "A"},
                {"type": "connector", "ref_id": "bad", "start_id": "a", "end_id": "missing"},
                {"type": "hexagon"},
            ]
        )

        assert result["success"] is True
        assert result["count"] == 1
        assert len(result["errors"]) == 2
        assert result["errors"][0].startswith("connector (bad):")

    @pytest.mark.asyncio
    async def test_all_failed(self):
        """Test that the batch fails only when nothing was created."""
        result = await batch_create([{"type": "connector", "start_id": "x", "end_id": "y"}])

        assert result["success"] is False
        assert result["count"] == 0
