"""
Pytest configuration and shared fixtures for FigJam MCP tests.
"""

from collections.abc import Generator
from unittest.mock import AsyncMock, Mock

from fastmcp import Context
import pytest

from figjam_mcp.utils.board import InMemoryBoard
from figjam_mcp.utils.board_service import get_board, reset_board


@pytest.fixture(autouse=True)
def fresh_board() -> Generator[None, None, None]:
    """Give every test its own global board."""
    reset_board()
    yield
    reset_board()


@pytest.fixture
def board() -> InMemoryBoard:
    """The global board used by the MCP tools."""
    return get_board()


@pytest.fixture
def mock_context() -> Context:
    """Create a mock MCP Context for testing."""
    context = Mock(spec=Context)
    context.info = AsyncMock()
    context.report_progress = AsyncMock()
    context.emit_log = AsyncMock()
    return context


@pytest.fixture
def flow_board(board: InMemoryBoard) -> dict[str, str]:
    """A clean three-step flow inside one section.

    Shapes are 200x100 with 100px gaps, well inside a 1000x300 section.
    """
    section = board.create_section("Flow", x=0, y=0, width=1000, height=300)
    start = board.create_shape(text="Start", x=40, y=80, parent_id=section.id)
    process = board.create_shape(text="Process", x=340, y=80, parent_id=section.id)
    end = board.create_shape(text="End", x=640, y=80, parent_id=section.id)
    board.create_connector(start.id, process.id, label="next")
    board.create_connector(process.id, end.id, label="done")
    return {"section": section.id, "start": start.id, "process": process.id, "end": end.id}
