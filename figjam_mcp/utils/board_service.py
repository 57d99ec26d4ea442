"""
Process-wide access to the active board.

Tools share one board per server process; commands are serialized by the MCP
transport, so no locking is done here.
"""

from figjam_mcp.utils.board import InMemoryBoard

# Global board instance for easy access
_board_instance: InMemoryBoard | None = None


def get_board() -> InMemoryBoard:
    """Get the global board instance, creating it on first use."""
    global _board_instance
    if _board_instance is None:
        _board_instance = InMemoryBoard()
    return _board_instance


def reset_board() -> None:
    """Reset the global board instance (server shutdown and tests)."""
    global _board_instance
    _board_instance = None
