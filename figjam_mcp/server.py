"""
MCP server creation and configuration.
"""

import atexit
from collections.abc import Callable
import logging
import os
import signal
import sys

from fastmcp import FastMCP

from figjam_mcp.config import LOG_LEVEL
from figjam_mcp.prompts.diagram_prompts import register_diagram_prompts
from figjam_mcp.resources.schema_resources import register_schema_resources
from figjam_mcp.tools.board_tools import register_board_tools
from figjam_mcp.tools.layout_tools import register_layout_tools
from figjam_mcp.tools.text_to_diagram import register_text_to_diagram_tools
from figjam_mcp.utils.board_service import get_board, reset_board

# Track cleanup handlers
cleanup_handlers = []

# Flag to track whether we're already in shutdown process
_shutting_down = False

# Store server instance for clean shutdown
_server_instance = None


def add_cleanup_handler(handler: Callable) -> None:
    """Register a function to be called during cleanup.

    Args:
        handler: Function to call during cleanup
    """
    cleanup_handlers.append(handler)


def run_cleanup_handlers() -> None:
    """Run all registered cleanup handlers.

    Executes all cleanup functions in order, with error handling for each.
    Prevents multiple executions using the global _shutting_down flag.

    Note:
        This function is idempotent - multiple calls are safe.
    """
    global _shutting_down

    if _shutting_down:
        return

    _shutting_down = True
    logging.info("Running cleanup handlers...")

    for handler in cleanup_handlers:
        try:
            handler()
            logging.info(f"Cleanup handler {handler.__name__} completed successfully")
        except Exception as e:
            logging.error(f"Error in cleanup handler {handler.__name__}: {str(e)}", exc_info=True)


def shutdown_server() -> None:
    """Properly shutdown the server if it exists.

    Safe to call even if no server instance exists.
    """
    global _server_instance

    if _server_instance:
        try:
            logging.info("Shutting down FigJam MCP server")
            _server_instance = None
            logging.info("FigJam MCP server shutdown complete")
        except Exception as e:
            logging.error(f"Error shutting down server: {str(e)}", exc_info=True)


def register_signal_handlers(server: FastMCP) -> None:
    """Register handlers for system signals to ensure clean shutdown.

    Args:
        server: The FastMCP server instance
    """

    def handle_exit_signal(signum: int, frame) -> None:
        logging.info(f"Received signal {signum}, initiating shutdown...")

        run_cleanup_handlers()
        shutdown_server()

        # Exit without waiting for stdio processes which might be blocking
        os._exit(0)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            signal.signal(sig, handle_exit_signal)
            logging.info(f"Registered handler for signal {sig}")
        except (ValueError, AttributeError) as e:
            # Some signals may not be available on all platforms
            logging.error(f"Could not register handler for signal {sig}: {str(e)}")


def clear_active_board() -> None:
    """Drop every element from the in-memory board and forget the instance."""
    removed = get_board().clear_board()
    reset_board()
    logging.info(f"Released board ({removed} page-level elements)")


def create_server() -> FastMCP:
    """Create and configure the FigJam MCP server.

    Registers the schema resource, the board, layout and text-to-diagram
    tools, and the diagram prompts. Sets up signal handlers and cleanup.

    Returns:
        FastMCP: Fully configured MCP server instance ready for use
    """
    logging.info("Initializing FigJam MCP server")

    mcp = FastMCP("FigJam")
    logging.info("Created FastMCP server instance")

    # Register resources
    logging.info("Registering resources...")
    register_schema_resources(mcp)

    # Register tools
    logging.info("Registering tools...")
    register_board_tools(mcp)
    register_layout_tools(mcp)
    register_text_to_diagram_tools(mcp)

    # Register prompts
    logging.info("Registering prompts...")
    register_diagram_prompts(mcp)

    # Register signal handlers and cleanup
    register_signal_handlers(mcp)
    atexit.register(run_cleanup_handlers)

    add_cleanup_handler(lambda: logging.info("FigJam MCP server shutdown complete"))
    add_cleanup_handler(clear_active_board)

    logging.info("Server initialization complete")
    return mcp


def setup_logging() -> None:
    """Set up logging configuration.

    Level comes from FIGJAM_MCP_LOG_LEVEL (default INFO).

    Note:
        Uses basicConfig which only takes effect on first call.
    """
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


setup_logging()
logger = logging.getLogger(__name__)


def setup_signal_handlers() -> None:
    """Set up signal handlers for graceful shutdown of the stdio server."""

    def signal_handler(signum: int, frame) -> None:
        logger.info(f"Received shutdown signal {signum}")
        cleanup_handler()
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def cleanup_handler() -> None:
    """Clean up resources on shutdown.

    Clears the board and runs all registered cleanup handlers. Errors are
    logged, not raised.
    """
    logger.info("Starting server cleanup")
    try:
        clear_active_board()
        run_cleanup_handlers()
    except Exception as e:
        logger.error(f"Error during cleanup: {e}")


async def main() -> None:
    """Main server entry point.

    Starts the FigJam MCP server over stdio with signal handling and cleanup.

    Flow:
        1. Setup signal handlers
        2. Create and configure server
        3. Start server (async)
        4. Handle shutdown signals and cleanup
    """
    try:
        logger.info("Starting FigJam MCP server")
        setup_signal_handlers()

        server = create_server()
        global _server_instance
        _server_instance = server

        await server.run_async()

    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, graceful shutdown initiated")
        cleanup_handler()
    except Exception as e:
        logger.error(f"Server startup error: {e}")
        cleanup_handler()
