"""
FigJam MCP server: board tools plus layout validation and arrangement.
"""

__version__ = "0.1.0"
