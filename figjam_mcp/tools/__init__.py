"""
MCP tools for FigJam boards.
"""
