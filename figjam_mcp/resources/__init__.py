"""
MCP resources for FigJam boards.
"""
