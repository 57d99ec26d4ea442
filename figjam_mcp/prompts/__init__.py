"""
MCP prompts for FigJam boards.
"""
