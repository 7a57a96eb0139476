"""
Canvas Grades Tools

This package contains the tool functions for the Canvas Grades server.
Each module in this package contains related tool functions that are
registered with the MCP server.
"""

__all__ = ["grades"]
