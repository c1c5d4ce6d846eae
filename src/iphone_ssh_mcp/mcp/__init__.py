"""MCP server and tool contracts."""

from .contracts import InvalidArguments, ToolResult, parse_args

__all__ = [
    "InvalidArguments",
    "ToolResult",
    "parse_args",
]
