"""iphone-ssh-mcp package.

Exposes a managed iPhone to MCP clients over SSH while routing every command
and path through the policy checks in :mod:`iphone_ssh_mcp.security`.
"""

__all__ = [
    "config",
    "security",
    "remote",
    "mcp",
    "cli",
]

__version__ = "1.0.0"
