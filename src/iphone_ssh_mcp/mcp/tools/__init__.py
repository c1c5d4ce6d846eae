"""Tool groups registered by :func:`iphone_ssh_mcp.mcp.server.create_server`."""
