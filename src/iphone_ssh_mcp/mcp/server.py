"""MCP server implementation for iphone-ssh-mcp."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from pydantic import BaseModel

from .. import __version__
from ..config import ServerConfig
from ..remote.ssh import ExecResult, SshConfig, SshRunner
from ..remote.tweak import TweakClient
from ..security import check_read_command, check_write_command
from .contracts import ToolResult, parse_args

logger = logging.getLogger(__name__)

SERVER_NAME = "iphone-ssh-mcp"

ToolHandler = Callable[["ToolContext", Any], ToolResult]


@dataclass(slots=True)
class ToolContext:
    """Everything a tool handler may touch: configuration and transports."""

    config: ServerConfig
    ssh: SshRunner
    tweak: TweakClient

    def exec_read_command(self, command: str, timeout_sec: Optional[int] = None) -> ExecResult:
        """Run ``command`` after the read-only gateway checks."""

        check_read_command(command)
        return self.ssh.exec_remote(command, timeout_sec)

    def exec_write_command(
        self, command: str, write_paths: Sequence[str], timeout_sec: Optional[int] = None
    ) -> ExecResult:
        """Run ``command`` after the denylist and declared write-path checks."""

        check_write_command(command, write_paths, self.config.allowed_write_roots)
        return self.ssh.exec_remote(command, timeout_sec)


def build_context(config: ServerConfig) -> ToolContext:
    ssh = SshRunner(
        SshConfig(
            host=config.ssh_host,
            user=config.ssh_user,
            port=config.ssh_port,
            key_path=config.ssh_key_path,
            password=config.ssh_password,
            connect_timeout_sec=config.ssh_connect_timeout_sec,
            command_timeout_sec=config.ssh_command_timeout_sec,
            strict_host_key_checking=config.ssh_strict_host_key_checking,
            known_hosts_file=config.ssh_known_hosts_file,
        )
    )
    tweak = TweakClient(config.ssh_host, config.tweak_port, config.tweak_timeout_ms)
    return ToolContext(config=config, ssh=ssh, tweak=tweak)


class IPhoneSSHServer:
    """MCP server exposing the managed iPhone as a set of tools."""

    def __init__(self, config: ServerConfig | None = None, context: ToolContext | None = None):
        self.config = config or (context.config if context else ServerConfig.from_env())
        self.context = context or build_context(self.config)
        self.server = Server(SERVER_NAME, version=__version__)
        self.tools: Dict[str, ToolHandler] = {}
        self.tool_models: Dict[str, Type[BaseModel]] = {}
        self.tool_metadata: Dict[str, tuple[str, Dict[str, Any]]] = {}

        # Register handlers once at initialization
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Set up MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return [
                types.Tool(name=tool_name, description=desc, inputSchema=schema)
                for tool_name, (desc, schema) in self.tool_metadata.items()
            ]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict) -> types.CallToolResult:
            # handlers block on ssh/scp and HTTP, keep them off the event loop
            result = await asyncio.to_thread(self.dispatch, name, arguments)
            return types.CallToolResult(content=_to_content(result), isError=result.is_error)

    def register_tool(
        self,
        name: str,
        description: str,
        model: Type[BaseModel],
        handler: ToolHandler,
    ) -> None:
        """Register an MCP tool.

        Parameters
        ----------
        name:
            Tool name
        description:
            Tool description
        model:
            Pydantic model validating the tool arguments; its JSON schema is
            advertised as the tool's input schema
        handler:
            Function called with the tool context and the validated model
        """
        self.tools[name] = handler
        self.tool_models[name] = model
        self.tool_metadata[name] = (description, model.model_json_schema())

    def dispatch(self, name: str, arguments: Dict[str, Any] | None) -> ToolResult:
        """Validate ``arguments`` and run the named tool.

        Any exception raised along the way, policy refusals included, becomes
        an error result carrying the exception message.
        """
        handler = self.tools.get(name)
        if handler is None:
            return ToolResult(f"Unknown tool: {name}", is_error=True)

        try:
            parsed = parse_args(self.tool_models[name], arguments)
            return handler(self.context, parsed)
        except Exception as e:
            logger.warning("Tool %s failed: %s", name, e)
            return ToolResult(str(e), is_error=True)

    async def run(self) -> None:
        """Run the MCP server with stdio transport."""
        logger.info("%s started: %s", SERVER_NAME, self.config.summarize())
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def _to_content(result: ToolResult) -> List[types.TextContent | types.ImageContent]:
    content: List[types.TextContent | types.ImageContent] = [
        types.TextContent(type="text", text=result.text)
    ]
    if result.image is not None:
        content.append(types.ImageContent(type="image", data=result.image, mimeType="image/png"))
    return content


def create_server(
    config: ServerConfig | None = None, context: ToolContext | None = None
) -> IPhoneSSHServer:
    """Create and configure an MCP server instance.

    Parameters
    ----------
    config:
        Server configuration; read from the environment when omitted
    context:
        Pre-built tool context, used by tests to substitute transports

    Returns
    -------
    Configured IPhoneSSHServer instance
    """
    server = IPhoneSSHServer(config, context)

    from .tools import commands, device, files, logs, tweak

    device.register_tools(server)
    commands.register_tools(server)
    files.register_tools(server)
    logs.register_tools(server)
    tweak.register_tools(server)

    return server
