"""Free-form shell command tools.

Two entry points: a read-only one that refuses anything the classifier
flags as a write, and a write-capable one that requires the caller to
declare the remote paths the command will modify.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..contracts import RunCommandArgs, RunWriteCommandArgs, ToolResult

if TYPE_CHECKING:
    from ..server import IPhoneSSHServer, ToolContext


def run_command(context: ToolContext, args: RunCommandArgs) -> ToolResult:
    result = context.exec_read_command(args.command, args.timeout_sec)
    return ToolResult.from_exec(result)


def run_write_command(context: ToolContext, args: RunWriteCommandArgs) -> ToolResult:
    result = context.exec_write_command(args.command, args.write_paths, args.timeout_sec)
    return ToolResult.from_exec(result)


def register_tools(server: IPhoneSSHServer) -> None:
    server.register_tool(
        name="iphone_run_command",
        description=(
            "Run a read-only shell command on iPhone over SSH. "
            "Write-like commands are blocked here."
        ),
        model=RunCommandArgs,
        handler=run_command,
    )
    server.register_tool(
        name="iphone_run_write_command",
        description=(
            "Run a write-capable SSH command. Requires write_paths that must stay "
            "inside allowlisted roots. The declared paths are checked, not enforced "
            "on what the command actually touches."
        ),
        model=RunWriteCommandArgs,
        handler=run_write_command,
    )
