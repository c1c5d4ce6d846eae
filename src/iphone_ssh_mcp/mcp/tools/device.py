"""Device inspection and control tools."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..contracts import NoArgs, RespringArgs, ToolResult

if TYPE_CHECKING:
    from ..server import IPhoneSSHServer, ToolContext

DEVICE_INFO_COMMAND = " ; ".join(
    [
        "echo '== uname ==' && uname -a",
        "echo '== os ==' && (sysctl -n kern.osversion 2>/dev/null || true)",
        "echo '== uptime ==' && uptime",
        "echo '== disk ==' && df -h /",
        "echo '== python ==' && (python3.14 -V 2>/dev/null || python3 -V 2>/dev/null || echo 'python3 not found')",
        "echo '== pip ==' && (python3.14 -m pip --version 2>/dev/null || python3 -m pip --version 2>/dev/null || echo 'pip not found')",
    ]
)

RESPRING_COMMAND = "killall -9 SpringBoard"

_CONNECTION_CLOSED = re.compile(r"connection to .* closed", re.IGNORECASE)


def get_device_info(context: ToolContext, args: NoArgs) -> ToolResult:
    return ToolResult.from_exec(context.exec_read_command(DEVICE_INFO_COMMAND))


def respring(context: ToolContext, args: RespringArgs) -> ToolResult:
    """Kill SpringBoard so it restarts.

    The SSH session usually dies with SpringBoard; exit status 255 with a
    "connection closed" message is therefore reported as success.
    """
    if not args.confirm:
        return ToolResult("Refused: set confirm=true to execute respring.", is_error=True)

    result = context.ssh.exec_remote(RESPRING_COMMAND, args.timeout_sec)
    if not result.ok and result.exit_code == 255 and _CONNECTION_CLOSED.search(result.stderr):
        return ToolResult(
            "Respring command likely executed; SSH connection dropped as SpringBoard restarted."
        )
    return ToolResult.from_exec(result)


def register_tools(server: IPhoneSSHServer) -> None:
    server.register_tool(
        name="iphone_get_device_info",
        description="Fetch baseline iPhone device/runtime info over SSH.",
        model=NoArgs,
        handler=get_device_info,
    )
    server.register_tool(
        name="iphone_respring",
        description="Respring the iPhone (kill SpringBoard). Requires confirm=true.",
        model=RespringArgs,
        handler=respring,
    )
