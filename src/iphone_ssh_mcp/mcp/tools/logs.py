"""System and crash log tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...security import shell_quote
from ..contracts import CrashLogsArgs, LogsArgs, ToolResult

if TYPE_CHECKING:
    from ..server import IPhoneSSHServer, ToolContext

CRASH_REPORTER_DIR = "/var/mobile/Library/Logs/CrashReporter"
MAX_CRASH_REPORTS = 5


def get_logs(context: ToolContext, args: LogsArgs) -> ToolResult:
    """Recent unified log output, falling back to syslog when ``log`` is missing."""

    base = (
        f"(log show --last {args.minutes}m --style compact 2>/dev/null"
        f" || tail -n {args.lines} /var/log/syslog 2>/dev/null"
        " || echo 'No log source available')"
    )
    if args.filter:
        base = f"{base} | grep -i -- {shell_quote(args.filter)}"
    command = f"{base} | tail -n {args.lines}"
    return ToolResult.from_exec(context.exec_read_command(command, args.timeout_sec))


def get_crash_logs(context: ToolContext, args: CrashLogsArgs) -> ToolResult:
    command = " ".join(
        [
            f"find {CRASH_REPORTER_DIR} -type f 2>/dev/null",
            f"| grep -i -- {shell_quote(args.app_name)}",
            f"| head -n {MAX_CRASH_REPORTS}",
            "| while read -r f; do",
            'echo "== $f ==";',
            f'tail -n {args.lines} "$f";',
            "echo;",
            "done",
        ]
    )
    return ToolResult.from_exec(context.exec_read_command(command, args.timeout_sec))


def register_tools(server: IPhoneSSHServer) -> None:
    server.register_tool(
        name="iphone_get_logs",
        description="Fetch recent iPhone logs with optional filter.",
        model=LogsArgs,
        handler=get_logs,
    )
    server.register_tool(
        name="iphone_get_crash_logs",
        description="Fetch crash logs matching an app name from CrashReporter folder.",
        model=CrashLogsArgs,
        handler=get_crash_logs,
    )
