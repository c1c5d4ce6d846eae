"""File tools: listing, reading, writing and copying files on the device."""

from __future__ import annotations

import os
import posixpath
from typing import TYPE_CHECKING

from ...security import (
    ensure_allowed_local_path,
    ensure_allowed_write_paths,
    normalize_remote_path,
    shell_quote,
)
from ..contracts import (
    ListDirArgs,
    PullFileArgs,
    PushFileArgs,
    ReadFileArgs,
    ToolResult,
    WriteFileArgs,
)

if TYPE_CHECKING:
    from ..server import IPhoneSSHServer, ToolContext


def list_dir(context: ToolContext, args: ListDirArgs) -> ToolResult:
    remote_path = normalize_remote_path(args.path)
    quoted = shell_quote(remote_path)
    list_flags = "-la" if args.show_hidden else "-l"
    command = " ".join(
        [
            f"if [ -d {quoted} ]; then",
            f"  ls {list_flags} {quoted} | head -n {args.max_entries}",
            "else",
            f"  echo {shell_quote(f'Directory not found: {remote_path}')} >&2 ; exit 2",
            "fi",
        ]
    )
    return ToolResult.from_exec(context.exec_read_command(command, args.timeout_sec))


def read_file(context: ToolContext, args: ReadFileArgs) -> ToolResult:
    """Read a remote file as text (first ``max_bytes``) or whole as base64."""

    remote_path = normalize_remote_path(args.path)
    quoted = shell_quote(remote_path)
    missing = f"echo {shell_quote(f'File not found: {remote_path}')} >&2; exit 2"
    if args.encoding == "base64":
        body = f"base64 < {quoted} | tr -d '\\n'"
    else:
        body = f"head -c {args.max_bytes} {quoted}"
    command = f"if [ -f {quoted} ]; then {body}; else {missing}; fi"

    result = context.exec_read_command(command, args.timeout_sec)
    if not result.ok:
        return ToolResult.from_exec(result)

    payload = result.stdout.strip() if args.encoding == "base64" else result.stdout
    return ToolResult("\n".join([f"path: {remote_path}", f"encoding: {args.encoding}", "", payload]))


def write_file(context: ToolContext, args: WriteFileArgs) -> ToolResult:
    remote_path = normalize_remote_path(args.path)
    ensure_allowed_write_paths([remote_path], context.config.allowed_write_roots)

    directory = posixpath.dirname(remote_path)
    command = (
        f"mkdir -p {shell_quote(directory)} && "
        f"printf '%s' {shell_quote(args.content)} > {shell_quote(remote_path)} && "
        f"chmod {args.mode} {shell_quote(remote_path)}"
    )
    result = context.exec_write_command(command, [remote_path], args.timeout_sec)
    return ToolResult.from_exec(result)


def pull_file(context: ToolContext, args: PullFileArgs) -> ToolResult:
    remote_path = normalize_remote_path(args.remote_path)
    local_path = ensure_allowed_local_path(args.local_path, context.config.local_artifact_roots)

    os.makedirs(os.path.dirname(local_path), exist_ok=True)
    result = context.ssh.copy_from_remote(remote_path, local_path, args.timeout_sec)

    verb = "Pulled" if result.ok else "Failed pulling"
    return ToolResult.from_exec(result, summary=f"{verb} {remote_path} -> {local_path}")


def push_file(context: ToolContext, args: PushFileArgs) -> ToolResult:
    local_path = os.path.abspath(args.local_path)
    remote_path = normalize_remote_path(args.remote_path)
    ensure_allowed_write_paths([remote_path], context.config.allowed_write_roots)

    if not os.path.exists(local_path):
        raise FileNotFoundError(f"Local file not found: {local_path}")
    result = context.ssh.copy_to_remote(local_path, remote_path, args.timeout_sec)

    verb = "Pushed" if result.ok else "Failed pushing"
    return ToolResult.from_exec(result, summary=f"{verb} {local_path} -> {remote_path}")


def register_tools(server: IPhoneSSHServer) -> None:
    server.register_tool(
        name="iphone_list_dir",
        description="List directory contents on iPhone.",
        model=ListDirArgs,
        handler=list_dir,
    )
    server.register_tool(
        name="iphone_read_file",
        description="Read a remote file from iPhone as text or base64.",
        model=ReadFileArgs,
        handler=read_file,
    )
    server.register_tool(
        name="iphone_write_file",
        description="Write a text file on iPhone within allowlisted write roots.",
        model=WriteFileArgs,
        handler=write_file,
    )
    server.register_tool(
        name="iphone_pull_file",
        description="Copy remote file from iPhone to local machine via scp.",
        model=PullFileArgs,
        handler=pull_file,
    )
    server.register_tool(
        name="iphone_push_file",
        description="Copy local file to iPhone via scp into allowlisted write roots.",
        model=PushFileArgs,
        handler=push_file,
    )
