"""Exceptions raised by the command-safety gateway."""

from __future__ import annotations

from typing import Sequence


class GatewayError(Exception):
    """Base class for every refusal raised by the policy layer."""


class InvalidPath(GatewayError, ValueError):
    """A remote path argument is not absolute."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Expected absolute remote path, got: {path}")


class WritePathBlocked(GatewayError, PermissionError):
    """One or more declared write paths fall outside every allowed root."""

    def __init__(self, roots: Sequence[str], blocked: Sequence[str]):
        self.roots = list(roots)
        self.blocked = list(blocked)
        super().__init__(
            "Write path blocked by allowlist. "
            f"Allowed roots: {', '.join(self.roots)}. "
            f"Blocked: {', '.join(self.blocked)}"
        )


class LocalPathBlocked(GatewayError, PermissionError):
    """A local artifact path falls outside every allowed local root."""

    def __init__(self, roots: Sequence[str], blocked: str):
        self.roots = list(roots)
        self.blocked = blocked
        super().__init__(
            "Local path blocked. "
            f"Allowed local roots: {', '.join(self.roots)}. "
            f"Blocked: {blocked}"
        )


class CommandDenied(GatewayError, PermissionError):
    """The command matched a denial rule."""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Blocked by denylist: {reason}")


class WriteIntentOnReadPath(GatewayError, PermissionError):
    """A write-like command was submitted through the read-only entry point."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(
            "Write-like command blocked in iphone_run_command/readonly context. "
            "Use iphone_run_write_command with write_paths."
        )
