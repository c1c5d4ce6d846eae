"""Shared pytest fixtures: configuration and recording transports."""

from __future__ import annotations

from typing import Any, List, Optional

import pytest

from iphone_ssh_mcp.config import ServerConfig
from iphone_ssh_mcp.remote.ssh import ExecResult
from iphone_ssh_mcp.remote.tweak import TweakResponse


def ok_result(stdout: str = "", stderr: str = "") -> ExecResult:
    return ExecResult(ok=True, stdout=stdout, stderr=stderr, exit_code=0, signal=None, auth_mode="key")


class RecordingSsh:
    """Stands in for ``SshRunner``; records calls and replays queued results."""

    def __init__(self) -> None:
        self.commands: List[tuple[str, Optional[int]]] = []
        self.copies: List[tuple[str, str, str]] = []
        self.results: List[ExecResult] = []

    def _next(self) -> ExecResult:
        return self.results.pop(0) if self.results else ok_result()

    def exec_remote(self, command: str, timeout_sec: Optional[int] = None) -> ExecResult:
        self.commands.append((command, timeout_sec))
        return self._next()

    def copy_from_remote(self, remote_path: str, local_path: str, timeout_sec: Optional[int] = None) -> ExecResult:
        self.copies.append(("pull", remote_path, local_path))
        return self._next()

    def copy_to_remote(self, local_path: str, remote_path: str, timeout_sec: Optional[int] = None) -> ExecResult:
        self.copies.append(("push", local_path, remote_path))
        return self._next()


class RecordingTweak:
    """Stands in for ``TweakClient``."""

    def __init__(self) -> None:
        self.requests: List[tuple[str, str, Any]] = []
        self.responses: List[TweakResponse] = []

    def request(self, endpoint: str, method: str = "GET", body: Any = None) -> TweakResponse:
        self.requests.append((endpoint, method, body))
        if self.responses:
            return self.responses.pop(0)
        return TweakResponse(ok=True, status=200, data={"ok": True}, raw='{"ok": true}')


@pytest.fixture
def config(tmp_path) -> ServerConfig:
    return ServerConfig(
        ssh_key_path=None,
        ssh_known_hosts_file=str(tmp_path / "known_hosts"),
        allowed_write_roots=["/var/mobile", "/tmp"],
        local_artifact_roots=[str(tmp_path / "artifacts")],
    )


@pytest.fixture
def ssh() -> RecordingSsh:
    return RecordingSsh()


@pytest.fixture
def tweak() -> RecordingTweak:
    return RecordingTweak()
