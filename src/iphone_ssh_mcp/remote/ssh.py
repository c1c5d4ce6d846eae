"""SSH and SCP transport to the managed device.

Commands are spawned with argv lists, never through a local shell. Key
authentication is always tried first in batch mode; a password configured
for the device is only used when the key attempt was refused for an
authentication reason, and then only through ``sshpass``.
"""

from __future__ import annotations

import logging
import os
import re
import signal
import subprocess
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..security.quoting import escape_scp_remote_path

logger = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 10 * 1024 * 1024
SSHPASS_PROBE_TIMEOUT_SEC = 3

_AUTH_FAILURE = re.compile(
    r"permission denied|publickey|keyboard-interactive|authentication", re.IGNORECASE
)

RunFunction = Callable[..., "subprocess.CompletedProcess[str]"]


@dataclass(slots=True)
class SshConfig:
    host: str
    user: str
    port: int
    connect_timeout_sec: int
    command_timeout_sec: int
    strict_host_key_checking: str
    known_hosts_file: str
    key_path: Optional[str] = None
    password: Optional[str] = None

    @property
    def destination(self) -> str:
        return f"{self.user}@{self.host}"


@dataclass(slots=True)
class ExecResult:
    """Outcome of one ssh/scp invocation."""

    ok: bool
    stdout: str
    stderr: str
    exit_code: int
    signal: Optional[str]
    auth_mode: str

    def format(self) -> str:
        lines = [f"auth_mode: {self.auth_mode}", f"exit_code: {self.exit_code}"]
        if self.signal:
            lines.append(f"signal: {self.signal}")
        if self.stdout.strip():
            lines.extend(["stdout:", self.stdout.rstrip()])
        if self.stderr.strip():
            lines.extend(["stderr:", self.stderr.rstrip()])
        return "\n".join(lines)


@dataclass(slots=True)
class _RawResult:
    stdout: str
    stderr: str
    exit_code: int
    signal: Optional[str]


def _signal_name(number: int) -> str:
    try:
        return signal.Signals(number).name
    except ValueError:
        return f"SIG{number}"


def _clip(output: Optional[str | bytes]) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    return output[:MAX_OUTPUT_BYTES]


class SshRunner:
    """Run commands and copy files on the device described by ``config``."""

    def __init__(self, config: SshConfig, run: RunFunction = subprocess.run):
        self.config = config
        self._run = run
        self._sshpass_available: Optional[bool] = None

    def exec_remote(self, command: str, timeout_sec: Optional[int] = None) -> ExecResult:
        timeout = timeout_sec or self.config.command_timeout_sec
        logger.debug("ssh %s: %s", self.config.destination, command)
        key_attempt = self._run_ssh(command, timeout, batch_mode=True)
        if key_attempt.ok or not self._should_try_password(key_attempt.stderr):
            return key_attempt
        logger.info("Key authentication refused; retrying with password")
        return self._run_ssh(command, timeout, batch_mode=False)

    def copy_from_remote(
        self, remote_path: str, local_path: str, timeout_sec: Optional[int] = None
    ) -> ExecResult:
        timeout = timeout_sec or self.config.command_timeout_sec
        destination = os.path.abspath(local_path)
        return self._copy([self._remote_spec(remote_path), destination], timeout)

    def copy_to_remote(
        self, local_path: str, remote_path: str, timeout_sec: Optional[int] = None
    ) -> ExecResult:
        timeout = timeout_sec or self.config.command_timeout_sec
        source = os.path.abspath(local_path)
        return self._copy([source, self._remote_spec(remote_path)], timeout)

    def _remote_spec(self, remote_path: str) -> str:
        return f"{self.config.destination}:{escape_scp_remote_path(remote_path)}"

    def _copy(self, path_args: List[str], timeout: int) -> ExecResult:
        logger.debug("scp %s", " -> ".join(path_args))
        key_attempt = self._run_scp(path_args, timeout, batch_mode=True)
        if key_attempt.ok or not self._should_try_password(key_attempt.stderr):
            return key_attempt
        logger.info("Key authentication refused; retrying copy with password")
        return self._run_scp(path_args, timeout, batch_mode=False)

    def _common_options(self, batch_mode: bool) -> List[str]:
        args = [
            "-o",
            f"StrictHostKeyChecking={self.config.strict_host_key_checking}",
            "-o",
            f"UserKnownHostsFile={self.config.known_hosts_file}",
            "-o",
            f"BatchMode={'yes' if batch_mode else 'no'}",
        ]
        if self.config.key_path and batch_mode:
            args.extend(["-i", self.config.key_path])
        if not batch_mode:
            args.extend(
                [
                    "-o",
                    "PreferredAuthentications=password,keyboard-interactive",
                    "-o",
                    "PubkeyAuthentication=no",
                ]
            )
        return args

    def ssh_args(self, batch_mode: bool) -> List[str]:
        return [
            "-p",
            str(self.config.port),
            "-T",
            "-o",
            f"ConnectTimeout={self.config.connect_timeout_sec}",
            "-o",
            "ServerAliveInterval=15",
            "-o",
            "ServerAliveCountMax=2",
            *self._common_options(batch_mode),
        ]

    def scp_args(self, batch_mode: bool) -> List[str]:
        return [
            "-P",
            str(self.config.port),
            "-o",
            f"ConnectTimeout={self.config.connect_timeout_sec}",
            *self._common_options(batch_mode),
        ]

    def _run_ssh(self, command: str, timeout: int, batch_mode: bool) -> ExecResult:
        args = [*self.ssh_args(batch_mode), self.config.destination, command]
        return self._finish(self._exec("ssh", args, timeout, batch_mode), batch_mode)

    def _run_scp(self, path_args: List[str], timeout: int, batch_mode: bool) -> ExecResult:
        args = [*self.scp_args(batch_mode), *path_args]
        return self._finish(self._exec("scp", args, timeout, batch_mode), batch_mode)

    @staticmethod
    def _finish(raw: _RawResult, batch_mode: bool) -> ExecResult:
        return ExecResult(
            ok=raw.exit_code == 0,
            stdout=raw.stdout,
            stderr=raw.stderr,
            exit_code=raw.exit_code,
            signal=raw.signal,
            auth_mode="key" if batch_mode else "password",
        )

    def _exec(self, program: str, args: List[str], timeout: int, batch_mode: bool) -> _RawResult:
        if batch_mode or not self.config.password:
            return self._exec_file([program, *args], timeout)

        if not self._has_sshpass():
            return _RawResult(
                stdout="",
                stderr=(
                    "Password fallback requested but sshpass is not installed. "
                    "Install sshpass or configure IPHONE_SSH_KEY_PATH."
                ),
                exit_code=255,
                signal=None,
            )
        # -e reads SSHPASS so the password never appears in the process list
        env = {**os.environ, "SSHPASS": self.config.password}
        return self._exec_file(["sshpass", "-e", program, *args], timeout, env=env)

    def _should_try_password(self, stderr: str) -> bool:
        if not self.config.password:
            return False
        return _AUTH_FAILURE.search(stderr) is not None

    def _has_sshpass(self) -> bool:
        if self._sshpass_available is None:
            probe = self._exec_file(["sshpass", "-V"], SSHPASS_PROBE_TIMEOUT_SEC)
            self._sshpass_available = probe.exit_code == 0
        return self._sshpass_available

    def _exec_file(
        self, argv: List[str], timeout: int, env: Optional[Dict[str, str]] = None
    ) -> _RawResult:
        try:
            completed = self._run(
                argv,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
                env=env,
            )
        except subprocess.TimeoutExpired as exc:
            logger.warning("%s timed out after %ss", argv[0], timeout)
            return _RawResult(
                stdout=_clip(exc.stdout),
                stderr=_clip(exc.stderr) or f"Command timed out after {timeout}s",
                exit_code=1,
                signal="SIGKILL",
            )
        except OSError as exc:
            return _RawResult(stdout="", stderr=str(exc), exit_code=1, signal=None)

        if completed.returncode < 0:
            return _RawResult(
                stdout=_clip(completed.stdout),
                stderr=_clip(completed.stderr),
                exit_code=1,
                signal=_signal_name(-completed.returncode),
            )
        return _RawResult(
            stdout=_clip(completed.stdout),
            stderr=_clip(completed.stderr),
            exit_code=completed.returncode,
            signal=None,
        )
