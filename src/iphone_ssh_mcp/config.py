"""Configuration for the iPhone SSH MCP server, read from ``IPHONE_*`` variables."""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

DEFAULT_WRITE_ROOTS = [
    "/var/mobile",
    "/private/var/mobile",
    "/var/root",
    "/private/var/root",
    "/tmp",
    "/private/tmp",
    "/var/tmp",
    "/private/var/tmp",
    "/usr/local",
]

HOST_KEY_POLICIES = ("yes", "no", "accept-new")


def _dedupe(paths: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(paths))


@dataclass(slots=True)
class ServerConfig:
    """Runtime configuration for one managed device.

    Attributes
    ----------
    ssh_host, ssh_user, ssh_port:
        Where the device's SSH daemon listens and who to log in as.
    ssh_key_path:
        Private key tried first, in batch mode.
    ssh_password:
        Optional password used through ``sshpass`` when key auth is refused.
    ssh_connect_timeout_sec, ssh_command_timeout_sec:
        ``ConnectTimeout`` passed to ssh/scp, and the default wall-clock
        limit for one remote command.
    ssh_strict_host_key_checking:
        One of ``yes``, ``no`` or ``accept-new``.
    ssh_known_hosts_file:
        ``UserKnownHostsFile`` passed to ssh/scp.
    tweak_port, tweak_timeout_ms:
        Port and request timeout of the HTTP agent running on the device.
    allowed_write_roots:
        Remote directories that write tools may modify.
    local_artifact_roots:
        Local directories that pulled files and screenshots may be saved to.
    """

    ssh_host: str = "10.0.0.9"
    ssh_user: str = "root"
    ssh_port: int = 22
    ssh_key_path: Optional[str] = field(
        default_factory=lambda: str(Path.home() / ".ssh" / "id_rsa")
    )
    ssh_password: Optional[str] = None
    ssh_connect_timeout_sec: int = 5
    ssh_command_timeout_sec: int = 30
    ssh_strict_host_key_checking: str = "accept-new"
    ssh_known_hosts_file: str = field(
        default_factory=lambda: str(Path.home() / ".ssh" / "known_hosts")
    )
    tweak_port: int = 8765
    tweak_timeout_ms: int = 8_000
    allowed_write_roots: List[str] = field(default_factory=lambda: list(DEFAULT_WRITE_ROOTS))
    local_artifact_roots: List[str] = field(default_factory=lambda: [os.getcwd()])

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        """Build a configuration from ``environ`` (defaults to ``os.environ``).

        Blank or unparsable values fall back to the defaults above. Root
        lists are comma separated; remote roots are normalized with POSIX
        rules and local roots resolved against the working directory.
        """

        env = _Environment(os.environ if environ is None else environ)
        defaults = cls()

        policy = env.get("IPHONE_SSH_STRICT_HOST_KEY_CHECKING", defaults.ssh_strict_host_key_checking)
        if policy not in HOST_KEY_POLICIES:
            policy = "accept-new"

        write_roots = env.get_list("IPHONE_ALLOWED_WRITE_ROOTS", defaults.allowed_write_roots)
        local_roots = env.get_list("IPHONE_LOCAL_ARTIFACT_ROOTS", defaults.local_artifact_roots)

        return cls(
            ssh_host=env.get("IPHONE_SSH_HOST", defaults.ssh_host),
            ssh_user=env.get("IPHONE_SSH_USER", defaults.ssh_user),
            ssh_port=env.get_int("IPHONE_SSH_PORT", defaults.ssh_port),
            ssh_key_path=env.get("IPHONE_SSH_KEY_PATH", defaults.ssh_key_path),
            ssh_password=env.get("IPHONE_SSH_PASSWORD"),
            ssh_connect_timeout_sec=env.get_int(
                "IPHONE_SSH_CONNECT_TIMEOUT_SEC", defaults.ssh_connect_timeout_sec
            ),
            ssh_command_timeout_sec=env.get_int(
                "IPHONE_SSH_COMMAND_TIMEOUT_SEC", defaults.ssh_command_timeout_sec
            ),
            ssh_strict_host_key_checking=policy,
            ssh_known_hosts_file=env.get("IPHONE_SSH_KNOWN_HOSTS_FILE", defaults.ssh_known_hosts_file),
            tweak_port=env.get_int("IPHONE_TWEAK_PORT", defaults.tweak_port),
            tweak_timeout_ms=env.get_int("IPHONE_TWEAK_TIMEOUT_MS", defaults.tweak_timeout_ms),
            allowed_write_roots=_dedupe(posixpath.normpath(root) for root in write_roots),
            local_artifact_roots=_dedupe(os.path.abspath(root) for root in local_roots),
        )

    def summarize(self) -> str:
        """One-line description for startup logs. The password is never shown."""

        key_auth = f"key={self.ssh_key_path}" if self.ssh_key_path else "key=<none>"
        pw_auth = "password=set" if self.ssh_password else "password=<unset>"
        return " | ".join(
            [
                f"ssh={self.ssh_user}@{self.ssh_host}:{self.ssh_port}",
                key_auth,
                pw_auth,
                f"tweak=http://{self.ssh_host}:{self.tweak_port}",
                f"write_roots={','.join(self.allowed_write_roots)}",
                f"local_roots={','.join(self.local_artifact_roots)}",
            ]
        )


class _Environment:
    """Typed accessors over an environment mapping."""

    def __init__(self, environ: Mapping[str, str]):
        self._environ = environ

    def get(self, name: str, fallback: Optional[str] = None) -> Optional[str]:
        value = self._environ.get(name)
        if value is None or not value.strip():
            return fallback
        return value.strip()

    def get_int(self, name: str, fallback: int) -> int:
        value = self.get(name)
        if not value:
            return fallback
        try:
            return int(value, 10)
        except ValueError:
            return fallback

    def get_list(self, name: str, fallback: List[str]) -> List[str]:
        value = self.get(name)
        if not value:
            return list(fallback)
        return [entry.strip() for entry in value.split(",") if entry.strip()]
