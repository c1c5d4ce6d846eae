"""Transports to the managed device: SSH/SCP and the on-device HTTP agent."""

from .ssh import ExecResult, SshConfig, SshRunner
from .tweak import TweakClient, TweakResponse

__all__ = [
    "ExecResult",
    "SshConfig",
    "SshRunner",
    "TweakClient",
    "TweakResponse",
]
