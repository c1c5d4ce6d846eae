"""Ordering of the policy checks for the read and write entry points."""

from __future__ import annotations

import pytest

from iphone_ssh_mcp.security import (
    CommandDenied,
    WriteIntentOnReadPath,
    WritePathBlocked,
    check_read_command,
    check_write_command,
)

ROOTS = ["/var/mobile", "/tmp"]


def test_read_command_passes_for_plain_reads() -> None:
    check_read_command("ls -la /var/mobile")


def test_read_command_denylist_reports_reason() -> None:
    with pytest.raises(CommandDenied, match="Blocked by denylist: Refuses remote reboot command.") as excinfo:
        check_read_command("reboot")
    assert excinfo.value.reason == "Refuses remote reboot command."


def test_read_command_rejects_write_intent() -> None:
    with pytest.raises(WriteIntentOnReadPath, match="iphone_run_write_command"):
        check_read_command("mkdir -p /var/mobile/test")


def test_denylist_is_checked_before_write_intent() -> None:
    with pytest.raises(CommandDenied):
        check_read_command("rm -rf /")


def test_write_command_returns_normalized_paths() -> None:
    assert check_write_command("mkdir -p /var/mobile/x", ["/var/mobile/./x"], ROOTS) == ["/var/mobile/x"]


def test_write_command_denylist_cannot_be_overridden_by_paths() -> None:
    with pytest.raises(CommandDenied):
        check_write_command("rm -rf / ", ["/tmp/a"], ROOTS)


def test_write_command_blocks_paths_outside_roots() -> None:
    with pytest.raises(WritePathBlocked) as excinfo:
        check_write_command("cp /tmp/a /etc/a", ["/tmp/a", "/etc/a"], ROOTS)
    assert excinfo.value.blocked == ["/etc/a"]
