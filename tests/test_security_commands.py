"""Denylist and write-intent classification."""

from __future__ import annotations

import re

import pytest

from iphone_ssh_mcp.security import (
    DENY_RULES,
    DenialRule,
    is_likely_write_command,
    match_denied_pattern,
)


def test_deny_patterns_block_destructive_commands() -> None:
    assert match_denied_pattern("rm -rf /") is not None
    assert match_denied_pattern("reboot") is not None
    assert match_denied_pattern("ls -la") is None


@pytest.mark.parametrize(
    "command, reason_fragment",
    [
        ("rm -rf / ", "rm -rf /"),
        ("mkfs.hfs /dev/disk0s1", "formatting"),
        ("dd if=/dev/zero of=/dev/rdisk0", "raw disk"),
        ("shutdown -h now", "shutdown"),
        ("ls; REBOOT", "reboot"),
        ("halt", "halt"),
        ("launchctl bootout system/com.apple.foo", "launchctl"),
        ("apt-get purge openssh", "package removal"),
        ("apt remove foo", "package removal"),
        ("chflags -R uchg /var/mobile", "immutable"),
    ],
)
def test_each_rule_reports_its_reason(command: str, reason_fragment: str) -> None:
    rule = match_denied_pattern(command)
    assert rule is not None
    assert reason_fragment in rule.reason


def test_denylist_matches_inside_pipelines() -> None:
    assert match_denied_pattern("cat /tmp/x | sh -c 'reboot'") is not None
    assert match_denied_pattern("true && Shutdown") is not None


def test_rm_rf_only_denied_for_filesystem_root() -> None:
    assert match_denied_pattern("rm -rf /var/mobile/tmp") is None
    assert match_denied_pattern("rm -rf / && echo done") is not None


def test_word_boundaries_prevent_false_matches() -> None:
    assert match_denied_pattern("cat /var/log/rebooted.log") is None
    assert match_denied_pattern("echo halting") is None


def test_first_matching_rule_wins() -> None:
    rule = match_denied_pattern("reboot; shutdown")
    assert rule is not None
    assert rule.reason == "Refuses remote shutdown command."


def test_custom_rule_table() -> None:
    rules = (DenialRule(re.compile(r"\bkillall\b", re.IGNORECASE), "No killall."),)
    assert match_denied_pattern("killall SpringBoard", rules).reason == "No killall."
    assert match_denied_pattern("reboot", rules) is None


def test_rules_are_immutable() -> None:
    with pytest.raises(AttributeError):
        DENY_RULES[0].reason = "changed"  # type: ignore[misc]


@pytest.mark.parametrize(
    "command",
    [
        "ls -la /var/mobile",
        "tail -n 200 /var/log/syslog",
        "cat /etc/hosts",
        "ps aux | grep SpringBoard",
        "df -h /",
    ],
)
def test_read_commands_are_not_writes(command: str) -> None:
    assert is_likely_write_command(command) is False


@pytest.mark.parametrize(
    "command",
    [
        "mkdir -p /var/mobile/test",
        "python3.14 -m pip install requests",
        "python -m pip install rich",
        "touch /tmp/a",
        "echo hi | tee /tmp/out",
        "sed -i 's/a/b/' /etc/hosts",
        "perl -i -pe 's/a/b/' file",
        "apt-get install curl",
        "CHMOD 755 /usr/local/bin/x",
        "ls && rm /tmp/x",
    ],
)
def test_write_commands_are_flagged(command: str) -> None:
    assert is_likely_write_command(command) is True


def test_write_classifier_is_over_inclusive_for_quoted_words() -> None:
    assert is_likely_write_command("echo 'how to mkdir'") is True
