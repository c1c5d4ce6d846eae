"""Path normalization and allowed-root membership."""

from __future__ import annotations

import os

import pytest

from iphone_ssh_mcp.security import (
    InvalidPath,
    LocalPathBlocked,
    WritePathBlocked,
    ensure_allowed_local_path,
    ensure_allowed_write_paths,
    local_path_within_roots,
    normalize_local_path,
    normalize_remote_path,
    path_within_roots,
)


def test_normalize_remote_path_requires_absolute_path() -> None:
    with pytest.raises(InvalidPath, match="Expected absolute remote path"):
        normalize_remote_path("var/mobile/test.txt")


def test_invalid_path_is_a_value_error() -> None:
    with pytest.raises(ValueError) as excinfo:
        normalize_remote_path("")
    assert excinfo.value.path == ""


def test_normalize_remote_path_collapses_traversal() -> None:
    assert normalize_remote_path("/var/mobile/../mobile/a.txt") == "/var/mobile/a.txt"
    assert normalize_remote_path("/var//mobile/./Documents/") == "/var/mobile/Documents"
    assert normalize_remote_path("/../../etc/passwd") == "/etc/passwd"
    assert normalize_remote_path("//var/mobile") == "/var/mobile"
    assert normalize_remote_path("/") == "/"


@pytest.mark.parametrize(
    "path",
    ["/", "/var/mobile", "/var/mobile/../root/x", "//tmp//a/./b/..", "/a/b/c/../../.."],
)
def test_normalize_remote_path_is_idempotent(path: str) -> None:
    once = normalize_remote_path(path)
    assert normalize_remote_path(once) == once


def test_normalize_local_path_resolves_against_cwd(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert normalize_local_path("out/a.png") == os.path.join(str(tmp_path), "out", "a.png")
    assert normalize_local_path("does/not/../exist") == os.path.join(str(tmp_path), "does", "exist")


def test_root_membership_is_boundary_exact() -> None:
    roots = ["/var/mobile"]
    assert path_within_roots("/var/mobile", roots)
    assert path_within_roots("/var/mobile/x", roots)
    assert not path_within_roots("/var/mobile2", roots)
    assert not path_within_roots("/var/mobil", roots)
    assert not path_within_roots("/var", roots)


def test_roots_are_normalized_before_comparison() -> None:
    assert path_within_roots("/var/mobile/a", ["/var/mobile/"])
    assert path_within_roots("/tmp/a", ["/var/../tmp"])


def test_filesystem_root_admits_everything() -> None:
    assert path_within_roots("/etc/passwd", ["/"])


def test_string_prefix_overlapping_roots() -> None:
    roots = ["/var/tmp", "/var"]
    assert path_within_roots("/var/tmpfile", roots)
    assert not path_within_roots("/var/tmpfile", ["/var/tmp"])


def test_ensure_allowed_write_paths_returns_normalized_in_order() -> None:
    roots = ["/var/mobile", "/tmp"]
    assert ensure_allowed_write_paths(["/var/mobile/test.txt"], roots) == ["/var/mobile/test.txt"]
    assert ensure_allowed_write_paths(["/tmp/./b", "/var/mobile/x/../a"], roots) == [
        "/tmp/b",
        "/var/mobile/a",
    ]


def test_ensure_allowed_write_paths_blocks_outside_roots() -> None:
    with pytest.raises(WritePathBlocked, match="Write path blocked by allowlist"):
        ensure_allowed_write_paths(["/etc/passwd"], ["/var/mobile", "/tmp"])


def test_ensure_allowed_write_paths_is_all_or_nothing() -> None:
    roots = ["/var/mobile"]
    with pytest.raises(WritePathBlocked) as excinfo:
        ensure_allowed_write_paths(
            ["/var/mobile/a", "/etc/passwd", "/var/mobile/../root/.ssh"], roots
        )
    error = excinfo.value
    assert error.roots == roots
    assert error.blocked == ["/etc/passwd", "/var/root/.ssh"]
    assert "/var/mobile/a" not in error.blocked


def test_ensure_allowed_write_paths_traversal_escape_is_blocked() -> None:
    with pytest.raises(WritePathBlocked):
        ensure_allowed_write_paths(["/var/mobile/../../etc/hosts"], ["/var/mobile"])


def test_ensure_allowed_write_paths_rejects_relative_paths() -> None:
    with pytest.raises(InvalidPath):
        ensure_allowed_write_paths(["var/mobile/a"], ["/var/mobile"])


def test_ensure_allowed_local_path_enforces_local_roots(tmp_path) -> None:
    root = str(tmp_path / "project")
    ok = ensure_allowed_local_path(os.path.join(root, "artifacts", "a.txt"), [root])
    assert ok == os.path.join(root, "artifacts", "a.txt")

    with pytest.raises(LocalPathBlocked, match="Local path blocked") as excinfo:
        ensure_allowed_local_path(str(tmp_path / "b.txt"), [root])
    assert excinfo.value.blocked == str(tmp_path / "b.txt")
    assert excinfo.value.roots == [root]


def test_local_membership_is_boundary_exact(tmp_path) -> None:
    root = str(tmp_path / "out")
    assert local_path_within_roots(root, [root])
    assert not local_path_within_roots(root + "2", [root])


def test_relative_local_path_resolves_inside_cwd_root(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert ensure_allowed_local_path("shots/a.png", ["."]) == str(tmp_path / "shots" / "a.png")
    with pytest.raises(LocalPathBlocked):
        ensure_allowed_local_path("../escape.png", ["."])
