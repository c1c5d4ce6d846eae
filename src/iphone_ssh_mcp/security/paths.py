"""Path normalization and allowed-root enforcement.

Remote paths are resolved lexically with POSIX rules; nothing here contacts
the device, so a path that does not exist yet (a file about to be written)
normalizes the same way as one that does. Symlinks are not followed: a link
inside an allowed root that points elsewhere is not detected by these checks.
Membership is decided on directory boundaries only, so ``/var/mobile2`` is
never inside ``/var/mobile``.
"""

from __future__ import annotations

import os
import posixpath
from typing import Iterable, List, Sequence

from .errors import InvalidPath, LocalPathBlocked, WritePathBlocked

__all__ = [
    "normalize_remote_path",
    "normalize_local_path",
    "path_within_roots",
    "local_path_within_roots",
    "ensure_allowed_write_paths",
    "ensure_allowed_local_path",
]


def _posix_normalize(value: str) -> str:
    normalized = posixpath.normpath(value)
    # normpath keeps a leading "//" as an implementation-defined root
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def _within(target: str, root: str, sep: str) -> bool:
    if target == root:
        return True
    prefix = root if root.endswith(sep) else root + sep
    return target.startswith(prefix)


def normalize_remote_path(value: str) -> str:
    """Return ``value`` with ``.``, ``..`` and repeated slashes collapsed.

    Raises
    ------
    InvalidPath
        If ``value`` is not an absolute POSIX path.
    """

    if not value.startswith("/"):
        raise InvalidPath(value)
    return _posix_normalize(value)


def normalize_local_path(value: str) -> str:
    """Resolve ``value`` against the working directory. Never fails."""

    return os.path.abspath(value)


def path_within_roots(target: str, roots: Iterable[str]) -> bool:
    return any(_within(target, _posix_normalize(root), "/") for root in roots)


def local_path_within_roots(target: str, roots: Iterable[str]) -> bool:
    return any(_within(target, os.path.abspath(root), os.sep) for root in roots)


def ensure_allowed_write_paths(paths: Sequence[str], allowed_roots: Sequence[str]) -> List[str]:
    """Normalize ``paths`` and require every one to sit under ``allowed_roots``.

    The check is all-or-nothing: when any path is outside the roots the whole
    call fails and the error lists every blocked path, not only the first.

    Returns
    -------
    The normalized paths in input order.
    """

    normalized = [normalize_remote_path(entry) for entry in paths]
    denied = [entry for entry in normalized if not path_within_roots(entry, allowed_roots)]
    if denied:
        raise WritePathBlocked(allowed_roots, denied)
    return normalized


def ensure_allowed_local_path(pathname: str, allowed_roots: Sequence[str]) -> str:
    """Resolve a local artifact path and require it to sit under ``allowed_roots``."""

    normalized = normalize_local_path(pathname)
    if not local_path_within_roots(normalized, allowed_roots):
        raise LocalPathBlocked(allowed_roots, normalized)
    return normalized
