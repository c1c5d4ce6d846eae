"""Encoders for splicing untrusted strings into remote command lines.

There are two execution contexts and one function for each; they are not
interchangeable.

``shell_quote``
    For any value interpolated into a command string that a POSIX shell
    parses (everything sent through ``ssh``).
``escape_scp_remote_path``
    For the path half of an ``scp`` remote spec. ``scp`` receives it as a
    plain argv entry with no local shell, and the remote side parses it
    directly, so wrapper quotes would arrive as literal characters.
"""

from __future__ import annotations

import re

__all__ = ["shell_quote", "escape_scp_remote_path"]

_SCP_SPECIAL = re.compile(r"""([\\\s"'`$!#&*()\[\]{};<>?|~:])""")


def shell_quote(value: str) -> str:
    """Wrap ``value`` in single quotes so a POSIX shell reads it back verbatim.

    >>> shell_quote("a'b")
    "'a'\\\\''b'"
    """

    return "'" + value.replace("'", "'\\''") + "'"


def escape_scp_remote_path(pathname: str) -> str:
    """Backslash-escape shell-significant characters without adding quotes."""

    return _SCP_SPECIAL.sub(r"\\\1", pathname)
