"""Ordering of the policy checks for the two command entry points.

The denylist always runs first and no path declaration can override it.
Declared write paths are a statement of intent checked against the allowed
roots; they do not confine what the command actually touches.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from .commands import is_likely_write_command, match_denied_pattern
from .errors import CommandDenied, WriteIntentOnReadPath
from .paths import ensure_allowed_write_paths

logger = logging.getLogger(__name__)


def ensure_not_denied(command: str) -> None:
    rule = match_denied_pattern(command)
    if rule is not None:
        logger.warning("Refused command by denylist (%s): %r", rule.reason, command)
        raise CommandDenied(command, rule.reason)


def check_read_command(command: str) -> None:
    """Admit ``command`` through the read-only entry point or raise."""

    ensure_not_denied(command)
    if is_likely_write_command(command):
        logger.warning("Refused write-like command on read-only path: %r", command)
        raise WriteIntentOnReadPath(command)


def check_write_command(
    command: str, write_paths: Sequence[str], allowed_roots: Sequence[str]
) -> List[str]:
    """Admit ``command`` through the write entry point.

    Returns the normalized ``write_paths``.
    """

    ensure_not_denied(command)
    return ensure_allowed_write_paths(write_paths, allowed_roots)
