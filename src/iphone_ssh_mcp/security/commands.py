"""Lexical command classification: the denylist and write-intent signatures.

Both tables are matched case-insensitively against the whole command string,
so a dangerous sequence is caught anywhere in a pipeline. The classifier is
heuristic and errs towards flagging: a blocked read is recoverable, an
unflagged write is not.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

__all__ = [
    "DenialRule",
    "DENY_RULES",
    "WRITE_INTENT_SIGNATURES",
    "match_denied_pattern",
    "is_likely_write_command",
]


@dataclass(frozen=True, slots=True)
class DenialRule:
    """A command pattern that is always refused, with the reason reported."""

    pattern: re.Pattern[str]
    reason: str

    def matches(self, command: str) -> bool:
        return self.pattern.search(command) is not None


def _rule(regex: str, reason: str) -> DenialRule:
    return DenialRule(re.compile(regex, re.IGNORECASE), reason)


# Evaluated in order; the first match supplies the reason.
DENY_RULES: Tuple[DenialRule, ...] = (
    _rule(r"\brm\s+-rf\s+/(\s|$)", "Refuses full filesystem deletion (rm -rf /)."),
    _rule(r"\bmkfs\b", "Refuses filesystem formatting command."),
    _rule(r"\bdd\s+if=", "Refuses raw disk overwrite command."),
    _rule(r"\bshutdown\b", "Refuses remote shutdown command."),
    _rule(r"\breboot\b", "Refuses remote reboot command."),
    _rule(r"\bhalt\b", "Refuses remote halt command."),
    _rule(r"\blaunchctl\s+(bootout|remove)\b", "Refuses launchctl destructive operation."),
    _rule(r"\bapt(-get)?\s+(remove|purge)\b", "Refuses package removal command."),
    _rule(r"\bchflags\s+-R\s+uchg\b", "Refuses recursive immutable flag write."),
)

WRITE_INTENT_SIGNATURES: Tuple[re.Pattern[str], ...] = tuple(
    re.compile(regex, re.IGNORECASE)
    for regex in (
        r"\b(touch|mkdir|rmdir|mv|cp|rm|ln|install|tee|truncate|chmod|chown|chgrp)\b",
        r"\bsed\s+-i\b",
        r"\bperl\s+-i\b",
        r"\bpython\d*(\.\d+)?\s+-m\s+pip\s+install\b",
        r"\bapt(-get)?\s+install\b",
    )
)


def match_denied_pattern(
    command: str, rules: Sequence[DenialRule] = DENY_RULES
) -> Optional[DenialRule]:
    """Return the first rule matching ``command``, or ``None``."""

    for rule in rules:
        if rule.matches(command):
            return rule
    return None


def is_likely_write_command(command: str) -> bool:
    """Whether ``command`` looks like it mutates files or installed packages."""

    return any(pattern.search(command) for pattern in WRITE_INTENT_SIGNATURES)
