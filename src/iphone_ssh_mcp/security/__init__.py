"""Command-safety gateway: path allowlists, command classification, quoting."""

from .commands import (
    DENY_RULES,
    WRITE_INTENT_SIGNATURES,
    DenialRule,
    is_likely_write_command,
    match_denied_pattern,
)
from .errors import (
    CommandDenied,
    GatewayError,
    InvalidPath,
    LocalPathBlocked,
    WriteIntentOnReadPath,
    WritePathBlocked,
)
from .gateway import check_read_command, check_write_command
from .paths import (
    ensure_allowed_local_path,
    ensure_allowed_write_paths,
    local_path_within_roots,
    normalize_local_path,
    normalize_remote_path,
    path_within_roots,
)
from .quoting import escape_scp_remote_path, shell_quote

__all__ = [
    "DENY_RULES",
    "WRITE_INTENT_SIGNATURES",
    "DenialRule",
    "is_likely_write_command",
    "match_denied_pattern",
    "CommandDenied",
    "GatewayError",
    "InvalidPath",
    "LocalPathBlocked",
    "WriteIntentOnReadPath",
    "WritePathBlocked",
    "check_read_command",
    "check_write_command",
    "ensure_allowed_local_path",
    "ensure_allowed_write_paths",
    "local_path_within_roots",
    "normalize_local_path",
    "normalize_remote_path",
    "path_within_roots",
    "escape_scp_remote_path",
    "shell_quote",
]
