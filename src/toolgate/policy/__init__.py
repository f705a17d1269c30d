"""
Policy module for toolgate.

This module answers "is this tool call allowed?" for one agent run.

Key concepts:
    - resolve_path: Lexical normalization of agent-supplied paths
    - DirectoryGuard: Path containment for filesystem tools
    - TrustOptions: Per-tier tool allow/deny lists

Both checks are pure and fail closed: a path that does not normalize into an
allowed directory is denied, and a tool missing from a tier's allowed list
is refused.
"""

from toolgate.policy.guard import PATH_BEARING_TOOLS, DirectoryGuard, path_argument_for
from toolgate.policy.paths import is_within, resolve_path
from toolgate.policy.trust import (
    TrustOptions,
    capability_tool_name,
    capability_tool_patterns,
    split_capability_tool_name,
    trust_options,
)

__all__ = [
    "PATH_BEARING_TOOLS",
    "DirectoryGuard",
    "TrustOptions",
    "capability_tool_name",
    "capability_tool_patterns",
    "is_within",
    "path_argument_for",
    "resolve_path",
    "split_capability_tool_name",
    "trust_options",
]
