"""
Trust-tier tool lists for toolgate.

The Directory Guard only looks at path-bearing tools. Whether a tool may be
called at all is decided by the per-tier allow/deny lists defined here:

    - sandbox:      only web search, subtasks and a fixed set of capability tools
    - controlled:   file tools, web tools and capability tools; Bash is blocked
    - unrestricted: everything

Capability tools are matched with wildcards of the form mcp__<key>__*.
"""

import logging
from fnmatch import fnmatchcase

from pydantic import BaseModel, ConfigDict, Field

from toolgate.schema import TrustLevel

logger = logging.getLogger(__name__)

CAPABILITY_TOOL_PREFIX = "mcp"


def capability_tool_name(key: str, tool: str) -> str:
    """Namespaced name under which a capability tool is exposed to the agent."""
    return f"{CAPABILITY_TOOL_PREFIX}__{key}__{tool}"


def split_capability_tool_name(name: str) -> tuple[str, str] | None:
    """
    Split mcp__<key>__<tool> into (key, tool).

    Returns None for names that are not capability-namespaced.
    """
    parts = name.split("__", 2)
    if len(parts) != 3 or parts[0] != CAPABILITY_TOOL_PREFIX or not parts[1] or not parts[2]:
        return None
    return parts[1], parts[2]


def capability_tool_patterns(keys: list[str] | None) -> list[str]:
    """Wildcard patterns pre-approving every tool of each capability."""
    if not keys:
        return []
    return [capability_tool_name(key, "*") for key in keys]


SANDBOX_ALLOWED_TOOLS: tuple[str, ...] = (
    "Skill",
    "WebSearch",
    "WebFetch",
    "Task",
    "TaskOutput",
    *capability_tool_patterns([
        "memory",
        "history",
        "agents",
        "agent-management",
        "triggers",
        "suggest-edit",
        "tasks",
        "notes",
        "notify-user",
    ]),
)

STANDARD_ALLOWED_TOOLS: tuple[str, ...] = (
    "Skill",
    "Read",
    "Write",
    "Edit",
    "Glob",
    "Grep",
    "WebSearch",
    "WebFetch",
    "Task",
    "TaskOutput",
    "NotebookEdit",
    *capability_tool_patterns([
        "memory",
        "history",
        "triggers",
        "agents",
        "agent-management",
        "suggest-edit",
        "self",
        "media",
        "tasks",
        "notes",
        "notify-user",
        "secrets",
    ]),
)

CONTROLLED_DISALLOWED_TOOLS: tuple[str, ...] = ("Bash",)


class TrustOptions(BaseModel):
    """
    Tool permissions for one trust tier.

    Attributes:
        level: The trust level these options were built for
        permission_mode: How the host handles tools outside the lists
        allowed_tools: Tool names/patterns pre-approved (None = all tools)
        disallowed_tools: Tool names/patterns always refused
        skip_permissions: Whether the host bypasses permission checks entirely
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: TrustLevel
    permission_mode: str = Field(..., description="dontAsk or bypassPermissions")
    allowed_tools: tuple[str, ...] | None = None
    disallowed_tools: tuple[str, ...] = ()
    skip_permissions: bool = False

    def permits(self, tool_name: str) -> bool:
        """
        Check whether a tool may be called at this tier.

        The disallowed list wins over the allowed list. With no allowed
        list every tool that is not disallowed is permitted.
        """
        if any(fnmatchcase(tool_name, pattern) for pattern in self.disallowed_tools):
            return False
        if self.allowed_tools is None:
            return True
        return any(fnmatchcase(tool_name, pattern) for pattern in self.allowed_tools)


def _build_options(level: TrustLevel) -> TrustOptions:
    if level is TrustLevel.SANDBOX:
        return TrustOptions(
            level=level,
            permission_mode="dontAsk",
            allowed_tools=SANDBOX_ALLOWED_TOOLS,
        )
    if level is TrustLevel.CONTROLLED:
        return TrustOptions(
            level=level,
            permission_mode="dontAsk",
            allowed_tools=STANDARD_ALLOWED_TOOLS,
            disallowed_tools=CONTROLLED_DISALLOWED_TOOLS,
        )
    return TrustOptions(
        level=level,
        permission_mode="bypassPermissions",
        skip_permissions=True,
    )


def trust_options(
    level: TrustLevel | str = TrustLevel.CONTROLLED,
    extra_allowed_tools: list[str] | None = None,
) -> TrustOptions:
    """
    Map a trust level to its tool permissions.

    Args:
        level: Trust level of the run
        extra_allowed_tools: Additional names/patterns appended to the allowed
            list (ignored when the tier has no allowed list)

    Returns:
        TrustOptions for the level
    """
    level = TrustLevel(level)
    opts = _build_options(level)
    if extra_allowed_tools and opts.allowed_tools is not None:
        opts = opts.model_copy(
            update={"allowed_tools": (*opts.allowed_tools, *extra_allowed_tools)},
        )

    logger.info(
        "level=%s permissionMode=%s allowedTools=%s disallowedTools=%s",
        level.value,
        opts.permission_mode,
        ",".join(opts.allowed_tools) if opts.allowed_tools is not None else "all",
        ",".join(opts.disallowed_tools) or "none",
        extra={"trust": level.value},
    )
    return opts
