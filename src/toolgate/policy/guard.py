"""
Directory Guard for toolgate.

The Directory Guard is the per-run pre-invocation check for tools that touch
the filesystem. It is built once per agent run with a fixed trust level,
working directory and extra directories, then asked about every candidate
tool call.

How it works:
    1. unrestricted trust -> allow everything
    2. look up the tool's path-bearing argument key (Read/Write/Edit ->
       file_path, NotebookEdit -> notebook_path, Glob/Grep -> path)
    3. tools without a path key -> allow (trust-tier tool lists handle them)
    4. missing path argument -> allow (the host defaults it to cwd)
    5. resolve the path lexically against cwd and require it to equal or
       lie beneath one of [cwd, *extra_dirs]

sandbox and controlled trust apply the same containment rules here.

Security Note:
    This module is security-critical. Decisions are pure functions of the
    constructor arguments and the invocation. With resolve_symlinks=True the
    guard additionally follows symlinks (this reads the filesystem) so that a
    link inside an allowed directory cannot point outside of it.
"""

import logging
import os
from typing import Any

from toolgate.policy.paths import is_within, normalize_dir, resolve_path
from toolgate.schema import AllowedDirectorySet, Decision, ToolInvocation, TrustLevel

logger = logging.getLogger(__name__)

# Tools that carry a file path, mapped to the argument holding it
PATH_BEARING_TOOLS: dict[str, str] = {
    "Read": "file_path",
    "Write": "file_path",
    "Edit": "file_path",
    "NotebookEdit": "notebook_path",
    "Glob": "path",
    "Grep": "path",
}

DENY_TEMPLATE = "Access denied: {path} is outside allowed directories"


def path_argument_for(tool_name: str) -> str | None:
    """Return the path-bearing argument key for a tool, or None."""
    return PATH_BEARING_TOOLS.get(tool_name)


class DirectoryGuard:
    """
    Path containment check for one agent run.

    Usage:
        guard = DirectoryGuard(TrustLevel.CONTROLLED, "/home/user/project", ["/shared/data"])
        decision = guard.decide("Read", {"file_path": "/etc/passwd"})
        if not decision.allowed:
            report(decision.reason)

    The guard is immutable after construction and safe to call from
    several in-flight tool calls at once.
    """

    __slots__ = ("_trust", "_directories", "_resolve_symlinks")

    def __init__(
        self,
        trust: TrustLevel | str,
        cwd: str,
        extra_dirs: list[str] | tuple[str, ...] = (),
        resolve_symlinks: bool = False,
    ) -> None:
        """
        Initialize the guard.

        Args:
            trust: Trust level of the run
            cwd: Agent working directory
            extra_dirs: Additional allowed directories
            resolve_symlinks: Follow symlinks before the containment check
        """
        object.__setattr__(self, "_trust", TrustLevel(trust))
        object.__setattr__(
            self,
            "_directories",
            AllowedDirectorySet(
                cwd=normalize_dir(cwd),
                extra_dirs=tuple(normalize_dir(d) for d in extra_dirs),
            ),
        )
        object.__setattr__(self, "_resolve_symlinks", bool(resolve_symlinks))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def trust(self) -> TrustLevel:
        return self._trust

    @property
    def cwd(self) -> str:
        return self._directories.cwd

    @property
    def extra_dirs(self) -> tuple[str, ...]:
        return self._directories.extra_dirs

    @property
    def directories(self) -> AllowedDirectorySet:
        return self._directories

    @property
    def resolve_symlinks(self) -> bool:
        return self._resolve_symlinks

    def decide(self, tool_name: str, arguments: dict[str, Any] | None = None) -> Decision:
        """
        Decide whether a tool call may proceed.

        Args:
            tool_name: Name of the tool being called
            arguments: The tool's argument bag

        Returns:
            Decision; on denial the reason is the literal message for the agent
        """
        if self._trust is TrustLevel.UNRESTRICTED:
            logger.debug(
                "allow %s (unrestricted trust)",
                tool_name,
                extra={"tool_name": tool_name, "rule": "unrestricted"},
            )
            return Decision.allow("Unrestricted trust", rule="unrestricted")

        path_key = path_argument_for(tool_name)
        if path_key is None:
            logger.debug(
                "allow %s (not a file tool)",
                tool_name,
                extra={"tool_name": tool_name, "rule": "not_path_bearing"},
            )
            return Decision.allow("Not a path-bearing tool", rule="not_path_bearing")

        raw_path = (arguments or {}).get(path_key)
        if raw_path is None or raw_path == "":
            logger.debug(
                "allow %s (no path specified, defaults to cwd)",
                tool_name,
                extra={"tool_name": tool_name, "rule": "no_path"},
            )
            return Decision.allow("No path specified, defaults to cwd", rule="no_path")

        resolved = resolve_path(raw_path, self.cwd)
        allowed_dirs = self._directories.all()

        for directory in allowed_dirs:
            if is_within(resolved, directory):
                if self._resolve_symlinks and not self._real_path_contained(resolved):
                    logger.debug(
                        "deny %s %s (symlink escapes allowed directories)",
                        tool_name,
                        resolved,
                        extra={
                            "tool_name": tool_name,
                            "resolved_path": resolved,
                            "rule": "symlink_escape",
                        },
                    )
                    return Decision.deny(
                        DENY_TEMPLATE.format(path=resolved),
                        rule="symlink_escape",
                    )
                rule = f"within[{directory}]"
                logger.debug(
                    "allow %s %s (within %s)",
                    tool_name,
                    resolved,
                    directory,
                    extra={"tool_name": tool_name, "resolved_path": resolved, "rule": rule},
                )
                return Decision.allow(f"Within {directory}", rule=rule)

        logger.debug(
            "deny %s %s (outside allowed directories: %s)",
            tool_name,
            resolved,
            ", ".join(allowed_dirs),
            extra={
                "tool_name": tool_name,
                "resolved_path": resolved,
                "rule": "outside_allowed_directories",
            },
        )
        return Decision.deny(
            DENY_TEMPLATE.format(path=resolved),
            rule="outside_allowed_directories",
        )

    def check(self, invocation: ToolInvocation) -> Decision:
        """Decide for a ToolInvocation value."""
        return self.decide(invocation.name, invocation.arguments)

    def __call__(
        self,
        tool_name: str,
        tool_input: dict[str, Any] | None = None,
        cancellation_token: Any = None,
    ) -> Decision:
        """
        Pre-invocation hook entry point.

        cancellation_token is accepted for hook compatibility only;
        a decision is always returned.
        """
        return self.decide(tool_name, tool_input)

    def _real_path_contained(self, resolved: str) -> bool:
        """Check containment again after following symlinks on both sides."""
        try:
            real = os.path.realpath(resolved)
        except (ValueError, OSError):
            # Embedded NUL and friends: nothing to follow
            real = resolved

        for directory in self._directories.all():
            try:
                real_dir = os.path.realpath(directory)
            except (ValueError, OSError):
                real_dir = directory
            if is_within(real, real_dir):
                return True
        return False

    def __repr__(self) -> str:
        dirs = ", ".join(self._directories.all())
        return f"<DirectoryGuard: trust={self._trust.value} dirs=[{dirs}]>"
