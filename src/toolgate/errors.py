"""
Exception hierarchy for toolgate.

All toolgate exceptions inherit from ToolgateError, allowing callers to catch
every toolgate-specific exception with a single except clause.

Exception Categories:
    - ConfigurationError: A misconfigured agent run (unknown capability,
      unknown tool in an allow-list, invalid agent YAML)
    - ToolError: Lookup failures inside a resolved capability

Access denial is deliberately NOT an exception. The Directory Guard returns a
Decision value and the host turns a denial into a failed tool result.

Design Principles:
    - All errors have error codes for programmatic handling
    - All errors include context (capability, tool, etc. where applicable)
    - Configuration errors are fail-fast and non-retryable
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Tool errors: 2xxx
ERROR_TOOL_NOT_FOUND = 2001

# Configuration errors: 3xxx
ERROR_CONFIG_INVALID = 3000
ERROR_CONFIG_UNKNOWN_CAPABILITY = 3001
ERROR_CONFIG_UNKNOWN_TOOL = 3002
ERROR_CONFIG_INVALID_AGENT = 3003


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class ToolgateError(Exception):
    """
    Base exception for all toolgate errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


@dataclass
class ConfigurationError(ToolgateError):
    """
    Raised when an agent run is misconfigured.

    These errors abort setup of the run before any tool executes.
    They are never retried.
    """

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID


@dataclass
class UnknownCapabilityError(ConfigurationError):
    """Raised when a requested capability key is not registered."""

    capability: str = ""
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f'Unknown capability: "{self.capability}"'
        if self.code == 0:
            self.code = ERROR_CONFIG_UNKNOWN_CAPABILITY
        if not self.suggestion:
            self.suggestion = f"Available: {', '.join(self.available) or '(none)'}"
        super().__post_init__()
        self.context.update({
            "capability": self.capability,
            "available": list(self.available),
        })


@dataclass
class UnknownToolError(ConfigurationError):
    """Raised when a tools allow-list names a tool the capability lacks."""

    tool: str = ""
    capability: str = ""
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f'Unknown tool "{self.tool}" for capability "{self.capability}"'
        if self.code == 0:
            self.code = ERROR_CONFIG_UNKNOWN_TOOL
        if not self.suggestion:
            self.suggestion = f"Available: {', '.join(self.available) or '(none)'}"
        super().__post_init__()
        self.context.update({
            "tool": self.tool,
            "capability": self.capability,
            "available": list(self.available),
        })


@dataclass
class InvalidAgentConfigError(ConfigurationError):
    """Raised when an agent configuration file cannot be loaded."""

    source: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid agent configuration {self.source}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID_AGENT
        super().__post_init__()
        self.context.update({
            "source": self.source,
            "underlying_error": self.underlying_error,
        })


# =============================================================================
# Tool Errors
# =============================================================================


@dataclass
class ToolError(ToolgateError):
    """
    Base class for tool lookup errors inside a resolved capability.

    Attributes:
        tool: Name of the tool involved
        capability: Key of the capability that was searched
    """

    tool: str = ""
    capability: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "tool": self.tool,
            "capability": self.capability,
        })


@dataclass
class ToolNotFoundError(ToolError):
    """Raised when a capability does not expose the requested tool."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            where = f" in capability {self.capability}" if self.capability else ""
            self.message = f"Tool not found: {self.tool}{where}"
        if self.code == 0:
            self.code = ERROR_TOOL_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Check tool name spelling or the capability's tools allow-list"
        super().__post_init__()
