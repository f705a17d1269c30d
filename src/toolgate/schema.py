"""
Schema definitions for toolgate.

This module defines the Pydantic models used throughout toolgate:
- TrustLevel: Coarse per-run policy tier
- AllowedDirectorySet / ToolInvocation: Inputs to the Directory Guard
- Decision: The result of evaluating a tool call
- CapabilityConfig / ToolDescriptor / CapabilityDescriptor: Capability metadata
- SubprocessServer: Static descriptor for out-of-process tool servers
- AgentConfig: Per-agent configuration loaded from YAML

Design Decisions:
    - Models are immutable (frozen=True)
    - Agent YAML is loaded with yaml.safe_load and validated here, so
      configuration errors surface before any run starts
"""

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from toolgate.errors import InvalidAgentConfigError


# =============================================================================
# Enums
# =============================================================================


class TrustLevel(str, Enum):
    """
    Per-agent-run trust tier.

    SANDBOX and CONTROLLED share the same directory containment rules;
    they differ only in which tools the host lets through (see policy.trust).
    UNRESTRICTED bypasses every check.
    """

    SANDBOX = "sandbox"
    CONTROLLED = "controlled"
    UNRESTRICTED = "unrestricted"


# =============================================================================
# Guard Models
# =============================================================================


class AllowedDirectorySet(BaseModel):
    """
    Directories a run may touch with path-bearing tools.

    Attributes:
        cwd: The agent working directory (always allowed)
        extra_dirs: Additional allowed directories
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cwd: str = Field(..., description="Agent working directory", min_length=1)
    extra_dirs: tuple[str, ...] = Field(
        default=(),
        description="Additional allowed directories",
    )

    def all(self) -> list[str]:
        """Return [cwd, *extra_dirs]."""
        return [self.cwd, *self.extra_dirs]


class ToolInvocation(BaseModel):
    """
    A candidate tool call as requested by the agent.

    Only the path-bearing keys are inspected; everything else is opaque.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Tool name as requested by the agent")
    arguments: dict[str, Any] = Field(
        default_factory=dict,
        description="Tool arguments",
    )


class Decision(BaseModel):
    """
    Result of evaluating a tool call.

    A denial is a normal value, not an error. The host reports the
    reason verbatim to the calling agent.

    Attributes:
        allowed: Whether the call may proceed
        reason: Human-readable explanation (the literal deny message on denial)
        rule_matched: Which rule produced this decision
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed: bool = Field(..., description="Whether the call may proceed")
    reason: str = Field(default="", description="Explanation of the decision")
    rule_matched: str | None = Field(
        default=None,
        description="Which rule produced this decision",
    )

    @classmethod
    def allow(cls, reason: str = "", rule: str | None = None) -> "Decision":
        """Create an ALLOW decision."""
        return cls(allowed=True, reason=reason, rule_matched=rule)

    @classmethod
    def deny(cls, reason: str, rule: str | None = None) -> "Decision":
        """Create a DENY decision."""
        return cls(allowed=False, reason=reason, rule_matched=rule)

    @property
    def denied(self) -> bool:
        return not self.allowed


# =============================================================================
# Capability Models
# =============================================================================


class CapabilityConfig(BaseModel):
    """
    Per-capability configuration from an agent file.

    Attributes:
        tools: Optional allow-list of tool names. None or [] means all tools.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    tools: list[str] | None = Field(
        default=None,
        description="Allow-list of tool names (None = all tools)",
    )

    @property
    def tools_allow_list(self) -> list[str] | None:
        return self.tools


class ToolDescriptor(BaseModel):
    """Name and one-line description of a capability tool."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    description: str = ""


class CapabilityDescriptor(BaseModel):
    """Introspection record for a registered capability."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    tools: tuple[ToolDescriptor, ...] = ()


class SubprocessServer(BaseModel):
    """
    Static descriptor for a capability served by an external tool process.

    The host launches `command args...` and speaks the tool protocol over
    stdio. toolgate never starts the process itself.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    transport: str = Field(default="subprocess")
    command: str = Field(..., min_length=1)
    args: tuple[str, ...] = ()


# =============================================================================
# Agent Configuration
# =============================================================================


class AgentConfig(BaseModel):
    """
    Agent configuration as stored in agent.yaml.

    Attributes:
        id: Unique agent identifier
        name: Display name
        trust: Trust level for every run of this agent
        directories: Extra directories the agent may access
        capabilities: Requested capabilities, in request order
        allowed_agents: Agents this one may delegate to (agents capability)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = ""
    trust: TrustLevel = TrustLevel.CONTROLLED
    directories: list[str] = Field(default_factory=list)
    capabilities: dict[str, CapabilityConfig] = Field(default_factory=dict)
    allowed_agents: list[str] = Field(default_factory=list)

    @field_validator("capabilities", mode="before")
    @classmethod
    def normalize_capabilities(cls, v: Any) -> Any:
        """Accept a bare list of keys or `key:` entries with no body."""
        if v is None:
            return {}
        if isinstance(v, list):
            return {key: {} for key in v}
        if isinstance(v, dict):
            return {key: ({} if cfg is None else cfg) for key, cfg in v.items()}
        return v


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def _validate_agent(data: Any, source: str) -> AgentConfig:
    try:
        return AgentConfig.model_validate(data)
    except ValidationError as e:
        raise InvalidAgentConfigError(source=source, underlying_error=str(e)) from e


def load_agent_config(path: Path | str) -> AgentConfig:
    """
    Load an agent configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated AgentConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidAgentConfigError: If the YAML is malformed or doesn't match the schema
    """
    path = Path(path)
    with path.open() as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidAgentConfigError(source=str(path), underlying_error=str(e)) from e

    return _validate_agent(data, str(path))


def load_agent_config_from_string(content: str) -> AgentConfig:
    """Load an agent configuration from a YAML string."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise InvalidAgentConfigError(source="<string>", underlying_error=str(e)) from e
    return _validate_agent(data, "<string>")
