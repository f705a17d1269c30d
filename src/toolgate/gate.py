"""
Agent run gate for toolgate.

AgentGate is the per-run wiring a host needs in one place:
- Directory Guard: path containment for filesystem tools
- Trust options: which tools the run's trust tier lets through
- Capabilities: the resolved, run-scoped capability instances

Flow for every tool call:
    1. check(): trust-tier tool list, then the Directory Guard
    2. If denied: the literal deny message goes back to the agent
    3. If allowed and the tool belongs to a capability, call() executes it

Built-in host tools (Read, Bash, ...) are executed by the host after check().
"""

import logging
from typing import Any

from toolgate.capabilities.injections import resolve_injections
from toolgate.capabilities.registry import CapabilityRegistry, ResolvedCapabilities, ResolverContext
from toolgate.policy.guard import DirectoryGuard
from toolgate.policy.trust import (
    TrustOptions,
    capability_tool_patterns,
    split_capability_tool_name,
    trust_options,
)
from toolgate.schema import AgentConfig, Decision
from toolgate.tools.base import Capability, ToolContext, ToolOutput

logger = logging.getLogger(__name__)


class AgentGate:
    """
    Access control for one agent run.

    Usage:
        gate = AgentGate(agent, ctx, registry)
        decision = gate.check("Read", {"file_path": "notes.md"})
        output = gate.call("mcp__memory__list_memories", {})

    Construction resolves capabilities and raises ConfigurationError for
    a misconfigured agent, so a bad run aborts before any tool executes.

    Attributes:
        agent: The agent configuration
        context: The run's resolver context
        guard: DirectoryGuard for the run
        options: Trust-tier tool permissions
        capabilities: Resolved capability instances (requested + injected)
    """

    def __init__(
        self,
        agent: AgentConfig,
        context: ResolverContext,
        registry: CapabilityRegistry,
        cwd: str | None = None,
        background: bool = False,
        resolve_symlinks: bool = False,
    ) -> None:
        """
        Initialize the gate.

        Args:
            agent: Agent configuration (trust level, requested capabilities)
            context: Resolver context for the run
            registry: Capability registry to resolve against
            cwd: Working directory; defaults to context.agent_dir
            background: Whether the run has no interactive user
            resolve_symlinks: Enable the guard's symlink hardening
        """
        self.agent = agent
        self.context = context
        self.guard = DirectoryGuard(
            agent.trust,
            cwd or context.agent_dir,
            list(context.directories),
            resolve_symlinks=resolve_symlinks,
        )

        self.capabilities: ResolvedCapabilities = registry.resolve(agent.capabilities, context)
        self.capabilities.update(resolve_injections(context, background=background))

        self.options: TrustOptions = trust_options(
            agent.trust,
            capability_tool_patterns(list(self.capabilities)),
        )

    def check(self, tool_name: str, arguments: dict[str, Any] | None = None) -> Decision:
        """
        Decide whether a tool call may proceed.

        Args:
            tool_name: Tool name as requested by the agent
            arguments: Tool arguments

        Returns:
            Decision; a denial carries the message to report to the agent
        """
        if not self.options.permits(tool_name):
            logger.debug("deny %s (not permitted at %s trust)", tool_name, self.agent.trust.value)
            return Decision.deny(
                f"Tool not permitted at {self.agent.trust.value} trust: {tool_name}",
                rule="trust_tool_list",
            )
        return self.guard.decide(tool_name, arguments)

    def call(self, tool_name: str, arguments: dict[str, Any] | None = None) -> ToolOutput:
        """
        Check and execute a capability tool (mcp__<key>__<tool>).

        Denials and lookup failures come back as failed outputs; the
        agent sees the message and can adapt.
        """
        args = arguments or {}
        decision = self.check(tool_name, args)
        if not decision.allowed:
            return ToolOutput.fail(decision.reason, denied=True, rule=decision.rule_matched)

        parts = split_capability_tool_name(tool_name)
        if parts is None:
            return ToolOutput.fail(f"Not a capability tool: {tool_name}")
        key, name = parts

        capability = self.capabilities.get(key)
        if not isinstance(capability, Capability):
            # Missing, or served by an external process the host talks to
            return ToolOutput.fail(f"No in-process capability for tool: {tool_name}")

        tool = capability.get_optional(name)
        if tool is None:
            return ToolOutput.fail(f"Tool not found: {name} in capability {key}")

        context = ToolContext(
            agent_id=self.context.agent_id,
            thread_id=self.context.thread_id,
            working_dir=self.guard.cwd,
        )
        return tool.execute(args, context)

    def __repr__(self) -> str:
        return (
            f"<AgentGate: agent={self.agent.id} trust={self.agent.trust.value} "
            f"capabilities=[{', '.join(self.capabilities)}]>"
        )
