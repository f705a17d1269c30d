"""
Built-in capabilities for toolgate.

create_registry() returns a fresh CapabilityRegistry with:
    - memory:  short global facts stored in <workspace_dir>/memories.json
    - agents:  delegation to other agents (needs ctx.run_agent_fn)
    - browser: headless browser tool server, run as an external process

Each in-process factory applies the agent's tools allow-list with
filter_tools(), so a misnamed tool aborts the run setup.
"""

import json
import logging
from pathlib import Path
from typing import Any

from toolgate.capabilities.registry import (
    CapabilityRegistry,
    Factory,
    ResolverContext,
    StaticDescriptor,
)
from toolgate.schema import SubprocessServer, ToolDescriptor
from toolgate.tools.base import Capability, FunctionTool, ToolContext, ToolOutput
from toolgate.tools.filter import filter_tools

logger = logging.getLogger(__name__)

MAX_MEMORY_LENGTH = 200
MAX_DELEGATION_DEPTH = 3

BROWSER_SERVER = SubprocessServer(command="npx", args=("@playwright/mcp@latest",))


# =============================================================================
# memory
# =============================================================================


def _load_memories(path: Path) -> list[str]:
    if not path.exists():
        return []
    memories = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(memories, list) or not all(isinstance(m, str) for m in memories):
        msg = f"{path} must contain a JSON list of strings"
        raise ValueError(msg)
    return memories


def _save_memories(path: Path, memories: list[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(memories, indent=2), encoding="utf-8")


def create_memory_capability(
    workspace_dir: str,
    allowed_tools: list[str] | None = None,
) -> Capability:
    """
    Build the memory capability.

    Memories are short facts shared by every agent (user's name, timezone,
    preferences). Longer content belongs in files or agent instructions.
    """
    memories_path = Path(workspace_dir) / "memories.json"

    def save_memory(args: dict[str, Any], context: ToolContext) -> ToolOutput:
        memory = args["memory"]
        if len(memory) > MAX_MEMORY_LENGTH:
            return ToolOutput.fail(
                f"Memory too long ({len(memory)} chars, max {MAX_MEMORY_LENGTH}). "
                "Memories are for short cross-agent facts. "
                "For longer content, use files or agent instructions instead."
            )
        try:
            memories = _load_memories(memories_path)
            if memory in memories:
                return ToolOutput.ok("Memory already exists", path=str(memories_path))
            memories.append(memory)
            _save_memories(memories_path, memories)
        except (OSError, ValueError) as e:
            return ToolOutput.fail(f"Error saving memory: {e}", path=str(memories_path))
        return ToolOutput.ok(f"Saved memory: {memory}", path=str(memories_path))

    def list_memories(args: dict[str, Any], context: ToolContext) -> ToolOutput:
        try:
            memories = _load_memories(memories_path)
        except (OSError, ValueError) as e:
            return ToolOutput.fail(f"Error reading memories: {e}", path=str(memories_path))
        return ToolOutput.ok(memories, path=str(memories_path), count=len(memories))

    def delete_memory(args: dict[str, Any], context: ToolContext) -> ToolOutput:
        memory = args["memory"]
        try:
            memories = _load_memories(memories_path)
            if memory not in memories:
                return ToolOutput.fail("Memory not found", path=str(memories_path))
            memories.remove(memory)
            _save_memories(memories_path, memories)
        except (OSError, ValueError) as e:
            return ToolOutput.fail(f"Error deleting memory: {e}", path=str(memories_path))
        return ToolOutput.ok(f"Deleted memory: {memory}", path=str(memories_path))

    tools = [
        FunctionTool(
            "save_memory",
            f"Save a short global fact visible to all agents (max {MAX_MEMORY_LENGTH} chars)",
            save_memory,
            required=("memory",),
        ),
        FunctionTool("list_memories", "List saved global memories", list_memories),
        FunctionTool(
            "delete_memory",
            "Delete a memory by exact text",
            delete_memory,
            required=("memory",),
        ),
    ]
    return Capability("memory", filter_tools(tools, "memory", allowed_tools))


# =============================================================================
# agents
# =============================================================================


def create_agents_capability(ctx: ResolverContext, allowed_tools: list[str] | None = None) -> Capability | None:
    """
    Build the agents capability, or None when the host cannot run agents.
    """
    run_agent = ctx.run_agent_fn
    if run_agent is None:
        return None

    caller = ctx.agent
    depth = ctx.ask_agent_depth

    def list_available_agents(args: dict[str, Any], context: ToolContext) -> ToolOutput:
        return ToolOutput.ok(list(caller.allowed_agents), count=len(caller.allowed_agents))

    def ask_agent(args: dict[str, Any], context: ToolContext) -> ToolOutput:
        target = args["agent_id"]
        if target not in caller.allowed_agents:
            return ToolOutput.fail(
                f"Agent {target} is not in your allowed agents list",
                agent_id=target,
            )
        if depth >= MAX_DELEGATION_DEPTH:
            return ToolOutput.fail(
                f"Delegation depth limit reached (max {MAX_DELEGATION_DEPTH}). "
                "Cannot delegate further.",
                depth=depth,
            )

        logger.info("%s -> %s (depth %d)", caller.id, target, depth)
        try:
            reply = run_agent(target, args["message"], depth + 1)
        except Exception as e:
            logger.warning("delegation to %s failed: %s", target, e)
            return ToolOutput.fail(f"Agent {target} failed: {e}", agent_id=target)
        return ToolOutput.ok(reply, agent_id=target, depth=depth + 1)

    tools = [
        FunctionTool(
            "list_available_agents",
            "List agents you can delegate to",
            list_available_agents,
        ),
        FunctionTool(
            "ask_agent",
            "Send a message to another agent",
            ask_agent,
            required=("agent_id", "message"),
        ),
    ]
    return Capability("agents", filter_tools(tools, "agents", allowed_tools))


# =============================================================================
# Registry
# =============================================================================

KNOWN_CAPABILITIES: tuple[str, ...] = ("memory", "agents", "browser")


def create_registry() -> CapabilityRegistry:
    """Create a CapabilityRegistry with all built-in capabilities registered."""
    registry = CapabilityRegistry()

    registry.register(
        "memory",
        Factory(lambda ctx, allowed: create_memory_capability(ctx.workspace_dir, allowed)),
        [
            ToolDescriptor(name="save_memory", description="Save a short global fact"),
            ToolDescriptor(name="list_memories", description="List saved global memories"),
            ToolDescriptor(name="delete_memory", description="Delete a memory by exact text"),
        ],
    )

    registry.register(
        "agents",
        Factory(create_agents_capability),
        [
            ToolDescriptor(name="list_available_agents", description="List agents you can delegate to"),
            ToolDescriptor(name="ask_agent", description="Send a message to another agent"),
        ],
    )

    registry.register("browser", StaticDescriptor(BROWSER_SERVER), [])

    return registry
