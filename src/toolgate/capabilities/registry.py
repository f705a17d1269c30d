"""
Capability registry for toolgate.

The registry is the catalog of optional extension modules ("capabilities")
an agent run may be granted. It is populated once at process start and
resolve() turns an agent's requested capabilities into fresh, run-scoped
instances.

Design:
    - Explicit registry objects, passed by reference (no module-level singleton)
    - Sources are a tagged union: Factory for in-process capabilities,
      StaticDescriptor for capabilities served by an external tool process
    - A factory returning None means "unavailable in this context"
    - Unknown keys are configuration errors and abort the whole resolution

Usage:
    registry = CapabilityRegistry()
    registry.register("memory", Factory(make_memory), [ToolDescriptor(name="save_memory")])
    capabilities = registry.resolve({"memory": CapabilityConfig()}, ctx)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Union

from toolgate.errors import ConfigurationError, UnknownCapabilityError
from toolgate.schema import AgentConfig, CapabilityConfig, CapabilityDescriptor, ToolDescriptor

logger = logging.getLogger(__name__)

# run_agent_fn(agent_id, message, depth) -> reply text
RunAgentFn = Callable[[str, str, int], str]


@dataclass(frozen=True)
class ResolverCallbacks:
    """
    Optional host hooks a capability may bind to.

    Attributes:
        on_file_send: Deliver a file to the user (path, caption, file_type)
        on_share_note: Share a note with the user (title, slug, message)
        on_pin_change: Notify the host that pinned notes changed
        on_notify_user: Push a message to the user from a background run
    """

    on_file_send: Callable[[str, str | None, str], None] | None = None
    on_share_note: Callable[[str, str, str | None], None] | None = None
    on_pin_change: Callable[[], None] | None = None
    on_notify_user: Callable[[str], None] | None = None


@dataclass(frozen=True)
class ResolverContext:
    """
    Everything a capability factory may need, assembled once per run.

    Attributes:
        agent_id: Agent the run belongs to
        agent_dir: The agent's home directory
        workspace_dir: Shared workspace directory
        thread_id: Conversation thread of the run
        directories: Extra directories the agent may access
        manifest: Host thread manifest (opaque here)
        callbacks: Optional host hooks
        agent: The agent's configuration
        ask_agent_depth: Current delegation depth
        run_agent_fn: Hook for running another agent; None disables delegation
    """

    agent_id: str
    agent_dir: str
    workspace_dir: str
    thread_id: str
    agent: AgentConfig
    directories: tuple[str, ...] = ()
    manifest: Mapping[str, Any] = field(default_factory=dict)
    callbacks: ResolverCallbacks = field(default_factory=ResolverCallbacks)
    ask_agent_depth: int = 0
    run_agent_fn: RunAgentFn | None = None


CapabilityFactory = Callable[[ResolverContext, "list[str] | None"], Any]


@dataclass(frozen=True)
class Factory:
    """In-process capability: fn(ctx, tools_allow_list) -> instance or None."""

    fn: CapabilityFactory


@dataclass(frozen=True)
class StaticDescriptor:
    """Out-of-process capability: the value is returned verbatim."""

    value: Any


CapabilitySource = Union[Factory, StaticDescriptor]

ResolvedCapabilities = dict[str, Any]


@dataclass(frozen=True)
class _Registered:
    source: CapabilitySource
    tools: tuple[ToolDescriptor, ...]


class CapabilityRegistry:
    """
    Catalog mapping capability keys to their sources.

    Attributes:
        _capabilities: Internal mapping of keys to registered sources,
            in registration order
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._capabilities: dict[str, _Registered] = {}

    def register(
        self,
        key: str,
        source: CapabilitySource | CapabilityFactory,
        tools: Iterable[ToolDescriptor | Mapping[str, str]] = (),
    ) -> None:
        """
        Register a capability.

        Registering an existing key replaces its source and tools; the key
        keeps its original position in registration order.

        Args:
            key: Unique capability key
            source: Factory or StaticDescriptor (a bare callable is wrapped in Factory)
            tools: Descriptors of the tools the capability provides

        Raises:
            ValueError: If key is empty or source is neither tagged nor callable
        """
        if not key:
            msg = "Capability key must be non-empty"
            raise ValueError(msg)

        if not isinstance(source, (Factory, StaticDescriptor)):
            if not callable(source):
                msg = f"Capability source for {key} must be a Factory, StaticDescriptor or callable"
                raise ValueError(msg)
            source = Factory(source)

        descriptors = tuple(
            tool if isinstance(tool, ToolDescriptor) else ToolDescriptor.model_validate(tool)
            for tool in tools
        )
        if key in self._capabilities:
            logger.debug("replacing capability %s", key)
        self._capabilities[key] = _Registered(source=source, tools=descriptors)

    def resolve(
        self,
        requested: Mapping[str, CapabilityConfig | Mapping[str, Any] | None] | None,
        ctx: ResolverContext,
    ) -> ResolvedCapabilities:
        """
        Materialize the requested capabilities for one run.

        Args:
            requested: Capability key -> config, in request order
            ctx: The run's resolver context

        Returns:
            Key -> instance for every available capability, in request order.
            Capabilities whose factory returned None are omitted.

        Raises:
            UnknownCapabilityError: If any requested key is not registered.
                No factory runs in that case.
        """
        if not requested:
            return {}

        configs: dict[str, CapabilityConfig] = {}
        for key, raw_config in requested.items():
            if key not in self._capabilities:
                raise UnknownCapabilityError(capability=key, available=self.known_keys())
            configs[key] = _coerce_config(key, raw_config)

        resolved: ResolvedCapabilities = {}
        for key, config in configs.items():
            source = self._capabilities[key].source

            if isinstance(source, StaticDescriptor):
                resolved[key] = source.value
                continue

            instance = source.fn(ctx, config.tools_allow_list)
            if instance is None:
                logger.debug(
                    "capability %s unavailable in this context",
                    key,
                    extra={"capability": key},
                )
                continue
            resolved[key] = instance

        logger.info(
            "resolved capabilities for %s: %s",
            ctx.agent_id,
            ", ".join(resolved) or "(none)",
        )
        return resolved

    def known_capabilities(self) -> list[CapabilityDescriptor]:
        """Return descriptors for all registered capabilities, in registration order."""
        return [
            CapabilityDescriptor(key=key, tools=registered.tools)
            for key, registered in self._capabilities.items()
        ]

    def known_keys(self) -> list[str]:
        """Return all registered keys, in registration order."""
        return list(self._capabilities)

    def has(self, key: str) -> bool:
        return key in self._capabilities

    def __contains__(self, key: str) -> bool:
        return key in self._capabilities

    def __len__(self) -> int:
        return len(self._capabilities)

    def __repr__(self) -> str:
        return f"<CapabilityRegistry: [{', '.join(self._capabilities)}]>"


def _coerce_config(
    key: str,
    raw: CapabilityConfig | Mapping[str, Any] | None,
) -> CapabilityConfig:
    if isinstance(raw, CapabilityConfig):
        return raw
    if raw is None:
        return CapabilityConfig()
    try:
        return CapabilityConfig.model_validate(dict(raw))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            message=f"Invalid configuration for capability {key}: {e}",
            context={"capability": key},
        ) from e
