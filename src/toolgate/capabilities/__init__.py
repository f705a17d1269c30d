"""
Capabilities module for toolgate.

Capabilities are optional, named bundles of tools an agent run may be
granted. The registry maps capability keys to their sources and resolves
an agent's request into run-scoped instances.

There is no module-level registry: build one with create_registry() at
process start and pass it to whoever assembles agent runs.
"""

from toolgate.capabilities.builtin import KNOWN_CAPABILITIES, create_registry
from toolgate.capabilities.injections import resolve_injections
from toolgate.capabilities.registry import (
    CapabilityRegistry,
    CapabilitySource,
    Factory,
    ResolvedCapabilities,
    ResolverCallbacks,
    ResolverContext,
    StaticDescriptor,
)

__all__ = [
    "KNOWN_CAPABILITIES",
    "CapabilityRegistry",
    "CapabilitySource",
    "Factory",
    "ResolvedCapabilities",
    "ResolverCallbacks",
    "ResolverContext",
    "StaticDescriptor",
    "create_registry",
    "resolve_injections",
]
