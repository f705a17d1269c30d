"""
Tool allow-list filtering.

An agent's configuration can narrow a capability to a subset of its tools:

    capabilities:
      memory:
        tools: [list_memories]

filter_tools() applies that allow-list. A name the capability does not
provide is a configuration error, never silently ignored.
"""

from typing import Protocol, Sequence, TypeVar

from toolgate.errors import UnknownToolError


class _Named(Protocol):
    @property
    def name(self) -> str: ...


T = TypeVar("T", bound=_Named)


def filter_tools(
    tools: Sequence[T],
    capability_label: str,
    allowed_names: Sequence[str] | None = None,
) -> Sequence[T]:
    """
    Restrict a capability's tools to an allow-list.

    Args:
        tools: The capability's full tool collection (not modified)
        capability_label: Capability name used in error messages
        allowed_names: Names to keep; None or empty keeps everything

    Returns:
        The original collection object when there is no allow-list,
        otherwise a new list of the matching tools in their original order

    Raises:
        UnknownToolError: If an allowed name matches no tool
    """
    if not allowed_names:
        return tools

    available = [tool.name for tool in tools]
    known = set(available)
    for name in allowed_names:
        if name not in known:
            raise UnknownToolError(
                tool=name,
                capability=capability_label,
                available=available,
            )

    wanted = set(allowed_names)
    return [tool for tool in tools if tool.name in wanted]
