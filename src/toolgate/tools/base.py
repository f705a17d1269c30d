"""
Base classes for capability tools.

This module defines the core abstractions for the tools a capability exposes:
- Tool: Abstract base class that all tools must implement
- FunctionTool: Tool backed by a plain function
- ToolContext: Runtime context passed to tools during execution
- ToolOutput: Standardized result format from tool execution
- Capability: A live, run-scoped bundle of named tools

Design Principles:
    - Tools return ToolOutput and never raise for expected failures
    - Access checks happen BEFORE a tool executes, not inside it
    - A Capability keeps its tools in declaration order
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator

from toolgate.errors import ToolNotFoundError
from toolgate.schema import ToolDescriptor


@dataclass(frozen=True)
class ToolOutput:
    """
    Standardized output from tool execution.

    Attributes:
        success: Whether the tool executed successfully
        data: The output data from the tool (type varies by tool)
        error: Error message if success is False
        metadata: Additional metadata about the execution
    """

    success: bool
    data: Any = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, **metadata: Any) -> "ToolOutput":
        """Create a successful output."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, **metadata: Any) -> "ToolOutput":
        """Create a failed output."""
        return cls(success=False, error=error, metadata=metadata)


@dataclass
class ToolContext:
    """
    Runtime context passed to tools during execution.

    Attributes:
        agent_id: Agent the run belongs to
        thread_id: Conversation thread of the run
        working_dir: The working directory for relative paths
        metadata: Additional context-specific metadata
    """

    agent_id: str = ""
    thread_id: str = ""
    working_dir: str = "."
    metadata: dict[str, Any] = field(default_factory=dict)


class Tool(ABC):
    """
    Abstract base class for capability tools.

    Subclasses must implement:
    - name property: The tool's name within its capability
    - execute(): Performs the tool's action

    Example:
        class EchoTool(Tool):
            @property
            def name(self) -> str:
                return "echo"

            def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
                return ToolOutput.ok(args.get("message", ""))
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The tool's name, unique within its capability."""
        ...

    @property
    def description(self) -> str:
        return f"Tool: {self.name}"

    @property
    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(name=self.name, description=self.description)

    @abstractmethod
    def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        """
        Execute the tool with the given arguments.

        Args:
            args: The arguments for this tool call (tool-specific)
            context: Runtime context

        Returns:
            ToolOutput indicating success or failure with data/error
        """
        ...

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        """Return validation error messages (empty if valid)."""
        return []

    def __repr__(self) -> str:
        return f"<Tool: {self.name}>"


ToolHandler = Callable[[dict[str, Any], ToolContext], ToolOutput]


class FunctionTool(Tool):
    """
    Tool backed by a handler function.

    Required string arguments are checked before the handler runs.
    """

    def __init__(
        self,
        name: str,
        description: str,
        handler: ToolHandler,
        required: tuple[str, ...] = (),
    ) -> None:
        if not name:
            msg = "Tool must have a non-empty name"
            raise ValueError(msg)
        self._name = name
        self._description = description
        self._handler = handler
        self._required = required

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        errors = []
        for key in self._required:
            if key not in args:
                errors.append(f"'{key}' is required")
            elif not isinstance(args[key], str):
                errors.append(f"'{key}' must be a string")
        return errors

    def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        errors = self.validate_args(args)
        if errors:
            return ToolOutput.fail(f"Invalid arguments: {'; '.join(errors)}")
        return self._handler(args, context)


class Capability:
    """
    A live capability instance for one agent run.

    Holds the capability's (possibly filtered) tools in declaration order
    and lets the host look them up by name.

    Attributes:
        key: The capability key this instance was resolved for
    """

    def __init__(self, key: str, tools: Iterable[Tool]) -> None:
        self.key = key
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                msg = f"Duplicate tool name in capability {key}: {tool.name}"
                raise ValueError(msg)
            self._tools[tool.name] = tool

    @property
    def tools(self) -> list[Tool]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        """List tool names in declaration order."""
        return list(self._tools)

    def descriptors(self) -> list[ToolDescriptor]:
        return [tool.descriptor for tool in self._tools.values()]

    def get(self, name: str) -> Tool:
        """
        Look up a tool by name.

        Raises:
            ToolNotFoundError: If the capability does not expose that tool
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(tool=name, capability=self.key)
        return tool

    def get_optional(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __repr__(self) -> str:
        return f"<Capability {self.key}: [{', '.join(self._tools)}]>"
