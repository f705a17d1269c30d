"""
Tools module for toolgate.

Architecture:
    - Tool: Abstract base class defining the tool interface
    - FunctionTool: Tool backed by a handler function
    - Capability: Run-scoped bundle of named tools
    - ToolContext: Runtime context passed to tools
    - ToolOutput: Standardized result format from tool execution
    - filter_tools: Apply a capability's tools allow-list

Access checks happen BEFORE tool execution, not within tools.
"""

from toolgate.tools.base import Capability, FunctionTool, Tool, ToolContext, ToolOutput
from toolgate.tools.filter import filter_tools

__all__ = [
    "Capability",
    "FunctionTool",
    "Tool",
    "ToolContext",
    "ToolOutput",
    "filter_tools",
]
