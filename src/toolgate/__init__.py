"""
toolgate - Tool access control for LLM-driven agents.

toolgate decides, for every tool invocation an agent requests, whether it is
permitted, and which optional capabilities an agent run may use at all.
It provides:
- A Directory Guard enforcing path containment for filesystem tools
- Trust-tier tool allow/deny lists
- A capability registry with per-capability tool allow-lists

Everything fails closed: unknown capabilities and tools abort run setup,
and paths outside the allowed directories are denied.

Example usage:
    $ toolgate check agent.yaml Read --arg file_path=/etc/passwd
    $ toolgate resolve agent.yaml
"""

__version__ = "0.1.0"
__author__ = "toolgate Contributors"

__all__ = [
    "__version__",
    "__author__",
]
