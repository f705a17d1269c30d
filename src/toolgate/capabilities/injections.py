"""
Capabilities injected by the host rather than requested by the agent.

Background runs (triggers, scheduled work) have no open chat, so they get a
notify-user capability for pushing messages to the user.
"""

from typing import Any

from toolgate.capabilities.registry import ResolvedCapabilities, ResolverContext
from toolgate.tools.base import Capability, FunctionTool, ToolContext, ToolOutput


def create_notify_user_capability(ctx: ResolverContext) -> Capability:
    """Build the notify-user capability bound to ctx.callbacks.on_notify_user."""

    def notify_user(args: dict[str, Any], context: ToolContext) -> ToolOutput:
        callback = ctx.callbacks.on_notify_user
        if callback is not None:
            callback(args["message"])
        return ToolOutput.ok("Message sent to user.")

    return Capability(
        "notify-user",
        [
            FunctionTool(
                "notify_user",
                "Send a message to the user",
                notify_user,
                required=("message",),
            ),
        ],
    )


def resolve_injections(ctx: ResolverContext, background: bool = False) -> ResolvedCapabilities:
    """Return the host-injected capabilities for a run."""
    capabilities: ResolvedCapabilities = {}
    if background:
        capabilities["notify-user"] = create_notify_user_capability(ctx)
    return capabilities
