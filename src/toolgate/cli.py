"""
CLI entry point for toolgate.

This module provides the Typer-based command-line interface for toolgate.
It is a thin layer for inspecting access decisions without a running host.

Commands:
    check         Ask the Directory Guard about a single tool call
    capabilities  List the built-in capabilities and their tools
    trust         Show the tool lists of a trust level
    resolve       Resolve an agent's requested capabilities
"""

import json
import traceback
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from toolgate import __version__
from toolgate.capabilities import ResolverContext, create_registry
from toolgate.errors import ConfigurationError
from toolgate.log import configure_logging
from toolgate.policy import DirectoryGuard, trust_options
from toolgate.schema import AgentConfig, SubprocessServer, TrustLevel, load_agent_config
from toolgate.tools import Capability

app = typer.Typer(
    name="toolgate",
    help="Inspect tool access decisions for agent runs.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]toolgate[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Log every decision to stderr.",
        ),
    ] = False,
) -> None:
    """
    toolgate - Tool access control for agent runs.

    Decides whether tool calls are allowed and which capabilities
    an agent run may use.
    """
    if verbose:
        configure_logging("DEBUG")


def _load_agent(agent_path: Path, json_output: bool, debug: bool) -> AgentConfig:
    try:
        return load_agent_config(agent_path)
    except (ConfigurationError, OSError) as e:
        if json_output:
            _output_json_error("agent_load_error", str(e), debug)
        else:
            console.print(f"[red]Error loading agent: {escape(str(e))}[/red]")
            if debug:
                console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        raise typer.Exit(code=2)


def _parse_args(pairs: list[str]) -> dict[str, Any]:
    arguments: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got: {pair}", param_hint="--arg")
        arguments[key] = value
    return arguments


def _output_json_error(error_type: str, message: str, include_traceback: bool = False) -> None:
    """Output an error in JSON format."""
    output = {
        "error": True,
        "error_type": error_type,
        "message": message,
    }
    if include_traceback:
        output["traceback"] = traceback.format_exc()
    print(json.dumps(output, indent=2))


@app.command()
def check(
    agent_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the agent YAML file.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ],
    tool: Annotated[
        str,
        typer.Argument(help="Tool name, e.g. Read or Glob."),
    ],
    arg: Annotated[
        Optional[list[str]],
        typer.Option(
            "--arg",
            "-a",
            help="Tool argument as key=value. Repeatable.",
        ),
    ] = None,
    cwd: Annotated[
        Optional[Path],
        typer.Option(
            "--cwd",
            help="Agent working directory. Defaults to the current directory.",
        ),
    ] = None,
    resolve_symlinks: Annotated[
        bool,
        typer.Option(
            "--resolve-symlinks",
            help="Follow symlinks before the containment check.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format."),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show full error tracebacks."),
    ] = False,
) -> None:
    """
    Ask the Directory Guard whether a tool call is allowed.

    Exits 0 when allowed and 1 when denied.

    Example:
        $ toolgate check agent.yaml Read --arg file_path=/etc/passwd
    """
    agent = _load_agent(agent_path, json_output, debug)
    arguments = _parse_args(arg or [])
    work_dir = str(cwd) if cwd is not None else str(Path.cwd())

    guard = DirectoryGuard(agent.trust, work_dir, agent.directories, resolve_symlinks=resolve_symlinks)
    decision = guard.decide(tool, arguments)

    if json_output:
        output = {
            "agent": agent.id,
            "trust": agent.trust.value,
            "tool": tool,
            "arguments": arguments,
            "allowed": decision.allowed,
            "reason": decision.reason,
            "rule_matched": decision.rule_matched,
        }
        print(json.dumps(output, indent=2))
    elif decision.allowed:
        rule = escape(decision.rule_matched or "")
        console.print(f"[green]✓ allow[/green] {escape(tool)} [dim]({rule})[/dim]")
    else:
        console.print(f"[red]✗ deny[/red] {escape(tool)}: {escape(decision.reason)}")

    raise typer.Exit(code=0 if decision.allowed else 1)


@app.command()
def capabilities(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format."),
    ] = False,
) -> None:
    """List the built-in capabilities and the tools they provide."""
    registry = create_registry()
    descriptors = registry.known_capabilities()

    if json_output:
        output = {
            "capabilities": [d.model_dump(mode="json") for d in descriptors],
            "count": len(descriptors),
        }
        print(json.dumps(output, indent=2))
        raise typer.Exit(code=0)

    table = Table(title=f"Capabilities ({len(descriptors)})", show_header=True, header_style="bold")
    table.add_column("Capability", style="cyan")
    table.add_column("Tools")

    for descriptor in descriptors:
        tools = escape(", ".join(t.name for t in descriptor.tools)) or "[dim](external process)[/dim]"
        table.add_row(escape(descriptor.key), tools)

    console.print(table)


@app.command()
def trust(
    level: Annotated[
        TrustLevel,
        typer.Argument(help="Trust level to show."),
    ],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format."),
    ] = False,
) -> None:
    """Show the permission mode and tool lists of a trust level."""
    opts = trust_options(level)

    if json_output:
        print(json.dumps(opts.model_dump(mode="json"), indent=2))
        raise typer.Exit(code=0)

    console.print(f"[bold]{level.value}[/bold] permission mode: {opts.permission_mode}")
    if opts.allowed_tools is None:
        console.print("  allowed: [green]all tools[/green]")
    else:
        console.print(f"  allowed: {escape(', '.join(opts.allowed_tools))}")
    if opts.disallowed_tools:
        console.print(f"  disallowed: [red]{escape(', '.join(opts.disallowed_tools))}[/red]")


@app.command()
def resolve(
    agent_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the agent YAML file.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ],
    workspace: Annotated[
        Optional[Path],
        typer.Option(
            "--workspace",
            help="Workspace directory. Defaults to the current directory.",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format."),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show full error tracebacks."),
    ] = False,
) -> None:
    """
    Resolve an agent's requested capabilities with the built-in registry.

    Capabilities that need host hooks (such as agents) are reported as
    unavailable. Configuration errors exit with code 2.
    """
    agent = _load_agent(agent_path, json_output, debug)
    workspace_dir = str(workspace) if workspace is not None else str(Path.cwd())

    ctx = ResolverContext(
        agent_id=agent.id,
        agent_dir=str(agent_path.parent),
        workspace_dir=workspace_dir,
        thread_id="cli",
        agent=agent,
        directories=tuple(agent.directories),
    )

    try:
        resolved = create_registry().resolve(agent.capabilities, ctx)
    except ConfigurationError as e:
        if json_output:
            _output_json_error(type(e).__name__, e.message, debug)
        else:
            console.print(f"[red]{escape(str(e))}[/red]")
            if debug:
                console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        raise typer.Exit(code=2)

    unavailable = [key for key in agent.capabilities if key not in resolved]

    if json_output:
        output = {
            "agent": agent.id,
            "resolved": {key: _describe_instance(value) for key, value in resolved.items()},
            "unavailable": unavailable,
        }
        print(json.dumps(output, indent=2))
        raise typer.Exit(code=0)

    table = Table(title=f"Capabilities for {escape(agent.id)}", show_header=True, header_style="bold")
    table.add_column("Capability", style="cyan")
    table.add_column("Kind", width=12)
    table.add_column("Details")

    for key, value in resolved.items():
        info = _describe_instance(value)
        if info["kind"] == "in-process":
            details = ", ".join(info["tools"])
        else:
            details = " ".join([info.get("command", ""), *info.get("args", [])]).strip()
        table.add_row(escape(key), escape(info["kind"]), escape(details))
    for key in unavailable:
        table.add_row(escape(key), "[yellow]unavailable[/yellow]", "[dim]missing host hook[/dim]")

    console.print(table)


def _describe_instance(value: Any) -> dict[str, Any]:
    if isinstance(value, Capability):
        return {"kind": "in-process", "tools": value.names()}
    if isinstance(value, SubprocessServer):
        return {"kind": value.transport, "command": value.command, "args": list(value.args)}
    return {"kind": "static", "value": repr(value)}


if __name__ == "__main__":
    app()
