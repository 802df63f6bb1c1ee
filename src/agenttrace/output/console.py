"""Rich output formatting for scan results.

Sections, in print order: header, progress line, summary (counts, by
framework, by risk), high-risk tools, all tools (first 20), agents, MCP
servers and the manifest output path.

Risk Color Mapping:
    HIGH = bold red, MEDIUM = yellow, LOW = green
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from agenttrace import __version__
from agenttrace.models import (
    Agent,
    Manifest,
    McpServer,
    Permission,
    RiskLevel,
    Tool,
)
from agenttrace.output.manifest import get_high_risk_tools

_RISK_STYLES: dict[RiskLevel, str] = {
    RiskLevel.HIGH: "bold red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}

_PERMISSION_STYLES: dict[Permission, str] = {
    Permission.READ: "green",
    Permission.WRITE: "yellow",
    Permission.DELETE: "red",
    Permission.EXECUTE: "red",
    Permission.OUTPUT: "cyan",
    Permission.UNKNOWN: "dim",
}

DEFAULT_TOOL_LIMIT = 20

console = Console()


def make_console(no_color: bool = False) -> Console:
    """Build a console; ``no_color`` strips every style from the output."""
    return Console(no_color=no_color, highlight=not no_color)


def risk_style(risk: RiskLevel) -> str:
    """Return the Rich style string for a given risk level."""
    return _RISK_STYLES.get(risk, "white")


def permission_style(permission: Permission) -> str:
    """Return the Rich style string for a given permission."""
    return _PERMISSION_STYLES.get(permission, "white")


def _rule(out: Console) -> None:
    out.print("─" * 55, style="dim")


def print_header(manifest: Manifest, out: Console = console) -> None:
    out.print()
    out.print(Text.assemble(
        (f"AgentTrace v{__version__}", "bold cyan"),
        (f" - Scanning {manifest.scanned_path}", "dim"),
    ))
    out.print()
    seconds = manifest.scan_duration_ms / 1000
    out.print(
        f"Scanned {manifest.summary.files_scanned} files in {seconds:.1f}s",
        style="dim",
    )
    out.print()


def print_summary(manifest: Manifest, out: Console = console) -> None:
    """Print totals, then the by-framework and by-risk breakdowns."""
    summary = manifest.summary
    out.print("SUMMARY", style="bold")
    _rule(out)
    out.print(
        f"  Total Tools: [bold]{summary.total_tools}[/bold]"
        f"    Agents: [bold]{summary.total_agents}[/bold]"
        f"    MCP Servers: [bold]{summary.total_mcp_servers}[/bold]"
        f"    Files: [bold]{summary.files_scanned}[/bold]"
    )
    out.print()

    table = Table(show_header=True, header_style="dim", box=None, padding=(0, 4))
    table.add_column("By Framework")
    table.add_column("By Risk")
    frameworks = sorted(
        ((name, count) for name, count in summary.by_framework.items() if count > 0),
        key=lambda item: -item[1],
    )
    risks = list(summary.by_risk.items())
    for i in range(max(len(frameworks), len(risks))):
        framework_cell = Text("")
        if i < len(frameworks):
            framework_cell = Text(f"{frameworks[i][0]}: {frameworks[i][1]}")
        risk_cell = Text("")
        if i < len(risks):
            name, count = risks[i]
            risk_cell = Text.assemble((name, risk_style(RiskLevel(name))), f": {count}")
        table.add_row(framework_cell, risk_cell)
    out.print(table)
    out.print()


def print_high_risk_tools(tools: tuple[Tool, ...] | list[Tool], out: Console = console) -> None:
    """Print the tools that need review, or a clean bill of health."""
    high_risk = get_high_risk_tools(tools)
    if not high_risk:
        out.print("No high-risk tools detected", style="bold green")
        out.print()
        return

    table = Table(
        title=f"HIGH RISK TOOLS ({len(high_risk)} require review)",
        title_style="bold red",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Tool", style="bold")
    table.add_column("Permission")
    table.add_column("Source", style="dim")
    for tool in high_risk:
        table.add_row(
            Text(tool.name),
            Text(tool.permission.value, style=permission_style(tool.permission)),
            Text(tool.source),
        )
    out.print(table)
    out.print()


def print_all_tools(
    tools: tuple[Tool, ...] | list[Tool],
    limit: int | None = DEFAULT_TOOL_LIMIT,
    out: Console = console,
) -> None:
    """Print up to *limit* tools, with a count of those left out."""
    shown = list(tools[:limit]) if limit else list(tools)
    remaining = len(tools) - len(shown)

    table = Table(title=f"ALL TOOLS ({len(tools)})", show_header=True, header_style="bold")
    table.add_column("Risk", justify="center")
    table.add_column("Tool", style="bold")
    table.add_column("Permission")
    table.add_column("Framework", style="dim")
    table.add_column("Source", style="dim")
    for tool in shown:
        table.add_row(
            Text(tool.risk.value, style=risk_style(tool.risk)),
            Text(tool.name),
            Text(tool.permission.value, style=permission_style(tool.permission)),
            Text(tool.framework),
            Text(tool.source),
        )
    out.print(table)
    if remaining > 0:
        out.print(f"  ... and {remaining} more tools", style="dim")
    out.print()


def print_agents(agents: tuple[Agent, ...] | list[Agent], out: Console = console) -> None:
    if not agents:
        return
    out.print(f"AGENTS ({len(agents)})", style="bold")
    _rule(out)
    for agent in agents:
        out.print(Text.assemble(
            ("  ◆ ", "cyan"),
            (f"{agent.name:<22} ", "bold"),
            (f"{agent.framework:<12} ", "dim"),
            (agent.source, "dim"),
        ))
        if agent.tools:
            out.print(Text(f"    Tools: {', '.join(agent.tools)}", style="dim"))
    out.print()


def print_mcp_servers(
    servers: tuple[McpServer, ...] | list[McpServer], out: Console = console,
) -> None:
    if not servers:
        return
    out.print(f"MCP SERVERS ({len(servers)})", style="bold")
    _rule(out)
    for server in servers:
        out.print(Text.assemble(
            ("  ▸ ", "magenta"),
            (f"{server.name:<22} ", "bold"),
            (server.source, "dim"),
        ))
        if server.command:
            out.print(Text(f"    Command: {server.command}", style="dim"))
    out.print()


def print_full_results(
    manifest: Manifest,
    output_path: str | None = None,
    out: Console = console,
) -> None:
    """Print every section of the human-readable report.

    Args:
        manifest: The assembled scan manifest.
        output_path: Where the manifest was written, if anywhere.
        out: Target console.
    """
    print_header(manifest, out)
    print_summary(manifest, out)
    print_high_risk_tools(manifest.tools, out)
    print_all_tools(manifest.tools, DEFAULT_TOOL_LIMIT, out)
    print_agents(manifest.agents, out)
    print_mcp_servers(manifest.mcp_servers, out)
    if output_path:
        out.print(Text.assemble(("Output written to: ", "dim"), output_path))
        out.print()


def print_error(message: str, out: Console | None = None) -> None:
    target = out or Console(stderr=True)
    target.print(Text.assemble(("Error: ", "bold red"), message))
