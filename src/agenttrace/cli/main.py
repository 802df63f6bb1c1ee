"""AgentTrace CLI -- Inventory of AI agents, tools and MCP servers.

Entry point for the ``agenttrace`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    scan -- Detect tools, agents and MCP servers and rank tools by risk.

Usage::

    agenttrace scan                              # Scan the current directory
    agenttrace scan ./my-agent-project
    agenttrace scan . -o agent-manifest.json     # Also write the manifest
    agenttrace scan . --risk high --json         # High-risk tools as JSON
"""

from __future__ import annotations

import click

from agenttrace import __version__
from agenttrace.cli.scan import scan_command


@click.group()
@click.version_option(version=__version__, prog_name="agenttrace")
def cli() -> None:
    """AgentTrace: discover, classify and govern AI tools in your codebase.

    Finds tool declarations across Python, TypeScript/JavaScript, Go and
    MCP configuration files, and assigns each a permission and risk level.
    """


cli.add_command(scan_command)
