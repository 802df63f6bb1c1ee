"""``agenttrace scan [path]`` -- Discover AI tools, agents and MCP servers.

Walks the project at PATH (default: the current directory), runs every
detector and prints a risk-ranked report. With ``--output`` the manifest is
also written as JSON; with ``--json`` only the manifest JSON is printed.

Exit Codes:
    0 -- Scan completed.
    1 -- The scan failed (missing path, invalid configuration).
"""

from __future__ import annotations

import logging
import sys

import click

from agenttrace.config import load_config
from agenttrace.exceptions import AgentTraceError
from agenttrace.output.console import make_console, print_error, print_full_results
from agenttrace.output.manifest import manifest_to_json, write_manifest
from agenttrace.scanner.pipeline import run_scan

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.command("scan")
@click.argument(
    "path",
    type=click.Path(file_okay=True, dir_okay=True),
    required=False,
    default=".",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the JSON manifest to this file.",
)
@click.option(
    "-f", "--framework",
    default=None,
    help="Only report tools from this framework (mcp, langraph, crewai, ...).",
)
@click.option(
    "-r", "--risk",
    type=click.Choice(["low", "medium", "high"], case_sensitive=False),
    default=None,
    help="Only report tools at this risk level.",
)
@click.option("--json", "json_only", is_flag=True, default=False,
              help="Print only the manifest JSON.")
@click.option("--no-color", is_flag=True, default=False,
              help="Disable colored output.")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Config file (default: .agenttrace.yaml at the scan root).",
)
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Enable debug logging.")
def scan_command(
    path: str,
    output: str | None,
    framework: str | None,
    risk: str | None,
    json_only: bool,
    no_color: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Scan a directory for AI agents and MCP tools.

    Every detected tool gets a permission (READ, WRITE, DELETE, EXECUTE,
    OUTPUT, UNKNOWN) and a risk level derived from it.
    """
    _configure_logging(verbose)
    out = make_console(no_color=no_color)

    try:
        config = load_config(path, config_path).merge(
            framework=framework, risk=risk, output=output,
        )
        manifest = run_scan(path, config)
        written = write_manifest(manifest, config.output) if config.output else None
    except AgentTraceError as exc:
        logger.debug("Scan failed", exc_info=True)
        print_error(str(exc))
        sys.exit(1)

    if json_only:
        click.echo(manifest_to_json(manifest))
    else:
        print_full_results(manifest, str(written) if written else None, out)
