"""End-to-end scan: collect files, run detectors, assemble the manifest."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from agenttrace.config import ScanConfig
from agenttrace.models import Manifest
from agenttrace.output.manifest import assemble
from agenttrace.scanner.router import ExtensionRouter, default_router
from agenttrace.scanner.walker import walk_directory

logger = logging.getLogger(__name__)


def run_scan(
    path: str | Path,
    config: ScanConfig | None = None,
    router: ExtensionRouter | None = None,
) -> Manifest:
    """Scan the project at *path* and return its manifest.

    Args:
        path: Project root.
        config: Scan settings; defaults to ``ScanConfig()``.
        router: Detector router; defaults to ``default_router()``.

    Returns:
        The assembled ``Manifest``. Nothing is written to disk.

    Raises:
        ScanError: If *path* is missing or not a directory.
        ConfigError: If the configured risk filter is invalid.
    """
    config = config or ScanConfig()
    router = router or default_router()
    root = Path(path).resolve()
    started = time.perf_counter()

    files = walk_directory(
        root,
        extensions=config.extensions,
        ignore_patterns=config.ignore,
        respect_gitignore=config.respect_gitignore,
    )
    batches = [router.process_file(file) for file in files]
    duration_ms = int((time.perf_counter() - started) * 1000)

    manifest = assemble(
        batches,
        scanned_path=str(root),
        files_scanned=len(files),
        duration_ms=duration_ms,
        framework=config.framework,
        risk=config.risk,
    )
    if router.diagnostics:
        logger.warning("%d detector failure(s) during scan", len(router.diagnostics))
    logger.info(
        "Scanned %d file(s) in %d ms: %d tool(s), %d agent(s), %d MCP server(s)",
        len(files), duration_ms, manifest.summary.total_tools,
        manifest.summary.total_agents, manifest.summary.total_mcp_servers,
    )
    return manifest
