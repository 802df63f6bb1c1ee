"""Manifest assembly: merge, deduplicate, filter, sort and summarize.

Assembly Pipeline:
    1. ``merge_batches`` -- concatenate every detector batch.
    2. ``deduplicate_*`` -- first occurrence wins. Tools and agents are
       keyed by ``(name, source)``; MCP servers by name alone.
    3. ``filter_by_framework`` / ``filter_by_risk`` -- optional, tools only.
    4. ``sort_*`` -- tools by risk (HIGH first) then name; agents and servers
       by name.
    5. ``create_summary`` -- counts recomputed from the final collections.

The result is an immutable ``Manifest`` stamped with the assembly time.
``write_manifest`` persists it as indented JSON.

Name ordering is case-insensitive, with lowercase before uppercase when two
names differ only in case. It does not depend on the process locale, so the
same input always yields the same manifest.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, TypeVar

from agenttrace.exceptions import ConfigError
from agenttrace.models import (
    Agent,
    DetectionBatch,
    Manifest,
    McpServer,
    RiskLevel,
    ScanSummary,
    Tool,
)

logger = logging.getLogger(__name__)

MANIFEST_VERSION = "1.0.0"

_RISK_ORDER: dict[RiskLevel, int] = {
    RiskLevel.HIGH: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.LOW: 2,
}

_T = TypeVar("_T", Tool, Agent, McpServer)


# ---------------------------------------------------------------------------
# Merge and deduplicate
# ---------------------------------------------------------------------------


def merge_batches(batches: Iterable[DetectionBatch]) -> DetectionBatch:
    """Concatenate *batches* into a new batch, preserving order."""
    merged = DetectionBatch()
    for batch in batches:
        merged.extend(batch)
    return merged


def _deduplicate(items: Iterable[_T]) -> list[_T]:
    seen: set[object] = set()
    unique: list[_T] = []
    for item in items:
        if item.key in seen:
            continue
        seen.add(item.key)
        unique.append(item)
    return unique


def deduplicate_tools(tools: Iterable[Tool]) -> list[Tool]:
    """Drop tools whose ``(name, source)`` was already seen."""
    return _deduplicate(tools)


def deduplicate_agents(agents: Iterable[Agent]) -> list[Agent]:
    """Drop agents whose ``(name, source)`` was already seen."""
    return _deduplicate(agents)


def deduplicate_mcp_servers(servers: Iterable[McpServer]) -> list[McpServer]:
    """Drop servers whose name was already seen, wherever declared."""
    return _deduplicate(servers)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def parse_risk(risk: str | RiskLevel) -> RiskLevel:
    """Parse a case-insensitive risk name.

    Raises:
        ConfigError: If *risk* is not LOW, MEDIUM or HIGH.
    """
    if isinstance(risk, RiskLevel):
        return risk
    try:
        return RiskLevel[str(risk).upper()]
    except KeyError:
        valid = ", ".join(r.value.lower() for r in RiskLevel)
        raise ConfigError(f"Unknown risk level {risk!r} (expected one of: {valid})") from None


def filter_by_framework(tools: Iterable[Tool], framework: str) -> list[Tool]:
    """Keep tools whose framework tag equals *framework* exactly."""
    return [t for t in tools if t.framework == framework]


def filter_by_risk(tools: Iterable[Tool], risk: str | RiskLevel) -> list[Tool]:
    """Keep tools at exactly the given risk level."""
    level = parse_risk(risk)
    return [t for t in tools if t.risk is level]


def get_high_risk_tools(tools: Iterable[Tool]) -> list[Tool]:
    return [t for t in tools if t.risk is RiskLevel.HIGH]


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


_PUNCTUATION_ORDER = "_-,;:!?.'\"()[]{}@*/\\&#%`^+<=>|~$"


def _char_rank(char: str) -> tuple[int, int, str]:
    if char.isspace():
        return (0, 0, char)
    if char.isalpha():
        return (3, 0, char)
    if char.isdigit():
        return (2, 0, char)
    index = _PUNCTUATION_ORDER.find(char)
    return (1, index if index >= 0 else len(_PUNCTUATION_ORDER), char)


def name_sort_key(name: str) -> tuple[tuple[tuple[int, int, str], ...], str]:
    """Locale-style name key, independent of the host locale.

    Whitespace sorts before punctuation (``_`` then ``-`` first), punctuation
    before digits and digits before letters. Comparison ignores case, and
    lowercase sorts first among case variants.
    """
    return (tuple(_char_rank(c) for c in name.casefold()), name.swapcase())


def sort_tools(tools: Iterable[Tool]) -> list[Tool]:
    """Order tools HIGH, MEDIUM, LOW, then by name."""
    return sorted(tools, key=lambda t: (_RISK_ORDER[t.risk], name_sort_key(t.name)))


def sort_agents(agents: Iterable[Agent]) -> list[Agent]:
    return sorted(agents, key=lambda a: name_sort_key(a.name))


def sort_mcp_servers(servers: Iterable[McpServer]) -> list[McpServer]:
    return sorted(servers, key=lambda s: name_sort_key(s.name))


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def create_summary(
    tools: Iterable[Tool],
    agents: Iterable[Agent],
    mcp_servers: Iterable[McpServer],
    files_scanned: int,
) -> ScanSummary:
    return ScanSummary.from_collections(tools, agents, mcp_servers, files_scanned)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and ``Z``."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def assemble(
    batches: Iterable[DetectionBatch],
    scanned_path: str,
    files_scanned: int,
    duration_ms: int,
    framework: str | None = None,
    risk: str | RiskLevel | None = None,
) -> Manifest:
    """Build the final manifest from raw detector output.

    Args:
        batches: Detector batches in any order.
        scanned_path: Absolute path of the scan root.
        files_scanned: Number of files collected by the walker.
        duration_ms: Wall-clock scan time.
        framework: Optional framework filter for tools.
        risk: Optional risk filter for tools (case-insensitive).

    Returns:
        An immutable ``Manifest`` whose summary matches its collections.

    Raises:
        ConfigError: If *risk* is not a known level.
    """
    merged = merge_batches(batches)
    tools = deduplicate_tools(merged.tools)
    agents = deduplicate_agents(merged.agents)
    servers = deduplicate_mcp_servers(merged.mcp_servers)

    if framework:
        tools = filter_by_framework(tools, framework)
    if risk:
        tools = filter_by_risk(tools, risk)

    tools = sort_tools(tools)
    agents = sort_agents(agents)
    servers = sort_mcp_servers(servers)

    return Manifest(
        version=MANIFEST_VERSION,
        scanned_at=utc_timestamp(),
        scanned_path=scanned_path,
        scan_duration_ms=duration_ms,
        summary=create_summary(tools, agents, servers, files_scanned),
        tools=tuple(tools),
        agents=tuple(agents),
        mcp_servers=tuple(servers),
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def manifest_to_json(manifest: Manifest) -> str:
    """Serialize *manifest* as 2-space indented JSON."""
    return manifest.to_json(indent=2)


def write_manifest(manifest: Manifest, path: str | Path) -> Path:
    """Write *manifest* to *path*, creating parent directories.

    Returns:
        The resolved output path.
    """
    target = Path(path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(manifest_to_json(manifest) + "\n", encoding="utf-8")
    logger.info("Manifest written to %s", target)
    return target
