"""Manifest assembly, persistence and console rendering."""

from agenttrace.output.manifest import (
    MANIFEST_VERSION,
    assemble,
    create_summary,
    deduplicate_agents,
    deduplicate_mcp_servers,
    deduplicate_tools,
    filter_by_framework,
    filter_by_risk,
    get_high_risk_tools,
    manifest_to_json,
    merge_batches,
    sort_agents,
    sort_mcp_servers,
    sort_tools,
    write_manifest,
)

__all__ = [
    "MANIFEST_VERSION",
    "assemble",
    "create_summary",
    "deduplicate_agents",
    "deduplicate_mcp_servers",
    "deduplicate_tools",
    "filter_by_framework",
    "filter_by_risk",
    "get_high_risk_tools",
    "manifest_to_json",
    "merge_batches",
    "sort_agents",
    "sort_mcp_servers",
    "sort_tools",
    "write_manifest",
]
