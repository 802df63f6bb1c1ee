"""Detector for MCP (Model Context Protocol) server configuration files.

MCP clients declare the servers they launch in JSON files. A ``.json`` file
is treated as an MCP configuration when any of these hold:

- Its file name is a known config name (``mcp.json``, ``.mcp.json``,
  ``mcp_settings.json``, ``mcp_servers.json``,
  ``claude_desktop_config.json``).
- Its relative path matches a known location (``.cursor/mcp.json``,
  ``*mcp_settings.json``, ``*mcp-config.json`` ...).
- Its content mentions ``mcpServers``, or both ``"servers"`` and
  ``"command"``.

The server map lives under ``mcpServers`` (Claude, Cursor) or ``servers``
(VS Code). Two entry shapes are supported:

.. code-block:: json

    {
      "mcpServers": {
        "filesystem": {
          "command": "npx",
          "args": ["-y", "@modelcontextprotocol/server-filesystem", "/tmp"],
          "env": { "NODE_ENV": "production" }
        },
        "remote": { "url": "https://mcp.example.com/sse", "transport": "sse" }
      }
    }

A launch entry keeps its command, args and env. A URL entry reports the URL
as its command. Entries with neither are skipped.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import PurePosixPath
from typing import Any

from agenttrace.detectors.base import Detector, create_mcp_server
from agenttrace.models import DetectionBatch, FileRecord, McpServer, string_map

logger = logging.getLogger(__name__)

MCP_CONFIG_FILENAMES = frozenset({
    "mcp.json",
    ".mcp.json",
    "mcp_settings.json",
    "mcp_servers.json",
    "claude_desktop_config.json",
})

_MCP_PATH_PATTERNS = (
    re.compile(r"\.cursor/mcp\.json$"),
    re.compile(r"mcp[_-]?settings\.json$", re.IGNORECASE),
    re.compile(r"mcp[_-]?config\.json$", re.IGNORECASE),
)

# Top-level keys holding the server map, in lookup order.
_MCP_SERVER_KEYS = ("mcpServers", "servers")


def is_mcp_config_file(file: FileRecord) -> bool:
    """Return True if *file* looks like an MCP configuration file."""
    relative = file.relative_path.replace("\\", "/")
    if PurePosixPath(relative).name in MCP_CONFIG_FILENAMES:
        return True
    if any(pattern.search(relative) for pattern in _MCP_PATH_PATTERNS):
        return True
    content = file.content
    return "mcpServers" in content or (
        '"servers"' in content and '"command"' in content
    )


def _server_map(data: Any) -> dict[str, Any]:
    """Return the first server map found under a known key."""
    if not isinstance(data, dict):
        return {}
    for key in _MCP_SERVER_KEYS:
        candidate = data.get(key)
        if isinstance(candidate, dict):
            return candidate
    return {}


def _parse_server_entry(
    name: str, config: dict[str, Any], file: FileRecord,
) -> McpServer | None:
    """Parse a single server entry into an ``McpServer``.

    Args:
        name: Server name (the key in the server map).
        config: Server configuration object.
        file: The configuration file (for the source locator).

    Returns:
        An ``McpServer``, or None if the entry has no command and no URL.
    """
    command = config.get("command")
    if command:
        args = config.get("args")
        env = config.get("env")
        return create_mcp_server(
            name=name,
            command=str(command),
            source=file.relative_path,
            args=[str(a) for a in args] if isinstance(args, list) else None,
            env=string_map(env) if isinstance(env, dict) else None,
        )

    url = config.get("url")
    if url:
        return create_mcp_server(name=name, command=str(url), source=file.relative_path)

    return None


class McpConfigDetector(Detector):
    """Detects MCP servers declared in JSON configuration files."""

    name = "mcp-config"
    extensions = (".json",)

    def detect(self, file: FileRecord) -> DetectionBatch:
        batch = DetectionBatch()
        if not is_mcp_config_file(file):
            return batch

        try:
            data = json.loads(file.content)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed MCP config: %s", file.relative_path)
            return batch

        for server_name, server_config in _server_map(data).items():
            if not isinstance(server_config, dict):
                continue
            server = _parse_server_entry(str(server_name), server_config, file)
            if server is not None:
                batch.mcp_servers.append(server)
        return batch
