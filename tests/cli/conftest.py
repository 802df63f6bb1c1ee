"""Shared fixtures for CLI tests.

Provides a small multi-language agent project with one high-risk Python
tool, one low-risk TypeScript tool and one MCP server.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def agent_project(tmp_path: Path) -> Path:
    """Create a project with Python, TypeScript and MCP config sources."""
    (tmp_path / "agents").mkdir()
    (tmp_path / "agents" / "admin.py").write_text(
        "from langchain.tools import tool\n"
        "\n"
        "\n"
        "@tool\n"
        "def delete_user(user_id: str) -> str:\n"
        '    """Delete a user account."""\n'
        "    return user_id\n"
    )
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "server.ts").write_text(
        'import { McpServer } from "@modelcontextprotocol/sdk/server/mcp.js";\n'
        'const server = new McpServer({ name: "weather" });\n'
        'server.tool("get_forecast", "Get the forecast", {}, async () => {});\n'
    )
    (tmp_path / "mcp.json").write_text(json.dumps({
        "mcpServers": {"fs": {"command": "npx", "args": ["-y", "server-fs"]}},
    }))
    return tmp_path


@pytest.fixture
def empty_dir(tmp_path: Path) -> Path:
    """Create an empty directory with nothing to detect."""
    return tmp_path
