"""AgentTrace: discover AI agent tools, agents and MCP servers in a codebase."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
