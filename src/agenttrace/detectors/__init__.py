"""Language detectors for MCP configs, Python, TypeScript/JavaScript and Go."""

from agenttrace.detectors.base import (
    Detector,
    create_agent,
    create_mcp_server,
    create_tool,
)
from agenttrace.detectors.go import GoDetector
from agenttrace.detectors.mcp_config import McpConfigDetector
from agenttrace.detectors.python import PythonDetector
from agenttrace.detectors.typescript import TypeScriptDetector

__all__ = [
    "Detector",
    "GoDetector",
    "McpConfigDetector",
    "PythonDetector",
    "TypeScriptDetector",
    "create_agent",
    "create_mcp_server",
    "create_tool",
]
