"""Detector for MCP tools and servers in TypeScript / JavaScript source.

TypeScript and JavaScript cannot be parsed by Python's ``ast`` module, so
every declaration is recognised with regular expressions:

- ``server.tool("name", ...)`` calls (MCP SDK).
- ``server.registerTool("name", {...})`` calls, matched only against names
  bound to ``new McpServer(...)`` / ``new Server(...)`` in the same file.
- ``new McpServer({ name: "x" })`` instantiations, reported as servers.
- LangChain.js ``DynamicTool`` / ``StructuredTool`` / ``tool(fn, {name})``.
- ``createTool`` / ``defineTool`` / ``makeTool({ name: "x" })`` helpers.
- Functions documented with a JSDoc ``@tool`` tag.
"""

from __future__ import annotations

import re

from agenttrace.detectors.base import (
    Detector,
    create_mcp_server,
    create_tool,
    line_number,
    source_locator,
)
from agenttrace.models import (
    FRAMEWORK_CUSTOM,
    FRAMEWORK_MCP,
    FRAMEWORK_UNKNOWN,
    DetectionBatch,
    FileRecord,
)

# ── Compiled patterns ──────────────────────────────────────────────────────

_SERVER_TOOL = re.compile(r"""\.tool\s*\(\s*["'`]([^"'`]+)["'`]""")
_POSITIONAL_DESCRIPTION = re.compile(r"""\s*,\s*["'`]([^"'`]+)["'`]""")
_DESCRIPTION_KEY = re.compile(r"""description\s*:\s*["'`]([^"'`]+)["'`]""")
_DESCRIPTION_WINDOW = 500

_SERVER_INSTANCE = re.compile(
    r"(?:const|let|var)\s+(\w+)\s*=\s*new\s+(?:McpServer|Server)\s*\("
)

_MCP_SERVER_CLASS = re.compile(r"(?:new\s+)?McpServer(?:\.create)?\s*\(\s*\{([^}]*)\}")
_MCP_SERVER_NAME = re.compile(r"""name\s*:\s*["'`]([^"'`]+)["'`]""")

_LANGCHAIN_TOOL = re.compile(
    r"""(?:DynamicTool|StructuredTool|Tool)\s*\(\s*\{[^}]*name\s*:\s*["'`]([^"'`]+)["'`]"""
)
_LANGCHAIN_TOOL_FUNC = re.compile(
    r"""tool\s*\(\s*(?:async\s*)?\([^)]*\)\s*=>\s*\{[^}]*\}\s*,\s*\{[^}]*"""
    r"""name\s*:\s*["'`]([^"'`]+)["'`]"""
)
_CREATE_TOOL = re.compile(
    r"""(?:createTool|defineTool|makeTool)\s*\(\s*\{[^}]*name\s*:\s*["'`]([^"'`]+)["'`]"""
)
_JSDOC_TOOL = re.compile(
    r"/\*\*((?:(?!\*/)[\s\S])*?@tool\b(?:(?!\*/)[\s\S])*)\*/\s*"
    r"(?:export\s+)?(?:async\s+)?function\s+(\w+)"
)
_JSDOC_LINE_PREFIX = re.compile(r"^\s*\*?\s?")

_MCP_IMPORT = re.compile(
    r"""from\s+["']@modelcontextprotocol/sdk(?:/[^"']*)?["']"""
    r"""|from\s+["']mcp["']"""
    r"""|require\s*\(\s*["']@modelcontextprotocol/sdk"""
)
_LANGCHAIN_IMPORT = re.compile(
    r"""from\s+["']@langchain/[^"']+["']|from\s+["']langchain[^"']*["']"""
)


def detect_framework(content: str) -> str:
    """Return the framework tag implied by a TS/JS file's imports."""
    if _MCP_IMPORT.search(content):
        return FRAMEWORK_MCP
    if _LANGCHAIN_IMPORT.search(content):
        return FRAMEWORK_CUSTOM
    return FRAMEWORK_UNKNOWN


def find_server_instances(content: str) -> list[str]:
    """Return the local names bound to ``new McpServer(...)`` / ``new Server(...)``."""
    return list(dict.fromkeys(m.group(1) for m in _SERVER_INSTANCE.finditer(content)))


def _nearby_description(content: str, start: int) -> str | None:
    """Return the first ``description:`` value in the window after *start*."""
    match = _DESCRIPTION_KEY.search(content[start:start + _DESCRIPTION_WINDOW])
    return match.group(1) if match else None


def _jsdoc_summary(body: str) -> str | None:
    """Return the first JSDoc text line that is not a ``@tag``."""
    for raw in body.splitlines():
        text = _JSDOC_LINE_PREFIX.sub("", raw).strip()
        if text and not text.startswith("@"):
            return text
    return None


class TypeScriptDetector(Detector):
    """Detects tools and servers in TypeScript and JavaScript files."""

    name = "typescript"
    extensions = (".ts", ".tsx", ".js", ".jsx", ".mjs")

    def detect(self, file: FileRecord) -> DetectionBatch:
        batch = DetectionBatch()
        framework = detect_framework(file.content)

        self._detect_server_tools(file, batch)
        self._detect_registered_tools(file, batch)
        self._detect_mcp_servers(file, batch)
        self._detect_langchain_tools(file, batch)
        self._detect_named_patterns(_CREATE_TOOL, file, framework, batch)
        self._detect_jsdoc_tools(file, framework, batch)
        return batch

    def _detect_server_tools(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        for match in _SERVER_TOOL.finditer(content):
            positional = _POSITIONAL_DESCRIPTION.match(content, match.end())
            description = (
                positional.group(1) if positional
                else _nearby_description(content, match.start())
            )
            batch.tools.append(create_tool(
                match.group(1),
                file,
                line_number(content, match.start()),
                framework=FRAMEWORK_MCP,
                description=description,
            ))

    def _detect_registered_tools(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        for instance in find_server_instances(content):
            pattern = re.compile(
                rf"""\b{re.escape(instance)}\.registerTool\s*\(\s*["'`]([^"'`]+)["'`]"""
            )
            for match in pattern.finditer(content):
                batch.tools.append(create_tool(
                    match.group(1),
                    file,
                    line_number(content, match.start()),
                    framework=FRAMEWORK_MCP,
                    description=_nearby_description(content, match.start()),
                ))

    def _detect_mcp_servers(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        for match in _MCP_SERVER_CLASS.finditer(content):
            line = line_number(content, match.start())
            name_match = _MCP_SERVER_NAME.search(match.group(1))
            server_name = name_match.group(1) if name_match else f"mcp-server-{line}"
            batch.mcp_servers.append(create_mcp_server(
                name=server_name,
                command="typescript",
                source=source_locator(file, line),
            ))

    def _detect_langchain_tools(self, file: FileRecord, batch: DetectionBatch) -> None:
        self._detect_named_patterns(_LANGCHAIN_TOOL, file, FRAMEWORK_CUSTOM, batch)
        self._detect_named_patterns(_LANGCHAIN_TOOL_FUNC, file, FRAMEWORK_CUSTOM, batch)

    def _detect_named_patterns(
        self,
        pattern: re.Pattern[str],
        file: FileRecord,
        framework: str,
        batch: DetectionBatch,
    ) -> None:
        content = file.content
        for match in pattern.finditer(content):
            batch.tools.append(create_tool(
                match.group(1),
                file,
                line_number(content, match.start()),
                framework=framework,
            ))

    def _detect_jsdoc_tools(
        self, file: FileRecord, framework: str, batch: DetectionBatch,
    ) -> None:
        content = file.content
        for match in _JSDOC_TOOL.finditer(content):
            batch.tools.append(create_tool(
                match.group(2),
                file,
                line_number(content, match.start()),
                framework=framework,
                description=_jsdoc_summary(match.group(1)),
            ))
