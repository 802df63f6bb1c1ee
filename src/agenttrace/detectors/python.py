"""Detector for AI tools and agents declared in Python source.

Recognised declarations:

- ``@tool`` / ``@tool(...)`` decorated functions (LangChain style).
- ``@mcp.tool()`` and ``@<server>.tool()`` decorated functions (MCP SDK).
- FastMCP servers: ``mcp = FastMCP("x")`` followed by ``@mcp.tool()``.
  Instance names are collected first, then decorators are matched against
  each bound name.
- Tool collections: ``TOOLS = [search, fetch]`` and friends. Every bareword
  inside the brackets becomes a candidate tool.
- ``Tool(name="x")`` and ``ToolCapability(name="x")`` instantiations.
- LangGraph nodes (``graph.add_node("x", fn)``), reported as agents.
- CrewAI ``Agent(role="x", tools=[...])`` and AutoGen
  ``AssistantAgent(name="x")`` declarations, reported as agents.

A file's framework tag comes from its own imports and is recomputed for
every file. Tool descriptions are the first line of the docstring of the
function with the same name in the same file.
"""

from __future__ import annotations

import re

from agenttrace.detectors.base import (
    Detector,
    create_agent,
    create_tool,
    first_line,
    line_number,
    parse_name_list,
)
from agenttrace.models import (
    FRAMEWORK_AUTOGEN,
    FRAMEWORK_CREWAI,
    FRAMEWORK_CUSTOM,
    FRAMEWORK_FASTMCP,
    FRAMEWORK_LANGGRAPH,
    FRAMEWORK_MCP,
    FRAMEWORK_UNKNOWN,
    DetectionBatch,
    FileRecord,
)

# ── Declaration patterns ───────────────────────────────────────────────────

_TOOL_DECORATOR = re.compile(
    r"@tool(?:\s*\([^)]*\))?\s*(?:async\s+)?def\s+(\w+)\s*\("
)
_MCP_TOOL_DECORATOR = re.compile(
    r"@(?:\w+\.)?(?:mcp\.)?tool\s*\([^)]*\)\s*(?:async\s+)?def\s+(\w+)\s*\("
)
_FASTMCP_INSTANCE = re.compile(r"(\w+)\s*=\s*FastMCP\s*\(")

_TOOL_ARRAY = re.compile(
    r"(?:TOOLS|LOCAL_TOOLS|AVAILABLE_TOOLS|tools|local_tools)\s*=\s*\[([\s\S]*?)\]",
    re.IGNORECASE,
)
_BAREWORD = re.compile(r"\b([a-z_][a-z0-9_]*)\b(?!\s*[=(])", re.IGNORECASE)
_NON_TOOL_WORDS = frozenset({
    "True", "False", "None", "and", "or", "not", "if", "else",
})

_TOOL_CLASS = re.compile(r"""Tool\s*\(\s*name\s*=\s*["']([^"']+)["']""")
_TOOL_CAPABILITY = re.compile(
    r"""ToolCapability\s*\(\s*name\s*=\s*["']([^"']+)["']"""
)

_LANGGRAPH_GRAPH = re.compile(r"(?:StateGraph|MessageGraph|Graph)\s*\(")
_LANGGRAPH_NODE = re.compile(r"""\.add_node\s*\(\s*["']([^"']+)["']""")

_CREWAI_AGENT = re.compile(
    r"""Agent\s*\([^)]*role\s*=\s*["']([^"']+)["'][^)]*\)"""
)
_AGENT_TOOLS = re.compile(r"tools\s*=\s*\[([^\]]*)\]")
_AGENT_TOOLS_WINDOW = 500

_AUTOGEN_AGENT = re.compile(
    r"""(?:AssistantAgent|UserProxyAgent|ConversableAgent)\s*\([^)]*"""
    r"""name\s*=\s*["']([^"']+)["']"""
)

_FUNC_WITH_DOCSTRING = re.compile(
    r"(?:async\s+)?def\s+(\w+)\s*\([^)]*\)[^:]*:\s*"
    r"(?:\"\"\"([\s\S]*?)\"\"\"|'''([\s\S]*?)''')"
)

# ── Framework attribution ──────────────────────────────────────────────────

# Checked in order; the first matching import decides the file's tag.
_FRAMEWORK_IMPORTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"from\s+mcp[.\w]*\s+import|import\s+mcp|from\s+fastmcp\s+import"),
        FRAMEWORK_MCP,
    ),
    (
        re.compile(r"from\s+langgraph[.\w]*\s+import|import\s+langgraph"),
        FRAMEWORK_LANGGRAPH,
    ),
    (
        re.compile(r"from\s+crewai[.\w]*\s+import|import\s+crewai"),
        FRAMEWORK_CREWAI,
    ),
    (
        re.compile(r"from\s+autogen[.\w]*\s+import|import\s+autogen"),
        FRAMEWORK_AUTOGEN,
    ),
    (
        re.compile(r"from\s+langchain[.\w]*\s+import|import\s+langchain"),
        FRAMEWORK_CUSTOM,
    ),
)


def detect_framework(content: str) -> str:
    """Return the framework tag implied by a Python file's imports."""
    for pattern, framework in _FRAMEWORK_IMPORTS:
        if pattern.search(content):
            return framework
    return FRAMEWORK_UNKNOWN


def extract_docstrings(content: str) -> dict[str, str]:
    """Map function names to the first line of their docstring.

    A later definition with the same name replaces an earlier one.
    """
    docstrings: dict[str, str] = {}
    for match in _FUNC_WITH_DOCSTRING.finditer(content):
        summary = first_line(match.group(2) or match.group(3) or "")
        if summary:
            docstrings[match.group(1)] = summary
    return docstrings


def find_fastmcp_instances(content: str) -> list[str]:
    """Return the local names bound to ``FastMCP(...)`` instances."""
    return list(dict.fromkeys(m.group(1) for m in _FASTMCP_INSTANCE.finditer(content)))


def _instance_tool_pattern(instance: str) -> re.Pattern[str]:
    return re.compile(
        rf"@{re.escape(instance)}\.tool\s*\([^)]*\)\s*(?:async\s+)?def\s+(\w+)\s*\("
    )


class PythonDetector(Detector):
    """Detects tools and agents in ``.py`` files."""

    name = "python"
    extensions = (".py",)

    def detect(self, file: FileRecord) -> DetectionBatch:
        batch = DetectionBatch()
        content = file.content
        framework = detect_framework(content)
        docstrings = extract_docstrings(content)

        self._detect_tool_decorators(file, docstrings, batch)
        self._detect_fastmcp_tools(file, docstrings, batch)
        self._detect_tool_collections(file, framework, docstrings, batch)
        self._detect_langgraph_nodes(file, batch)
        self._detect_crewai_agents(file, batch)
        self._detect_autogen_agents(file, batch)
        return batch

    # -- Tools --------------------------------------------------------------

    def _emit_matches(
        self,
        pattern: re.Pattern[str],
        file: FileRecord,
        framework: str,
        docstrings: dict[str, str],
        batch: DetectionBatch,
    ) -> None:
        """Emit one tool per match of *pattern*, named by its first group."""
        for match in pattern.finditer(file.content):
            tool_name = match.group(1)
            batch.tools.append(create_tool(
                tool_name,
                file,
                line_number(file.content, match.start()),
                framework=framework,
                description=docstrings.get(tool_name),
            ))

    def _detect_tool_decorators(
        self, file: FileRecord, docstrings: dict[str, str], batch: DetectionBatch,
    ) -> None:
        self._emit_matches(_TOOL_DECORATOR, file, FRAMEWORK_CUSTOM, docstrings, batch)
        self._emit_matches(_MCP_TOOL_DECORATOR, file, FRAMEWORK_MCP, docstrings, batch)

    def _detect_fastmcp_tools(
        self, file: FileRecord, docstrings: dict[str, str], batch: DetectionBatch,
    ) -> None:
        for instance in find_fastmcp_instances(file.content):
            self._emit_matches(
                _instance_tool_pattern(instance), file, FRAMEWORK_FASTMCP,
                docstrings, batch,
            )

    def _detect_tool_collections(
        self,
        file: FileRecord,
        framework: str,
        docstrings: dict[str, str],
        batch: DetectionBatch,
    ) -> None:
        content = file.content
        for match in _TOOL_ARRAY.finditer(content):
            line = line_number(content, match.start())
            for word in _BAREWORD.finditer(match.group(1)):
                tool_name = word.group(1)
                if tool_name in _NON_TOOL_WORDS:
                    continue
                batch.tools.append(create_tool(
                    tool_name, file, line,
                    framework=framework,
                    description=docstrings.get(tool_name),
                ))

        self._emit_matches(_TOOL_CAPABILITY, file, framework, docstrings, batch)
        self._emit_matches(_TOOL_CLASS, file, framework, docstrings, batch)

    # -- Agents -------------------------------------------------------------

    def _detect_langgraph_nodes(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        if not _LANGGRAPH_GRAPH.search(content):
            return
        for match in _LANGGRAPH_NODE.finditer(content):
            batch.agents.append(create_agent(
                match.group(1),
                file,
                line_number(content, match.start()),
                framework=FRAMEWORK_LANGGRAPH,
                description="LangGraph node",
            ))

    def _detect_crewai_agents(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        for match in _CREWAI_AGENT.finditer(content):
            role = match.group(1)
            window = content[match.start():match.start() + _AGENT_TOOLS_WINDOW]
            tools_match = _AGENT_TOOLS.search(window)
            tools = parse_name_list(tools_match.group(1)) if tools_match else []
            batch.agents.append(create_agent(
                role,
                file,
                line_number(content, match.start()),
                framework=FRAMEWORK_CREWAI,
                tools=tools,
                description=f"CrewAI agent with role: {role}",
            ))

    def _detect_autogen_agents(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        for match in _AUTOGEN_AGENT.finditer(content):
            batch.agents.append(create_agent(
                match.group(1),
                file,
                line_number(content, match.start()),
                framework=FRAMEWORK_AUTOGEN,
                description="AutoGen agent",
            ))
