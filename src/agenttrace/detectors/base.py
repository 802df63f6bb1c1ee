"""Base interface and shared helpers for language detectors.

Every detector in AgentTrace implements the ``Detector`` abstract base
class:

- ``name`` -- Stable identifier used in diagnostics and logs.
- ``extensions`` -- File suffixes the detector understands.
- ``detect(file)`` -- Scan one ``FileRecord`` and return a private
  ``DetectionBatch``.

Detectors are pure functions of ``file.content``. Anything derived from one
file (its framework tag, its docstring table) is computed inside ``detect``
and passed down as arguments, never stored on the instance, so the same
detector object can process files in any order.

Detection is heuristic: regular expressions over raw text, with no syntax
tree. Matches inside comments or strings are reported, and declarations
split across unusual formatting are missed. Module-level patterns are only
used through ``finditer`` / ``search``, which keep no state between calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from agenttrace.inference import infer_permission_and_risk
from agenttrace.models import (
    FRAMEWORK_UNKNOWN,
    Agent,
    DetectionBatch,
    FileRecord,
    McpServer,
    ParameterSchema,
    Tool,
)


class Detector(ABC):
    """Abstract base class for language detectors.

    Subclasses set ``name`` and ``extensions`` as class attributes and
    implement ``detect``. The router only ever sees this interface.
    """

    name: str = ""
    extensions: tuple[str, ...] = ()

    @abstractmethod
    def detect(self, file: FileRecord) -> DetectionBatch:
        """Scan one file and return every entity found in it.

        Must not raise on malformed content -- anomalies simply yield fewer
        matches. Must not mutate *file*.

        Args:
            file: The collected source file.

        Returns:
            A new ``DetectionBatch``. Empty if nothing was recognised.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def line_number(content: str, offset: int) -> int:
    """Return the 1-based line of *offset* by counting preceding newlines."""
    return content.count("\n", 0, offset) + 1


def source_locator(file: FileRecord, line: int) -> str:
    """Build the ``relative_path:line`` locator used in every entity."""
    return f"{file.relative_path}:{line}"


def first_line(text: str | None) -> str | None:
    """Return the first non-empty stripped line of *text*, or None."""
    if not text:
        return None
    for raw in text.strip().splitlines():
        stripped = raw.strip()
        if stripped:
            return stripped
    return None


def parse_name_list(text: str) -> list[str]:
    """Split a bracketed-list body into bare names.

    ``"search, 'fetch', \\"write\\""`` -> ``["search", "fetch", "write"]``.
    """
    names: list[str] = []
    for part in text.split(","):
        cleaned = part.strip().replace('"', "").replace("'", "").replace("`", "")
        if cleaned:
            names.append(cleaned)
    return names


# ---------------------------------------------------------------------------
# Entity factories
# ---------------------------------------------------------------------------


def create_tool(
    name: str,
    file: FileRecord,
    line: int,
    framework: str = FRAMEWORK_UNKNOWN,
    description: str | None = None,
    parameters: dict[str, ParameterSchema] | None = None,
    version: str | None = None,
) -> Tool:
    """Build a ``Tool`` whose permission and risk come from inference."""
    permission, risk = infer_permission_and_risk(name, description)
    return Tool(
        name=name,
        framework=framework,
        source=source_locator(file, line),
        line=line,
        permission=permission,
        risk=risk,
        description=description,
        parameters=parameters,
        version=version,
    )


def create_agent(
    name: str,
    file: FileRecord,
    line: int,
    framework: str = FRAMEWORK_UNKNOWN,
    tools: list[str] | None = None,
    description: str | None = None,
) -> Agent:
    """Build an ``Agent`` located at *line* of *file*."""
    return Agent(
        name=name,
        framework=framework,
        source=source_locator(file, line),
        line=line,
        tools=tuple(tools or ()),
        description=description,
    )


def create_mcp_server(
    name: str,
    command: str,
    source: str,
    args: list[str] | None = None,
    env: dict[str, str] | None = None,
) -> McpServer:
    """Build an ``McpServer`` entry."""
    return McpServer(
        name=name,
        command=command,
        source=source,
        args=tuple(args) if args is not None else None,
        env=env,
    )
