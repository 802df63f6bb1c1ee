"""Data models for the detection pipeline.

Every stage of the scan exchanges these types:

- ``FileRecord`` -- one collected source file, produced by the walker.
- ``Tool``, ``Agent``, ``McpServer`` -- entities emitted by detectors.
- ``DetectionBatch`` -- the private result of one detector invocation.
- ``ScanSummary`` and ``Manifest`` -- the assembled, immutable scan output.

The ``Permission`` -> ``RiskLevel`` table lives here because it is a data
invariant, not a heuristic: a ``Tool`` refuses to be built with a risk that
disagrees with its permission.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping


# ---------------------------------------------------------------------------
# Permission and risk
# ---------------------------------------------------------------------------


class Permission(Enum):
    """Coarse category of effect a tool has on its environment."""

    READ = "READ"
    WRITE = "WRITE"
    DELETE = "DELETE"
    EXECUTE = "EXECUTE"
    OUTPUT = "OUTPUT"
    UNKNOWN = "UNKNOWN"


class RiskLevel(Enum):
    """Severity tier derived from a tool's permission."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


PERMISSION_RISK: dict[Permission, RiskLevel] = {
    Permission.READ: RiskLevel.LOW,
    Permission.OUTPUT: RiskLevel.LOW,
    Permission.WRITE: RiskLevel.MEDIUM,
    Permission.DELETE: RiskLevel.HIGH,
    Permission.EXECUTE: RiskLevel.HIGH,
    # Unknown tools are reported as MEDIUM so they are never under-reported.
    Permission.UNKNOWN: RiskLevel.MEDIUM,
}
"""Fixed permission -> risk table. ``Tool.risk`` is always looked up here."""


# Framework tags emitted by the built-in detectors. "langraph" is the
# spelling existing manifest consumers expect.
FRAMEWORK_MCP = "mcp"
FRAMEWORK_LANGGRAPH = "langraph"
FRAMEWORK_CREWAI = "crewai"
FRAMEWORK_AUTOGEN = "autogen"
FRAMEWORK_FASTMCP = "fastmcp"
FRAMEWORK_CUSTOM = "custom"
FRAMEWORK_UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Input record
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileRecord:
    """A collected source file, ready for detection.

    Attributes:
        path: Absolute filesystem path.
        relative_path: Path relative to the scan root, using ``/`` separators.
            This is what appears in every ``source`` locator.
        extension: File suffix including the dot (e.g. ``.py``).
        content: Full decoded text of the file.
    """

    path: str
    relative_path: str
    extension: str
    content: str


# ---------------------------------------------------------------------------
# Detected entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParameterSchema:
    """Schema of one tool input parameter."""

    type: str
    description: str | None = None
    required: bool | None = None
    default: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.description is not None:
            data["description"] = self.description
        if self.required is not None:
            data["required"] = self.required
        if self.default is not None:
            data["default"] = self.default
        return data


@dataclass(frozen=True)
class Tool:
    """A callable capability exposed to an agent.

    Build tools through ``detectors.base.create_tool`` so that permission
    and risk come from the inference engine. Direct construction is allowed
    (tests, deserialization) but the risk must agree with
    ``PERMISSION_RISK``.

    Attributes:
        name: Tool identifier as declared in source.
        framework: Framework tag (one of the ``FRAMEWORK_*`` constants).
        source: ``relative_path:line`` locator.
        line: 1-based line number of the declaration.
        permission: Inferred permission category.
        risk: Risk tier derived from ``permission``.
        description: First line of the associated doc text, if any.
        parameters: Parameter name -> schema, if the declaration has one.
        version: Declared version string, if any.
    """

    name: str
    framework: str
    source: str
    line: int
    permission: Permission
    risk: RiskLevel
    description: str | None = None
    parameters: dict[str, ParameterSchema] | None = None
    version: str | None = None

    def __post_init__(self) -> None:
        expected = PERMISSION_RISK[self.permission]
        if self.risk is not expected:
            raise ValueError(
                f"Tool {self.name!r}: risk {self.risk.value} does not match "
                f"permission {self.permission.value} (expected {expected.value})"
            )

    @property
    def key(self) -> tuple[str, str]:
        """Identity key used for deduplication."""
        return (self.name, self.source)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "framework": self.framework,
            "source": self.source,
            "line": self.line,
            "permission": self.permission.value,
            "risk": self.risk.value,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.parameters is not None:
            data["parameters"] = {
                name: schema.to_dict() for name, schema in self.parameters.items()
            }
        if self.version is not None:
            data["version"] = self.version
        return data


@dataclass(frozen=True)
class Agent:
    """A named agent (or graph node) that references a set of tools."""

    name: str
    framework: str
    source: str
    line: int
    tools: tuple[str, ...] = ()
    description: str | None = None
    config: dict[str, Any] | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Identity key used for deduplication."""
        return (self.name, self.source)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "framework": self.framework,
            "source": self.source,
            "line": self.line,
            "tools": list(self.tools),
        }
        if self.description is not None:
            data["description"] = self.description
        if self.config is not None:
            data["config"] = dict(self.config)
        return data


@dataclass(frozen=True)
class McpServer:
    """A remote tool server: a launch command or an endpoint URL.

    Servers are identified by name alone; two declarations with the same
    name anywhere in a scan are treated as the same server.
    """

    name: str
    command: str
    source: str
    args: tuple[str, ...] | None = None
    env: dict[str, str] | None = None
    tools: tuple[str, ...] | None = None

    @property
    def key(self) -> str:
        """Identity key used for deduplication."""
        return self.name

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "command": self.command}
        if self.args is not None:
            data["args"] = list(self.args)
        if self.env is not None:
            data["env"] = dict(self.env)
        data["source"] = self.source
        if self.tools is not None:
            data["tools"] = list(self.tools)
        return data


@dataclass
class DetectionBatch:
    """Entities produced by one detector invocation on one file.

    Batches are private to the call that creates them and are merged by the
    router and the assembler; they are never shared between detectors.
    """

    tools: list[Tool] = field(default_factory=list)
    agents: list[Agent] = field(default_factory=list)
    mcp_servers: list[McpServer] = field(default_factory=list)

    def extend(self, other: DetectionBatch) -> None:
        """Append every entity of *other* to this batch."""
        self.tools.extend(other.tools)
        self.agents.extend(other.agents)
        self.mcp_servers.extend(other.mcp_servers)

    def is_empty(self) -> bool:
        return not (self.tools or self.agents or self.mcp_servers)


# ---------------------------------------------------------------------------
# Scan output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanSummary:
    """Counts describing a manifest's final collections.

    Always build through ``from_collections`` so that every count is derived
    from the collections it describes.
    """

    total_tools: int
    total_agents: int
    total_mcp_servers: int
    files_scanned: int
    by_framework: dict[str, int]
    by_permission: dict[str, int]
    by_risk: dict[str, int]

    @classmethod
    def from_collections(
        cls,
        tools: Iterable[Tool],
        agents: Iterable[Agent],
        mcp_servers: Iterable[McpServer],
        files_scanned: int,
    ) -> ScanSummary:
        """Compute all counts from the given collections."""
        tool_list = list(tools)
        by_framework: dict[str, int] = {}
        by_permission = {p.value: 0 for p in Permission}
        by_risk = {r.value: 0 for r in RiskLevel}
        for tool in tool_list:
            by_framework[tool.framework] = by_framework.get(tool.framework, 0) + 1
            by_permission[tool.permission.value] += 1
            by_risk[tool.risk.value] += 1
        return cls(
            total_tools=len(tool_list),
            total_agents=len(list(agents)),
            total_mcp_servers=len(list(mcp_servers)),
            files_scanned=files_scanned,
            by_framework=by_framework,
            by_permission=by_permission,
            by_risk=by_risk,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_tools": self.total_tools,
            "total_agents": self.total_agents,
            "total_mcp_servers": self.total_mcp_servers,
            "files_scanned": self.files_scanned,
            "by_framework": dict(self.by_framework),
            "by_permission": dict(self.by_permission),
            "by_risk": dict(self.by_risk),
        }


@dataclass(frozen=True)
class Manifest:
    """The complete, immutable result of one scan.

    Attributes:
        version: Manifest schema version.
        scanned_at: ISO-8601 UTC timestamp of assembly.
        scanned_path: Absolute path of the scan root.
        scan_duration_ms: Wall-clock duration of the scan.
        summary: Counts derived from the collections below.
        tools: Tools ordered by risk (HIGH first), then name.
        agents: Agents ordered by name.
        mcp_servers: Servers ordered by name.
    """

    version: str
    scanned_at: str
    scanned_path: str
    scan_duration_ms: int
    summary: ScanSummary
    tools: tuple[Tool, ...]
    agents: tuple[Agent, ...]
    mcp_servers: tuple[McpServer, ...]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the manifest JSON contract."""
        return {
            "version": self.version,
            "scanned_at": self.scanned_at,
            "scanned_path": self.scanned_path,
            "scan_duration_ms": self.scan_duration_ms,
            "summary": self.summary.to_dict(),
            "tools": [t.to_dict() for t in self.tools],
            "agents": [a.to_dict() for a in self.agents],
            "mcp_servers": [s.to_dict() for s in self.mcp_servers],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def string_map(value: Mapping[Any, Any]) -> dict[str, str]:
    """Coerce a mapping's keys and values to strings."""
    return {str(k): str(v) for k, v in value.items()}
