"""Detector for AI tool capabilities declared in Go source.

Go capability packages describe a tool with a family of declarations that
share a name prefix::

    // GetFile reads a file from the workspace.
    var GetFileType capabilities.Type = "get_file"
    var GetFileVersion capabilities.Version = "1.0.0"

    type GetFileInput struct {
        Path     string `json:"path"`
        MaxBytes int    `json:"max_bytes,omitempty"`
    }

The ``Type`` declaration names the tool; ``Version`` and ``Input`` are
correlated to it through the shared prefix (``GetFile``). Input fields
become the tool's parameter schema, with Go types mapped onto JSON-like
type names.

Also recognised:

- ``mcp.NewTool("name", mcp.WithDescription("..."))`` (mcp-go).
- ``Register("name", ...)`` / ``RegisterTool(...)`` / ``registerCapability``.
- ``func XTool(`` / ``func XHandler(`` / ``func XCapability(`` functions,
  named by stripping the suffix and converting to snake_case.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from agenttrace.detectors.base import (
    Detector,
    create_tool,
    line_number,
)
from agenttrace.models import (
    FRAMEWORK_CUSTOM,
    FRAMEWORK_MCP,
    DetectionBatch,
    FileRecord,
    ParameterSchema,
)

# ── Compiled patterns ──────────────────────────────────────────────────────

# Matches both ``var XType ...`` and the indented form inside ``var ( ... )``.
_CAPABILITY_TYPE = re.compile(
    r"""(?:\bvar\s+|^[ \t]+)(\w+)Type\s+(?:\w+\.)?Type\s*=\s*["'`]([^"'`]+)["'`]""",
    re.MULTILINE,
)
_CAPABILITY_VERSION = re.compile(
    r"""(?:\bvar\s+|^[ \t]+)(\w+)Version\s+(?:\w+\.)?Version\s*=\s*["'`]([^"'`]+)["'`]""",
    re.MULTILINE,
)
_INPUT_STRUCT = re.compile(r"type\s+(\w+)Input\s+struct\s*\{([^}]*)\}")
_STRUCT_FIELD = re.compile(r'(\w+)\s+([\w\[\]\*\.]+(?:\{\})?)\s+`json:"([^"]+)"')

_TOOL_REGISTER = re.compile(
    r"""(?:register|Register)(?:Tool|Capability)?\s*\(\s*["'`]([^"'`]+)["'`]"""
)
_TOOL_FUNCTION = re.compile(r"func\s+(\w+(?:Tool|Handler|Capability))\s*\(")
_FUNCTION_SUFFIXES = ("Tool", "Handler", "Capability")
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")

_MCP_NEW_TOOL = re.compile(r"""\bmcp\.NewTool\s*\(\s*["'`]([^"'`]+)["'`]""")
_MCP_WITH_DESCRIPTION = re.compile(r"""WithDescription\s*\(\s*["'`]([^"'`]+)["'`]""")
_DESCRIPTION_WINDOW = 500

_CAPABILITIES_IMPORT = re.compile(r"""import\s*(?:\(\s*)?[^)]*["'].*capabilities["']""")
_MCP_GO_IMPORT = re.compile(
    r"""["']github\.com/(?:mark3labs/mcp-go|modelcontextprotocol/go-sdk)[^"']*["']"""
)

_COMMENT_LINE = re.compile(r"^\s*//\s?(.*)$")

# Go type -> JSON-like type name. Anything missing maps to "string".
_GO_TYPE_MAP: dict[str, str] = {
    "string": "string",
    "int": "integer",
    "int8": "integer",
    "int16": "integer",
    "int32": "integer",
    "int64": "integer",
    "uint": "integer",
    "uint8": "integer",
    "uint16": "integer",
    "uint32": "integer",
    "uint64": "integer",
    "float32": "number",
    "float64": "number",
    "bool": "boolean",
    "interface{}": "any",
    "any": "any",
}


@dataclass
class _CapabilityInfo:
    """Declarations correlated under one name prefix."""

    name: str
    line: int
    description: str | None = None
    version: str | None = None
    parameters: dict[str, ParameterSchema] | None = None


def map_go_type(go_type: str) -> str:
    """Map a Go field type onto string/integer/number/boolean/array/object/any."""
    bare = go_type.lstrip("*")
    if bare.startswith("[]"):
        return "array"
    if bare.startswith("map["):
        return "object"
    return _GO_TYPE_MAP.get(bare, "string")


def parse_struct_fields(struct_body: str) -> dict[str, ParameterSchema]:
    """Parse ``Name Type `json:"tag"``` fields into parameter schemas.

    The JSON tag name is the parameter name; ``omitempty`` marks the field
    as optional.
    """
    fields: dict[str, ParameterSchema] = {}
    for match in _STRUCT_FIELD.finditer(struct_body):
        field_name, go_type, tag = match.groups()
        json_name, _, options = tag.partition(",")
        if not json_name or json_name == "-":
            continue
        fields[json_name] = ParameterSchema(
            type=map_go_type(go_type),
            description=field_name,
            required="omitempty" not in options.split(","),
        )
    return fields


def preceding_comment(content: str, offset: int) -> str | None:
    """Return the ``//`` comment line directly above the line at *offset*."""
    line_start = content.rfind("\n", 0, offset) + 1
    if line_start == 0:
        return None
    previous_start = content.rfind("\n", 0, line_start - 1) + 1
    match = _COMMENT_LINE.match(content[previous_start:line_start - 1])
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None


def function_tool_name(func_name: str) -> str:
    """``GetFileTool`` -> ``get_file``."""
    name = func_name
    for suffix in _FUNCTION_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return _CAMEL_BOUNDARY.sub(r"\1_\2", name).lower()


def uses_capabilities(content: str) -> bool:
    """Return True if the file imports or references a capabilities package."""
    return (
        bool(_CAPABILITIES_IMPORT.search(content))
        or "capabilities.Type" in content
        or "capabilities.Capability" in content
    )


class GoDetector(Detector):
    """Detects tool capabilities in ``.go`` files."""

    name = "go"
    extensions = (".go",)

    def detect(self, file: FileRecord) -> DetectionBatch:
        batch = DetectionBatch()
        content = file.content

        if uses_capabilities(content):
            self._detect_capabilities(file, batch)
        if _MCP_GO_IMPORT.search(content):
            self._detect_mcp_tools(file, batch)
        self._detect_tool_registrations(file, batch)
        self._detect_tool_functions(file, batch)
        return batch

    def _detect_capabilities(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        capabilities: dict[str, _CapabilityInfo] = {}

        for match in _CAPABILITY_TYPE.finditer(content):
            prefix, tool_name = match.group(1), match.group(2)
            capabilities[prefix] = _CapabilityInfo(
                name=tool_name,
                line=line_number(content, match.start()),
                description=preceding_comment(content, match.start()),
            )

        for match in _CAPABILITY_VERSION.finditer(content):
            info = capabilities.get(match.group(1))
            if info is not None:
                info.version = match.group(2)

        for match in _INPUT_STRUCT.finditer(content):
            info = capabilities.get(match.group(1))
            if info is not None:
                info.parameters = parse_struct_fields(match.group(2))

        for info in capabilities.values():
            batch.tools.append(create_tool(
                info.name,
                file,
                info.line,
                framework=FRAMEWORK_CUSTOM,
                description=info.description,
                parameters=info.parameters,
                version=info.version,
            ))

    def _detect_mcp_tools(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        for match in _MCP_NEW_TOOL.finditer(content):
            window = content[match.end():match.end() + _DESCRIPTION_WINDOW]
            desc_match = _MCP_WITH_DESCRIPTION.search(window)
            batch.tools.append(create_tool(
                match.group(1),
                file,
                line_number(content, match.start()),
                framework=FRAMEWORK_MCP,
                description=desc_match.group(1) if desc_match else None,
            ))

    def _detect_tool_registrations(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        for match in _TOOL_REGISTER.finditer(content):
            tool_name = match.group(1)
            if any(t.name == tool_name for t in batch.tools):
                continue
            batch.tools.append(create_tool(
                tool_name,
                file,
                line_number(content, match.start()),
                framework=FRAMEWORK_CUSTOM,
            ))

    def _detect_tool_functions(self, file: FileRecord, batch: DetectionBatch) -> None:
        content = file.content
        for match in _TOOL_FUNCTION.finditer(content):
            func_name = match.group(1)
            tool_name = function_tool_name(func_name)
            if not tool_name:
                continue
            if any(t.name in (tool_name, func_name) for t in batch.tools):
                continue
            batch.tools.append(create_tool(
                tool_name,
                file,
                line_number(content, match.start()),
                framework=FRAMEWORK_CUSTOM,
                description=preceding_comment(content, match.start()),
            ))
