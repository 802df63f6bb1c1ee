"""Tests for the Go capability detector.

Verifies:
    - ``Type`` / ``Version`` / ``Input`` correlation through a shared prefix.
    - Struct-tag parameter schemas and Go type mapping.
    - ``var ( ... )`` blocks, mcp-go ``NewTool``, ``Register*`` calls and
      ``*Tool`` / ``*Handler`` / ``*Capability`` functions.
"""

from __future__ import annotations

import pytest

from agenttrace.detectors import GoDetector
from agenttrace.detectors.go import (
    function_tool_name,
    map_go_type,
    parse_struct_fields,
    preceding_comment,
    uses_capabilities,
)
from agenttrace.models import ParameterSchema, Permission, RiskLevel


@pytest.fixture
def detector() -> GoDetector:
    return GoDetector()


CAPABILITY_FILE = """\
package tools

import "github.com/acme/agent/capabilities"

// GetFile reads a file from the workspace.
var GetFileType capabilities.Type = "get_file"
var GetFileVersion capabilities.Version = "1.2.0"

type GetFileInput struct {
	Path     string   `json:"path"`
	MaxBytes *int64   `json:"max_bytes,omitempty"`
	Tags     []string `json:"tags"`
	Internal string   `json:"-"`
}
"""

MCP_GO_FILE = """\
package main

import (
	"github.com/mark3labs/mcp-go/mcp"
)

func main() {
	tool := mcp.NewTool("run_command",
		mcp.WithDescription("Execute a shell command"),
	)
	_ = tool
}
"""

REGISTRY_FILE = """\
package main

func init() {
	registry.RegisterTool("list_buckets", listBuckets)
}

// Uploads an object to the bucket.
func UploadObjectHandler(ctx context.Context) error {
	return nil
}

func ListBucketsTool() {}
"""


class TestCapabilities:
    """Prefix-correlated capability declarations."""

    def test_capability_tool(self, detector: GoDetector, make_file) -> None:
        batch = detector.detect(make_file("tools/file.go", CAPABILITY_FILE))
        assert len(batch.tools) == 1
        tool = batch.tools[0]
        assert tool.name == "get_file"
        assert tool.framework == "custom"
        assert tool.version == "1.2.0"
        assert tool.line == 6
        assert tool.description == "GetFile reads a file from the workspace."
        assert tool.permission is Permission.READ

    def test_capability_parameters(self, detector: GoDetector, make_file) -> None:
        tool = detector.detect(make_file("tools/file.go", CAPABILITY_FILE)).tools[0]
        assert tool.parameters == {
            "path": ParameterSchema(type="string", description="Path", required=True),
            "max_bytes": ParameterSchema(
                type="integer", description="MaxBytes", required=False,
            ),
            "tags": ParameterSchema(type="array", description="Tags", required=True),
        }

    def test_var_block(self, detector: GoDetector, make_file) -> None:
        content = (
            'import "example.com/capabilities"\n'
            "\n"
            "var (\n"
            '\tDeleteRecordType    capabilities.Type    = "delete_record"\n'
            '\tDeleteRecordVersion capabilities.Version = "0.1.0"\n'
            ")\n"
        )
        batch = detector.detect(make_file("caps.go", content))
        assert [(t.name, t.version, t.line) for t in batch.tools] == [
            ("delete_record", "0.1.0", 4),
        ]
        assert batch.tools[0].risk is RiskLevel.HIGH
        assert batch.tools[0].description is None

    def test_uses_capabilities(self) -> None:
        assert uses_capabilities('import (\n\t"x/capabilities"\n)\n')
        assert uses_capabilities("var x capabilities.Type\n")
        assert not uses_capabilities('import "fmt"\n')


class TestMcpGo:
    """mcp-go ``NewTool`` declarations."""

    def test_new_tool(self, detector: GoDetector, make_file) -> None:
        batch = detector.detect(make_file("main.go", MCP_GO_FILE))
        assert len(batch.tools) == 1
        tool = batch.tools[0]
        assert tool.name == "run_command"
        assert tool.framework == "mcp"
        assert tool.description == "Execute a shell command"
        assert tool.permission is Permission.EXECUTE
        assert tool.line == 8

    def test_new_tool_requires_import(self, detector: GoDetector, make_file) -> None:
        content = 'func f() { mcp.NewTool("x_tool") }\n'
        assert detector.detect(make_file("main.go", content)).is_empty()


class TestRegistrationsAndFunctions:
    """``Register*`` calls and suffix-named functions."""

    def test_registration_and_handler(self, detector: GoDetector, make_file) -> None:
        batch = detector.detect(make_file("cmd/main.go", REGISTRY_FILE))
        by_name = {t.name: t for t in batch.tools}
        assert set(by_name) == {"list_buckets", "upload_object"}
        assert by_name["list_buckets"].line == 4
        assert by_name["upload_object"].description == "Uploads an object to the bucket."
        assert by_name["upload_object"].permission is Permission.WRITE

    def test_already_detected_name_is_skipped(
        self, detector: GoDetector, make_file,
    ) -> None:
        batch = detector.detect(make_file("cmd/main.go", REGISTRY_FILE))
        assert [t.name for t in batch.tools].count("list_buckets") == 1


class TestHelpers:
    """Module-level helpers."""

    @pytest.mark.parametrize(
        ("go_type", "expected"),
        [
            ("string", "string"),
            ("int", "integer"),
            ("uint32", "integer"),
            ("float64", "number"),
            ("bool", "boolean"),
            ("interface{}", "any"),
            ("*string", "string"),
            ("[]byte", "array"),
            ("map[string]int", "object"),
            ("time.Duration", "string"),
        ],
    )
    def test_map_go_type(self, go_type: str, expected: str) -> None:
        assert map_go_type(go_type) == expected

    @pytest.mark.parametrize(
        ("func_name", "expected"),
        [
            ("GetFileTool", "get_file"),
            ("RunShellHandler", "run_shell"),
            ("SearchCapability", "search"),
            ("CapabilityTool", ""),
        ],
    )
    def test_function_tool_name(self, func_name: str, expected: str) -> None:
        assert function_tool_name(func_name) == expected

    def test_parse_struct_fields_skips_untagged(self) -> None:
        body = '\n\tName string `json:"name"`\n\tcache map[string]int\n'
        assert list(parse_struct_fields(body)) == ["name"]

    def test_preceding_comment(self) -> None:
        content = "// Does a thing.\nfunc X() {}\n"
        assert preceding_comment(content, content.index("func")) == "Does a thing."

    def test_preceding_comment_absent(self) -> None:
        content = "x := 1\nfunc X() {}\n"
        assert preceding_comment(content, content.index("func")) is None
        assert preceding_comment(content, 0) is None

    def test_plain_file_yields_empty_batch(self, detector: GoDetector, make_file) -> None:
        content = 'package main\n\nfunc main() {\n\tfmt.Println("hi")\n}\n'
        assert detector.detect(make_file("main.go", content)).is_empty()
