"""Tests for the TypeScript / JavaScript detector."""

from __future__ import annotations

import pytest

from agenttrace.detectors import TypeScriptDetector
from agenttrace.detectors.typescript import detect_framework, find_server_instances
from agenttrace.models import Permission, RiskLevel


@pytest.fixture
def detector() -> TypeScriptDetector:
    return TypeScriptDetector()


WEATHER_SERVER = """\
import { McpServer } from "@modelcontextprotocol/sdk/server/mcp.js";

const server = new McpServer({ name: "weather", version: "1.0.0" });

server.tool("get_forecast", "Get the forecast for a city", { city: z.string() }, async () => {});
"""

REGISTERED_TOOLS = """\
import { McpServer } from "@modelcontextprotocol/sdk/server/mcp.js";
const files = new McpServer({ name: "fs" });
files.registerTool("delete_file", {
  description: "Remove a file",
  inputSchema: {},
}, handler);
other.registerTool("ignored_tool", {});
"""


class TestServerTools:
    """``server.tool(...)`` and ``registerTool`` calls."""

    def test_server_tool_with_positional_description(
        self, detector: TypeScriptDetector, make_file,
    ) -> None:
        batch = detector.detect(make_file("src/index.ts", WEATHER_SERVER))
        assert len(batch.tools) == 1
        tool = batch.tools[0]
        assert tool.name == "get_forecast"
        assert tool.framework == "mcp"
        assert tool.description == "Get the forecast for a city"
        assert tool.permission is Permission.READ
        assert tool.source == "src/index.ts:5"

    def test_server_tool_with_description_key(
        self, detector: TypeScriptDetector, make_file,
    ) -> None:
        content = 'server.tool("lookup", { description: "Find a record" }, handler);\n'
        batch = detector.detect(make_file("a.ts", content))
        assert batch.tools[0].description == "Find a record"

    def test_registered_tool_on_bound_instance(
        self, detector: TypeScriptDetector, make_file,
    ) -> None:
        batch = detector.detect(make_file("src/fs.ts", REGISTERED_TOOLS))
        assert [t.name for t in batch.tools] == ["delete_file"]
        tool = batch.tools[0]
        assert tool.description == "Remove a file"
        assert tool.risk is RiskLevel.HIGH
        assert tool.line == 3

    def test_find_server_instances(self) -> None:
        content = "const a = new McpServer({});\nlet b = new Server(info);\n"
        assert find_server_instances(content) == ["a", "b"]


class TestServers:
    """``new McpServer({...})`` instantiations."""

    def test_named_server(self, detector: TypeScriptDetector, make_file) -> None:
        batch = detector.detect(make_file("src/index.ts", WEATHER_SERVER))
        assert len(batch.mcp_servers) == 1
        server = batch.mcp_servers[0]
        assert server.name == "weather"
        assert server.command == "typescript"
        assert server.source == "src/index.ts:3"

    def test_unnamed_server_gets_line_name(
        self, detector: TypeScriptDetector, make_file,
    ) -> None:
        content = "// setup\nconst s = new McpServer({ version: '1.0.0' });\n"
        batch = detector.detect(make_file("main.js", content))
        assert [s.name for s in batch.mcp_servers] == ["mcp-server-2"]


class TestLangChainTools:
    """LangChain.js tool declarations."""

    def test_dynamic_tool(self, detector: TypeScriptDetector, make_file) -> None:
        content = (
            'import { DynamicTool } from "@langchain/core/tools";\n'
            "\n"
            "const calc = new DynamicTool({\n"
            '  name: "calculator",\n'
            '  description: "Evaluate math",\n'
            "  func: async (input) => input,\n"
            "});\n"
        )
        batch = detector.detect(make_file("tools.ts", content))
        assert [(t.name, t.framework, t.line) for t in batch.tools] == [
            ("calculator", "custom", 3),
        ]
        assert batch.tools[0].permission is Permission.UNKNOWN

    def test_tool_function(self, detector: TypeScriptDetector, make_file) -> None:
        content = (
            "const weather = tool(async ({ city }) => { return city; }, "
            '{ name: "get_weather", description: "x" });\n'
        )
        batch = detector.detect(make_file("tools.ts", content))
        assert [t.name for t in batch.tools] == ["get_weather"]
        assert batch.tools[0].framework == "custom"


class TestHelpersAndJsDoc:
    """``createTool`` helpers and JSDoc ``@tool`` functions."""

    def test_create_tool_uses_file_framework(
        self, detector: TypeScriptDetector, make_file,
    ) -> None:
        content = (
            'import { Server } from "@modelcontextprotocol/sdk/server/index.js";\n'
            'export const mailer = createTool({ id: "m", name: "send_email" });\n'
        )
        batch = detector.detect(make_file("mail.ts", content))
        matches = [t for t in batch.tools if t.name == "send_email"]
        assert any(t.framework == "mcp" for t in matches)
        assert all(t.permission is Permission.WRITE for t in matches)

    def test_multiline_jsdoc_tool(self, detector: TypeScriptDetector, make_file) -> None:
        content = (
            "/**\n"
            " * Runs a database migration.\n"
            " * @tool\n"
            " */\n"
            "export async function migrateDatabase() {}\n"
        )
        batch = detector.detect(make_file("db.ts", content))
        assert len(batch.tools) == 1
        tool = batch.tools[0]
        assert tool.name == "migrateDatabase"
        assert tool.description == "Runs a database migration."
        assert tool.framework == "unknown"
        assert tool.permission is Permission.EXECUTE
        assert tool.line == 1

    def test_jsdoc_without_tool_tag_is_ignored(
        self, detector: TypeScriptDetector, make_file,
    ) -> None:
        content = "/** Helper. */\nfunction helper() {}\n"
        assert detector.detect(make_file("h.js", content)).is_empty()


class TestFramework:
    """Framework attribution from imports."""

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ('import { McpServer } from "@modelcontextprotocol/sdk";\n', "mcp"),
            ('import x from "@modelcontextprotocol/sdk/server/stdio.js";\n', "mcp"),
            ('const sdk = require("@modelcontextprotocol/sdk");\n', "mcp"),
            ('import { tool } from "@langchain/core/tools";\n', "custom"),
            ('import { z } from "zod";\n', "unknown"),
        ],
    )
    def test_detect_framework(self, content: str, expected: str) -> None:
        assert detect_framework(content) == expected

    def test_plain_module_yields_empty_batch(
        self, detector: TypeScriptDetector, make_file,
    ) -> None:
        content = "export const add = (a: number, b: number) => a + b;\n"
        assert detector.detect(make_file("math.ts", content)).is_empty()
