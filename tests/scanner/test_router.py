"""Tests for the extension router.

Verifies registration order, global detectors, per-(detector, file) error
isolation and the default detector set.
"""

from __future__ import annotations

import logging

import pytest

from agenttrace.detectors import Detector, create_tool
from agenttrace.exceptions import DetectorError
from agenttrace.models import DetectionBatch, FileRecord
from agenttrace.scanner.router import ExtensionRouter, default_router


class _NamingDetector(Detector):
    """Emits one tool named after itself for every file."""

    extensions = (".py",)

    def __init__(self, name: str) -> None:
        self.name = name

    def detect(self, file: FileRecord) -> DetectionBatch:
        return DetectionBatch(tools=[create_tool(f"{self.name}_tool", file, 1)])


class _FailingDetector(Detector):
    name = "broken"
    extensions = (".py",)

    def detect(self, file: FileRecord) -> DetectionBatch:
        raise RuntimeError("boom")


class TestRegistration:
    """Detector lookup by extension."""

    def test_extension_normalized(self, make_file) -> None:
        router = ExtensionRouter()
        first = _NamingDetector("first")
        router.register(first, ["py"])
        assert router.detectors_for(make_file("a.py", "")) == [first]
        assert router.extensions == [".py"]

    def test_defaults_to_detector_extensions(self, make_file) -> None:
        router = ExtensionRouter()
        detector = _NamingDetector("only")
        router.register(detector)
        assert router.detectors_for(make_file("a.py", "")) == [detector]
        assert router.detectors_for(make_file("a.go", "")) == []

    def test_global_detectors_run_first(self, make_file) -> None:
        router = ExtensionRouter()
        local = _NamingDetector("local")
        everywhere = _NamingDetector("global")
        router.register(local)
        router.register_global(everywhere)
        assert router.detectors_for(make_file("a.py", "")) == [everywhere, local]
        assert router.detectors_for(make_file("a.md", "")) == [everywhere]

    def test_registration_order_is_kept(self, make_file) -> None:
        router = ExtensionRouter()
        router.register(_NamingDetector("one"))
        router.register(_NamingDetector("two"))
        batch = router.process_file(make_file("a.py", ""))
        assert [t.name for t in batch.tools] == ["one_tool", "two_tool"]


class TestErrorIsolation:
    """A failing detector never aborts the scan."""

    def test_other_detectors_still_run(self, make_file) -> None:
        router = ExtensionRouter()
        router.register(_FailingDetector())
        router.register(_NamingDetector("healthy"))
        batch = router.process_file(make_file("a.py", ""))
        assert [t.name for t in batch.tools] == ["healthy_tool"]

    def test_failure_recorded_as_diagnostic(self, make_file) -> None:
        router = ExtensionRouter()
        router.register(_FailingDetector())
        router.process_files([make_file("a.py", ""), make_file("b.py", "")])
        assert [(d.detector, d.file) for d in router.diagnostics] == [
            ("broken", "a.py"), ("broken", "b.py"),
        ]
        error = router.diagnostics[0].error
        assert isinstance(error, DetectorError)
        assert isinstance(error.__cause__, RuntimeError)

    def test_failure_is_logged(self, make_file, caplog: pytest.LogCaptureFixture) -> None:
        router = ExtensionRouter()
        router.register(_FailingDetector())
        with caplog.at_level(logging.WARNING, logger="agenttrace.scanner.router"):
            router.process_file(make_file("a.py", ""))
        assert "broken" in caplog.text
        assert "a.py" in caplog.text


class TestDefaultRouter:
    """Built-in detector set."""

    def test_registered_extensions(self) -> None:
        assert default_router().extensions == sorted(
            [".json", ".py", ".ts", ".tsx", ".js", ".jsx", ".mjs", ".go"]
        )

    def test_each_extension_has_one_detector(self, make_file) -> None:
        router = default_router()
        names = {
            ext: [d.name for d in router.detectors_for(make_file(f"f{ext}", ""))]
            for ext in (".json", ".py", ".ts", ".go")
        }
        assert names == {
            ".json": ["mcp-config"],
            ".py": ["python"],
            ".ts": ["typescript"],
            ".go": ["go"],
        }

    def test_process_files_merges_batches(self, make_file) -> None:
        router = default_router()
        batch = router.process_files([
            make_file("mcp.json", '{"mcpServers": {"fs": {"command": "npx"}}}'),
            make_file("a.py", "@tool\ndef get_user():\n    pass\n"),
        ])
        assert [s.name for s in batch.mcp_servers] == ["fs"]
        assert [t.name for t in batch.tools] == ["get_user"]
        assert router.diagnostics == []
