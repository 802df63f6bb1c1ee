"""Tests for ``.agenttrace.yaml`` loading and CLI overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from agenttrace.config import ScanConfig, find_config_file, load_config
from agenttrace.exceptions import ConfigError


class TestLoadConfig:
    """Reading the project config file."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        assert load_config(tmp_path) == ScanConfig()

    def test_full_config(self, tmp_path: Path) -> None:
        (tmp_path / ".agenttrace.yaml").write_text(
            "extensions: ['.py', '.ts']\n"
            "ignore:\n"
            "  - examples/\n"
            "respect_gitignore: false\n"
            "framework: mcp\n"
            "risk: high\n"
            "output: build/manifest.json\n"
        )
        config = load_config(tmp_path)
        assert config.extensions == (".py", ".ts")
        assert config.ignore == ("examples/",)
        assert config.respect_gitignore is False
        assert config.framework == "mcp"
        assert config.risk == "high"
        assert config.output == "build/manifest.json"

    def test_unhidden_file_name(self, tmp_path: Path) -> None:
        (tmp_path / "agenttrace.yaml").write_text("framework: crewai\n")
        assert find_config_file(tmp_path) == tmp_path / "agenttrace.yaml"
        assert load_config(tmp_path).framework == "crewai"

    def test_explicit_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "ci.yaml"
        custom.write_text("risk: low\n")
        assert load_config(tmp_path / "elsewhere", custom).risk == "low"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        (tmp_path / ".agenttrace.yaml").write_text("")
        assert load_config(tmp_path) == ScanConfig()


class TestInvalidConfig:
    """Every problem surfaces as ``ConfigError``."""

    @pytest.mark.parametrize(
        "content",
        [
            "extensions: [unclosed\n",
            "- just\n- a list\n",
            "extensions: .py\n",
            "ignore: [1, 2]\n",
            "respect_gitignore: maybe\n",
            "framework: [mcp]\n",
            "risk: critical\n",
        ],
    )
    def test_rejected(self, tmp_path: Path, content: str) -> None:
        (tmp_path / ".agenttrace.yaml").write_text(content)
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestMerge:
    """Command-line overrides."""

    def test_none_values_do_not_override(self) -> None:
        base = ScanConfig(framework="mcp", risk="low")
        assert base.merge(framework=None, risk=None) == base

    def test_values_override(self) -> None:
        merged = ScanConfig(framework="mcp").merge(framework="crewai", output="m.json")
        assert merged.framework == "crewai"
        assert merged.output == "m.json"

    def test_ignore_patterns_accumulate(self) -> None:
        merged = ScanConfig(ignore=("a/",)).merge(ignore=["b/"])
        assert merged.ignore == ("a/", "b/")

    def test_invalid_risk_override(self) -> None:
        with pytest.raises(ConfigError):
            ScanConfig().merge(risk="extreme")

    def test_unknown_option(self) -> None:
        with pytest.raises(ConfigError):
            ScanConfig().merge(colour=True)
