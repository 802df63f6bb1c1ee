from agenttrace import __version__
from click.testing import CliRunner

from agenttrace.cli.main import cli


def test_version():
    assert __version__ == "0.1.0"


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "discover, classify and govern" in result.output


def test_cli_version():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_every_detector_module_imports():
    import importlib

    for module in ("base", "go", "mcp_config", "python", "typescript"):
        importlib.import_module(f"agenttrace.detectors.{module}")
