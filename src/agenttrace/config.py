"""Project configuration for scans.

A project may carry a ``.agenttrace.yaml`` (or ``agenttrace.yaml``) file at
its root::

    extensions: [".py", ".ts"]
    ignore:
      - "examples/"
      - "*.generated.ts"
    respect_gitignore: true
    framework: mcp
    risk: high
    output: build/agent-manifest.json

Every key is optional. Command-line options override file values through
``ScanConfig.merge``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from agenttrace.exceptions import ConfigError
from agenttrace.output.manifest import parse_risk

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".agenttrace.yaml", "agenttrace.yaml")


@dataclass(frozen=True)
class ScanConfig:
    """Resolved scan settings.

    Attributes:
        extensions: Suffixes to collect; None means every supported suffix.
        ignore: Extra gitignore-style patterns to skip.
        respect_gitignore: Whether to honor the root ``.gitignore``.
        framework: Tool framework filter.
        risk: Tool risk filter (low, medium or high).
        output: Manifest output path; None means no file is written.
    """

    extensions: tuple[str, ...] | None = None
    ignore: tuple[str, ...] = ()
    respect_gitignore: bool = True
    framework: str | None = None
    risk: str | None = None
    output: str | None = None

    def merge(self, **overrides: Any) -> ScanConfig:
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown config option(s): {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "extensions" in changes:
            changes["extensions"] = tuple(changes["extensions"])
        if "ignore" in changes:
            changes["ignore"] = self.ignore + tuple(changes["ignore"])
        if changes.get("risk") is not None:
            parse_risk(changes["risk"])
        return replace(self, **changes)


def _string_list(data: dict[str, Any], key: str, source: Path) -> tuple[str, ...] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{source}: '{key}' must be a list of strings")
    return tuple(value)


def _optional_string(data: dict[str, Any], key: str, source: Path) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{source}: '{key}' must be a string")
    return value


def parse_config(data: Any, source: Path) -> ScanConfig:
    """Validate a decoded YAML document into a ``ScanConfig``.

    Raises:
        ConfigError: If the document or one of its values has the wrong type.
    """
    if data is None:
        return ScanConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected a mapping at the top level")

    unknown = set(data) - {f.name for f in fields(ScanConfig)}
    if unknown:
        logger.warning("Ignoring unknown keys in %s: %s", source, ", ".join(sorted(unknown)))

    respect_gitignore = data.get("respect_gitignore", True)
    if not isinstance(respect_gitignore, bool):
        raise ConfigError(f"{source}: 'respect_gitignore' must be true or false")

    risk = _optional_string(data, "risk", source)
    if risk is not None:
        parse_risk(risk)

    return ScanConfig(
        extensions=_string_list(data, "extensions", source),
        ignore=_string_list(data, "ignore", source) or (),
        respect_gitignore=respect_gitignore,
        framework=_optional_string(data, "framework", source),
        risk=risk,
        output=_optional_string(data, "output", source),
    )


def find_config_file(root: Path) -> Path | None:
    """Return the first config file present at *root*, if any."""
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_config(root: str | Path, path: str | Path | None = None) -> ScanConfig:
    """Load the scan configuration for *root*.

    Args:
        root: Scan root searched for a config file.
        path: Explicit config file; overrides the search.

    Returns:
        The parsed ``ScanConfig``, or defaults when no file exists.

    Raises:
        ConfigError: If the file cannot be read or is invalid.
    """
    config_path = Path(path) if path is not None else find_config_file(Path(root))
    if config_path is None:
        return ScanConfig()

    try:
        raw = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML in {config_path}: {exc}") from exc

    logger.debug("Loaded config from %s", config_path)
    return parse_config(data, config_path)
