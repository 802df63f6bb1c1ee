"""Shared fixtures for agenttrace tests."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Callable

import pytest

from agenttrace.models import FileRecord


@pytest.fixture
def make_file() -> Callable[[str, str], FileRecord]:
    """Build an in-memory ``FileRecord`` from a relative path and content."""

    def _make(relative_path: str, content: str) -> FileRecord:
        return FileRecord(
            path=f"/project/{relative_path}",
            relative_path=relative_path,
            extension=PurePosixPath(relative_path).suffix,
            content=content,
        )

    return _make


@pytest.fixture
def write_tree() -> Callable[[Path, dict[str, str]], Path]:
    """Write ``{relative_path: content}`` under a root directory."""

    def _write(root: Path, files: dict[str, str]) -> Path:
        for relative, content in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return root

    return _write
