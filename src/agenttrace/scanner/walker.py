"""Content collector: walks a project tree and loads candidate source files.

Walk Algorithm:
    1. Resolve the scan root. A missing root, or one that is not a
       directory, raises ``ScanError``.
    2. Build one ignore spec from the baseline patterns, the caller's
       extra patterns and (optionally) the root ``.gitignore``. Patterns use
       gitignore semantics via ``pathspec``.
    3. Walk top-down without following symlinks, pruning ignored
       directories before descending into them.
    4. Keep regular files whose suffix is in the extension set and whose
       relative path is not ignored, decoding them as UTF-8. Files that
       cannot be read or decoded are skipped.
    5. Return the records ordered by relative path.

Hidden files and directories are collected like any other, so editor
configs such as ``.mcp.json`` and ``.cursor/mcp.json`` reach the detectors.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

import pathspec

from agenttrace.exceptions import ScanError
from agenttrace.models import FileRecord

logger = logging.getLogger(__name__)

# Language -> file suffixes handled by the built-in detectors.
EXTENSION_MAP: dict[str, tuple[str, ...]] = {
    "python": (".py",),
    "typescript": (".ts", ".tsx"),
    "javascript": (".js", ".jsx", ".mjs"),
    "go": (".go",),
    "json": (".json",),
}

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "node_modules/",
    ".git/",
    "dist/",
    "build/",
    "__pycache__/",
    ".venv/",
    "venv/",
    ".env/",
    "env/",
    "*.min.js",
    "*.bundle.js",
    "coverage/",
    ".next/",
    ".nuxt/",
    "vendor/",
    ".mypy_cache/",
    ".pytest_cache/",
    ".ruff_cache/",
    ".tox/",
)

GITIGNORE_FILENAME = ".gitignore"


def get_supported_extensions() -> list[str]:
    """Return every suffix the built-in detectors understand."""
    return [ext for exts in EXTENSION_MAP.values() for ext in exts]


def get_extensions_for_language(language: str) -> list[str]:
    """Return the suffixes for *language*, or an empty list if unknown."""
    return list(EXTENSION_MAP.get(language.lower(), ()))


def filter_by_language(files: Iterable[FileRecord], language: str) -> list[FileRecord]:
    """Keep only the records whose extension belongs to *language*."""
    extensions = set(get_extensions_for_language(language))
    return [f for f in files if f.extension in extensions]


def _normalize_extensions(extensions: Iterable[str] | None) -> frozenset[str]:
    if extensions is None:
        return frozenset(get_supported_extensions())
    return frozenset(ext if ext.startswith(".") else f".{ext}" for ext in extensions)


def _read_gitignore(root: Path) -> list[str]:
    gitignore = root / GITIGNORE_FILENAME
    if not gitignore.is_file():
        return []
    try:
        return gitignore.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        logger.debug("Could not read %s", gitignore, exc_info=True)
        return []


def build_ignore_spec(
    root: Path,
    ignore_patterns: Iterable[str] | None = None,
    respect_gitignore: bool = True,
) -> pathspec.PathSpec:
    """Combine baseline, caller and ``.gitignore`` patterns into one spec.

    Args:
        root: Scan root; its ``.gitignore`` is read when requested.
        ignore_patterns: Extra gitignore-style patterns.
        respect_gitignore: Whether to include the root ``.gitignore``.

    Returns:
        A ``pathspec.GitIgnoreSpec`` matching paths relative to *root*.
    """
    lines = list(DEFAULT_IGNORE_PATTERNS)
    if ignore_patterns:
        lines.extend(ignore_patterns)
    if respect_gitignore:
        lines.extend(_read_gitignore(root))
    return pathspec.GitIgnoreSpec.from_lines(lines)


def _read_file(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.debug("Skipping undecodable file: %s", path)
    except OSError:
        logger.debug("Skipping unreadable file: %s", path, exc_info=True)
    return None


def walk_directory(
    root: str | os.PathLike[str],
    extensions: Iterable[str] | None = None,
    ignore_patterns: Iterable[str] | None = None,
    respect_gitignore: bool = True,
) -> list[FileRecord]:
    """Collect every candidate source file under *root*.

    Args:
        root: Directory to scan.
        extensions: Suffixes to collect (with or without the leading dot).
            Defaults to every supported extension.
        ignore_patterns: Extra gitignore-style patterns to skip.
        respect_gitignore: Whether to honor the root ``.gitignore``.

    Returns:
        ``FileRecord`` list ordered by relative path.

    Raises:
        ScanError: If *root* does not exist or is not a directory.
    """
    root_path = Path(root).resolve()
    if not root_path.exists():
        raise ScanError(f"Scan root does not exist: {root_path}")
    if not root_path.is_dir():
        raise ScanError(f"Scan root is not a directory: {root_path}")

    wanted = _normalize_extensions(extensions)
    spec = build_ignore_spec(root_path, ignore_patterns, respect_gitignore)
    records: list[FileRecord] = []

    def _on_error(exc: OSError) -> None:
        logger.debug("Cannot list directory: %s", exc.filename)

    for dirpath, dirnames, filenames in os.walk(
        root_path, onerror=_on_error, followlinks=False,
    ):
        current = Path(dirpath)
        rel_dir = current.relative_to(root_path).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"

        dirnames[:] = sorted(
            d for d in dirnames
            if not (current / d).is_symlink()
            and not spec.match_file(f"{prefix}{d}/")
        )

        for filename in sorted(filenames):
            full = current / filename
            extension = full.suffix
            if extension not in wanted:
                continue
            relative = f"{prefix}{filename}"
            if spec.match_file(relative):
                continue
            if full.is_symlink() or not full.is_file():
                continue
            content = _read_file(full)
            if content is None:
                continue
            records.append(FileRecord(
                path=str(full),
                relative_path=relative,
                extension=extension,
                content=content,
            ))

    records.sort(key=lambda r: r.relative_path)
    logger.debug("Collected %d file(s) under %s", len(records), root_path)
    return records
