"""File collection, detector dispatch and the end-to-end scan."""

from agenttrace.scanner.pipeline import run_scan
from agenttrace.scanner.router import DetectorDiagnostic, ExtensionRouter, default_router
from agenttrace.scanner.walker import (
    EXTENSION_MAP,
    filter_by_language,
    get_extensions_for_language,
    get_supported_extensions,
    walk_directory,
)

__all__ = [
    "DetectorDiagnostic",
    "EXTENSION_MAP",
    "ExtensionRouter",
    "default_router",
    "filter_by_language",
    "get_extensions_for_language",
    "get_supported_extensions",
    "run_scan",
    "walk_directory",
]
