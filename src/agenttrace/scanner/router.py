"""Extension router: dispatches collected files to their detectors.

The ``ExtensionRouter`` keeps an ordered list of detectors per file
extension, plus an optional list of global detectors that see every file.
``default_router()`` pre-registers the four built-in detectors.

Dispatch Algorithm
------------------
``process_file(file)``:

1. Look up global detectors, then the detectors registered for
   ``file.extension``, in registration order.
2. Call ``detect(file)`` on each and append its batch to the file's result.
3. If a detector raises, log it, record a ``DetectorDiagnostic`` and move
   on. The file is skipped for that detector only.

Output order is not meaningful; the manifest assembler sorts everything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from agenttrace.detectors import (
    Detector,
    GoDetector,
    McpConfigDetector,
    PythonDetector,
    TypeScriptDetector,
)
from agenttrace.exceptions import DetectorError
from agenttrace.models import DetectionBatch, FileRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectorDiagnostic:
    """A detector failure on one file.

    Attributes:
        detector: Name of the detector that failed.
        file: Relative path of the file being processed.
        error: The wrapped failure.
    """

    detector: str
    file: str
    error: DetectorError


def _normalize_extension(ext: str) -> str:
    return ext if ext.startswith(".") else f".{ext}"


class ExtensionRouter:
    """Routes files to detectors by extension.

    Attributes:
        diagnostics: Failures recorded during ``process_file`` calls.
    """

    def __init__(self) -> None:
        self._detectors: dict[str, list[Detector]] = {}
        self._global_detectors: list[Detector] = []
        self.diagnostics: list[DetectorDiagnostic] = []

    def register(self, detector: Detector, extensions: Iterable[str] | None = None) -> None:
        """Associate *detector* with one or more extensions.

        Args:
            detector: The detector to register.
            extensions: Extensions with or without a leading dot. Defaults
                to ``detector.extensions``.
        """
        for ext in extensions if extensions is not None else detector.extensions:
            self._detectors.setdefault(_normalize_extension(ext), []).append(detector)

    def register_global(self, detector: Detector) -> None:
        """Register a detector that runs on every file."""
        self._global_detectors.append(detector)

    @property
    def extensions(self) -> list[str]:
        """Every extension with at least one registered detector."""
        return sorted(self._detectors)

    def detectors_for(self, file: FileRecord) -> list[Detector]:
        """Return the detectors applicable to *file*, in dispatch order."""
        return [*self._global_detectors, *self._detectors.get(file.extension, [])]

    def process_file(self, file: FileRecord) -> DetectionBatch:
        """Run every applicable detector on *file* and merge their batches."""
        result = DetectionBatch()
        for detector in self.detectors_for(file):
            try:
                batch = detector.detect(file)
            except Exception as exc:
                error = DetectorError(
                    f"Detector {detector.name!r} failed on {file.relative_path}: {exc}"
                )
                error.__cause__ = exc
                self.diagnostics.append(
                    DetectorDiagnostic(detector.name, file.relative_path, error)
                )
                logger.warning(
                    "Error in detector %s for %s", detector.name, file.relative_path,
                    exc_info=True,
                )
                continue
            result.extend(batch)
        return result

    def process_files(self, files: Iterable[FileRecord]) -> DetectionBatch:
        """Process many files into a single merged batch."""
        result = DetectionBatch()
        for file in files:
            result.extend(self.process_file(file))
        return result


def default_router() -> ExtensionRouter:
    """Create an ExtensionRouter pre-loaded with all built-in detectors.

    Registration order:
    1. ``McpConfigDetector`` -- ``.json``
    2. ``PythonDetector`` -- ``.py``
    3. ``TypeScriptDetector`` -- ``.ts .tsx .js .jsx .mjs``
    4. ``GoDetector`` -- ``.go``
    """
    router = ExtensionRouter()
    for detector in (
        McpConfigDetector(),
        PythonDetector(),
        TypeScriptDetector(),
        GoDetector(),
    ):
        router.register(detector)
    return router
