"""Composite engine delegating each operation to an ordered list of engines."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from ..core.utils import get_logger
from ..exceptions import PdfEngineError, PdfEngineUnsupportedError
from ..pipeline.interfaces import PdfEngine
from ..pipeline.models import PdfFormats

LOGGER = get_logger("officepdf.pdfengines")


def _engine_name(engine: PdfEngine) -> str:
    return getattr(engine, "name", type(engine).__name__)


class MultiPdfEngine:
    """Tries the configured engines in order; the first success wins."""

    name = "multi"

    def __init__(
        self,
        merge_engines: Sequence[PdfEngine],
        convert_engines: Sequence[PdfEngine],
        metadata_engines: Sequence[PdfEngine],
    ) -> None:
        self.merge_engines = list(merge_engines)
        self.convert_engines = list(convert_engines)
        self.metadata_engines = list(metadata_engines)

    def merge(self, input_paths: Sequence[Path], output_path: Path) -> None:
        self._run("merge", self.merge_engines, lambda engine: engine.merge(input_paths, output_path))

    def convert(self, formats: PdfFormats, input_path: Path, output_path: Path) -> None:
        self._run(
            "convert",
            self.convert_engines,
            lambda engine: engine.convert(formats, input_path, output_path),
        )

    def write_metadata(self, metadata: Mapping[str, Any], path: Path) -> None:
        self._run(
            "write metadata",
            self.metadata_engines,
            lambda engine: engine.write_metadata(metadata, path),
        )

    def _run(
        self,
        operation: str,
        engines: Sequence[PdfEngine],
        call: Callable[[PdfEngine], None],
    ) -> None:
        if not engines:
            raise PdfEngineUnsupportedError(f"No PDF engine configured to {operation}")

        failures: list[str] = []
        all_unsupported = True
        for engine in engines:
            name = _engine_name(engine)
            try:
                call(engine)
            except PdfEngineUnsupportedError as exc:
                LOGGER.debug("Engine %s cannot %s: %s", name, operation, exc)
                failures.append(f"{name}: {exc}")
            except Exception as exc:
                all_unsupported = False
                LOGGER.warning("Engine %s failed to %s: %s", name, operation, exc)
                failures.append(f"{name}: {exc}")
            else:
                LOGGER.debug("Engine %s completed %s", name, operation)
                return

        message = f"{operation}: " + "; ".join(failures)
        if all_unsupported:
            raise PdfEngineUnsupportedError(message)
        raise PdfEngineError(message)


__all__ = ["MultiPdfEngine"]
