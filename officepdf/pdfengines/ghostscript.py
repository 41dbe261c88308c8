"""PDF/A conversion through Ghostscript's ``pdfwrite`` device."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Mapping, Sequence

from ..core.utils import ensure_parent_dir, get_logger, run_subprocess
from ..exceptions import PdfEngineError, PdfEngineUnsupportedError
from ..pipeline.models import PDF_A_1B, PDF_A_2B, PDF_A_3B, PdfFormats

LOGGER = get_logger("officepdf.pdfengines.ghostscript")

PDFA_LEVELS = {PDF_A_1B: 1, PDF_A_2B: 2, PDF_A_3B: 3}


def build_pdfa_command(executable: str, level: int, source: Path, output: Path) -> list[str]:
    """Construct the Ghostscript command producing a PDF/A document."""

    return [
        executable,
        f"-dPDFA={level}",
        "-dBATCH",
        "-dNOPAUSE",
        "-dSAFER",
        "-dNOOUTERSAVE",
        "-sDEVICE=pdfwrite",
        "-sColorConversionStrategy=RGB",
        "-sProcessColorModel=DeviceRGB",
        "-dPDFACompatibilityPolicy=1",
        f"-sOutputFile={output}",
        str(source),
    ]


class GhostscriptEngine:
    name = "ghostscript"

    def __init__(self, executable: str | None, *, timeout: float = 300.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def merge(self, input_paths: Sequence[Path], output_path: Path) -> None:
        raise PdfEngineUnsupportedError("ghostscript engine does not merge PDFs")

    def convert(self, formats: PdfFormats, input_path: Path, output_path: Path) -> None:
        if formats.pdfua:
            raise PdfEngineUnsupportedError("ghostscript cannot produce PDF/UA")
        try:
            level = PDFA_LEVELS[formats.pdfa]
        except KeyError as exc:
            raise PdfEngineUnsupportedError(f"ghostscript does not support {formats.pdfa!r}") from exc
        if not self.executable:
            raise PdfEngineUnsupportedError("ghostscript executable not found")

        ensure_parent_dir(output_path)
        command = build_pdfa_command(self.executable, level, input_path, output_path)
        try:
            result = run_subprocess(command, timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise PdfEngineError(f"ghostscript timed out after {self.timeout:g}s") from exc
        except OSError as exc:  # pragma: no cover - OS errors vary
            LOGGER.error("Failed to execute ghostscript: %s", exc)
            raise PdfEngineError("Failed to execute ghostscript") from exc

        if result.returncode != 0:
            LOGGER.error("ghostscript failed with code %s: %s", result.returncode, result.stderr)
            raise PdfEngineError(f"ghostscript failed: {result.stderr.strip()}")
        if not output_path.is_file():
            raise PdfEngineError(f"ghostscript produced no output for {input_path.name}")

        LOGGER.info("Converted %s to %s", input_path.name, formats.pdfa)

    def write_metadata(self, metadata: Mapping[str, Any], path: Path) -> None:
        raise PdfEngineUnsupportedError("ghostscript engine does not write metadata")


__all__ = ["GhostscriptEngine", "PDFA_LEVELS", "build_pdfa_command"]
