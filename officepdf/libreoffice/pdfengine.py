"""PDF engine re-exporting PDFs through LibreOffice Draw."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence

from ..exceptions import ConversionError, InvalidPdfFormatsError, PdfEngineError, PdfEngineUnsupportedError
from ..pipeline.models import ConversionOptions, PdfFormats
from .converter import LibreOfficeConverter


class LibreOfficePdfEngine:
    """Converts PDFs to PDF/A and PDF/UA; the only engine supporting PDF/UA."""

    name = "libreoffice"

    def __init__(self, converter: LibreOfficeConverter) -> None:
        self.converter = converter

    def merge(self, input_paths: Sequence[Path], output_path: Path) -> None:
        raise PdfEngineUnsupportedError("libreoffice engine does not merge PDFs")

    def convert(self, formats: PdfFormats, input_path: Path, output_path: Path) -> None:
        if formats.is_zero:
            raise PdfEngineError("No PDF format requested")
        options = ConversionOptions(pdf_formats=formats)
        try:
            self.converter.pdf(input_path, output_path, options)
        except InvalidPdfFormatsError as exc:
            raise PdfEngineUnsupportedError(str(exc)) from exc
        except ConversionError as exc:
            raise PdfEngineError(f"convert PDF with LibreOffice: {exc}") from exc

    def write_metadata(self, metadata: Mapping[str, Any], path: Path) -> None:
        raise PdfEngineUnsupportedError("libreoffice engine does not write metadata")


__all__ = ["LibreOfficePdfEngine"]
