"""LibreOffice backed document converter and PDF engine."""

from __future__ import annotations

from .converter import EXPORT_FILTERS, LibreOfficeConverter, build_pdf_filter_options
from .page_ranges import validate_page_ranges
from .pdfengine import LibreOfficePdfEngine

__all__ = [
    "EXPORT_FILTERS",
    "LibreOfficeConverter",
    "LibreOfficePdfEngine",
    "build_pdf_filter_options",
    "validate_page_ranges",
]
