"""Error vocabulary shared by the conversion and PDF engine collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .pipeline.models import PdfFormats


class OfficePdfError(Exception):
    """Base exception for all errors raised by :mod:`officepdf`."""


class ConversionError(OfficePdfError):
    """Raised when a document cannot be converted."""


class InvalidPdfFormatsError(ConversionError):
    """Raised when the requested PDF format combination is not supported."""

    def __init__(self, formats: "PdfFormats", message: str | None = None) -> None:
        self.formats = formats
        super().__init__(message or f"Unsupported PDF formats: {formats.describe()}")


class MalformedPageRangesError(ConversionError):
    """Raised when a page range expression cannot be parsed."""

    def __init__(self, page_ranges: str) -> None:
        self.page_ranges = page_ranges
        super().__init__(f"Malformed page ranges: {page_ranges!r}")


class PdfEngineError(OfficePdfError):
    """Raised when a PDF engine operation fails."""


class PdfEngineUnsupportedError(PdfEngineError):
    """Raised when a PDF engine does not implement the requested operation."""


__all__ = [
    "OfficePdfError",
    "ConversionError",
    "InvalidPdfFormatsError",
    "MalformedPageRangesError",
    "PdfEngineError",
    "PdfEngineUnsupportedError",
]
