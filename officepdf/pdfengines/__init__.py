"""PDF engines offering merge, PDF/A-PDF/UA conversion and metadata writing."""

from __future__ import annotations

from ..config import Settings
from ..libreoffice import LibreOfficeConverter, LibreOfficePdfEngine
from ..pipeline.interfaces import PdfEngine
from .ghostscript import GhostscriptEngine
from .multi import MultiPdfEngine
from .pypdf_engine import PypdfEngine


def build_pdf_engine(settings: Settings, converter: LibreOfficeConverter | None = None) -> MultiPdfEngine:
    """Assemble the engines named in ``settings.pdf_engines``, in that order."""

    if converter is None:
        converter = LibreOfficeConverter(settings.libreoffice_bin, timeout=settings.conversion_timeout)

    factories = {
        "pypdf": PypdfEngine,
        "ghostscript": lambda: GhostscriptEngine(settings.ghostscript_bin, timeout=settings.conversion_timeout),
        "libreoffice": lambda: LibreOfficePdfEngine(converter),
    }
    engines: list[PdfEngine] = [factories[name]() for name in settings.pdf_engines]
    return MultiPdfEngine(engines, engines, engines)


__all__ = [
    "GhostscriptEngine",
    "LibreOfficePdfEngine",
    "MultiPdfEngine",
    "PypdfEngine",
    "build_pdf_engine",
]
