"""Batch office document to PDF/DOCX conversion pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .config import Settings, get_settings
from .exceptions import (
    ConversionError,
    InvalidPdfFormatsError,
    MalformedPageRangesError,
    OfficePdfError,
    PdfEngineError,
    PdfEngineUnsupportedError,
)
from .libreoffice import LibreOfficeConverter, LibreOfficePdfEngine
from .pdfengines import GhostscriptEngine, MultiPdfEngine, PypdfEngine, build_pdf_engine
from .pipeline import (
    ClientInputError,
    ConversionOptions,
    ConversionRequest,
    NamingFailure,
    NormalizationMode,
    PdfFormats,
    PipelineCoordinator,
    PipelineError,
    RequestWorkspace,
    Stage,
    StageFailure,
    rename_outputs,
)

__version__ = "0.1.0"


def build_coordinator(workspace: RequestWorkspace, settings: Settings | None = None) -> PipelineCoordinator:
    """Wire the LibreOffice converter and the configured PDF engines to *workspace*."""

    settings = settings or get_settings()
    converter = LibreOfficeConverter(settings.libreoffice_bin, timeout=settings.conversion_timeout)
    engine = build_pdf_engine(settings, converter)
    return PipelineCoordinator(converter, engine, workspace)


def unsupported_paths(paths: Iterable[str | Path], extensions: Iterable[str]) -> list[Path]:
    """Return the paths whose extension is not in *extensions*."""

    allowed = {extension.lower() for extension in extensions}
    return [Path(path) for path in paths if Path(path).suffix.lower() not in allowed]


__all__ = [
    "ClientInputError",
    "ConversionError",
    "ConversionOptions",
    "ConversionRequest",
    "GhostscriptEngine",
    "InvalidPdfFormatsError",
    "LibreOfficeConverter",
    "LibreOfficePdfEngine",
    "MalformedPageRangesError",
    "MultiPdfEngine",
    "NamingFailure",
    "NormalizationMode",
    "OfficePdfError",
    "PdfEngineError",
    "PdfEngineUnsupportedError",
    "PdfFormats",
    "PipelineCoordinator",
    "PipelineError",
    "PypdfEngine",
    "RequestWorkspace",
    "Settings",
    "Stage",
    "StageFailure",
    "__version__",
    "build_coordinator",
    "build_pdf_engine",
    "get_settings",
    "rename_outputs",
    "unsupported_paths",
]
