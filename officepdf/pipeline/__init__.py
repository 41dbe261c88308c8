"""Pipeline coordinator composing conversion and PDF post-processing stages."""

from __future__ import annotations

from .coordinator import DOCX_SUFFIX, PDF_SUFFIX, PipelineCoordinator
from .errors import ClientInputError, NamingFailure, PipelineError, StageFailure
from .interfaces import Converter, PathAllocator, PdfEngine
from .models import (
    PDF_A_1B,
    PDF_A_2B,
    PDF_A_3B,
    SUPPORTED_PDFA,
    ConversionOptions,
    ConversionRequest,
    NormalizationMode,
    PdfFormats,
    Stage,
)
from .naming import output_name, rename_outputs
from .workspace import RequestWorkspace

__all__ = [
    "ClientInputError",
    "ConversionOptions",
    "ConversionRequest",
    "Converter",
    "DOCX_SUFFIX",
    "NamingFailure",
    "NormalizationMode",
    "PDF_A_1B",
    "PDF_A_2B",
    "PDF_A_3B",
    "PDF_SUFFIX",
    "PathAllocator",
    "PdfEngine",
    "PdfFormats",
    "PipelineCoordinator",
    "PipelineError",
    "RequestWorkspace",
    "SUPPORTED_PDFA",
    "Stage",
    "StageFailure",
    "output_name",
    "rename_outputs",
]
