"""Value objects describing a conversion request and its pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Sequence

PDF_A_1B = "PDF/A-1b"
PDF_A_2B = "PDF/A-2b"
PDF_A_3B = "PDF/A-3b"

SUPPORTED_PDFA = (PDF_A_1B, PDF_A_2B, PDF_A_3B)

StageOutputSet = tuple[Path, ...]


class Stage(str, Enum):
    """Names of the pipeline stages, used to tag failures."""

    CONVERT = "convert"
    MERGE = "merge"
    NORMALIZE = "normalize"
    METADATA = "metadata"
    RENAME = "rename"


class NormalizationMode(str, Enum):
    """Where PDF format normalization happens for a request."""

    NONE = "none"
    NATIVE = "native"
    POST_PROCESS = "post-process"


@dataclass(frozen=True)
class PdfFormats:
    """Archival (PDF/A) and accessibility (PDF/UA) targets of a request."""

    pdfa: str = ""
    pdfua: bool = False

    @property
    def is_zero(self) -> bool:
        return not self.pdfa and not self.pdfua

    def describe(self) -> str:
        return f"{{PdfA:{self.pdfa} PdfUa:{str(self.pdfua).lower()}}}"


@dataclass(frozen=True)
class ConversionOptions:
    """Options handed to the converter for every input document.

    ``export_form_fields`` and ``single_page_sheets`` are passed through
    untouched; only the converter interprets them.
    """

    landscape: bool = False
    page_ranges: str = ""
    export_form_fields: bool = True
    single_page_sheets: bool = False
    pdf_formats: PdfFormats | None = None


def _freeze_metadata(metadata: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(metadata or {}))


@dataclass(frozen=True)
class ConversionRequest:
    """A validated request entering the pipeline coordinator."""

    input_paths: tuple[Path, ...]
    landscape: bool = False
    page_ranges: str = ""
    export_form_fields: bool = True
    single_page_sheets: bool = False
    pdf_formats: PdfFormats = field(default_factory=PdfFormats)
    native_pdf_formats: bool = True
    merge: bool = False
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        paths = tuple(Path(path) for path in self.input_paths)
        if not paths:
            raise ValueError("A conversion request requires at least one input file")
        object.__setattr__(self, "input_paths", paths)
        object.__setattr__(self, "metadata", _freeze_metadata(self.metadata))

    @classmethod
    def for_paths(cls, input_paths: Sequence[str | Path], **options: Any) -> "ConversionRequest":
        return cls(input_paths=tuple(Path(path) for path in input_paths), **options)

    @property
    def normalization(self) -> NormalizationMode:
        if self.pdf_formats.is_zero:
            return NormalizationMode.NONE
        if self.native_pdf_formats:
            return NormalizationMode.NATIVE
        return NormalizationMode.POST_PROCESS

    def converter_options(self) -> ConversionOptions:
        return ConversionOptions(
            landscape=self.landscape,
            page_ranges=self.page_ranges,
            export_form_fields=self.export_form_fields,
            single_page_sheets=self.single_page_sheets,
            pdf_formats=self.pdf_formats if self.native_pdf_formats else None,
        )


__all__ = [
    "PDF_A_1B",
    "PDF_A_2B",
    "PDF_A_3B",
    "SUPPORTED_PDFA",
    "ConversionOptions",
    "ConversionRequest",
    "NormalizationMode",
    "PdfFormats",
    "Stage",
    "StageOutputSet",
]
