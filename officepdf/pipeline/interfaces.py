from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence

from .models import ConversionOptions, PdfFormats


class Converter(Protocol):
    def extensions(self) -> tuple[str, ...]:
        """Lower-case file extensions (with the leading dot) the converter accepts."""

    def pdf(self, input_path: Path, output_path: Path, options: ConversionOptions) -> None:
        """Convert *input_path* to a PDF written at *output_path*.

        Raises :class:`~officepdf.exceptions.InvalidPdfFormatsError` or
        :class:`~officepdf.exceptions.MalformedPageRangesError` for unsupported
        options, any other exception for processing failures.
        """

    def docx(self, input_path: Path, output_path: Path) -> None:
        ...


class PdfEngine(Protocol):
    def merge(self, input_paths: Sequence[Path], output_path: Path) -> None:
        ...

    def convert(self, formats: PdfFormats, input_path: Path, output_path: Path) -> None:
        ...

    def write_metadata(self, metadata: Mapping[str, Any], path: Path) -> None:
        """Write *metadata* into *path*, overriding existing entries."""


class PathAllocator(Protocol):
    def generate_path(self, extension: str) -> Path:
        ...

    def rename(self, path: Path, logical_name: str) -> Path:
        ...


__all__ = ["Converter", "PdfEngine", "PathAllocator"]
