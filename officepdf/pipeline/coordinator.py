"""Sequencing of the conversion, merge, normalization and metadata stages."""

from __future__ import annotations

from pathlib import Path

from ..core.utils import get_logger
from ..exceptions import InvalidPdfFormatsError, MalformedPageRangesError
from .errors import ClientInputError, StageFailure
from .interfaces import Converter, PathAllocator, PdfEngine
from .models import ConversionRequest, NormalizationMode, Stage, StageOutputSet
from .naming import rename_outputs

LOGGER = get_logger("officepdf.pipeline")

PDF_SUFFIX = ".pdf"
DOCX_SUFFIX = ".docx"


class PipelineCoordinator:
    """Drives a converter and a PDF engine over the files of one request.

    Stages run sequentially and each one completes for every file before the
    next starts. The current outputs are held in a tuple that is replaced,
    never mutated, at every stage boundary.
    """

    def __init__(self, converter: Converter, engine: PdfEngine, paths: PathAllocator) -> None:
        self.converter = converter
        self.engine = engine
        self.paths = paths

    def run_pdf_pipeline(self, request: ConversionRequest) -> list[Path]:
        outputs = self._convert_to_pdf(request)

        if len(outputs) > 1 and request.merge:
            outputs = self._merge(outputs)

        if request.normalization is NormalizationMode.POST_PROCESS:
            outputs = self._normalize(request, outputs)

        if request.metadata:
            outputs = self._write_metadata(request, outputs)

        return self._name_outputs(outputs, request.input_paths, PDF_SUFFIX)

    def run_docx_pipeline(self, request: ConversionRequest) -> list[Path]:
        converted: list[Path] = []
        for input_path in request.input_paths:
            output_path = self.paths.generate_path(DOCX_SUFFIX)
            LOGGER.debug("Converting %s to DOCX", input_path.name)
            try:
                self.converter.docx(input_path, output_path)
            except Exception as exc:
                raise StageFailure(Stage.CONVERT, exc, file=input_path) from exc
            converted.append(output_path)

        return self._name_outputs(tuple(converted), request.input_paths, DOCX_SUFFIX)

    def _convert_to_pdf(self, request: ConversionRequest) -> StageOutputSet:
        options = request.converter_options()
        converted: list[Path] = []
        for input_path in request.input_paths:
            output_path = self.paths.generate_path(PDF_SUFFIX)
            LOGGER.debug("Converting %s to PDF", input_path.name)
            try:
                self.converter.pdf(input_path, output_path, options)
            except InvalidPdfFormatsError as exc:
                raise ClientInputError(
                    f"A PDF format in '{request.pdf_formats.describe()}' is not supported",
                    value=request.pdf_formats,
                    file=input_path,
                ) from exc
            except MalformedPageRangesError as exc:
                raise ClientInputError(
                    f"Malformed page ranges '{options.page_ranges}' (nativePageRanges)",
                    value=options.page_ranges,
                    file=input_path,
                ) from exc
            except Exception as exc:
                raise StageFailure(Stage.CONVERT, exc, file=input_path) from exc
            converted.append(output_path)
        return tuple(converted)

    def _merge(self, outputs: StageOutputSet) -> StageOutputSet:
        merged_path = self.paths.generate_path(PDF_SUFFIX)
        LOGGER.debug("Merging %d PDF(s) into %s", len(outputs), merged_path.name)
        try:
            self.engine.merge(list(outputs), merged_path)
        except Exception as exc:
            raise StageFailure(Stage.MERGE, exc) from exc
        return (merged_path,)

    def _normalize(self, request: ConversionRequest, outputs: StageOutputSet) -> StageOutputSet:
        normalized: list[Path] = []
        for output_path in outputs:
            target = self.paths.generate_path(PDF_SUFFIX)
            LOGGER.debug("Converting %s to %s", output_path.name, request.pdf_formats.describe())
            try:
                self.engine.convert(request.pdf_formats, output_path, target)
            except Exception as exc:
                raise StageFailure(Stage.NORMALIZE, exc, file=output_path) from exc
            normalized.append(target)
        return tuple(normalized)

    def _write_metadata(self, request: ConversionRequest, outputs: StageOutputSet) -> StageOutputSet:
        for output_path in outputs:
            LOGGER.debug("Writing %d metadata entries to %s", len(request.metadata), output_path.name)
            try:
                self.engine.write_metadata(request.metadata, output_path)
            except Exception as exc:
                raise StageFailure(Stage.METADATA, exc, file=output_path) from exc
        return outputs

    def _name_outputs(
        self,
        outputs: StageOutputSet,
        inputs: tuple[Path, ...],
        suffix: str,
    ) -> list[Path]:
        if len(outputs) > 1:
            return rename_outputs(self.paths, outputs, inputs, suffix)
        return list(outputs)


__all__ = ["PipelineCoordinator", "PDF_SUFFIX", "DOCX_SUFFIX"]
