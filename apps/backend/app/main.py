"""FastAPI application exposing the office document conversion routes."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from json import JSONDecodeError
from pathlib import Path
from typing import AsyncIterator, Callable, Iterable, List, Sequence
from zipfile import ZipFile

from fastapi import BackgroundTasks, Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse

from officepdf import __version__, build_pdf_engine, unsupported_paths
from officepdf.config import Settings, get_settings
from officepdf.core.utils import configure_logging, get_logger
from officepdf.libreoffice import LibreOfficeConverter
from officepdf.pipeline import (
    ClientInputError,
    ConversionRequest,
    Converter,
    PdfEngine,
    PdfFormats,
    PipelineCoordinator,
    PipelineError,
    RequestWorkspace,
)

LOGGER = get_logger("officepdf.api")

PDF_MEDIA_TYPE = "application/pdf"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ZIP_MEDIA_TYPE = "application/zip"


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_logging(get_settings().log_level)
    yield


app = FastAPI(title="officepdf API", version=__version__, lifespan=lifespan)


def get_converter(settings: Settings = Depends(get_settings)) -> Converter:
    return LibreOfficeConverter(settings.libreoffice_bin, timeout=settings.conversion_timeout)


def get_pdf_engine(
    settings: Settings = Depends(get_settings),
    converter: Converter = Depends(get_converter),
) -> PdfEngine:
    if isinstance(converter, LibreOfficeConverter):
        return build_pdf_engine(settings, converter)
    return build_pdf_engine(settings)


def _safe_filename(filename: str | None, default: str) -> str:
    """Return a filesystem-safe filename derived from user input."""

    if not filename:
        return default

    candidate = Path(filename).name
    return candidate or default


async def _store_uploads(
    workspace: RequestWorkspace,
    files: Sequence[UploadFile] | None,
    extensions: Iterable[str],
) -> list[Path]:
    """Persist the uploaded documents into ``workspace`` in upload order."""

    if not files:
        raise HTTPException(status_code=400, detail="At least one file must be provided.")

    names = [_safe_filename(upload.filename, f"document_{index}") for index, upload in enumerate(files, start=1)]
    rejected = unsupported_paths(names, extensions)
    if rejected:
        raise HTTPException(
            status_code=400,
            detail=f"File '{rejected[0].name}' has an unsupported extension.",
        )

    stored: list[Path] = []
    for name, upload in zip(names, files):
        contents = await upload.read()
        if not contents:
            raise HTTPException(status_code=400, detail=f"File '{name}' is empty.")
        try:
            stored.append(workspace.add_input(name, contents))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    return stored


def _parse_metadata(raw_value: str | None) -> dict[str, object]:
    """Parse the optional JSON encoded ``metadata`` form field."""

    if not raw_value:
        return {}

    try:
        payload = json.loads(raw_value)
    except JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="metadata must be valid JSON.") from exc

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="metadata must be a JSON object.")

    return payload


def _zip_outputs(files: Iterable[Path], destination: Path) -> Path:
    """Create a zip archive containing ``files`` at ``destination``."""

    with ZipFile(destination, "w") as archive:
        for file_path in files:
            archive.write(file_path, arcname=file_path.name)
    return destination


async def _run_pipeline(run: Callable[[ConversionRequest], list[Path]], request: ConversionRequest) -> list[Path]:
    try:
        return await run_in_threadpool(run, request)
    except ClientInputError as exc:
        raise HTTPException(status_code=400, detail=exc.detail) from exc
    except PipelineError as exc:
        LOGGER.error("Pipeline failed: %s", exc, exc_info=exc)
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc


def _file_response(
    background_tasks: BackgroundTasks,
    workspace: RequestWorkspace,
    outputs: Sequence[Path],
    media_type: str,
) -> FileResponse:
    if len(outputs) == 1:
        path = outputs[0]
        response = FileResponse(path, media_type=media_type, filename=path.name)
    else:
        archive = _zip_outputs(outputs, workspace.generate_path(".zip"))
        response = FileResponse(archive, media_type=ZIP_MEDIA_TYPE, filename=archive.name)

    background_tasks.add_task(workspace.cleanup)
    return response


@app.get("/health", response_class=JSONResponse)
async def health() -> dict[str, str]:
    """Lightweight health endpoint for uptime checks."""
    return {"status": "ok"}


@app.post("/forms/libreoffice/convert", response_class=FileResponse)
async def convert_to_pdf(
    background_tasks: BackgroundTasks,
    files: List[UploadFile] | None = File(None, description="Documents to convert."),
    landscape: bool = Form(False),
    native_page_ranges: str = Form("", alias="nativePageRanges"),
    export_form_fields: bool = Form(True, alias="exportFormFields"),
    single_page_sheets: bool = Form(False, alias="singlePageSheets"),
    pdfa: str = Form(""),
    pdfua: bool = Form(False),
    native_pdf_formats: bool = Form(True, alias="nativePdfFormats"),
    merge: bool = Form(False),
    metadata: str | None = Form(None, description="JSON object of metadata entries to write."),
    settings: Settings = Depends(get_settings),
    converter: Converter = Depends(get_converter),
    engine: PdfEngine = Depends(get_pdf_engine),
) -> FileResponse:
    """Convert office documents to PDF.

    Several documents are returned as a zip archive in which
    ``document.docx`` becomes ``document.docx.pdf``, unless ``merge`` is set.
    """

    workspace = RequestWorkspace(settings.work_dir)
    try:
        input_paths = await _store_uploads(workspace, files, converter.extensions())
        request = ConversionRequest(
            input_paths=tuple(input_paths),
            landscape=landscape,
            page_ranges=native_page_ranges,
            export_form_fields=export_form_fields,
            single_page_sheets=single_page_sheets,
            pdf_formats=PdfFormats(pdfa=pdfa, pdfua=pdfua),
            native_pdf_formats=native_pdf_formats,
            merge=merge,
            metadata=_parse_metadata(metadata),
        )
        coordinator = PipelineCoordinator(converter, engine, workspace)
        outputs = await _run_pipeline(coordinator.run_pdf_pipeline, request)
        return _file_response(background_tasks, workspace, outputs, PDF_MEDIA_TYPE)
    except Exception:
        workspace.cleanup()
        raise


@app.post("/forms/libreoffice/convert/docx", response_class=FileResponse)
async def convert_to_docx(
    background_tasks: BackgroundTasks,
    files: List[UploadFile] | None = File(None, description="Documents to convert."),
    settings: Settings = Depends(get_settings),
    converter: Converter = Depends(get_converter),
    engine: PdfEngine = Depends(get_pdf_engine),
) -> FileResponse:
    """Convert office documents to DOCX."""

    workspace = RequestWorkspace(settings.work_dir)
    try:
        input_paths = await _store_uploads(workspace, files, converter.extensions())
        request = ConversionRequest(input_paths=tuple(input_paths))
        coordinator = PipelineCoordinator(converter, engine, workspace)
        outputs = await _run_pipeline(coordinator.run_docx_pipeline, request)
        return _file_response(background_tasks, workspace, outputs, DOCX_MEDIA_TYPE)
    except Exception:
        workspace.cleanup()
        raise


__all__ = ["app", "get_converter", "get_pdf_engine"]
