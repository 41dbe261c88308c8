"""Document conversion through a headless LibreOffice (``soffice``) process."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Any

from pypdf import PdfReader, PdfWriter

from ..core.utils import ensure_parent_dir, get_logger, run_subprocess
from ..exceptions import ConversionError, InvalidPdfFormatsError
from ..pipeline.models import SUPPORTED_PDFA, ConversionOptions, PdfFormats
from .page_ranges import validate_page_ranges

LOGGER = get_logger("officepdf.libreoffice")

WRITER_PDF_EXPORT = "writer_pdf_Export"
CALC_PDF_EXPORT = "calc_pdf_Export"
IMPRESS_PDF_EXPORT = "impress_pdf_Export"
DRAW_PDF_EXPORT = "draw_pdf_Export"

_WRITER_EXTENSIONS = (
    ".abw", ".doc", ".docm", ".docx", ".dot", ".dotm", ".dotx", ".fodt", ".htm",
    ".html", ".hwp", ".lwp", ".odt", ".ott", ".pages", ".rtf", ".sxw", ".txt",
    ".wpd", ".wps", ".xml",
)
_CALC_EXTENSIONS = (
    ".csv", ".dbf", ".fods", ".numbers", ".ods", ".ots", ".sxc", ".xls", ".xlsb",
    ".xlsm", ".xlsx", ".xlt", ".xltx",
)
_IMPRESS_EXTENSIONS = (
    ".fodp", ".key", ".odp", ".otp", ".pot", ".potx", ".pps", ".ppsx", ".ppt",
    ".pptm", ".pptx", ".sxi",
)
_DRAW_EXTENSIONS = (".cdr", ".odg", ".otg", ".pub", ".vsd", ".vsdx")

EXPORT_FILTERS: dict[str, str] = {
    **{ext: WRITER_PDF_EXPORT for ext in _WRITER_EXTENSIONS},
    **{ext: CALC_PDF_EXPORT for ext in _CALC_EXTENSIONS},
    **{ext: IMPRESS_PDF_EXPORT for ext in _IMPRESS_EXTENSIONS},
    **{ext: DRAW_PDF_EXPORT for ext in _DRAW_EXTENSIONS},
}

PDFA_VERSIONS = {level: index for index, level in enumerate(SUPPORTED_PDFA, start=1)}

DOCX_TARGET = 'docx:"MS Word 2007 XML"'


def validate_pdf_formats(formats: PdfFormats) -> None:
    if formats.pdfa and formats.pdfa not in PDFA_VERSIONS:
        raise InvalidPdfFormatsError(formats)


def _typed(value: Any) -> dict[str, str]:
    if isinstance(value, bool):
        return {"type": "boolean", "value": "true" if value else "false"}
    if isinstance(value, int):
        return {"type": "long", "value": str(value)}
    return {"type": "string", "value": str(value)}


def build_pdf_filter_options(options: ConversionOptions) -> dict[str, dict[str, str]]:
    """Translate *options* into LibreOffice's JSON PDF export filter data."""

    filter_data: dict[str, dict[str, str]] = {
        "ExportFormFields": _typed(options.export_form_fields),
        "SinglePageSheets": _typed(options.single_page_sheets),
    }

    page_ranges = validate_page_ranges(options.page_ranges)
    if page_ranges:
        filter_data["PageRange"] = _typed(page_ranges)

    formats = options.pdf_formats
    if formats is not None and not formats.is_zero:
        validate_pdf_formats(formats)
        if formats.pdfa:
            filter_data["SelectPdfVersion"] = _typed(PDFA_VERSIONS[formats.pdfa])
        if formats.pdfua:
            filter_data["PDFUACompliance"] = _typed(True)

    return filter_data


def build_command(
    binary: str,
    profile_dir: Path,
    convert_to: str,
    output_dir: Path,
    input_path: Path,
    *,
    infilter: str | None = None,
) -> list[str]:
    command = [
        binary,
        f"-env:UserInstallation={profile_dir.as_uri()}",
        "--headless",
        "--invisible",
        "--nocrashreport",
        "--nodefault",
        "--nologo",
        "--nofirststartwizard",
        "--norestore",
    ]
    if infilter:
        command.append(f"--infilter={infilter}")
    command.extend(["--convert-to", convert_to, "--outdir", str(output_dir), str(input_path)])
    return command


def rotate_to_landscape(path: Path) -> None:
    """Rotate every portrait page of *path* by 90 degrees, in place.

    Pages are turned, not reflowed: ``soffice --convert-to`` has no
    orientation option, so the content keeps its portrait layout. The whole
    document root is cloned, keeping output intents, the XMP packet and
    form fields of PDF/A, PDF/UA and form exports.
    """

    reader = PdfReader(str(path))
    portrait = [
        index
        for index, page in enumerate(reader.pages)
        if float(page.mediabox.height) > float(page.mediabox.width)
    ]
    if not portrait:
        return

    writer = PdfWriter()
    writer.clone_reader_document_root(reader)
    for index in portrait:
        writer.pages[index].rotate(90)
    if reader.metadata:
        writer.add_metadata(
            {key: str(value) for key, value in reader.metadata.items() if value is not None}
        )
    temp_path = path.with_name(f"{path.name}.landscape")
    with temp_path.open("wb") as handle:
        writer.write(handle)
    temp_path.replace(path)
    LOGGER.debug("Rotated %d page(s) of %s to landscape", len(portrait), path.name)


class LibreOfficeConverter:
    """Converts office documents to PDF or DOCX with ``soffice --convert-to``.

    Each call uses its own scratch directory and LibreOffice user profile so
    several conversions may run side by side.
    """

    def __init__(self, binary: str | None, *, timeout: float = 300.0) -> None:
        self.binary = binary
        self.timeout = timeout

    def extensions(self) -> tuple[str, ...]:
        return tuple(sorted(EXPORT_FILTERS))

    def pdf(self, input_path: Path, output_path: Path, options: ConversionOptions) -> None:
        if input_path.suffix.lower() == ".pdf":
            export_filter = DRAW_PDF_EXPORT
            infilter: str | None = "draw_pdf_import"
        else:
            export_filter = self._export_filter(input_path)
            infilter = None

        filter_options = build_pdf_filter_options(options)
        convert_to = f"pdf:{export_filter}:{json.dumps(filter_options, separators=(',', ':'))}"
        self._convert(input_path, output_path, convert_to, ".pdf", infilter=infilter)

        if options.landscape:
            try:
                rotate_to_landscape(output_path)
            except Exception as exc:
                raise ConversionError(f"Failed to apply landscape orientation to {input_path.name}") from exc

    def docx(self, input_path: Path, output_path: Path) -> None:
        self._export_filter(input_path)
        self._convert(input_path, output_path, DOCX_TARGET, ".docx")

    def _export_filter(self, input_path: Path) -> str:
        try:
            return EXPORT_FILTERS[input_path.suffix.lower()]
        except KeyError as exc:
            raise ConversionError(f"Unsupported document extension: {input_path.suffix or input_path.name}") from exc

    def _convert(
        self,
        input_path: Path,
        output_path: Path,
        convert_to: str,
        produced_suffix: str,
        *,
        infilter: str | None = None,
    ) -> None:
        if not self.binary:
            raise ConversionError("LibreOffice executable not found")
        if not input_path.is_file():
            raise ConversionError(f"Input document does not exist: {input_path}")

        with TemporaryDirectory(prefix="officepdf-soffice-") as scratch:
            scratch_path = Path(scratch)
            profile_dir = scratch_path / "profile"
            out_dir = scratch_path / "out"
            out_dir.mkdir()
            command = build_command(
                self.binary, profile_dir, convert_to, out_dir, input_path, infilter=infilter
            )
            try:
                completed = run_subprocess(command, timeout=self.timeout)
            except subprocess.TimeoutExpired as exc:
                raise ConversionError(
                    f"LibreOffice timed out after {self.timeout:g}s converting {input_path.name}"
                ) from exc
            except OSError as exc:
                raise ConversionError(f"Failed to execute LibreOffice: {exc}") from exc

            if completed.returncode != 0:
                LOGGER.error(
                    "LibreOffice failed with code %s: %s", completed.returncode, completed.stderr
                )
                raise ConversionError(
                    f"LibreOffice failed converting {input_path.name}: {completed.stderr.strip()}"
                )

            produced = out_dir / f"{input_path.stem}{produced_suffix}"
            if not produced.is_file():
                raise ConversionError(f"LibreOffice produced no output for {input_path.name}")

            ensure_parent_dir(output_path)
            shutil.move(str(produced), str(output_path))

        LOGGER.info("Converted %s into %s", input_path.name, output_path.name)


__all__ = [
    "EXPORT_FILTERS",
    "LibreOfficeConverter",
    "build_command",
    "build_pdf_filter_options",
    "rotate_to_landscape",
    "validate_pdf_formats",
]
