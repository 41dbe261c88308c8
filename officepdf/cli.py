"""
Command-line interface for officepdf.
"""

import json
import os
import shutil
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from officepdf import __version__, build_coordinator, unsupported_paths
from officepdf.config import get_settings
from officepdf.core.utils import configure_logging
from officepdf.libreoffice import LibreOfficeConverter
from officepdf.pipeline import (
    ClientInputError,
    ConversionRequest,
    PdfFormats,
    PipelineError,
    RequestWorkspace,
)

console = Console()


def _format_size(num_bytes: int) -> str:
    size = float(num_bytes)
    for unit in ("bytes", "KiB", "MiB", "GiB"):
        if size < 1024.0:
            return f"{size:3.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TiB"


def _parse_metadata(raw):
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"metadata must be valid JSON: {exc}", param_hint="--metadata")
    if not isinstance(payload, dict):
        raise click.BadParameter("metadata must be a JSON object", param_hint="--metadata")
    return payload


def _check_inputs(inputs):
    settings = get_settings()
    converter = LibreOfficeConverter(settings.libreoffice_bin)
    rejected = unsupported_paths(inputs, converter.extensions())
    if rejected:
        names = ", ".join(path.name for path in rejected)
        console.print(f"[bold red]✗ Error:[/bold red] unsupported file extension: {names}")
        sys.exit(1)


def _run(inputs, output_dir, run_pipeline, request_options):
    settings = get_settings()
    configure_logging(settings.log_level)
    _check_inputs(inputs)

    with RequestWorkspace(settings.work_dir) as workspace:
        try:
            stored = [workspace.add_input(Path(path).name, Path(path).read_bytes()) for path in inputs]
        except ValueError as e:
            console.print(f"[bold red]✗ Error:[/bold red] {e}")
            sys.exit(1)

        request = ConversionRequest.for_paths(stored, **request_options)
        coordinator = build_coordinator(workspace, settings)

        try:
            with console.status(f"[bold cyan]Converting {len(stored)} document(s)...[/bold cyan]"):
                outputs = run_pipeline(coordinator, request)
        except ClientInputError as e:
            console.print(f"[bold red]✗ Invalid request:[/bold red] {e.detail}")
            sys.exit(1)
        except PipelineError as e:
            console.print(f"[bold red]✗ Error:[/bold red] {e}")
            sys.exit(1)

        destination = Path(output_dir)
        destination.mkdir(parents=True, exist_ok=True)
        copied = []
        for output in outputs:
            target = destination / output.name
            shutil.copyfile(output, target)
            copied.append(target)

    table = Table(title="Converted files")
    table.add_column("File", style="cyan")
    table.add_column("Size", style="green")
    for path in copied:
        table.add_row(path.name, _format_size(path.stat().st_size))

    console.print()
    console.print(table)
    console.print(f"[dim]Output directory: {os.path.abspath(output_dir)}[/dim]")
    return copied


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    officepdf - Convert office documents to PDF or DOCX.
    """
    pass


@cli.command(name="convert")
@click.argument('inputs', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option('--output-dir', '-o', default='./output', type=click.Path(file_okay=False),
              help='Directory receiving the converted files')
@click.option('--landscape', is_flag=True, help='Landscape page orientation')
@click.option('--page-ranges', default='', help="Pages to export, e.g. '1-3,5'")
@click.option('--export-form-fields/--no-export-form-fields', default=True,
              help='Export form fields as widgets')
@click.option('--single-page-sheets', is_flag=True, help='Render each spreadsheet on one page')
@click.option('--pdfa', default='', help='PDF/A level: PDF/A-1b, PDF/A-2b or PDF/A-3b')
@click.option('--pdfua', is_flag=True, help='Produce a PDF/UA document')
@click.option('--native-pdf-formats/--no-native-pdf-formats', default=True,
              help='Apply PDF/A-PDF/UA during conversion instead of afterwards')
@click.option('--merge', is_flag=True, help='Merge the converted documents into one PDF')
@click.option('--metadata', default=None, help='JSON object of metadata to write')
def convert(inputs, output_dir, landscape, page_ranges, export_form_fields, single_page_sheets,
            pdfa, pdfua, native_pdf_formats, merge, metadata):
    """
    Convert office documents to PDF.

    Examples:

        officepdf convert report.docx

        officepdf convert a.docx b.xlsx --merge --pdfa PDF/A-2b -o out
    """
    options = {
        "landscape": landscape,
        "page_ranges": page_ranges,
        "export_form_fields": export_form_fields,
        "single_page_sheets": single_page_sheets,
        "pdf_formats": PdfFormats(pdfa=pdfa, pdfua=pdfua),
        "native_pdf_formats": native_pdf_formats,
        "merge": merge,
        "metadata": _parse_metadata(metadata),
    }
    _run(inputs, output_dir, lambda coordinator, request: coordinator.run_pdf_pipeline(request), options)


@cli.command(name="convert-docx")
@click.argument('inputs', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option('--output-dir', '-o', default='./output', type=click.Path(file_okay=False),
              help='Directory receiving the converted files')
def convert_docx(inputs, output_dir):
    """
    Convert office documents to DOCX.

    Example:

        officepdf convert-docx legacy.doc notes.hwp -o out
    """
    _run(inputs, output_dir, lambda coordinator, request: coordinator.run_docx_pipeline(request), {})


if __name__ == '__main__':
    cli()
