from __future__ import annotations

from pathlib import Path

import pytest

from officepdf.pipeline import (
    PDF_A_1B,
    ConversionRequest,
    NormalizationMode,
    PdfFormats,
)


def test_request_requires_inputs() -> None:
    with pytest.raises(ValueError):
        ConversionRequest(input_paths=())


def test_request_coerces_paths_and_freezes_metadata() -> None:
    request = ConversionRequest.for_paths(["a.docx"], metadata={"Title": "x"})

    assert request.input_paths == (Path("a.docx"),)
    with pytest.raises(TypeError):
        request.metadata["Title"] = "y"  # type: ignore[index]


def test_pdf_formats_zero_value() -> None:
    assert PdfFormats().is_zero
    assert not PdfFormats(pdfa=PDF_A_1B).is_zero
    assert not PdfFormats(pdfua=True).is_zero
    assert PdfFormats(pdfa=PDF_A_1B, pdfua=True).describe() == "{PdfA:PDF/A-1b PdfUa:true}"


@pytest.mark.parametrize(
    ("formats", "native", "expected"),
    [
        (PdfFormats(), True, NormalizationMode.NONE),
        (PdfFormats(), False, NormalizationMode.NONE),
        (PdfFormats(pdfa=PDF_A_1B), True, NormalizationMode.NATIVE),
        (PdfFormats(pdfua=True), False, NormalizationMode.POST_PROCESS),
    ],
)
def test_normalization_mode(formats: PdfFormats, native: bool, expected: NormalizationMode) -> None:
    request = ConversionRequest.for_paths(["a.docx"], pdf_formats=formats, native_pdf_formats=native)
    assert request.normalization is expected


def test_converter_options_embed_formats_only_when_native() -> None:
    formats = PdfFormats(pdfa=PDF_A_1B)
    native = ConversionRequest.for_paths(
        ["a.docx"],
        landscape=True,
        page_ranges="1-2",
        export_form_fields=False,
        single_page_sheets=True,
        pdf_formats=formats,
    ).converter_options()
    post = ConversionRequest.for_paths(["a.docx"], pdf_formats=formats, native_pdf_formats=False).converter_options()

    assert native.pdf_formats == formats
    assert native.landscape and native.single_page_sheets
    assert native.page_ranges == "1-2"
    assert native.export_form_fields is False
    assert post.pdf_formats is None
