from __future__ import annotations

import io
import re
from pathlib import Path
from zipfile import ZipFile

import pytest
from fastapi.testclient import TestClient
from pypdf import PdfReader

from officepdf.config import Settings, get_settings
from officepdf.exceptions import InvalidPdfFormatsError
from officepdf.pipeline import PdfFormats

from apps.backend.app.main import app, get_converter, get_pdf_engine


client = TestClient(app)

CONVERT_URL = "/forms/libreoffice/convert"
DOCX_URL = "/forms/libreoffice/convert/docx"


@pytest.fixture()
def work_dir(tmp_path: Path) -> Path:
    return tmp_path / "work"


@pytest.fixture(autouse=True)
def overrides(work_dir: Path, fake_converter, recording_engine):
    app.dependency_overrides[get_settings] = lambda: Settings(work_dir=work_dir)
    app.dependency_overrides[get_converter] = lambda: fake_converter
    app.dependency_overrides[get_pdf_engine] = lambda: recording_engine
    yield
    app.dependency_overrides.clear()


def _upload(*names: str) -> list[tuple[str, tuple[str, bytes, str]]]:
    return [("files", (name, b"document " + name.encode(), "application/octet-stream")) for name in names]


def test_health() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_single_document_is_returned_as_pdf(work_dir: Path) -> None:
    response = client.post(CONVERT_URL, files=_upload("report.docx"))

    assert response.status_code == 200
    assert response.headers.get("content-type") == "application/pdf"
    disposition = response.headers.get("content-disposition", "")
    assert re.search(r"[0-9a-f]{32}\.pdf", disposition)
    assert PdfReader(io.BytesIO(response.content)).metadata.get("/Title") == "report.docx"
    assert list(work_dir.iterdir()) == []


def test_several_documents_are_zipped_with_source_names(work_dir: Path) -> None:
    response = client.post(CONVERT_URL, files=_upload("a.docx", "b.xlsx"))

    assert response.status_code == 200
    assert response.headers.get("content-type") == "application/zip"
    with ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == ["a.docx.pdf", "b.xlsx.pdf"]
    assert list(work_dir.iterdir()) == []


def test_form_fields_reach_the_pipeline(fake_converter, calls) -> None:
    response = client.post(
        CONVERT_URL,
        data={
            "merge": "true",
            "landscape": "true",
            "nativePageRanges": "1-2",
            "exportFormFields": "false",
            "singlePageSheets": "true",
            "pdfa": "PDF/A-2b",
            "nativePdfFormats": "false",
            "metadata": '{"Author": "Jane"}',
        },
        files=_upload("a.docx", "b.docx"),
    )

    assert response.status_code == 200
    assert response.headers.get("content-type") == "application/pdf"
    options = fake_converter.options[0]
    assert options.landscape and options.single_page_sheets
    assert options.page_ranges == "1-2"
    assert options.export_form_fields is False
    assert options.pdf_formats is None
    assert [call[0] for call in calls] == ["pdf", "pdf", "merge", "convert", "metadata"]
    info = PdfReader(io.BytesIO(response.content)).metadata
    assert info.get("/Author") == "Jane"


def test_native_pdf_formats_are_sent_to_converter(fake_converter) -> None:
    response = client.post(CONVERT_URL, data={"pdfa": "PDF/A-1b", "pdfua": "true"}, files=_upload("a.docx"))

    assert response.status_code == 200
    assert fake_converter.options[0].pdf_formats == PdfFormats(pdfa="PDF/A-1b", pdfua=True)


def test_missing_files_are_rejected() -> None:
    response = client.post(CONVERT_URL, data={"merge": "true"})

    assert response.status_code == 400
    assert response.json()["detail"] == "At least one file must be provided."


def test_unsupported_extension_is_rejected(calls) -> None:
    response = client.post(CONVERT_URL, files=_upload("a.docx", "tool.exe"))

    assert response.status_code == 400
    assert "tool.exe" in response.json()["detail"]
    assert calls == []


def test_empty_upload_is_rejected(work_dir: Path) -> None:
    response = client.post(CONVERT_URL, files=[("files", ("a.docx", b"", "application/octet-stream"))])

    assert response.status_code == 400
    assert response.json()["detail"] == "File 'a.docx' is empty."
    assert list(work_dir.iterdir()) == []


def test_duplicate_upload_names_are_rejected() -> None:
    response = client.post(CONVERT_URL, files=_upload("a.docx", "a.docx"))

    assert response.status_code == 400
    assert "Duplicate input file name" in response.json()["detail"]


@pytest.mark.parametrize("metadata", ["not-json", "[1, 2]"])
def test_invalid_metadata_is_rejected(metadata: str) -> None:
    response = client.post(CONVERT_URL, data={"metadata": metadata}, files=_upload("a.docx"))

    assert response.status_code == 400
    assert response.json()["detail"].startswith("metadata must be")


def test_client_input_error_maps_to_bad_request(fake_converter) -> None:
    formats = PdfFormats(pdfa="PDF/A-4z")
    fake_converter.failures["a.docx"] = InvalidPdfFormatsError(formats)

    response = client.post(CONVERT_URL, data={"pdfa": "PDF/A-4z"}, files=_upload("a.docx"))

    assert response.status_code == 400
    assert response.json()["detail"] == "A PDF format in '{PdfA:PDF/A-4z PdfUa:false}' is not supported"


def test_stage_failure_maps_to_internal_error(fake_converter, work_dir: Path) -> None:
    fake_converter.failures["b.docx"] = RuntimeError("soffice crashed")

    response = client.post(CONVERT_URL, files=_upload("a.docx", "b.docx"))

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal Server Error"
    assert list(work_dir.iterdir()) == []


def test_docx_route_zips_named_outputs(calls) -> None:
    response = client.post(DOCX_URL, files=_upload("notes.odt", "legacy.docx"))

    assert response.status_code == 200
    with ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == ["notes.odt.docx", "legacy.docx.docx"]
    assert {call[0] for call in calls} == {"docx"}


def test_docx_route_single_document() -> None:
    response = client.post(DOCX_URL, files=_upload("notes.odt"))

    assert response.status_code == 200
    assert (
        response.headers.get("content-type")
        == "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )
    assert response.content.startswith(b"PK")
