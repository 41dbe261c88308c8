from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, Sequence
import sys

import pytest
from pypdf import PdfReader, PdfWriter
from pypdf.generic import ArrayObject, DictionaryObject, FloatObject, NameObject, TextStringObject

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from officepdf.pdfengines import PypdfEngine  # noqa: E402
from officepdf.pipeline import ConversionOptions, PdfFormats, PipelineCoordinator, RequestWorkspace  # noqa: E402

XMP_TEMPLATE = """<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>
<x:xmpmeta xmlns:x="adobe:ns:meta/">
  <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
    <rdf:Description rdf:about="" xmlns:pdfaid="http://www.aiim.org/pdfa/ns/id/">
      <pdfaid:part>2</pdfaid:part>
      <pdfaid:conformance>B</pdfaid:conformance>
    </rdf:Description>
    <rdf:Description rdf:about="" xmlns:dc="http://purl.org/dc/elements/1.1/">
      <dc:title><rdf:Alt><rdf:li xml:lang="x-default">{title}</rdf:li></rdf:Alt></dc:title>
    </rdf:Description>
    <rdf:Description rdf:about="" xmlns:pdf="http://ns.adobe.com/pdf/1.3/" pdf:Producer="LibreOffice"/>
  </rdf:RDF>
</x:xmpmeta>
<?xpacket end="w"?>"""


def write_pdf(path: Path, *, title: str | None = None, pages: int = 1, width: float = 72, height: float = 72) -> Path:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=height)
    if title is not None:
        writer.add_metadata({"/Title": title})
    with path.open("wb") as handle:
        writer.write(handle)
    return path


def write_archival_pdf(path: Path, *, title: str = "Original", width: float = 72, height: float = 72) -> Path:
    """A PDF/A-2b shaped file: output intent, XMP packet and one text field."""

    writer = PdfWriter()
    page = writer.add_blank_page(width=width, height=height)
    field = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Annot"),
            NameObject("/Subtype"): NameObject("/Widget"),
            NameObject("/FT"): NameObject("/Tx"),
            NameObject("/T"): TextStringObject("customer"),
            NameObject("/Rect"): ArrayObject([FloatObject(5), FloatObject(5), FloatObject(50), FloatObject(20)]),
        }
    )
    field_ref = writer._add_object(field)
    page[NameObject("/Annots")] = ArrayObject([field_ref])
    writer.root_object[NameObject("/AcroForm")] = DictionaryObject(
        {NameObject("/Fields"): ArrayObject([field_ref])}
    )
    writer.root_object[NameObject("/OutputIntents")] = ArrayObject(
        [
            DictionaryObject(
                {
                    NameObject("/Type"): NameObject("/OutputIntent"),
                    NameObject("/S"): NameObject("/GTS_PDFA1"),
                    NameObject("/OutputConditionIdentifier"): TextStringObject("sRGB IEC61966-2.1"),
                }
            )
        ]
    )
    writer.add_metadata({"/Title": title})
    writer.xmp_metadata = XMP_TEMPLATE.format(title=title).encode("utf-8")
    with path.open("wb") as handle:
        writer.write(handle)
    return path


class FakeConverter:
    """Writes a one page PDF titled after the input; fails on demand."""

    def __init__(self, calls: list[tuple[str, str]]) -> None:
        self.calls = calls
        self.failures: dict[str, Exception] = {}
        self.options: list[ConversionOptions] = []

    def extensions(self) -> tuple[str, ...]:
        return (".docx", ".xlsx", ".odt", ".pptx")

    def pdf(self, input_path: Path, output_path: Path, options: ConversionOptions) -> None:
        self.calls.append(("pdf", input_path.name))
        self.options.append(options)
        if input_path.name in self.failures:
            raise self.failures[input_path.name]
        write_pdf(output_path, title=input_path.name)

    def docx(self, input_path: Path, output_path: Path) -> None:
        self.calls.append(("docx", input_path.name))
        if input_path.name in self.failures:
            raise self.failures[input_path.name]
        output_path.write_bytes(b"PK\x03\x04 fake docx")


class RecordingEngine:
    """Real pypdf merge and metadata; a normalizer that rewrites the document info."""

    def __init__(self, calls: list[tuple[str, str]]) -> None:
        self.calls = calls
        self.failures: dict[str, Exception] = {}
        self._pypdf = PypdfEngine()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    def merge(self, input_paths: Sequence[Path], output_path: Path) -> None:
        self.calls.append(("merge", ",".join(path.name for path in input_paths)))
        self._maybe_fail("merge")
        self._pypdf.merge(input_paths, output_path)

    def convert(self, formats: PdfFormats, input_path: Path, output_path: Path) -> None:
        self.calls.append(("convert", input_path.name))
        self._maybe_fail("convert")
        reader = PdfReader(str(input_path))
        writer = PdfWriter()
        for page in reader.pages:
            writer.add_page(page)
        writer.add_metadata({"/Producer": f"normalizer {formats.pdfa}", "/Title": "normalized"})
        with output_path.open("wb") as handle:
            writer.write(handle)

    def write_metadata(self, metadata: Mapping[str, Any], path: Path) -> None:
        self.calls.append(("metadata", path.name))
        self._maybe_fail("metadata")
        self._pypdf.write_metadata(metadata, path)


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str, title: str | None = None, **kwargs: Any) -> Path:
        return write_pdf(tmp_path / filename, title=title, **kwargs)

    return _create


@pytest.fixture()
def sample_pdfs(pdf_factory: Callable[..., Path]) -> list[Path]:
    pdf1 = pdf_factory("one.pdf", title="Document One", pages=2)
    pdf2 = pdf_factory("two.pdf", pages=3)
    return [pdf1, pdf2]


@pytest.fixture()
def archival_pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str, **kwargs: Any) -> Path:
        return write_archival_pdf(tmp_path / filename, **kwargs)

    return _create


@pytest.fixture()
def calls() -> list[tuple[str, str]]:
    return []


@pytest.fixture()
def fake_converter(calls: list[tuple[str, str]]) -> FakeConverter:
    return FakeConverter(calls)


@pytest.fixture()
def recording_engine(calls: list[tuple[str, str]]) -> RecordingEngine:
    return RecordingEngine(calls)


@pytest.fixture()
def workspace(tmp_path: Path):
    workspace = RequestWorkspace(tmp_path / "work")
    yield workspace
    workspace.cleanup()


@pytest.fixture()
def coordinator(
    fake_converter: FakeConverter,
    recording_engine: RecordingEngine,
    workspace: RequestWorkspace,
) -> PipelineCoordinator:
    return PipelineCoordinator(fake_converter, recording_engine, workspace)


@pytest.fixture()
def add_inputs(workspace: RequestWorkspace) -> Callable[..., list[Path]]:
    def _add(*names: str) -> list[Path]:
        return [workspace.add_input(name, b"document " + name.encode()) for name in names]

    return _add
