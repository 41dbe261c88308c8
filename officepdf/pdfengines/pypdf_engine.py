"""Merge and metadata operations implemented with :mod:`pypdf`."""

from __future__ import annotations

import json
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence
from xml.etree import ElementTree

from pypdf import PdfReader, PdfWriter

from ..core.utils import ensure_parent_dir, get_logger
from ..exceptions import PdfEngineError, PdfEngineUnsupportedError
from ..pipeline.models import PdfFormats

LOGGER = get_logger("officepdf.pdfengines.pypdf")

METADATA_KEY_MAP = {
    "title": "/Title",
    "author": "/Author",
    "subject": "/Subject",
    "keywords": "/Keywords",
    "creator": "/Creator",
    "producer": "/Producer",
    "creationdate": "/CreationDate",
    "moddate": "/ModDate",
    "trapped": "/Trapped",
}

_DATE_KEYS = {"/CreationDate", "/ModDate"}

XMP_NAMESPACES = {
    "x": "adobe:ns:meta/",
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "dc": "http://purl.org/dc/elements/1.1/",
    "xmp": "http://ns.adobe.com/xap/1.0/",
    "pdf": "http://ns.adobe.com/pdf/1.3/",
    "pdfaid": "http://www.aiim.org/pdfa/ns/id/",
    "xmpMM": "http://ns.adobe.com/xap/1.0/mm/",
}

for _prefix, _uri in XMP_NAMESPACES.items():
    ElementTree.register_namespace(_prefix, _uri)

# Document information entry -> (namespace prefix, property, rdf container)
XMP_PROPERTIES = {
    "/Title": ("dc", "title", "Alt"),
    "/Author": ("dc", "creator", "Seq"),
    "/Subject": ("dc", "description", "Alt"),
    "/Keywords": ("pdf", "Keywords", None),
    "/Creator": ("xmp", "CreatorTool", None),
    "/Producer": ("pdf", "Producer", None),
    "/CreationDate": ("xmp", "CreateDate", None),
    "/ModDate": ("xmp", "ModifyDate", None),
}

_RDF = XMP_NAMESPACES["rdf"]
_XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
_PACKET = re.compile(r"^(\s*(?:<\?.*?\?>\s*)*)(.*?)(\s*(?:<\?.*?\?>\s*)*)$", re.DOTALL)
_PDF_DATE = re.compile(
    r"^D:(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(?:(Z)|([+-])(\d{2})'(\d{2})')?$"
)


def _load_reader(path: Path) -> PdfReader:
    try:
        reader = PdfReader(str(path))
    except Exception as exc:
        raise PdfEngineError(f"Unable to read PDF: {path.name}") from exc
    if reader.is_encrypted:
        LOGGER.debug("Attempting to decrypt encrypted PDF %s", path)
        try:
            reader.decrypt("")
        except Exception as exc:  # pragma: no cover - decrypt errors vary
            LOGGER.error("Failed to decrypt PDF %s: %s", path, exc)
            raise PdfEngineError(f"Unable to decrypt encrypted PDF: {path.name}") from exc
    return reader


def _pdf_date(value: str) -> str:
    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        return value
    stamp = moment.strftime("D:%Y%m%d%H%M%S")
    offset = moment.strftime("%z")
    if offset:
        stamp += f"{offset[:3]}'{offset[3:]}'"
    return stamp


def _xmp_date(value: str) -> str | None:
    """``D:20240102030405+01'00'`` becomes ``2024-01-02T03:04:05+01:00``."""

    match = _PDF_DATE.match(value)
    if match is None:
        return None
    year, month, day, hour, minute, second, utc, sign, tz_hour, tz_minute = match.groups()
    stamp = f"{year}-{month}-{day}T{hour}:{minute}:{second}"
    if utc:
        return stamp + "Z"
    if sign:
        return f"{stamp}{sign}{tz_hour}:{tz_minute}"
    return stamp


def _metadata_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    return str(value)


def to_document_info(metadata: Mapping[str, Any]) -> dict[str, str]:
    """Map client supplied metadata onto PDF document information entries."""

    entries: dict[str, str] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        pdf_key = METADATA_KEY_MAP.get(str(key).lower())
        if pdf_key is None:
            pdf_key = key if str(key).startswith("/") else f"/{key}"
        string_value = _metadata_value(value)
        if pdf_key in _DATE_KEYS:
            string_value = _pdf_date(string_value)
        entries[pdf_key] = string_value
    return entries


def sync_xmp_packet(packet: bytes, entries: Mapping[str, str]) -> bytes:
    """Rewrite the XMP properties mirroring *entries* so both sources agree.

    Each mirrored property is removed from every ``rdf:Description``, in
    element or attribute form, then written once into the first one. A date
    that is not a PDF date is dropped from the packet. The ``xpacket``
    processing instructions around the root element are kept verbatim.
    """

    header, body, trailer = _PACKET.match(packet.decode("utf-8")).groups()
    root = ElementTree.fromstring(body)

    descriptions = list(root.iter(f"{{{_RDF}}}Description"))
    if not descriptions:
        rdf = root if root.tag == f"{{{_RDF}}}RDF" else root.find(f"{{{_RDF}}}RDF")
        if rdf is None:
            raise ValueError("XMP packet has no rdf:RDF element")
        descriptions = [ElementTree.SubElement(rdf, f"{{{_RDF}}}Description", {f"{{{_RDF}}}about": ""})]
    target = descriptions[0]

    for key, value in entries.items():
        if key not in XMP_PROPERTIES:
            continue
        prefix, name, container = XMP_PROPERTIES[key]
        tag = f"{{{XMP_NAMESPACES[prefix]}}}{name}"
        for description in descriptions:
            description.attrib.pop(tag, None)
            for element in description.findall(tag):
                description.remove(element)

        if key in _DATE_KEYS:
            value = _xmp_date(value)
            if value is None:
                continue

        element = ElementTree.SubElement(target, tag)
        if container is None:
            element.text = value
            continue
        item = ElementTree.SubElement(ElementTree.SubElement(element, f"{{{_RDF}}}{container}"), f"{{{_RDF}}}li")
        if container == "Alt":
            item.set(_XML_LANG, "x-default")
        item.text = value

    return (header + ElementTree.tostring(root, encoding="unicode") + trailer).encode("utf-8")


def _write_atomically(writer: PdfWriter, destination: Path) -> None:
    ensure_parent_dir(destination)
    temp_path = destination.with_name(f".{destination.name}.tmp")
    try:
        with temp_path.open("wb") as handle:
            writer.write(handle)
        os.replace(temp_path, destination)
    except Exception as exc:  # pragma: no cover - IO errors vary
        temp_path.unlink(missing_ok=True)
        LOGGER.error("Failed to write PDF to %s: %s", destination, exc)
        raise PdfEngineError(f"Failed to write PDF to {destination.name}") from exc


class PypdfEngine:
    """Pure Python engine: merges PDFs and writes document information."""

    name = "pypdf"

    def merge(self, input_paths: Sequence[Path], output_path: Path) -> None:
        if not input_paths:
            raise PdfEngineError("No input PDFs provided")

        writer = PdfWriter()
        first_metadata: Optional[dict[str, str]] = None

        for pdf_path in input_paths:
            reader = _load_reader(pdf_path)
            LOGGER.debug("Appending %d page(s) from %s", len(reader.pages), pdf_path.name)
            # append keeps form fields and outlines along with the pages
            writer.append(reader)

            if first_metadata is None and reader.metadata:
                first_metadata = {
                    key: str(value)
                    for key, value in reader.metadata.items()
                    if isinstance(key, str) and value is not None
                }

        if first_metadata:
            writer.add_metadata(first_metadata)

        _write_atomically(writer, output_path)
        LOGGER.info("Merged %d PDFs into %s", len(input_paths), output_path.name)

    def convert(self, formats: PdfFormats, input_path: Path, output_path: Path) -> None:
        raise PdfEngineUnsupportedError("pypdf engine cannot convert to PDF/A or PDF/UA")

    def write_metadata(self, metadata: Mapping[str, Any], path: Path) -> None:
        """Stamp *metadata* into the document information and the XMP packet.

        Both sources carry the same values afterwards, which PDF/A requires.
        A document without an XMP packet does not get one.
        """

        entries = to_document_info(metadata)
        reader = _load_reader(path)
        writer = PdfWriter()
        writer.clone_reader_document_root(reader)

        existing = {
            key: str(value)
            for key, value in (reader.metadata or {}).items()
            if isinstance(key, str) and value is not None
        }
        LOGGER.debug("Setting metadata on %s: %s", path.name, entries)
        writer.add_metadata({**existing, **entries})

        xmp = writer.root_object.get("/Metadata")
        if entries and xmp is not None:
            try:
                packet = sync_xmp_packet(xmp.get_object().get_data(), entries)
            except (ValueError, ElementTree.ParseError) as exc:
                raise PdfEngineError(f"Unable to update XMP metadata of {path.name}") from exc
            writer.xmp_metadata = packet

        _write_atomically(writer, path)


__all__ = ["METADATA_KEY_MAP", "PypdfEngine", "sync_xmp_packet", "to_document_info"]
