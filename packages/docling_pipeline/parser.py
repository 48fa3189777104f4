from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import List

from docling.chunking import HybridChunker
from docling.datamodel.base_models import DocumentStream
from docling.datamodel.document import ConversionResult, DoclingDocument
from docling.document_converter import DocumentConverter

_log = logging.getLogger(__name__)

# Docling has no plain-text backend; its Markdown backend reads such files as-is.
_PLAIN_TEXT_SUFFIXES = {".txt", ".text"}

_converter: DocumentConverter | None = None


def _get_converter() -> DocumentConverter:
    """Return a shared Docling converter accepting every supported format."""
    global _converter
    if _converter is None:
        _converter = DocumentConverter()
    return _converter


def _stream_name(filename: str) -> str:
    path = Path(filename or "upload")
    if path.suffix.lower() in _PLAIN_TEXT_SUFFIXES or not path.suffix:
        return f"{path.stem or 'upload'}.md"
    return path.name


def _check(result: ConversionResult, name: str) -> DoclingDocument:
    if result.status.value != "success":
        raise RuntimeError(f"Docling conversion of {name} failed: {result.status.value}")
    return result.document


def convert_file(path: Path) -> DoclingDocument:
    """Convert a single file on disk to a DoclingDocument."""
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    _log.info("Converting file with Docling: %s", path)
    if path.suffix.lower() in _PLAIN_TEXT_SUFFIXES or not path.suffix:
        return convert_bytes(path.read_bytes(), path.name)

    result = _get_converter().convert(path)
    return _check(result, path.name)


def convert_bytes(data: bytes, filename: str) -> DoclingDocument:
    """Convert an in-memory payload (e.g. an uploaded file) to a DoclingDocument."""
    name = _stream_name(filename)
    stream = DocumentStream(name=name, stream=BytesIO(data))
    result = _get_converter().convert(stream)
    return _check(result, filename or name)


def extract_text(data: bytes, filename: str) -> str:
    """Return the full text of an uploaded document."""
    doc = convert_bytes(data, filename)
    return doc.export_to_markdown()


def chunk_document(doc: DoclingDocument) -> List[str]:
    """Split a document into chunk texts with Docling's HybridChunker."""
    chunker = HybridChunker()
    texts: list[str] = []
    for chunk in chunker.chunk(doc):
        text = (chunk.text or "").strip()
        if text:
            texts.append(text)
    return texts


__all__ = ["chunk_document", "convert_bytes", "convert_file", "extract_text"]
