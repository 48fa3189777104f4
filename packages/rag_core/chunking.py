from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, TypeVar

from docling_pipeline.parser import chunk_document, convert_file

from .models import ChunkRecord

_log = logging.getLogger(__name__)

T = TypeVar("T")


def split_file(path: Path) -> List[ChunkRecord]:
    """Parse a file with Docling and split it into ChunkRecords."""
    doc = convert_file(path)
    texts = chunk_document(doc)
    _log.debug("Docling produced %d chunks for %s", len(texts), path.name)
    return [
        ChunkRecord(source=path.name, chunk_index=i, chunk_text=text)
        for i, text in enumerate(texts)
    ]


def limit_chunks(chunks: Sequence[T], per_file: int, remaining: int) -> List[T]:
    """Keep the leading chunks allowed by the per-file cap and the remaining total budget."""
    limit = max(0, min(per_file, remaining))
    return list(chunks[:limit])


__all__ = ["limit_chunks", "split_file"]
