from __future__ import annotations

import re
import zlib
from pathlib import Path
from typing import Callable, List

import numpy as np
import pytest

from docling_pipeline.config import PipelineSettings
from rag_core.models import ChunkRecord

DIM = 64


def fake_embed(texts: List[str]) -> np.ndarray:
    """Deterministic bag-of-words embedding, unit length."""
    vecs = np.zeros((len(texts), DIM), dtype=np.float32)
    for i, text in enumerate(texts):
        for word in re.findall(r"\w+", text.lower()):
            vecs[i, zlib.crc32(word.encode("utf-8")) % DIM] += 1.0
        norm = np.linalg.norm(vecs[i])
        if norm == 0:
            vecs[i, 0] = 1.0
        else:
            vecs[i] /= norm
    return vecs


def line_split(path: Path) -> List[ChunkRecord]:
    """Split a text file into one chunk per non-empty line."""
    lines = [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
    return [ChunkRecord(source=path.name, chunk_index=i, chunk_text=line) for i, line in enumerate(lines)]


@pytest.fixture
def settings(tmp_path: Path) -> PipelineSettings:
    return PipelineSettings(
        project_root=tmp_path,
        input_dir=Path("input"),
        vector_store_path=Path("output") / "vectorstore.json",
        min_store_bytes=100,
    ).resolve_paths()


@pytest.fixture
def write_input(settings: PipelineSettings) -> Callable[[str, int], Path]:
    """Create an input file with `n` distinct lines."""

    def _write(name: str, n: int) -> Path:
        settings.input_dir.mkdir(parents=True, exist_ok=True)
        path = settings.input_dir / name
        path.write_text(
            "\n".join(f"{path.stem} paragraph {i} about {path.stem}" for i in range(n)),
            encoding="utf-8",
        )
        return path

    return _write
