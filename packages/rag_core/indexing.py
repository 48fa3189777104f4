from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence

import numpy as np
from qdrant_client import QdrantClient
from qdrant_client.http.models import Distance, PointStruct, VectorParams

from docling_pipeline.config import PipelineSettings, get_settings

from .chunking import limit_chunks, split_file
from .models import ChunkRecord, StoredChunk
from .retrieval import SearchResult

_log = logging.getLogger(__name__)

COLLECTION_NAME = "documents"
VECTOR_NAME = "dense"

EmbedFn = Callable[[List[str]], np.ndarray]
SplitFn = Callable[[Path], List[ChunkRecord]]


def _default_embed(texts: List[str]) -> np.ndarray:
    from .embeddings import embed_dense

    return embed_dense(texts)


def _batch_iter(seq: Sequence, batch_size: int) -> Iterable[Sequence]:
    for i in range(0, len(seq), batch_size):
        yield seq[i : i + batch_size]


class VectorStore:
    """In-memory Qdrant collection that can be persisted to a single JSON file."""

    def __init__(self, embed_fn: EmbedFn | None = None, batch_size: int = 64) -> None:
        self._embed = embed_fn or _default_embed
        self._batch_size = batch_size
        self._client = QdrantClient(location=":memory:")

    def _has_collection(self) -> bool:
        return self._client.collection_exists(COLLECTION_NAME)

    def _ensure_collection(self, dim: int) -> None:
        """Create collection with dense vectors if it does not exist."""
        if self._has_collection():
            return

        _log.info("Creating Qdrant collection '%s' (dim=%d)", COLLECTION_NAME, dim)
        self._client.create_collection(
            collection_name=COLLECTION_NAME,
            vectors_config={VECTOR_NAME: VectorParams(size=dim, distance=Distance.COSINE)},
        )

    def _upsert(self, chunks: Sequence[StoredChunk]) -> None:
        if not chunks:
            return
        self._ensure_collection(len(chunks[0].embedding))
        points = [
            PointStruct(
                id=chunk.id,
                vector={VECTOR_NAME: chunk.embedding},
                payload=chunk.model_dump(mode="python", exclude={"embedding"}),
            )
            for chunk in chunks
        ]
        _log.info("Upserting %d points to Qdrant...", len(points))
        self._client.upsert(collection_name=COLLECTION_NAME, points=points, wait=True)

    def add(self, chunks: Sequence[ChunkRecord]) -> None:
        """Embed and store the given chunks."""
        for batch in _batch_iter(list(chunks), self._batch_size):
            vectors = np.asarray(self._embed([c.chunk_text for c in batch]), dtype=np.float32)
            if len(vectors) != len(batch):
                raise ValueError(f"Embedding returned {len(vectors)} vectors for {len(batch)} texts")
            stored = [
                StoredChunk(**chunk.model_dump(), embedding=vector.tolist())
                for chunk, vector in zip(batch, vectors)
            ]
            self._upsert(stored)

    def count(self) -> int:
        if not self._has_collection():
            return 0
        return self._client.count(collection_name=COLLECTION_NAME, exact=True).count

    def similarity_search(
        self,
        query: str,
        top_k: int = 5,
        threshold: float | None = None,
    ) -> List[SearchResult]:
        """Return up to `top_k` chunks whose cosine similarity to `query` is at least `threshold`."""
        if not self._has_collection():
            return []

        query_vec = np.asarray(self._embed([query]), dtype=np.float32)[0].tolist()
        response = self._client.query_points(
            collection_name=COLLECTION_NAME,
            query=query_vec,
            using=VECTOR_NAME,
            limit=top_k,
            score_threshold=threshold,
            with_payload=True,
        )
        return [SearchResult(score=point.score, payload=point.payload or {}) for point in response.points]

    def stored_chunks(self) -> List[StoredChunk]:
        if not self._has_collection():
            return []

        chunks: list[StoredChunk] = []
        offset = None
        while True:
            points, offset = self._client.scroll(
                collection_name=COLLECTION_NAME,
                limit=256,
                offset=offset,
                with_payload=True,
                with_vectors=True,
            )
            for point in points:
                vector = point.vector[VECTOR_NAME] if isinstance(point.vector, dict) else point.vector
                chunks.append(StoredChunk(**(point.payload or {}), embedding=list(vector or [])))
            if offset is None:
                break
        chunks.sort(key=lambda c: (c.source, c.chunk_index))
        return chunks

    def sources(self) -> Dict[str, int]:
        """Return the number of stored chunks per source file."""
        return dict(Counter(chunk.source for chunk in self.stored_chunks()))

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        serializable = [chunk.model_dump(mode="json") for chunk in self.stored_chunks()]
        with path.open("w", encoding="utf-8") as f:
            json.dump(serializable, f, ensure_ascii=False, indent=2)

    def load(self, path: Path) -> None:
        """Load chunks and their embeddings from a file written by `save`."""
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Unexpected vector store format in {path}")
        chunks = [StoredChunk.model_validate(item) for item in data]
        for batch in _batch_iter(chunks, self._batch_size):
            self._upsert(batch)


def _log_sources(chunks: Sequence[ChunkRecord]) -> None:
    _log.info("Document sources summary:")
    for source, count in Counter(c.source for c in chunks).items():
        _log.info("Source: %s - %d chunks", source, count)


def _try_load(store: VectorStore, path: Path) -> bool:
    try:
        store.load(path)
        _log.info("Loaded existing vector store (%d bytes)", path.stat().st_size)
        probe = store.similarity_search("test", top_k=1)
        _log.info("Vector store contains %d chunks (probe returned %d)", store.count(), len(probe))
        return True
    except Exception as exc:  # noqa: BLE001
        _log.warning("Failed to load vector store, will recreate: %s", exc)
        return False


def build_vector_store(
    settings: PipelineSettings | None = None,
    *,
    embed_fn: EmbedFn | None = None,
    split_fn: SplitFn | None = None,
) -> VectorStore:
    """
    Load the persisted vector store, or build it from the input folder.

    Chunk counts are capped per file and in total. Files that fail to parse are
    skipped; if nothing can be indexed an empty store is returned.
    """
    if settings is None:
        settings = get_settings()
    if split_fn is None:
        split_fn = split_file

    output_file = settings.vector_store_path
    input_dir = settings.input_dir

    if output_file.is_file() and output_file.stat().st_size > settings.min_store_bytes:
        store = VectorStore(embed_fn)
        if _try_load(store, output_file):
            return store

    store = VectorStore(embed_fn)

    if not input_dir.is_dir():
        _log.warning("Input folder does not exist or is not a directory: %s", input_dir)
        return store

    files = sorted(input_dir.iterdir())
    _log.info("Starting document processing for %d files", len(files))

    total_limit = settings.max_total_chunks
    documents: list[ChunkRecord] = []

    for path in files:
        if not path.is_file() or len(documents) >= total_limit:
            continue
        try:
            _log.info("Processing file: %s (size: %d bytes)", path.name, path.stat().st_size)
            chunks = split_fn(path)
            _log.info("Split into %d chunks from %s", len(chunks), path.name)

            limited = limit_chunks(chunks, settings.max_chunks_per_file, total_limit - len(documents))
            documents.extend(limited)
            _log.info("Successfully processed %d chunks from %s", len(limited), path.name)
        except Exception as exc:  # noqa: BLE001
            _log.error("Error processing file %s: %s", path.name, exc)
            continue

        if len(documents) >= total_limit:
            _log.info("Reached total chunks limit of %d", total_limit)
            break

    _log.info("Total chunks processed: %d", len(documents))

    if not documents:
        _log.warning("No documents were processed successfully")
        return store

    try:
        _log.info("Adding %d chunks to vector store...", len(documents))
        store.add(documents)
        store.save(output_file)
        _log.info("Vector store saved to %s with %d chunks", output_file, len(documents))
    except Exception as exc:  # noqa: BLE001
        _log.error("Error adding documents to vector store: %s", exc)
        return VectorStore(embed_fn)

    _log_sources(documents)
    return store


__all__ = ["build_vector_store", "VectorStore", "COLLECTION_NAME"]
