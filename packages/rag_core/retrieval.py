from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from qdrant_client.http.models import Payload

if TYPE_CHECKING:
    from .indexing import VectorStore

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    score: float
    payload: Payload

    @property
    def text(self) -> str:
        return self.payload.get("chunk_text") or ""

    @property
    def source(self) -> str | None:
        return self.payload.get("source")


@dataclass(frozen=True)
class SearchSettings:
    top_k: int = 5
    similarity_threshold: float = 0.5


def retrieve(
    store: "VectorStore",
    query: str,
    settings: SearchSettings | None = None,
) -> List[SearchResult]:
    """Return the chunks most similar to `query` above the similarity threshold."""
    if settings is None:
        settings = SearchSettings()
    results = store.similarity_search(
        query,
        top_k=settings.top_k,
        threshold=settings.similarity_threshold,
    )
    _log.info("Retrieved %d chunks (top_k=%d, threshold=%.2f)", len(results), settings.top_k, settings.similarity_threshold)
    return results


__all__ = ["retrieve", "SearchResult", "SearchSettings"]
