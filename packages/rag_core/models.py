from __future__ import annotations

import uuid
from typing import List

from pydantic import BaseModel, Field


class ChunkRecord(BaseModel):
    """A chunk of an ingested document."""

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Stable identifier, also used as the vector point id.",
    )
    source: str = Field(..., description="File name the chunk was read from.")
    chunk_index: int = Field(
        ...,
        ge=0,
        description="Index of the chunk within its source.",
    )
    chunk_text: str = Field(
        ...,
        description="Plain text used for embeddings and generation.",
    )


class StoredChunk(ChunkRecord):
    """Chunk together with its dense embedding, as persisted in the store file."""

    embedding: List[float] = Field(default_factory=list)


__all__ = ["ChunkRecord", "StoredChunk"]
