from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

import numpy as np
import torch

from docling_pipeline.config import get_settings

if TYPE_CHECKING:
    from FlagEmbedding import BGEM3FlagModel

_log = logging.getLogger(__name__)

_model: "BGEM3FlagModel | None" = None


def get_model() -> "BGEM3FlagModel":
    """Load the configured BGE-M3 model once, on GPU with fp16 when CUDA is present."""
    global _model
    if _model is None:
        # Imported here so the API can start without pulling in the model stack.
        from FlagEmbedding import BGEM3FlagModel

        name = get_settings().embedding_model
        on_gpu = torch.cuda.is_available()
        _log.info("Loading embedding model %s (%s)", name, "cuda/fp16" if on_gpu else "cpu")
        _model = BGEM3FlagModel(name, use_fp16=on_gpu, device="cuda" if on_gpu else "cpu")
    return _model


def embed_dense(texts: List[str], batch_size: int = 16) -> np.ndarray:
    """Return one dense float32 vector per text; a (0, 0) array for no texts."""
    if not texts:
        return np.zeros((0, 0), dtype=np.float32)

    _log.info("Embedding %d texts", len(texts))
    outputs = get_model().encode(
        texts,
        batch_size=batch_size,
        return_dense=True,
        return_sparse=False,
        return_colbert_vecs=False,
    )
    return np.asarray(outputs["dense_vecs"], dtype=np.float32)


__all__ = ["embed_dense", "get_model"]
