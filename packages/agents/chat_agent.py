from __future__ import annotations

import logging
from typing import Callable, List, Optional

from rag_core.indexing import VectorStore
from rag_core.retrieval import SearchResult, SearchSettings, retrieve
from apps.backend.llm.groq_client import build_context_block, complete

from .prompts import (
    ATS_CHECK_TEMPLATE,
    RAG_CONTEXT_TEMPLATE,
    RAG_SYSTEM_PROMPT,
    RESUME_ANALYSIS_TEMPLATE,
)

_log = logging.getLogger(__name__)

CompleteFn = Callable[..., str]


class ChatAgent:
    """Builds prompts for each chat operation and sends them to the LLM."""

    def __init__(
        self,
        store: Optional[VectorStore] = None,
        complete_fn: CompleteFn = complete,
        search_settings: Optional[SearchSettings] = None,
    ) -> None:
        self.store = store
        self._complete = complete_fn
        self.search_settings = search_settings or SearchSettings()

    def chat(self, message: str) -> str:
        """Plain chat: the message is sent unmodified."""
        return self._complete(message)

    def retrieve(self, question: str) -> List[SearchResult]:
        if self.store is None:
            _log.warning("No vector store configured; answering without context")
            return []
        return retrieve(self.store, question, settings=self.search_settings)

    def rag_chat(self, message: str) -> str:
        """Answer from the indexed documents only."""
        results = self.retrieve(message)
        user = RAG_CONTEXT_TEMPLATE.format(
            question=message,
            context=build_context_block(results),
        )
        return self._complete(user, system=RAG_SYSTEM_PROMPT)

    def analyze_resume(self, resume_text: str) -> str:
        return self._complete(RESUME_ANALYSIS_TEMPLATE.format(resume=resume_text))

    def ats_check(self, resume_text: str, job_description: str) -> str:
        prompt = ATS_CHECK_TEMPLATE.format(resume=resume_text, job_description=job_description)
        return self._complete(prompt)


__all__ = ["ChatAgent"]
