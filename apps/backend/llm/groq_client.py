from __future__ import annotations

import logging
import os
from typing import List, Sequence

from dotenv import load_dotenv
from groq import Groq

from rag_core.retrieval import SearchResult

# Load .env once when module is imported so that GROQ_API_KEY/GROQ_MODEL_ID
# can be defined in a persisted config file rather than every shell session.
load_dotenv()

_log = logging.getLogger(__name__)

GROQ_MODEL_ID: str = os.getenv("GROQ_MODEL_ID", "llama-3.3-70b-versatile")
GROQ_TEMPERATURE: float = float(os.getenv("GROQ_TEMPERATURE", "0.7"))

# Missing credentials must not block API startup; errors surface on first call.
_client: Groq | None = None


def _get_client() -> Groq:
    """Return a singleton Groq client, initialising it on first use."""
    global _client
    if _client is None:
        _client = Groq()  # GROQ_API_KEY is read from the environment
    return _client


def build_context_block(results: Sequence[SearchResult]) -> str:
    """Format retrieved chunks into a single context block for the LLM."""
    parts: list[str] = []
    for i, res in enumerate(results, 1):
        header = f"[SOURCE {i}: {res.source or 'unknown'}]"
        parts.append(header + "\n" + res.text)
    return "\n\n".join(parts)


def complete(user: str, system: str | None = None) -> str:
    """Run one chat completion and return the reply text."""
    messages: List[dict] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": user})

    _log.info("Request model=%s messages=%s", GROQ_MODEL_ID, messages)
    client = _get_client()
    resp = client.chat.completions.create(
        model=GROQ_MODEL_ID,
        messages=messages,
        temperature=GROQ_TEMPERATURE,
        stream=False,
    )
    content = resp.choices[0].message.content or ""
    _log.info("Response model=%s content=%s", GROQ_MODEL_ID, content)
    return content


__all__ = ["build_context_block", "complete", "GROQ_MODEL_ID"]
