from __future__ import annotations

import logging
from types import SimpleNamespace

from apps.backend.llm import groq_client
from rag_core.retrieval import SearchResult


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs: dict = {}

    def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_client(content):
    completions = FakeCompletions(content)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def test_complete_sends_system_and_user_messages(monkeypatch, caplog):
    client, completions = _fake_client("Paris")
    monkeypatch.setattr(groq_client, "_get_client", lambda: client)

    with caplog.at_level(logging.INFO, logger=groq_client.__name__):
        reply = groq_client.complete("Capital of France?", system="Be brief.")

    assert reply == "Paris"
    assert completions.kwargs["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Capital of France?"},
    ]
    assert completions.kwargs["model"] == groq_client.GROQ_MODEL_ID
    assert "max_completion_tokens" not in completions.kwargs
    assert any("Request" in r.getMessage() for r in caplog.records)
    assert any("Response" in r.getMessage() and "Paris" in r.getMessage() for r in caplog.records)


def test_complete_without_system_prompt(monkeypatch):
    client, completions = _fake_client("hi")
    monkeypatch.setattr(groq_client, "_get_client", lambda: client)

    groq_client.complete("hello")

    assert completions.kwargs["messages"] == [{"role": "user", "content": "hello"}]
    assert completions.kwargs["temperature"] == groq_client.GROQ_TEMPERATURE


def test_complete_empty_content_becomes_empty_string(monkeypatch):
    client, _ = _fake_client(None)
    monkeypatch.setattr(groq_client, "_get_client", lambda: client)

    assert groq_client.complete("hello") == ""


def test_build_context_block_numbers_sources():
    results = [
        SearchResult(score=0.9, payload={"source": "a.pdf", "chunk_text": "alpha"}),
        SearchResult(score=0.7, payload={"chunk_text": "beta"}),
    ]

    block = groq_client.build_context_block(results)

    assert block == "[SOURCE 1: a.pdf]\nalpha\n\n[SOURCE 2: unknown]\nbeta"


def test_build_context_block_empty():
    assert groq_client.build_context_block([]) == ""
