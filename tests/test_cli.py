from __future__ import annotations

import pytest
from click.testing import CliRunner

from docling_pipeline.cli import main
from rag_core import indexing
from rag_core.retrieval import SearchResult


class FakeStore:
    def __init__(self, results=None) -> None:
        self.results = results or []
        self.queries: list[tuple] = []

    def sources(self):
        return {"b.pdf": 2, "a.pdf": 5}

    def similarity_search(self, query, top_k=5, threshold=None):
        self.queries.append((query, top_k, threshold))
        return self.results


@pytest.fixture
def store_path(monkeypatch, tmp_path):
    path = tmp_path / "vectorstore.json"
    monkeypatch.setenv("CHATBOT_VECTOR_STORE_PATH", str(path))
    monkeypatch.setenv("CHATBOT_INPUT_DIR", str(tmp_path / "input"))
    return path


def test_ingest_force_removes_persisted_store(monkeypatch, store_path):
    store_path.write_text("[]", encoding="utf-8")
    seen = []

    def build(settings):
        seen.append(store_path.exists())
        return FakeStore()

    monkeypatch.setattr(indexing, "build_vector_store", build)

    result = CliRunner().invoke(main, ["ingest", "--force"])

    assert result.exit_code == 0, result.output
    assert seen == [False]
    lines = [line for line in result.output.splitlines() if "chunks" in line and " - " not in line]
    assert lines == ["a.pdf: 5 chunks", "b.pdf: 2 chunks", "Total: 7 chunks"]


def test_ingest_without_force_keeps_store(monkeypatch, store_path):
    store_path.write_text("[]", encoding="utf-8")
    monkeypatch.setattr(indexing, "build_vector_store", lambda settings: FakeStore())

    result = CliRunner().invoke(main, ["ingest"])

    assert result.exit_code == 0, result.output
    assert store_path.exists()


def test_search_prints_matches(monkeypatch, store_path):
    store = FakeStore([SearchResult(score=0.8123, payload={"source": "a.pdf", "chunk_text": "leave policy text"})])
    monkeypatch.setattr(indexing, "build_vector_store", lambda settings: store)

    result = CliRunner().invoke(main, ["search", "leave policy", "--top-k", "3"])

    assert result.exit_code == 0, result.output
    assert "[0.812] a.pdf: leave policy text" in result.output
    assert store.queries == [("leave policy", 3, 0.5)]


def test_search_without_matches(monkeypatch, store_path):
    monkeypatch.setattr(indexing, "build_vector_store", lambda settings: FakeStore())

    result = CliRunner().invoke(main, ["search", "anything"])

    assert result.exit_code == 0, result.output
    assert "No matching chunks." in result.output


def test_serve_runs_uvicorn(monkeypatch):
    import uvicorn

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

    result = CliRunner().invoke(main, ["serve", "--port", "9000"])

    assert result.exit_code == 0, result.output
    assert calls == [("apps.backend.main:app", {"host": "0.0.0.0", "port": 9000, "reload": False})]
