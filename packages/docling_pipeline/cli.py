from __future__ import annotations

import logging

import click

from .config import get_settings

_log = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
def main() -> None:
    """CLI entrypoint for the chatbot backend."""


@main.command("ingest")
@click.option("--force", is_flag=True, help="Discard the persisted store and rebuild it from the input folder.")
def ingest(force: bool) -> None:
    """Build the vector store from the configured input folder."""
    _configure_logging()

    from rag_core.indexing import build_vector_store

    settings = get_settings()
    _log.info("Using input_dir=%s", settings.input_dir)
    _log.info("Vector store file=%s", settings.vector_store_path)

    if force and settings.vector_store_path.exists():
        _log.info("Removing existing vector store %s", settings.vector_store_path)
        settings.vector_store_path.unlink()

    store = build_vector_store(settings)
    sources = store.sources()
    for source, count in sorted(sources.items()):
        click.echo(f"{source}: {count} chunks")
    click.echo(f"Total: {sum(sources.values())} chunks")


@main.command("search")
@click.argument("query")
@click.option("--top-k", default=None, type=int, help="Number of results (defaults to settings).")
def search(query: str, top_k: int | None) -> None:
    """Run a similarity search against the vector store."""
    _configure_logging()

    from rag_core.indexing import build_vector_store
    from rag_core.retrieval import SearchSettings, retrieve

    settings = get_settings()
    store = build_vector_store(settings)
    search_settings = SearchSettings(
        top_k=top_k or settings.top_k,
        similarity_threshold=settings.similarity_threshold,
    )
    results = retrieve(store, query, settings=search_settings)
    if not results:
        click.echo("No matching chunks.")
        return
    for res in results:
        click.echo(f"[{res.score:.3f}] {res.source}: {res.text[:200]}")


@main.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8080, type=int, show_default=True)
@click.option("--reload", is_flag=True, help="Reload on code changes (development).")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    _configure_logging()

    import uvicorn

    uvicorn.run("apps.backend.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
