from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Configuration for document ingestion and retrieval."""

    model_config = SettingsConfigDict(
        env_prefix="CHATBOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_root: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parents[2],
        description="Repository root directory.",
    )

    # Files to ingest at startup (PDF, DOCX, HTML, Markdown, plain text...)
    input_dir: Path = Field(
        default_factory=lambda: Path("data") / "input-data",
        description="Directory whose files are loaded into the vector store.",
    )

    vector_store_path: Path = Field(
        default_factory=lambda: Path("data") / "output-data" / "vectorstore.json",
        description="Serialized vector store file.",
    )
    min_store_bytes: int = Field(
        default=5000,
        ge=0,
        description="A store file must be larger than this to be reused.",
    )

    # Hard caps keep embedding API usage bounded.
    max_chunks_per_file: int = Field(default=5, ge=0)
    max_total_chunks: int = Field(default=20, ge=0)

    top_k: int = Field(default=5, ge=1)
    similarity_threshold: float = Field(default=0.5, ge=0.0, le=1.0)

    embedding_model: str = Field(default="BAAI/bge-m3")

    def resolve_paths(self) -> "PipelineSettings":
        """Return a copy with all relative paths resolved against project_root."""

        def _resolve(path: Path) -> Path:
            if path.is_absolute():
                return path
            return self.project_root / path

        return self.model_copy(
            update={
                "input_dir": _resolve(self.input_dir),
                "vector_store_path": _resolve(self.vector_store_path),
            }
        )


def get_settings() -> PipelineSettings:
    """Return settings with resolved paths."""
    return PipelineSettings().resolve_paths()


__all__ = ["PipelineSettings", "get_settings"]
