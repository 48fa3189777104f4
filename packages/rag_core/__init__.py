"""
Core RAG logic for the chatbot backend.

This package contains:
- Data models for chunks
- Chunking of input files (Docling HybridChunker) with per-file caps
- BGE-M3 embeddings, the Qdrant-backed vector store and retrieval
"""
