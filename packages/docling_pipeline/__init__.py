"""
Docling-based document pipeline for the chatbot backend.

This package is responsible for:
- Settings for ingestion and retrieval
- Converting input files and uploads to Docling documents and text
- Providing a CLI to build the vector store and run the API
"""
