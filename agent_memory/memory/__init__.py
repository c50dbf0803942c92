"""
Vector Memory System.

Chunks text, embeds it and stores it so later natural-language queries
can retrieve the most semantically related pieces.
"""

from .base import MemoryEntry, MemoryMetadata, SearchResult, VectorStore
from .chunking import ChunkingPipeline, IngestionOptions, chunk_text
from .embeddings import (
    EmbeddingService,
    HashEmbeddingService,
    LocalEmbeddingService,
    OpenAIEmbeddingService,
    create_embedding_service,
    hash_embedding,
)
from .json_store import JsonVectorStore, cosine_similarity

__all__ = [
    "MemoryEntry",
    "MemoryMetadata",
    "SearchResult",
    "VectorStore",
    "ChunkingPipeline",
    "IngestionOptions",
    "chunk_text",
    "EmbeddingService",
    "HashEmbeddingService",
    "LocalEmbeddingService",
    "OpenAIEmbeddingService",
    "create_embedding_service",
    "hash_embedding",
    "JsonVectorStore",
    "cosine_similarity",
]
