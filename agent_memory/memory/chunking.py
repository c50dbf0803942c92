"""
Chunking and ingestion of converted documents.

Documents are split on blank lines and paragraphs are packed greedily into
chunks of roughly chunk_size characters. Each chunk becomes one memory entry.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from ..convert import ConversionResult
from .base import MemoryEntry, MemoryMetadata, VectorStore
from .embeddings import EmbeddingService

logger = logging.getLogger("agent_memory.memory.chunking")

PARAGRAPH_BREAK = re.compile(r"\n\n+")


@dataclass
class IngestionOptions:
    """Options for ingesting a document."""
    tags: list[str] = field(default_factory=list)
    source: Optional[str] = None
    chunk_size: Optional[int] = None
    generate_embedding: bool = True


def chunk_text(text: str, max_chunk_size: int) -> list[str]:
    """
    Split text into paragraph-aligned chunks.

    Paragraphs are accumulated until the next one would push the chunk past
    max_chunk_size (separators are not counted). A single paragraph larger
    than the limit becomes its own oversized chunk. Text with no usable
    paragraphs comes back whole as one chunk.
    """
    chunks = []
    current = ""

    for paragraph in PARAGRAPH_BREAK.split(text):
        if len(current) + len(paragraph) <= max_chunk_size:
            current = f"{current}\n\n{paragraph}" if current else paragraph
        else:
            if current:
                chunks.append(current)
            current = paragraph

    if current:
        chunks.append(current)

    return chunks or [text]


class ChunkingPipeline:
    """Turns converted documents into stored, embedded memory entries."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_service: EmbeddingService,
        default_chunk_size: int = 1000,
    ):
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.default_chunk_size = default_chunk_size

    async def ingest(
        self,
        document: ConversionResult,
        options: Optional[IngestionOptions] = None,
        source: Optional[str] = None,
    ) -> list[str]:
        """
        Chunk, embed and store a converted document.

        Chunks are stored one at a time. If embedding or storing a chunk
        fails the error propagates and chunks stored before it remain.

        Args:
            document: Output of the document converter
            options: Tags, source label, chunk size, embedding switch
            source: Fallback source label (usually the file path)

        Returns:
            The new memory IDs in chunk order
        """
        options = options or IngestionOptions()
        chunk_size = options.chunk_size or self.default_chunk_size
        chunks = chunk_text(document.content, chunk_size)

        memory_ids = []
        for index, chunk in enumerate(chunks):
            embedding = (
                await self.embedding_service.embed(chunk)
                if options.generate_embedding
                else []
            )

            entry = MemoryEntry(
                content=chunk,
                metadata=MemoryMetadata(
                    type="document",
                    source=options.source or source,
                    tags=list(options.tags),
                    context={
                        "chunk_index": index,
                        "total_chunks": len(chunks),
                        "original_format": document.metadata.original_format,
                    },
                ),
            )

            memory_ids.append(await self.vector_store.store(entry, embedding))

        logger.info(f"Ingested {len(chunks)} chunks from {options.source or source or 'text'}")
        return memory_ids
