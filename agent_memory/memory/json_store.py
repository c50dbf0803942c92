"""
JSON File Vector Store Implementation.

Keeps every memory in process and mirrors the whole collection to a
single human-readable JSON file:
- No server required
- The file is rewritten in full on every mutation
- Exact (brute-force) cosine search, fine up to tens of thousands of entries

One process, one writer: two stores pointed at the same directory will
overwrite each other's changes.
"""

import asyncio
import json
import logging
import math
import os
from pathlib import Path
from typing import Optional

from ..errors import DimensionMismatchError
from .base import EntryFilter, MemoryEntry, SearchResult, VectorStore

logger = logging.getLogger("agent_memory.memory.store")

VECTORS_FILE = "vectors.json"


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector is all zeros.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(expected=len(b), actual=len(a))

    dot_product = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot_product += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot_product / (math.sqrt(norm_a) * math.sqrt(norm_b))


class JsonVectorStore(VectorStore):
    """
    File-backed implementation of the vector store.

    Entries are loaded from disk on construction. Iteration order is
    insertion order (an overwrite keeps its original slot), which also
    breaks similarity ties so repeated queries rank identically.
    """

    def __init__(
        self,
        storage_path: str = ".agent-memory/vectors",
        dimension: Optional[int] = None,
    ):
        """
        Args:
            storage_path: Directory holding vectors.json
            dimension: Expected embedding length. When None it is taken from
                       the first non-empty embedding stored or loaded.
        """
        self.storage_path = Path(storage_path)
        self.file_path = self.storage_path / VECTORS_FILE
        self._dimension = dimension
        self._vectors: dict[str, tuple[MemoryEntry, list[float]]] = {}
        self._lock = asyncio.Lock()

        self.storage_path.mkdir(parents=True, exist_ok=True)
        self._load()
        logger.info(
            f"JsonVectorStore configured with directory: {storage_path} "
            f"({len(self._vectors)} existing memories)"
        )

    @property
    def dimension(self) -> Optional[int]:
        """Embedding length shared by all indexed entries, if known yet."""
        return self._dimension

    def _load(self) -> None:
        """Load vectors from disk, treating a missing or broken file as empty."""
        if not self.file_path.exists():
            return

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            vectors: dict[str, tuple[MemoryEntry, list[float]]] = {}
            dimension = self._dimension
            for item in data:
                embedding = [float(x) for x in item.get("embedding") or []]
                if embedding:
                    if dimension is None:
                        dimension = len(embedding)
                    elif len(embedding) != dimension:
                        raise DimensionMismatchError(expected=dimension, actual=len(embedding))
                entry = MemoryEntry.from_dict(item["entry"], embedding=embedding)
                vectors[item["id"]] = (entry, embedding)
        except Exception as e:
            logger.warning(f"Failed to load vectors from {self.file_path}: {e}")
            return

        self._vectors = vectors
        self._dimension = dimension

    def _write(self, payload: str) -> None:
        self.storage_path.mkdir(parents=True, exist_ok=True)
        tmp_path = self.file_path.with_name(f"{VECTORS_FILE}.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_path, self.file_path)

    async def _save(self, vectors: dict[str, tuple[MemoryEntry, list[float]]]) -> None:
        """
        Persist a candidate state of the collection.

        Serialization happens before the file is touched, so an entry that
        cannot be encoded leaves the previous file intact.
        """
        payload = json.dumps(
            [
                {
                    "id": memory_id,
                    "entry": entry.to_dict(),
                    "embedding": embedding,
                }
                for memory_id, (entry, embedding) in vectors.items()
            ],
            indent=2,
        )
        await asyncio.to_thread(self._write, payload)
        logger.debug(f"Saved {len(vectors)} memories to {self.file_path}")

    async def initialize(self) -> None:
        """Ensure the storage directory exists."""
        self.storage_path.mkdir(parents=True, exist_ok=True)

    async def store(self, entry: MemoryEntry, embedding: list[float]) -> str:
        """Store a memory entry with its embedding."""
        embedding = [float(x) for x in embedding]

        async with self._lock:
            dimension = self._dimension
            if embedding:
                if dimension is None:
                    dimension = len(embedding)
                elif len(embedding) != dimension:
                    raise DimensionMismatchError(expected=dimension, actual=len(embedding))

            existed = entry.id in self._vectors
            stored = MemoryEntry(
                id=entry.id,
                content=entry.content,
                metadata=entry.metadata,
                timestamp=entry.timestamp,
                embedding=embedding,
            )
            # Copying keeps an overwritten ID in its original slot
            updated = dict(self._vectors)
            updated[entry.id] = (stored, embedding)
            await self._save(updated)

            self._vectors = updated
            self._dimension = dimension

        if existed:
            logger.info(f"Updated existing memory: {entry.id}")
        else:
            logger.debug(f"Stored new memory: {entry.id}")
        return entry.id

    async def search(
        self,
        query_embedding: list[float],
        limit: int = 5,
        min_similarity: float = 0.5,
        where: Optional[EntryFilter] = None,
    ) -> list[SearchResult]:
        """Search for similar memories by exact cosine similarity."""
        if limit <= 0:
            return []

        results = []
        for entry, embedding in self._vectors.values():
            # Entries ingested without an embedding cannot be ranked
            if not embedding:
                continue

            similarity = cosine_similarity(query_embedding, embedding)
            if similarity < min_similarity:
                continue
            if where is not None and not where(entry):
                continue
            results.append(SearchResult(entry=entry, similarity=similarity))

        # Stable sort keeps insertion order among equal similarities
        results.sort(key=lambda x: x.similarity, reverse=True)
        return results[:limit]

    async def get(self, memory_id: str) -> Optional[MemoryEntry]:
        """Get a specific memory by ID."""
        item = self._vectors.get(memory_id)
        return item[0] if item else None

    async def get_all(self) -> list[MemoryEntry]:
        """Get all stored memories."""
        return [entry for entry, _ in self._vectors.values()]

    async def delete(self, memory_id: str) -> bool:
        """Delete a memory by ID."""
        async with self._lock:
            if memory_id not in self._vectors:
                return False
            updated = {k: v for k, v in self._vectors.items() if k != memory_id}
            await self._save(updated)
            self._vectors = updated

        logger.info(f"Deleted memory: {memory_id}")
        return True

    async def clear(self) -> None:
        """Clear all memories."""
        async with self._lock:
            removed = len(self._vectors)
            await self._save({})
            self._vectors = {}

        logger.info(f"Cleared {removed} memories")

    async def count(self) -> int:
        """Get total number of stored memories."""
        return len(self._vectors)

    def storage_size(self) -> int:
        """Size of the persisted file in bytes (0 if nothing has been written)."""
        if self.file_path.exists():
            return self.file_path.stat().st_size
        return 0

    async def close(self) -> None:
        """Nothing to release; every mutation is already on disk."""
        logger.info("JsonVectorStore closed")
