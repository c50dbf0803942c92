"""
Base interfaces and data structures for vector memory.

Defines the memory entry model and the abstract contract that
vector store backends must implement.
"""

import json
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Literal, Optional

MemoryType = Literal["document", "skill_execution", "conversation", "experience"]

MEMORY_TYPES: tuple[str, ...] = ("document", "skill_execution", "conversation", "experience")


def generate_memory_id() -> str:
    """Generate an opaque, unique memory ID."""
    return uuid.uuid4().hex


def json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_jsonable(value: Any) -> Any:
    """
    Round-trip through JSON so datetimes and tuples become plain values.

    Raises:
        TypeError: If a value has no JSON form.
    """
    return json.loads(json.dumps(value, default=json_default))


@dataclass
class MemoryMetadata:
    """Descriptive metadata attached to a memory entry."""
    type: MemoryType = "document"
    source: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.type not in MEMORY_TYPES:
            raise ValueError(f"Unknown memory type: {self.type}")

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "source": self.source,
            "tags": list(self.tags),
            "context": to_jsonable(self.context),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MemoryMetadata":
        return cls(
            type=data.get("type", "document"),
            source=data.get("source"),
            tags=list(data.get("tags") or []),
            context=dict(data.get("context") or {}),
        )


@dataclass
class MemoryEntry:
    """
    A unit of stored knowledge: one chunk of text with its metadata.

    Entries are never edited in place; storing an entry with an existing
    ID replaces the whole record. The embedding is carried along for
    convenience but does not take part in equality.
    """
    content: str
    metadata: MemoryMetadata = field(default_factory=MemoryMetadata)
    id: str = field(default_factory=generate_memory_id)
    timestamp: datetime = field(default_factory=datetime.now)
    embedding: Optional[list[float]] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict:
        """Serialize without the embedding (stored alongside by the store)."""
        return {
            "id": self.id,
            "content": self.content,
            "metadata": self.metadata.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict, embedding: Optional[list[float]] = None) -> "MemoryEntry":
        return cls(
            id=data["id"],
            content=data["content"],
            metadata=MemoryMetadata.from_dict(data.get("metadata") or {}),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            embedding=embedding,
        )


@dataclass
class SearchResult:
    """A search result from the vector store."""
    entry: MemoryEntry
    similarity: float  # cosine similarity, higher is more similar

    @property
    def is_strong_match(self) -> bool:
        """Is this a strong enough match to mention?"""
        return self.similarity > 0.75


EntryFilter = Callable[[MemoryEntry], bool]


class VectorStore(ABC):
    """
    Abstract interface for vector storage backends.

    Implementations: JsonVectorStore (single-file, in-process)
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backing storage."""
        pass

    @abstractmethod
    async def store(self, entry: MemoryEntry, embedding: list[float]) -> str:
        """
        Store a memory entry with its embedding, replacing any entry with the same ID.

        Args:
            entry: The memory entry
            embedding: The vector embedding (may be empty to skip indexing)

        Returns:
            The ID of the stored entry
        """
        pass

    @abstractmethod
    async def search(
        self,
        query_embedding: list[float],
        limit: int = 5,
        min_similarity: float = 0.5,
        where: Optional[EntryFilter] = None,
    ) -> list[SearchResult]:
        """
        Search for similar memories.

        Args:
            query_embedding: The embedding to search for
            limit: Maximum number of results
            min_similarity: Minimum similarity threshold
            where: Optional predicate applied to candidates before the limit

        Returns:
            List of search results, ordered by similarity
        """
        pass

    @abstractmethod
    async def get(self, memory_id: str) -> Optional[MemoryEntry]:
        """Get a specific memory by ID."""
        pass

    @abstractmethod
    async def get_all(self) -> list[MemoryEntry]:
        """Get all stored memories."""
        pass

    @abstractmethod
    async def delete(self, memory_id: str) -> bool:
        """Delete a memory. Returns True if it existed."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every stored memory."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Get total number of stored memories."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources."""
        pass
