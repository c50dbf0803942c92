"""
Memory Manager - Orchestrates the agent memory system.

This is the high-level interface that the CLI and host agents use.
It handles:
- Converting and chunking files into embedded memories
- Recalling memories by meaning, with metadata filters
- Executing skills with relevant memories as context
- Recommending skills from execution history
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .config import Config
from .convert import DocumentConverter
from .memory.base import MemoryEntry, MemoryMetadata, MemoryType, SearchResult
from .memory.chunking import ChunkingPipeline, IngestionOptions
from .memory.embeddings import EmbeddingService, create_embedding_service
from .memory.json_store import JsonVectorStore
from .skills.base import (
    Skill,
    SkillContext,
    SkillExecutionRecord,
    SkillRecommendation,
    SkillResult,
)
from .skills.builtin import builtin_skills
from .skills.catalog import SkillCatalog
from .skills.history import SkillHistoryStore
from .skills.manager import SkillManager

logger = logging.getLogger("agent_memory.manager")


@dataclass
class RecallFilters:
    """Metadata constraints for recall. Tags match if any tag is shared."""
    type: Optional[MemoryType] = None
    tags: list[str] = field(default_factory=list)
    source: Optional[str] = None

    def matches(self, entry: MemoryEntry) -> bool:
        metadata = entry.metadata

        if self.type and metadata.type != self.type:
            return False

        if self.source and metadata.source != self.source:
            return False

        if self.tags and not any(tag in metadata.tags for tag in self.tags):
            return False

        return True


@dataclass
class RecallOptions:
    """Options for memory recall. None means use the configured default."""
    limit: Optional[int] = None
    threshold: Optional[float] = None
    filters: Optional[RecallFilters] = None


@dataclass
class MemoryStats:
    """Statistics about the memory system."""
    total_count: int
    counts_by_type: dict[str, int]
    oldest_timestamp: Optional[datetime] = None
    newest_timestamp: Optional[datetime] = None
    storage_size: int = 0  # bytes on disk


def render_output(result: SkillResult) -> str:
    """Short text form of a skill result for storing as an experience."""
    if result.output is None:
        return json.dumps(None) if result.success else f"error: {result.error}"
    return result.output.body


class MemoryManager:
    """
    High-level memory management for an autonomous agent.

    Composes document conversion, embedding, vector storage and the skill
    subsystem. Calls are not safe to overlap with each other on the same
    instance from different tasks unless they are read-only.
    """

    def __init__(
        self,
        vector_store: JsonVectorStore,
        embedding_service: EmbeddingService,
        skill_manager: SkillManager,
        converter: Optional[DocumentConverter] = None,
        settings: Optional[Config] = None,
    ):
        self.settings = settings or Config()
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.skill_manager = skill_manager
        self.converter = converter or DocumentConverter()
        self.pipeline = ChunkingPipeline(
            vector_store=vector_store,
            embedding_service=embedding_service,
            default_chunk_size=self.settings.memory.chunk_size,
        )
        self._initialized = False
        logger.info("MemoryManager created")

    async def initialize(self) -> None:
        """Initialize the memory system. Safe to call more than once."""
        if self._initialized:
            return

        await self.embedding_service.initialize()
        await self.vector_store.initialize()
        self._initialized = True

        count = await self.vector_store.count()
        logger.info(f"MemoryManager initialized with {count} stored memories")

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    async def ingest(self, path: str | Path, options: Optional[IngestionOptions] = None) -> list[str]:
        """
        Ingest a file into memory.

        Args:
            path: File to convert and store
            options: Tags, source label (defaults to the path), chunk size

        Returns:
            Memory IDs of the stored chunks, in document order

        Raises:
            DocumentNotFoundError: If the file does not exist.
            UnsupportedInputError: If the file cannot be converted.
        """
        await self._ensure_initialized()

        logger.info(f"Ingesting file: {path}")
        document = await self.converter.convert(path)
        return await self.pipeline.ingest(document, options, source=str(path))

    async def ingest_text(
        self,
        text: str,
        metadata: Optional[MemoryMetadata] = None,
    ) -> str:
        """
        Store a piece of text as a single memory.

        Args:
            text: Content to remember
            metadata: Type (defaults to conversation), source, tags, context

        Returns:
            The new memory ID
        """
        await self._ensure_initialized()

        metadata = metadata or MemoryMetadata(type="conversation")
        embedding = await self.embedding_service.embed(text)
        entry = MemoryEntry(content=text, metadata=metadata)

        return await self.vector_store.store(entry, embedding)

    async def recall(self, query: str, options: Optional[RecallOptions] = None) -> list[SearchResult]:
        """
        Recall memories related to a query.

        Args:
            query: Natural-language query
            options: Limit, similarity threshold and metadata filters

        Returns:
            Matching memories, most similar first
        """
        await self._ensure_initialized()

        options = options or RecallOptions()
        limit = options.limit if options.limit is not None else self.settings.memory.recall_limit
        threshold = (
            options.threshold
            if options.threshold is not None
            else self.settings.memory.similarity_threshold
        )

        query_embedding = await self.embedding_service.embed(query)
        # Filters run inside the search, before the limit is taken, so a
        # filter narrows the candidates rather than emptying a full page.
        results = await self.vector_store.search(
            query_embedding=query_embedding,
            limit=limit,
            min_similarity=threshold,
            where=options.filters.matches if options.filters else None,
        )

        logger.info(f"Recalled {len(results)} memories for: {query[:80]}")
        for r in results:
            logger.debug(f"  - {r.entry.id}: similarity={r.similarity:.3f}")

        return results

    async def get(self, memory_id: str) -> Optional[MemoryEntry]:
        """Look up one memory by ID."""
        return await self.vector_store.get(memory_id)

    async def forget(self, memory_id: str) -> bool:
        """Delete one memory. Returns False if it did not exist."""
        return await self.vector_store.delete(memory_id)

    def register_skill(self, skill: Skill) -> None:
        """Register a skill, replacing any skill with the same ID."""
        self.skill_manager.catalog.register(skill)

    def get_skills(self) -> list[Skill]:
        """All registered skills in registration order."""
        return self.skill_manager.catalog.all()

    def get_skill_history(self, skill_id: Optional[str] = None) -> list[SkillExecutionRecord]:
        return self.skill_manager.history.records(skill_id)

    async def _skill_context(self, query: str, limit: int, **metadata: Any) -> SkillContext:
        memories = await self.recall(query, RecallOptions(limit=limit))
        return SkillContext(
            query=query,
            memories=[r.entry for r in memories],
            metadata=metadata,
        )

    async def execute_skill(self, skill_id: str, query: str) -> SkillResult:
        """
        Execute a skill with relevant memories as context.

        The execution itself is remembered as an experience memory.

        Raises:
            SkillNotFoundError: If the skill is not registered.
        """
        await self._ensure_initialized()

        # Fail fast before doing any recall work
        self.skill_manager.catalog.require(skill_id)

        context = await self._skill_context(
            query,
            limit=self.settings.memory.execute_recall_limit,
            timestamp=datetime.now(),
        )
        result = await self.skill_manager.execute(skill_id, context)

        await self.ingest_text(
            f"Skill executed: {skill_id}\nQuery: {query}\nResult: {render_output(result)}",
            MemoryMetadata(
                type="experience",
                tags=["skill-execution", skill_id],
                context={"skill_id": skill_id, "success": result.success},
            ),
        )

        return result

    async def recommend_skills(self, query: str, limit: int = 3) -> list[SkillRecommendation]:
        """Rank registered skills for a query."""
        await self._ensure_initialized()

        context = await self._skill_context(
            query,
            limit=self.settings.memory.recommend_recall_limit,
        )
        return self.skill_manager.recommend(context, limit)

    async def get_stats(self) -> MemoryStats:
        """Get memory statistics."""
        memories = await self.vector_store.get_all()

        counts_by_type: dict[str, int] = {}
        for memory in memories:
            memory_type = memory.metadata.type
            counts_by_type[memory_type] = counts_by_type.get(memory_type, 0) + 1

        timestamps = [memory.timestamp for memory in memories]
        return MemoryStats(
            total_count=len(memories),
            counts_by_type=counts_by_type,
            oldest_timestamp=min(timestamps) if timestamps else None,
            newest_timestamp=max(timestamps) if timestamps else None,
            storage_size=self.vector_store.storage_size(),
        )

    async def clear(self) -> None:
        """Clear all memories and the skill execution history."""
        await self.vector_store.clear()
        await self.skill_manager.clear_history()
        logger.info("All memories and skill history cleared")

    async def close(self) -> None:
        """Clean up resources."""
        await self.vector_store.close()
        logger.info("MemoryManager closed")


def build_memory_manager(
    settings: Config,
    embedding_service: Optional[EmbeddingService] = None,
) -> MemoryManager:
    """
    Wire a MemoryManager from configuration without initializing it.

    Args:
        settings: Configuration to build from
        embedding_service: Use this provider instead of the configured one

    Returns:
        Uninitialized MemoryManager
    """
    if embedding_service is None:
        embedding_service = create_embedding_service(
            provider=settings.embedding.provider,
            api_key=settings.embedding.openai_api_key,
            model=(
                settings.embedding.openai_model
                if settings.embedding.provider == "openai"
                else settings.embedding.model
            ),
            dimension=settings.embedding.dimension,
        )

    catalog = SkillCatalog(builtin_skills() if settings.memory.register_builtin_skills else [])
    skill_manager = SkillManager(
        catalog=catalog,
        history=SkillHistoryStore(storage_path=str(settings.memory.skills_path)),
        scoring=settings.skills,
    )

    return MemoryManager(
        vector_store=JsonVectorStore(storage_path=str(settings.memory.vectors_path)),
        embedding_service=embedding_service,
        skill_manager=skill_manager,
        settings=settings,
    )


async def create_memory_manager(
    settings: Optional[Config] = None,
    embedding_service: Optional[EmbeddingService] = None,
) -> MemoryManager:
    """
    Factory function to create a configured, initialized MemoryManager.

    Args:
        settings: Configuration (defaults to a fresh Config from config.yaml/.env)
        embedding_service: Optional provider override

    Returns:
        Initialized MemoryManager
    """
    manager = build_memory_manager(settings or Config(), embedding_service)
    await manager.initialize()
    return manager
