"""
Shared pytest fixtures for agent memory tests.

This module provides:
- Temporary storage directories
- Vector and skill history stores backed by tmp_path
- A hash-based embedding service (no model download, no network)
- A fully wired MemoryManager
- Sample config and environment fixtures
"""

import logging
from pathlib import Path

import pytest
import pytest_asyncio

from agent_memory.config import Config
from agent_memory.memory.embeddings import HashEmbeddingService
from agent_memory.memory.json_store import JsonVectorStore
from agent_memory.memory_manager import build_memory_manager
from agent_memory.skills.catalog import SkillCatalog
from agent_memory.skills.history import SkillHistoryStore
from agent_memory.skills.manager import SkillManager
from tests.fixtures import make_entry


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def storage_dir(tmp_path) -> Path:
    """Provide a temporary storage root."""
    return tmp_path / "agent-memory"


@pytest.fixture
def vectors_dir(storage_dir) -> Path:
    return storage_dir / "vectors"


@pytest.fixture
def skills_dir(storage_dir) -> Path:
    return storage_dir / "skills"


@pytest.fixture
def vector_store(vectors_dir) -> JsonVectorStore:
    """Provide an empty file-backed vector store."""
    return JsonVectorStore(storage_path=str(vectors_dir))


@pytest.fixture
def hash_embeddings() -> HashEmbeddingService:
    """Deterministic embeddings, 384 dimensions."""
    return HashEmbeddingService()


# =============================================================================
# Skill Fixtures
# =============================================================================


@pytest.fixture
def skill_history(skills_dir) -> SkillHistoryStore:
    return SkillHistoryStore(storage_path=str(skills_dir))


@pytest.fixture
def skill_manager(skill_history) -> SkillManager:
    """A SkillManager with an empty catalog."""
    return SkillManager(catalog=SkillCatalog(), history=skill_history)


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def test_config(storage_dir) -> Config:
    """Configuration pointing at the temporary storage root."""
    settings = Config()
    settings.memory.storage_path = str(storage_dir)
    settings.memory.similarity_threshold = 0.5
    settings.memory.recall_limit = 5
    settings.memory.chunk_size = 1000
    settings.memory.register_builtin_skills = True
    settings.embedding.provider = "hash"
    settings.embedding.dimension = 384
    return settings


@pytest.fixture
def sample_config_yaml(tmp_path) -> Path:
    """Create a sample config.yaml file."""
    config_path = tmp_path / "config.yaml"
    config_content = """
memory:
  storage_path: /tmp/agent-memory-test
  similarity_threshold: 0.4
  chunk_size: 500

embedding:
  provider: hash
  dimension: 128

skills:
  context_similarity_threshold: 0.25

logging:
  level: DEBUG
"""
    config_path.write_text(config_content)
    return config_path


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set mock environment variables for testing."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai-key")


@pytest.fixture
def restore_logging():
    """Undo setup_logging() changes to the root logger after a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# =============================================================================
# Manager Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def memory_manager(test_config, hash_embeddings):
    """Provide an initialized MemoryManager with built-in skills."""
    manager = build_memory_manager(test_config, embedding_service=hash_embeddings)
    await manager.initialize()
    yield manager
    await manager.close()


@pytest.fixture
def sample_entries():
    """Three entries with distinct types and tags."""
    return [
        make_entry(id="doc-1", content="Deploy with docker compose", type="document",
                   source="ops.md", tags=["ops"]),
        make_entry(id="conv-1", content="User asked about deployment", type="conversation",
                   tags=["chat"]),
        make_entry(id="exp-1", content="Deployment failed on missing env var", type="experience",
                   source="ops.md", tags=["ops", "incident"]),
    ]
