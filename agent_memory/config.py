"""
Configuration module for Agent Memory.

Loads application settings from config.yaml and secrets from environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import yaml
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# Default config file path
CONFIG_FILE = Path(__file__).parent.parent / "config.yaml"


def _load_yaml_config() -> dict:
    """Load configuration from YAML file."""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE) as f:
            return yaml.safe_load(f) or {}
    return {}


# Load YAML config once at module import
_yaml_config = _load_yaml_config()


def _get_yaml(section: str, key: str, default=None):
    """Get a value from the YAML config."""
    return (_yaml_config.get(section) or {}).get(key, default)


def _get_storage_path() -> str:
    """Get the storage path from .env or YAML."""
    env_path = os.getenv("AGENT_MEMORY_PATH", "")
    if env_path:
        return env_path
    return _get_yaml("memory", "storage_path", ".agent-memory")


@dataclass
class MemoryConfig:
    """Vector memory storage and recall settings."""
    storage_path: str = field(default_factory=_get_storage_path)
    similarity_threshold: float = field(
        default_factory=lambda: _get_yaml("memory", "similarity_threshold", 0.5)
    )
    recall_limit: int = field(
        default_factory=lambda: _get_yaml("memory", "recall_limit", 5)
    )
    # Soft target for chunk size, in characters
    chunk_size: int = field(
        default_factory=lambda: _get_yaml("memory", "chunk_size", 1000)
    )
    register_builtin_skills: bool = field(
        default_factory=lambda: _get_yaml("memory", "register_builtin_skills", True)
    )
    # How many memories are handed to a skill as context
    execute_recall_limit: int = field(
        default_factory=lambda: _get_yaml("memory", "execute_recall_limit", 3)
    )
    recommend_recall_limit: int = field(
        default_factory=lambda: _get_yaml("memory", "recommend_recall_limit", 5)
    )

    @property
    def vectors_path(self) -> Path:
        return Path(self.storage_path) / "vectors"

    @property
    def skills_path(self) -> Path:
        return Path(self.storage_path) / "skills"


@dataclass
class EmbeddingConfig:
    """Embedding provider configuration."""
    provider: Literal["local", "openai", "hash"] = field(
        default_factory=lambda: _get_yaml("embedding", "provider", "local")
    )
    # sentence-transformers model for the local provider
    model: str = field(
        default_factory=lambda: _get_yaml("embedding", "model", "all-MiniLM-L6-v2")
    )
    dimension: int = field(
        default_factory=lambda: _get_yaml("embedding", "dimension", 384)
    )
    openai_model: str = field(
        default_factory=lambda: _get_yaml("embedding", "openai_model", "text-embedding-3-small")
    )
    # Secret from .env
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))


@dataclass
class SkillConfig:
    """Skill recommendation scoring parameters."""
    # Jaccard similarity above which two queries count as the same situation
    context_similarity_threshold: float = field(
        default_factory=lambda: _get_yaml("skills", "context_similarity_threshold", 0.3)
    )
    name_match_weight: float = field(
        default_factory=lambda: _get_yaml("skills", "name_match_weight", 0.3)
    )
    description_match_weight: float = field(
        default_factory=lambda: _get_yaml("skills", "description_match_weight", 0.2)
    )
    # Keywords must be strictly longer than this
    min_keyword_length: int = field(
        default_factory=lambda: _get_yaml("skills", "min_keyword_length", 3)
    )
    default_success_rate: float = field(
        default_factory=lambda: _get_yaml("skills", "default_success_rate", 0.5)
    )
    high_success_rate: float = field(
        default_factory=lambda: _get_yaml("skills", "high_success_rate", 0.7)
    )
    strong_relevance: float = field(
        default_factory=lambda: _get_yaml("skills", "strong_relevance", 0.5)
    )


@dataclass
class AppConfig:
    """Application settings from YAML."""
    log_level: str = field(
        default_factory=lambda: _get_yaml("logging", "level", "INFO")
    )


@dataclass
class Config:
    """Main configuration container."""
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    skills: SkillConfig = field(default_factory=SkillConfig)
    app: AppConfig = field(default_factory=AppConfig)

    def setup_logging(self) -> logging.Logger:
        """Configure and return the application logger."""
        # Reset existing handlers to ensure clean configuration
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)

        logging.basicConfig(
            level=getattr(logging, self.app.log_level.upper(), logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        return logging.getLogger("agent_memory")

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of missing/invalid settings.

        Returns:
            List of validation error messages, empty if all valid.
        """
        errors = []

        if self.embedding.provider not in ("local", "openai", "hash"):
            errors.append(f"Unknown embedding provider: {self.embedding.provider}")
        elif self.embedding.provider == "openai" and not self.embedding.openai_api_key:
            errors.append("OPENAI_API_KEY is required when using the openai embedding provider")

        if self.embedding.dimension <= 0:
            errors.append("embedding.dimension must be positive")

        if not 0.0 <= self.memory.similarity_threshold <= 1.0:
            errors.append("memory.similarity_threshold must be between 0 and 1")
        if self.memory.chunk_size <= 0:
            errors.append("memory.chunk_size must be positive")

        if not 0.0 <= self.skills.context_similarity_threshold <= 1.0:
            errors.append("skills.context_similarity_threshold must be between 0 and 1")
        if not 0.0 <= self.skills.default_success_rate <= 1.0:
            errors.append("skills.default_success_rate must be between 0 and 1")

        return errors


# Global configuration instance
config = Config()
