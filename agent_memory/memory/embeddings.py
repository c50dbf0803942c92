"""
Embedding Service for generating vector representations.

Uses a local sentence-transformers model by default, with support for
OpenAI's embedding API. Whenever a model cannot be loaded or a single call
fails, a deterministic hash-based embedding of the same dimension is used
instead, so callers never see a dimension change or a hard failure caused
by model unavailability.
"""

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Literal

logger = logging.getLogger("agent_memory.memory.embeddings")

DEFAULT_DIMENSION = 384  # all-MiniLM-L6-v2


def hash_embedding(text: str, dimension: int = DEFAULT_DIMENSION) -> list[float]:
    """
    Derive a unit-length vector from character codes.

    Each character of each word contributes to one bucket chosen from its
    code point, its position in the word and the word's position in the
    text. Identical text always yields an identical vector; empty text
    yields the zero vector.
    """
    words = text.lower().split()
    embedding = [0.0] * dimension
    if not words:
        return embedding

    weight = 1 / math.sqrt(len(words))
    for i, word in enumerate(words):
        for j, char in enumerate(word):
            index = (ord(char) + j * 17 + i * 31) % dimension
            embedding[index] += weight

    norm = math.sqrt(sum(value * value for value in embedding))
    if norm > 0:
        embedding = [value / norm for value in embedding]
    return embedding


class EmbeddingService(ABC):
    """Abstract interface for embedding generation."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the dimension of embeddings produced."""
        pass

    @property
    def is_ready(self) -> bool:
        """Whether initialize() has completed (possibly in fallback mode)."""
        return True

    async def initialize(self) -> None:
        """One-time setup; safe to call repeatedly."""
        pass

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        pass

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts."""
        pass


class HashEmbeddingService(EmbeddingService):
    """
    Model-free embeddings using the deterministic hash scheme.

    Lower quality than a learned model but needs no downloads, which makes
    it useful offline and in tests.
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION):
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str) -> list[float]:
        return hash_embedding(text, self._dimension)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [hash_embedding(text, self._dimension) for text in texts]


class ModelEmbeddingService(EmbeddingService):
    """
    Base for services backed by an external model.

    Subclasses provide _load_model() and _encode(); this class handles
    one-time initialization, readiness and the fallback path.
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION):
        self._dimension = dimension
        self._model: Any = None
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_ready(self) -> bool:
        return self._initialized

    @property
    def using_fallback(self) -> bool:
        """True when the model is unavailable and hash embeddings are served."""
        return self._initialized and self._model is None

    @abstractmethod
    async def _load_model(self) -> Any:
        """Load and return the underlying model client."""
        pass

    @abstractmethod
    async def _encode(self, texts: list[str]) -> list[list[float]]:
        """Embed texts with the loaded model."""
        pass

    async def initialize(self) -> None:
        """Load the model, falling back to hash embeddings on failure."""
        async with self._init_lock:
            if self._initialized:
                return
            try:
                self._model = await self._load_model()
            except Exception as e:
                self._model = None
                logger.warning(f"Failed to initialize embedding model: {e}")
                logger.warning("Embeddings will use the hash-based fallback")
            self._initialized = True

    def _fallback(self, texts: list[str]) -> list[list[float]]:
        return [hash_embedding(text, self._dimension) for text in texts]

    async def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        return (await self.embed_batch([text]))[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts, in input order."""
        if not texts:
            return []

        if not self._initialized:
            await self.initialize()

        if self._model is None:
            return self._fallback(texts)

        try:
            embeddings = await self._encode(texts)
        except Exception as e:
            logger.warning(f"Embedding generation failed, using fallback: {e}")
            return self._fallback(texts)

        if any(len(embedding) != self._dimension for embedding in embeddings):
            logger.warning(
                f"Model returned vectors of unexpected length (expected {self._dimension}), "
                "using fallback"
            )
            return self._fallback(texts)
        return embeddings


class LocalEmbeddingService(ModelEmbeddingService):
    """
    Local embedding service using sentence-transformers.

    Uses all-MiniLM-L6-v2 by default (384 dimensions, fast, good quality).
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", dimension: int = DEFAULT_DIMENSION):
        super().__init__(dimension=dimension)
        self.model_name = model_name
        logger.info(f"LocalEmbeddingService configured with model: {model_name}")

    async def _load_model(self) -> Any:
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError:
            raise RuntimeError(
                "sentence-transformers not installed. "
                "Install with: pip install sentence-transformers"
            )

        model = await asyncio.to_thread(SentenceTransformer, self.model_name)
        model_dimension = model.get_sentence_embedding_dimension()
        if model_dimension and model_dimension != self._dimension:
            logger.info(
                f"Model {self.model_name} produces {model_dimension}-dim vectors, "
                f"overriding configured {self._dimension}"
            )
            self._dimension = model_dimension
        logger.info(f"Loaded local embedding model: {self.model_name}")
        return model

    async def _encode(self, texts: list[str]) -> list[list[float]]:
        embeddings = await asyncio.to_thread(
            self._model.encode,
            texts,
            convert_to_numpy=True,
            normalize_embeddings=True,
        )
        return embeddings.tolist()


class OpenAIEmbeddingService(ModelEmbeddingService):
    """
    OpenAI embedding service using text-embedding-3 models.

    Supports native dimension reduction via the dimensions parameter, so the
    store dimension can be pinned regardless of the model's default.
    """

    # Default dimensions for each model
    MODEL_DEFAULT_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
    }

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int | None = None,
    ):
        """
        Initialize OpenAI embedding service.

        Args:
            api_key: OpenAI API key
            model: Model name (text-embedding-3-small or text-embedding-3-large)
            dimensions: Override output dimensions. If None, uses the model's default.
        """
        default_dim = self.MODEL_DEFAULT_DIMENSIONS.get(model, 1536)
        if dimensions is not None and dimensions > default_dim:
            logger.warning(
                f"Requested dimensions ({dimensions}) exceeds model default ({default_dim}). "
                f"Using {default_dim}."
            )
            dimensions = None
        super().__init__(dimension=dimensions or default_dim)
        self.api_key = api_key
        self.model = model
        self._requested_dimensions = dimensions

        logger.info(
            f"OpenAIEmbeddingService configured: model={model}, dimensions={self._dimension}"
        )

    async def _load_model(self) -> Any:
        from openai import AsyncOpenAI
        return AsyncOpenAI(api_key=self.api_key)

    async def _encode(self, texts: list[str]) -> list[list[float]]:
        kwargs = {
            "model": self.model,
            "input": texts,
        }
        if self._requested_dimensions is not None:
            kwargs["dimensions"] = self._requested_dimensions

        response = await self._model.embeddings.create(**kwargs)

        # Sort by index to maintain order
        sorted_data = sorted(response.data, key=lambda x: x.index)
        return [item.embedding for item in sorted_data]


def create_embedding_service(
    provider: Literal["local", "openai", "hash"] = "local",
    api_key: str = "",
    model: str = "",
    dimension: int = DEFAULT_DIMENSION,
) -> EmbeddingService:
    """
    Factory function to create the appropriate embedding service.

    Args:
        provider: "local", "openai" or "hash"
        api_key: OpenAI API key (required for openai provider)
        model: Model name (optional, uses defaults)
        dimension: Vector dimension. For openai this is passed as the
                   dimensions override.

    Returns:
        Configured EmbeddingService instance
    """
    if provider == "local":
        return LocalEmbeddingService(
            model_name=model or "all-MiniLM-L6-v2",
            dimension=dimension,
        )
    elif provider == "openai":
        if not api_key:
            raise ValueError("OpenAI API key required for openai embedding provider")
        return OpenAIEmbeddingService(
            api_key=api_key,
            model=model or "text-embedding-3-small",
            dimensions=dimension,
        )
    elif provider == "hash":
        return HashEmbeddingService(dimension=dimension)
    else:
        raise ValueError(f"Unknown embedding provider: {provider}")
