"""Embedding providers with dependency injection for mock mode.

Supports:
- OpenAI embeddings (production, hybrid)
- Mock embeddings (demo/testing - deterministic, no API keys)
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from roadmap_ai.core.config import RoadmapConfig, RunMode
from roadmap_ai.core.result import Err, Ok, Result


class EmbeddingProvider(ABC):
    """Abstract embedding provider interface."""

    @abstractmethod
    async def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        """Generate embeddings for a batch of texts in one call."""
        ...

    @abstractmethod
    async def embed_query(self, query: str) -> Result[list[float], str]:
        """Generate embedding for a single query."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return the embedding dimensions."""
        ...


class MockEmbeddingProvider(EmbeddingProvider):
    """Deterministic mock embeddings for testing and demos.

    Generates consistent embeddings based on text content hashing.
    Texts with shared words produce similar vectors.
    """

    def __init__(self, dimensions: int = 384) -> None:
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        try:
            return Ok([self._generate_embedding(text) for text in texts])
        except Exception as e:
            return Err(f"Mock embedding failed: {e}")

    async def embed_query(self, query: str) -> Result[list[float], str]:
        try:
            return Ok(self._generate_embedding(query))
        except Exception as e:
            return Err(f"Mock query embedding failed: {e}")

    def _generate_embedding(self, text: str) -> list[float]:
        """Generate a deterministic unit vector from text content.

        Word-level hashing dominates the vector so that texts sharing
        words land close together; a small text-level component keeps
        distinct texts from collapsing onto the same point.
        """
        text_hash = hashlib.sha256(text.encode()).hexdigest()
        rng = np.random.RandomState(int(text_hash[:8], 16))
        base = rng.randn(self._dimensions).astype(np.float64) * 0.1

        for word in set(text.lower().split()):
            word_seed = int(hashlib.md5(word.encode()).hexdigest()[:8], 16)
            word_rng = np.random.RandomState(word_seed)
            base += word_rng.randn(self._dimensions).astype(np.float64)

        norm = np.linalg.norm(base)
        if norm > 0:
            base = base / norm

        return base.tolist()


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """OpenAI API embedding provider for production use."""

    def __init__(self, config: RoadmapConfig) -> None:
        self._config = config
        self._dimensions = config.embedding_dimensions
        self._model: Any = None

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _embeddings_model(self) -> Any:
        if self._model is None:
            from langchain_openai import OpenAIEmbeddings

            self._model = OpenAIEmbeddings(
                model=self._config.embedding_model,
                dimensions=self._dimensions,
                openai_api_key=self._config.openai_api_key,
            )
        return self._model

    async def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        if not texts:
            return Ok([])
        try:
            embeddings = await self._embeddings_model().aembed_documents(texts)
            return Ok(embeddings)
        except ImportError:
            return Err("langchain-openai not installed")
        except Exception as e:
            return Err(f"OpenAI embedding failed: {e}")

    async def embed_query(self, query: str) -> Result[list[float], str]:
        try:
            embedding = await self._embeddings_model().aembed_query(query)
            return Ok(embedding)
        except ImportError:
            return Err("langchain-openai not installed")
        except Exception as e:
            return Err(f"OpenAI query embedding failed: {e}")


def create_embedding_provider(config: RoadmapConfig) -> EmbeddingProvider:
    """Factory function to create the appropriate embedding provider."""
    if config.mode == RunMode.MOCK:
        return MockEmbeddingProvider(dimensions=config.embedding_dimensions)
    return OpenAIEmbeddingProvider(config)
