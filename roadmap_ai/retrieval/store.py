"""In-memory cache of knowledge-document embeddings.

Document vectors are keyed by a fingerprint of the exact text that was
embedded, so an edited document misses the cache on its next lookup and
an unchanged one is never re-embedded. Misses are embedded together in a
single batch call.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Iterable, Sequence

import numpy as np

from roadmap_ai.core.document import KnowledgeDocument
from roadmap_ai.core.embeddings import EmbeddingProvider
from roadmap_ai.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)


def fingerprint(text: str) -> str:
    """Stable cache key for an embedding input."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class EmbeddingStore:
    """Caches corpus embeddings produced by an ``EmbeddingProvider``."""

    def __init__(self, embedding_provider: EmbeddingProvider, char_limit: int = 8000) -> None:
        self._embeddings = embedding_provider
        self._char_limit = char_limit
        self._vectors: dict[str, np.ndarray] = {}

    @property
    def count(self) -> int:
        """Return the number of cached vectors."""
        return len(self._vectors)

    def key_for(self, document: KnowledgeDocument) -> str:
        return fingerprint(document.embedding_text(self._char_limit))

    def contains(self, document: KnowledgeDocument) -> bool:
        return self.key_for(document) in self._vectors

    async def vectors_for(
        self, documents: Sequence[KnowledgeDocument]
    ) -> Result[np.ndarray, str]:
        """Return one row per document, embedding only the uncached ones."""
        if not documents:
            return Ok(np.empty((0, self._embeddings.dimensions)))

        texts = [doc.embedding_text(self._char_limit) for doc in documents]
        keys = [fingerprint(text) for text in texts]

        missing: dict[str, str] = {}
        for key, text in zip(keys, texts):
            if key not in self._vectors and key not in missing:
                missing[key] = text

        if missing:
            logger.debug(
                "Embedding %d of %d knowledge documents (cache holds %d)",
                len(missing), len(documents), len(self._vectors),
            )
            embed_result = await self._embeddings.embed_texts(list(missing.values()))
            if embed_result.is_err():
                return Err(f"Embedding failed: {embed_result.error}")  # type: ignore[union-attr]

            vectors = embed_result.unwrap()
            if len(vectors) != len(missing):
                return Err(
                    f"Embedding provider returned {len(vectors)} vectors for {len(missing)} texts"
                )
            for key, vector in zip(missing.keys(), vectors):
                self._vectors[key] = np.asarray(vector, dtype=np.float64)

        try:
            return Ok(np.vstack([self._vectors[key] for key in keys]))
        except ValueError as e:
            return Err(f"Inconsistent embedding dimensions: {e}")

    def prune(self, documents: Iterable[KnowledgeDocument]) -> int:
        """Drop vectors for documents no longer in the corpus. Returns the number dropped."""
        live = {self.key_for(doc) for doc in documents}
        stale = [key for key in self._vectors if key not in live]
        for key in stale:
            del self._vectors[key]
        return len(stale)

    def invalidate(self) -> None:
        """Forget every cached vector."""
        self._vectors.clear()
