"""Semantic retrieval over the knowledge corpus using cosine similarity.

Retrieval only grounds the generation prompt. It must never block
generation, so every failure ends in an empty result and a log line.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from roadmap_ai.core.document import KnowledgeDocument, ScoredDocument
from roadmap_ai.core.embeddings import EmbeddingProvider
from roadmap_ai.retrieval.store import EmbeddingStore

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; 0.0 if either has zero norm."""
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    if vec_a.shape != vec_b.shape:
        raise ValueError("Vectors must have the same dimensions")

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.clip(np.dot(vec_a, vec_b) / (norm_a * norm_b), -1.0, 1.0))


def cosine_scores(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Row-wise cosine similarity of ``matrix`` against ``query``."""
    if matrix.ndim != 2 or matrix.shape[1] != query.shape[0]:
        raise ValueError("Vectors must have the same dimensions")

    query_norm = np.linalg.norm(query)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * query_norm

    scores = np.zeros(matrix.shape[0], dtype=np.float64)
    nonzero = denom > 0
    scores[nonzero] = (matrix[nonzero] @ query) / denom[nonzero]
    return np.clip(scores, -1.0, 1.0)


def rank_documents(
    documents: Sequence[KnowledgeDocument], scores: Sequence[float], k: int
) -> list[ScoredDocument]:
    """Pair documents with scores and keep the ``k`` best, highest first.

    Ties keep corpus order.
    """
    if k <= 0:
        return []
    order = sorted(range(len(documents)), key=lambda i: scores[i], reverse=True)
    return [ScoredDocument(document=documents[i], score=float(scores[i])) for i in order[:k]]


class SimilarityRetriever:
    """Scores a corpus against a query with cached document embeddings."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        store: Optional[EmbeddingStore] = None,
        char_limit: int = 8000,
    ) -> None:
        self._embeddings = embedding_provider
        self._store = store or EmbeddingStore(embedding_provider, char_limit=char_limit)

    @property
    def store(self) -> EmbeddingStore:
        return self._store

    async def retrieve(
        self, query: str, corpus: Sequence[KnowledgeDocument], k: int
    ) -> list[ScoredDocument]:
        """Return up to ``k`` documents sorted by similarity to ``query``."""
        if not corpus or k <= 0:
            return []
        if not query.strip():
            logger.debug("Skipping retrieval for an empty query")
            return []

        try:
            query_result = await self._embeddings.embed_query(query)
            if query_result.is_err():
                logger.warning("Knowledge retrieval skipped: %s", query_result.error)  # type: ignore[union-attr]
                return []

            vectors_result = await self._store.vectors_for(corpus)
            if vectors_result.is_err():
                logger.warning("Knowledge retrieval skipped: %s", vectors_result.error)  # type: ignore[union-attr]
                return []

            scores = cosine_scores(
                np.asarray(query_result.unwrap(), dtype=np.float64), vectors_result.unwrap()
            )
        except Exception as e:
            logger.warning("Knowledge retrieval failed: %s", e)
            return []

        ranked = rank_documents(corpus, scores.tolist(), k)
        logger.info("Retrieved %d of %d knowledge documents for %r", len(ranked), len(corpus), query)
        return ranked
