"""Knowledge corpus, embedding cache and similarity search."""

from roadmap_ai.retrieval.knowledge import KnowledgeBase
from roadmap_ai.retrieval.similarity import SimilarityRetriever, cosine_similarity
from roadmap_ai.retrieval.store import EmbeddingStore

__all__ = ["KnowledgeBase", "SimilarityRetriever", "EmbeddingStore", "cosine_similarity"]
