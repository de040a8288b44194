"""Tests for the corpus embedding cache."""

from dataclasses import replace

import pytest

from conftest import CountingEmbeddingProvider, FailingEmbeddingProvider
from roadmap_ai.core.document import KnowledgeDocument
from roadmap_ai.core.result import Ok, Result
from roadmap_ai.retrieval.store import EmbeddingStore, fingerprint


class ShortBatchProvider(CountingEmbeddingProvider):
    async def embed_texts(self, texts: list[str]) -> Result[list[list[float]], str]:
        return Ok([[1.0] * self.dimensions])


class TestFingerprint:
    def test_stable(self) -> None:
        assert fingerprint("abc") == fingerprint("abc")

    def test_distinct(self) -> None:
        assert fingerprint("abc") != fingerprint("abd")


class TestEmbeddingStore:
    @pytest.mark.asyncio
    async def test_vectors_one_row_per_document(
        self, sample_documents: list[KnowledgeDocument]
    ) -> None:
        store = EmbeddingStore(CountingEmbeddingProvider(dimensions=16))
        matrix = (await store.vectors_for(sample_documents)).unwrap()
        assert matrix.shape == (3, 16)
        assert store.count == 3

    @pytest.mark.asyncio
    async def test_only_misses_are_embedded(
        self, sample_documents: list[KnowledgeDocument]
    ) -> None:
        provider = CountingEmbeddingProvider()
        store = EmbeddingStore(provider)
        await store.vectors_for(sample_documents[:2])
        await store.vectors_for(sample_documents)
        assert provider.batch_calls == 2
        assert len(provider.embedded_texts) == 3

    @pytest.mark.asyncio
    async def test_edited_document_is_reembedded(
        self, sample_documents: list[KnowledgeDocument]
    ) -> None:
        provider = CountingEmbeddingProvider()
        store = EmbeddingStore(provider)
        await store.vectors_for(sample_documents)
        edited = replace(sample_documents[0], content="Query planning and indexes.")
        assert not store.contains(edited)
        await store.vectors_for([edited, *sample_documents[1:]])
        assert len(provider.embedded_texts) == 4

    @pytest.mark.asyncio
    async def test_duplicate_texts_embedded_once(self) -> None:
        provider = CountingEmbeddingProvider()
        store = EmbeddingStore(provider)
        docs = [KnowledgeDocument(title="Same", content="same", doc_id=str(i)) for i in range(3)]
        matrix = (await store.vectors_for(docs)).unwrap()
        assert matrix.shape[0] == 3
        assert len(provider.embedded_texts) == 1

    @pytest.mark.asyncio
    async def test_empty_documents(self) -> None:
        provider = CountingEmbeddingProvider(dimensions=8)
        matrix = (await EmbeddingStore(provider).vectors_for([])).unwrap()
        assert matrix.shape == (0, 8)
        assert provider.batch_calls == 0

    @pytest.mark.asyncio
    async def test_provider_error(self, sample_documents: list[KnowledgeDocument]) -> None:
        store = EmbeddingStore(FailingEmbeddingProvider())
        result = await store.vectors_for(sample_documents)
        assert result.is_err()
        assert "rate limited" in result.unwrap_err()
        assert store.count == 0

    @pytest.mark.asyncio
    async def test_vector_count_mismatch(self, sample_documents: list[KnowledgeDocument]) -> None:
        store = EmbeddingStore(ShortBatchProvider())
        result = await store.vectors_for(sample_documents)
        assert "returned 1 vectors for 3 texts" in result.unwrap_err()

    @pytest.mark.asyncio
    async def test_prune_and_invalidate(self, sample_documents: list[KnowledgeDocument]) -> None:
        store = EmbeddingStore(CountingEmbeddingProvider())
        await store.vectors_for(sample_documents)
        assert store.prune(sample_documents[:1]) == 2
        assert store.count == 1
        store.invalidate()
        assert store.count == 0
