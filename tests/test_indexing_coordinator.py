"""Tests for the indexing coordinator service."""

import pytest

from chunkwright.core.config import ParallelConfig
from chunkwright.providers.embeddings import CallableEmbeddingProvider
from chunkwright.services import IndexingCoordinator
from chunkwright.store import SimilarityStore

CONFIG = {"chunkSize": 120, "strategy": "semantic", "minChunkSize": 20}


@pytest.fixture
def coordinator(provider):
    coordinator = IndexingCoordinator(
        embedding_provider=provider,
        chunking_config=CONFIG,
        parallel_config=ParallelConfig(workers=2, executor="thread"),
        batch_size=3,
    )
    yield coordinator
    coordinator.close()


class TestIndexText:
    """Test indexing single texts in each execution mode."""

    @pytest.mark.parametrize("mode", ["sequential", "parallel", "lazy"])
    def test_modes_store_chunks(self, coordinator, paragraph_text, mode):
        result = coordinator.index_text(paragraph_text, metadata={"source": mode}, mode=mode)

        assert result["status"] == "success"
        assert result["mode"] == mode
        assert result["chunks"] == len(coordinator.store) > 0
        for chunk_id in result["chunk_ids"]:
            assert coordinator.store.get_chunk(chunk_id).metadata["source"] == mode

    def test_lazy_mode_matches_sequential(self, provider, paragraph_text):
        sequential = IndexingCoordinator(embedding_provider=provider, chunking_config=CONFIG)
        lazy = IndexingCoordinator(embedding_provider=provider, chunking_config=CONFIG, batch_size=2)

        sequential.index_text(paragraph_text)
        lazy.index_text(paragraph_text, mode="lazy")

        assert [c.content for c in lazy.store] == [c.content for c in sequential.store]

    def test_no_chunks(self, coordinator):
        result = coordinator.index_text("Short text")
        assert result == {"status": "no_chunks", "mode": "sequential", "chunks": 0}

    def test_unknown_mode(self, coordinator, paragraph_text):
        result = coordinator.index_text(paragraph_text, mode="warp")
        assert result["status"] == "error"
        assert "mode" in result["error"]

    def test_failure_is_reported(self, paragraph_text):
        def embed(text):
            raise RuntimeError("embedding service down")

        coordinator = IndexingCoordinator(
            embedding_provider=CallableEmbeddingProvider(embed, dims=2),
            chunking_config=CONFIG,
        )
        result = coordinator.index_text(paragraph_text)

        assert result["status"] == "error"
        assert "embedding service down" in result["error"]
        assert len(coordinator.store) == 0

    def test_partial_failure_reports_stored_chunks(self, paragraph_text):
        """Chunks stored before a failure are counted and stay in the store."""
        calls = []

        def embed(text):
            calls.append(text)
            if len(calls) == 3:
                raise RuntimeError("quota exhausted")
            return [1.0, 0.0]

        coordinator = IndexingCoordinator(
            embedding_provider=CallableEmbeddingProvider(embed, dims=2),
            chunking_config=CONFIG,
            batch_size=2,
        )
        result = coordinator.index_text(paragraph_text, mode="lazy")

        assert result["status"] == "error"
        assert "quota exhausted" in result["error"]
        assert result["chunks"] == 2 == len(coordinator.store)
        assert result["chunk_ids"] == [c.id for c in coordinator.store]


class TestIndexTexts:
    """Test indexing several texts."""

    def test_sequential(self, coordinator, paragraph_text):
        result = coordinator.index_texts([paragraph_text, "tiny"])

        assert result["status"] == "success"
        assert result["documents"] == 2
        assert result["failed"] == 0
        assert [r["status"] for r in result["results"]] == ["success", "no_chunks"]
        assert result["chunks"] == len(coordinator.store)

    def test_parallel(self, coordinator, paragraph_text):
        result = coordinator.index_texts([paragraph_text, paragraph_text.upper()], mode="parallel")

        assert result["status"] == "success"
        assert result["chunks"] == len(coordinator.store)
        assert all(r["status"] == "success" for r in result["results"])
        assert "parallel" in coordinator.get_stats()

    def test_partial_failure(self, coordinator, paragraph_text):
        result = coordinator.index_texts([paragraph_text, paragraph_text], mode="bogus")
        assert result["status"] == "partial"
        assert result["failed"] == 2


class TestStreamAndSearch:
    """Test stream indexing and search."""

    @pytest.mark.asyncio
    async def test_index_stream(self, coordinator, paragraph_text):
        fragments = [paragraph_text[i:i + 25] for i in range(0, len(paragraph_text), 25)]
        result = await coordinator.index_stream(fragments, metadata={"source": "stream"})

        assert result["status"] == "success"
        assert result["mode"] == "stream"
        assert result["chunks"] == len(coordinator.store)
        assert all(c.metadata["streaming"] for c in coordinator.store)

    @pytest.mark.asyncio
    async def test_index_empty_stream(self, coordinator):
        result = await coordinator.index_stream([])
        assert result["status"] == "no_chunks"

    def test_search(self, coordinator, paragraph_text):
        coordinator.index_text(paragraph_text)
        target = list(coordinator.store)[2]

        results = coordinator.search(target.content, top_k=2, threshold=-1.0)

        assert len(results) == 2
        assert results[0]["chunk"]["id"] == target.id
        assert results[0]["score"] == pytest.approx(1.0)
        assert results[0]["relevance"] == "high"

    def test_stats(self, coordinator, paragraph_text):
        coordinator.index_text(paragraph_text)
        stats = coordinator.get_stats()

        assert stats["store"]["total_chunks"] == len(coordinator.store)
        assert stats["chunking"]["strategy"] == "semantic"

    def test_uses_given_store(self, provider, paragraph_text):
        """An empty store passed in is the one that receives chunks."""
        store = SimilarityStore({"similarityMetric": "dot"})
        coordinator = IndexingCoordinator(store=store, embedding_provider=provider, chunking_config=CONFIG)
        assert coordinator.store is store

        result = coordinator.index_text(paragraph_text)
        assert result["status"] == "success"
        assert len(store) == result["chunks"] > 0
