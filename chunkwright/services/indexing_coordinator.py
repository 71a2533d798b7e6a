"""Indexing coordinator service for chunkwright - text to chunks to store workflows."""

from typing import Any, AsyncIterable, Dict, Iterable, List, Optional, Sequence, Union

from loguru import logger

from ..chunker import Segmenter
from ..core.config import ChunkingConfig, ParallelConfig
from ..core.exceptions import ConfigurationError
from ..core.models import Chunk
from ..interfaces import EmbeddingProvider
from ..lazy import LazySegmenter
from ..parallel import ParallelSegmenter
from ..registry import ProviderRegistry
from ..store import SimilarityStore
from ..streaming import ContinuousSegmenter

INDEXING_MODES = ("sequential", "parallel", "lazy")


class IndexingCoordinator:
    """Coordinates segmentation and storage of texts.

    Every ``index_*`` call returns a status dictionary instead of raising, so
    batch callers can record failures per document.
    """

    def __init__(
        self,
        store: Optional[SimilarityStore] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        chunking_config: Optional[Any] = None,
        parallel_config: Optional[ParallelConfig] = None,
        registry: Optional[ProviderRegistry] = None,
        batch_size: int = 100
    ):
        """Initialize indexing coordinator.

        Args:
            store: Store receiving chunks (a new default store if omitted)
            embedding_provider: Vector source shared by segmenters and store
            chunking_config: Segmentation configuration
            parallel_config: Worker pool settings for parallel mode
            registry: Registry resolving strategies and the default provider
            batch_size: Chunks materialized per step in lazy mode
        """
        if store is None:
            store = SimilarityStore(embedding_provider=embedding_provider, registry=registry)
        self._store = store
        self._embedding_provider = embedding_provider
        self._registry = registry
        self._chunking_config = ChunkingConfig.merge(chunking_config)
        self._parallel_config = parallel_config or ParallelConfig()
        self._batch_size = batch_size
        self._segmenter = Segmenter(
            self._chunking_config, embedding_provider=embedding_provider, registry=registry
        )
        self._parallel: Optional[ParallelSegmenter] = None

    @property
    def store(self) -> SimilarityStore:
        """Store receiving indexed chunks."""
        return self._store

    @property
    def chunking_config(self) -> ChunkingConfig:
        return self._chunking_config

    def _get_parallel(self) -> ParallelSegmenter:
        if self._parallel is None:
            self._parallel = ParallelSegmenter(
                self._chunking_config,
                embedding_provider=self._embedding_provider,
                registry=self._registry,
                parallel_config=self._parallel_config,
            )
        return self._parallel

    def _store_chunks(self, chunks: Iterable[Chunk], chunk_ids: Optional[List[str]] = None) -> List[str]:
        """Add chunks to the store, appending each stored id to ``chunk_ids`` as it lands."""
        if chunk_ids is None:
            chunk_ids = []
        for chunk in chunks:
            chunk_ids.append(self._store.add(chunk).id)
        return chunk_ids

    def index_text(
        self,
        text: str,
        metadata: Optional[Dict[str, Any]] = None,
        mode: str = "sequential"
    ) -> Dict[str, Any]:
        """Segment one text with the chosen execution mode and store the chunks.

        Args:
            text: Source text
            metadata: Caller metadata copied onto every chunk
            mode: "sequential", "parallel" or "lazy"

        Returns:
            Dictionary with status, chunk count and chunk ids
        """
        chunk_ids: List[str] = []
        try:
            if mode not in INDEXING_MODES:
                raise ConfigurationError("mode", mode, f"Mode must be one of {INDEXING_MODES}")

            if mode == "sequential":
                self._store_chunks(self._segmenter.segment(text, metadata), chunk_ids)
            elif mode == "parallel":
                self._store_chunks(self._get_parallel().segment(text, metadata), chunk_ids)
            else:
                lazy = LazySegmenter(
                    text,
                    self._chunking_config,
                    metadata=metadata,
                    embedding_provider=self._embedding_provider,
                    registry=self._registry,
                )
                for start in range(0, len(lazy), self._batch_size):
                    self._store_chunks(lazy.process_batch(start, self._batch_size), chunk_ids)
                    lazy.clear_cache()

            if not chunk_ids:
                return {"status": "no_chunks", "mode": mode, "chunks": 0}

            logger.debug(f"Indexed {len(chunk_ids)} chunks ({mode})")
            return {"status": "success", "mode": mode, "chunks": len(chunk_ids), "chunk_ids": chunk_ids}

        except Exception as e:
            # Chunks stored before the failure stay in the store and are reported
            logger.error(f"Failed to index text ({mode}) after {len(chunk_ids)} chunks: {e}")
            return {
                "status": "error",
                "mode": mode,
                "error": str(e),
                "chunks": len(chunk_ids),
                "chunk_ids": chunk_ids,
            }

    def index_texts(
        self,
        texts: Sequence[str],
        metadata: Optional[Dict[str, Any]] = None,
        mode: str = "sequential"
    ) -> Dict[str, Any]:
        """Index several texts.

        In parallel mode each text becomes one worker task; other modes index
        the texts one after another. Per-text results are listed in order.
        """
        if mode == "parallel":
            try:
                results = self._get_parallel().segment_many(texts, metadata)
            except Exception as e:
                logger.error(f"Failed to index {len(texts)} texts in parallel: {e}")
                return {"status": "error", "mode": mode, "error": str(e), "documents": len(texts), "chunks": 0}

            per_text = []
            for chunks in results:
                chunk_ids: List[str] = []
                try:
                    self._store_chunks(chunks, chunk_ids)
                except Exception as e:
                    logger.error(f"Failed to store chunks after {len(chunk_ids)}: {e}")
                    per_text.append({
                        "status": "error",
                        "mode": mode,
                        "error": str(e),
                        "chunks": len(chunk_ids),
                        "chunk_ids": chunk_ids,
                    })
                    continue
                per_text.append({
                    "status": "success" if chunk_ids else "no_chunks",
                    "mode": mode,
                    "chunks": len(chunk_ids),
                    "chunk_ids": chunk_ids,
                })
        else:
            per_text = [self.index_text(text, metadata, mode=mode) for text in texts]

        failed = sum(1 for result in per_text if result["status"] == "error")
        total_chunks = sum(result["chunks"] for result in per_text)
        logger.info(f"Indexed {len(texts)} texts into {total_chunks} chunks ({failed} failed)")
        return {
            "status": "success" if failed == 0 else "partial",
            "mode": mode,
            "documents": len(texts),
            "failed": failed,
            "chunks": total_chunks,
            "results": per_text,
        }

    async def index_stream(
        self,
        fragments: Union[AsyncIterable[Union[str, bytes]], Iterable[Union[str, bytes]]],
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Segment a fragment stream continuously and store chunks as they settle."""
        stream = ContinuousSegmenter(
            self._chunking_config,
            embedding_provider=self._embedding_provider,
            metadata=metadata,
            registry=self._registry,
        )
        chunk_ids: List[str] = []
        try:
            async for chunk in stream.astream(fragments):
                chunk_ids.append(self._store.add(chunk).id)
        except Exception as e:
            logger.error(f"Failed to index stream after {len(chunk_ids)} chunks: {e}")
            return {"status": "error", "mode": "stream", "error": str(e), "chunks": len(chunk_ids)}

        if not chunk_ids:
            return {"status": "no_chunks", "mode": "stream", "chunks": 0}
        return {"status": "success", "mode": "stream", "chunks": len(chunk_ids), "chunk_ids": chunk_ids}

    def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        threshold: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """Search indexed chunks by text; results as plain dictionaries."""
        results = self._store.search_by_text(query, top_k=top_k, threshold=threshold)
        logger.info(f"Search completed: {len(results)} results found")
        return [result.to_dict() for result in results]

    def get_stats(self) -> Dict[str, Any]:
        stats = {"store": self._store.get_stats(), "chunking": self._chunking_config.to_dict()}
        if self._parallel is not None:
            stats["parallel"] = self._parallel.get_performance_stats()
        return stats

    def close(self) -> None:
        """Release the worker pool used by parallel mode."""
        if self._parallel is not None:
            self._parallel.close()
            self._parallel = None
