"""Similarity store for chunkwright - in-memory chunks with linear-scan search.

Chunks live in an arena: a list of slots addressed by integer handles, with a
``chunk id -> handle`` map as secondary index. Removing a chunk tombstones its
slot; the arena is compacted once tombstones outnumber live chunks. Iteration
follows insertion order (a replaced id keeps its original position).

The store assumes a single writer. Searches may interleave with each other but
not with concurrent mutation.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import numpy as np
from loguru import logger

from . import vector_ops
from .core.config import SimilarityStoreConfig
from .core.exceptions import (
    ChunkwrightError, ConfigurationError, DimensionMismatch, SnapshotError, ValidationError
)
from .core.models import Chunk, SearchResult, Vector
from .core.types import SimilarityMetric
from .interfaces import EmbeddingProvider
from .registry import ProviderRegistry, get_registry

ChunkInput = Union[Chunk, Mapping[str, Any]]

_SCORERS: Dict[SimilarityMetric, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    SimilarityMetric.COSINE: vector_ops.cosine_scores,
    SimilarityMetric.EUCLIDEAN: vector_ops.euclidean_scores,
    SimilarityMetric.MANHATTAN: vector_ops.manhattan_scores,
    SimilarityMetric.DOT: vector_ops.dot_scores,
}


def _coerce_chunk(item: ChunkInput) -> Chunk:
    if isinstance(item, Chunk):
        return item
    if isinstance(item, Mapping):
        return Chunk.from_dict(dict(item))
    raise ValidationError("chunk", item, "Expected a Chunk or a chunk mapping")


class SimilarityStore:
    """In-memory chunk store with brute-force similarity search."""

    def __init__(
        self,
        config: Optional[Any] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        registry: Optional[ProviderRegistry] = None
    ):
        """Initialize the store.

        Args:
            config: SimilarityStoreConfig, partial mapping, or None for defaults
            embedding_provider: Vector source for ``search_by_text``
                (registry default if omitted)
            registry: Registry resolving the default embedding provider
        """
        self._config = SimilarityStoreConfig.merge(config)
        self._embedding_provider = embedding_provider
        self._registry = registry
        self._reset_arena()

    def _reset_arena(self) -> None:
        self._slots: List[Optional[Chunk]] = []
        self._handles: Dict[str, int] = {}
        self._tombstones = 0
        self._dimension: Optional[int] = None
        self._invalidate_matrix()

    def _invalidate_matrix(self) -> None:
        self._matrix: Optional[np.ndarray] = None
        self._matrix_chunks: List[Chunk] = []

    def _live_matrix(self) -> np.ndarray:
        """Stacked vectors of the live chunks in iteration order, rebuilt after mutation."""
        if self._matrix is None:
            self._matrix_chunks = list(self)
            self._matrix = vector_ops.stack(
                (chunk.vector for chunk in self._matrix_chunks), self._dimension or 0
            )
        return self._matrix

    @property
    def config(self) -> SimilarityStoreConfig:
        return self._config

    @property
    def dimension(self) -> Optional[int]:
        """Vector dimension shared by stored chunks; None while empty."""
        return self._dimension

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        if self._embedding_provider is None:
            registry = self._registry if self._registry is not None else get_registry()
            self._embedding_provider = registry.get_embedding_provider()
        return self._embedding_provider

    # Mutation

    def add(self, chunk: ChunkInput, normalize: Optional[bool] = None) -> Chunk:
        """Validate and insert a chunk.

        Args:
            chunk: Chunk or chunk mapping (snake_case or camelCase keys)
            normalize: Normalize the vector first (config default if None)

        Returns:
            The stored chunk (a normalized copy when normalizing)

        Raises:
            ValidationError: If the chunk is malformed
            DimensionMismatch: If the vector dimension differs from stored chunks
        """
        item = _coerce_chunk(chunk)

        if self._dimension is not None and item.vector.dimension != self._dimension:
            raise DimensionMismatch(
                self._dimension, item.vector.dimension, "add", context={"chunk_id": item.id}
            )

        if self._config.normalize_vectors if normalize is None else normalize:
            item = item.with_vector(vector_ops.normalize(item.vector))

        handle = self._handles.get(item.id)
        if handle is not None:
            logger.warning(f"Replacing existing chunk {item.id}")
            self._slots[handle] = item
        else:
            self._handles[item.id] = len(self._slots)
            self._slots.append(item)
        self._invalidate_matrix()

        if self._dimension is None:
            self._dimension = item.vector.dimension
        return item

    def add_batch(
        self,
        chunks: Iterable[ChunkInput],
        batch_size: int = 1000,
        normalize: Optional[bool] = None,
        on_error: str = "raise"
    ) -> int:
        """Insert many chunks; each chunk is added or rejected on its own.

        Args:
            chunks: Chunks or chunk mappings
            batch_size: Chunks per progress log entry
            normalize: Normalize vectors first (config default if None)
            on_error: "raise" to stop at the first invalid chunk, "skip" to log
                and continue

        Returns:
            Number of chunks added
        """
        if on_error not in ("raise", "skip"):
            raise ConfigurationError("on_error", on_error, "Must be 'raise' or 'skip'")
        if batch_size < 1:
            raise ConfigurationError("batch_size", batch_size, "Batch size must be positive")

        added = 0
        skipped = 0
        for position, item in enumerate(chunks):
            try:
                self.add(item, normalize=normalize)
                added += 1
            except (ValidationError, DimensionMismatch) as e:
                if on_error == "raise":
                    raise e.add_context("position", position)
                skipped += 1
                logger.warning(f"Skipping chunk at position {position}: {e}")

            if (position + 1) % batch_size == 0:
                logger.debug(f"Batch progress: {position + 1} chunks processed")

        logger.info(f"Added {added} chunks to store ({skipped} skipped)")
        return added

    def remove(self, chunk_id: str) -> bool:
        """Remove a chunk by id; False if it was not stored."""
        handle = self._handles.pop(chunk_id, None)
        if handle is None:
            return False

        self._slots[handle] = None
        self._tombstones += 1
        self._invalidate_matrix()
        if self._tombstones > len(self._handles):
            self._compact()
        if not self._handles:
            self._dimension = None
        return True

    def _compact(self) -> None:
        live = [chunk for chunk in self._slots if chunk is not None]
        self._slots = live
        self._handles = {chunk.id: handle for handle, chunk in enumerate(live)}
        logger.debug(f"Compacted arena: dropped {self._tombstones} tombstones")
        self._tombstones = 0

    def clear(self) -> None:
        self._reset_arena()

    # Access

    def get_chunk(self, chunk_id: str) -> Optional[Chunk]:
        handle = self._handles.get(chunk_id)
        return self._slots[handle] if handle is not None else None

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, chunk_id: object) -> bool:
        return chunk_id in self._handles

    def __iter__(self) -> Iterator[Chunk]:
        return (chunk for chunk in self._slots if chunk is not None)

    # Search

    def search(
        self,
        query_vector: Union[Vector, Iterable[float]],
        top_k: Optional[int] = None,
        threshold: Optional[float] = None,
        normalize_query: bool = False
    ) -> List[SearchResult]:
        """Score every stored chunk against ``query_vector``.

        Args:
            query_vector: Query as a Vector or a sequence of floats
            top_k: Maximum results (config ``max_results`` if None)
            threshold: Minimum score kept (config ``threshold`` if None)
            normalize_query: Normalize the query before scoring

        Returns:
            Results with ``score >= threshold``, best first

        Raises:
            DimensionMismatch: If the query dimension differs from stored chunks
        """
        query = query_vector if isinstance(query_vector, Vector) else Vector.from_values(query_vector)
        if normalize_query:
            query = vector_ops.normalize(query)

        limit = self._config.max_results if top_k is None else top_k
        if limit < 1:
            raise ValidationError("top_k", limit, "top_k must be positive")
        minimum = self._config.threshold if threshold is None else threshold

        if self._dimension is not None and query.dimension != self._dimension:
            raise DimensionMismatch(query.dimension, self._dimension, "search")

        metric = self._config.similarity_metric
        if not self._handles:
            return []

        matrix = self._live_matrix()
        scores = _SCORERS[metric](matrix, vector_ops.as_array(query))
        kept = np.flatnonzero(scores >= minimum)
        # Stable sort keeps insertion order among equal scores
        order = kept[np.argsort(-scores[kept], kind="stable")][:limit]
        return [
            SearchResult.from_score(self._matrix_chunks[i], float(scores[i]), metric) for i in order
        ]

    def search_by_text(
        self,
        text: str,
        top_k: Optional[int] = None,
        threshold: Optional[float] = None
    ) -> List[SearchResult]:
        """Embed ``text`` with the store's provider and search with it."""
        query = self.embedding_provider.embed_single(text)
        logger.debug(f"Text search using {self.embedding_provider.name}/{self.embedding_provider.model}")
        return self.search(query, top_k=top_k, threshold=threshold)

    # Configuration and stats

    def get_config(self) -> SimilarityStoreConfig:
        return self._config

    def update_config(self, changes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> SimilarityStoreConfig:
        """Apply partial changes over the current configuration."""
        updates = dict(changes or {})
        updates.update(kwargs)
        self._config = self._config.updated(**updates)
        return self._config

    def get_stats(self) -> Dict[str, Any]:
        total = len(self)
        content_chars = sum(len(chunk.content) for chunk in self)
        return {
            "total_chunks": total,
            "dimension": self._dimension or 0,
            "tombstones": self._tombstones,
            "similarity_metric": self._config.similarity_metric.value,
            "index_type": self._config.index_type,
            "content_characters": content_chars,
            # Rough estimate: 8 bytes per component plus content
            "memory_usage": total * 8 * (self._dimension or 0) + content_chars,
        }

    # External documents

    def export_external_documents(self, index_name: str, doc_type: str = "_doc") -> List[Dict[str, Any]]:
        """Export chunks as bulk-index documents for an external search engine."""
        timestamp = datetime.now(timezone.utc).isoformat()
        return [
            {
                "_index": index_name,
                "_type": doc_type,
                "_id": chunk.id,
                "_source": {
                    "content": chunk.content,
                    "vector": list(chunk.vector.values),
                    "metadata": dict(chunk.metadata),
                    "chunkIndex": chunk.chunk_index,
                    "startPosition": chunk.start_position,
                    "endPosition": chunk.end_position,
                    "timestamp": timestamp,
                },
            }
            for chunk in self
        ]

    def import_external_documents(
        self,
        documents: Iterable[Mapping[str, Any]],
        normalize: Optional[bool] = None,
        on_error: str = "raise"
    ) -> int:
        """Import bulk-index documents; optional fields may be missing.

        Returns:
            Number of chunks added
        """
        def to_chunk_dict(doc: Mapping[str, Any]) -> Dict[str, Any]:
            source = doc.get("_source") or {}
            return {
                "id": doc.get("_id"),
                "content": source.get("content"),
                "vector": source.get("vector"),
                "metadata": source.get("metadata") or {},
                "chunkIndex": source.get("chunkIndex") or 0,
                "startPosition": source.get("startPosition") or 0,
                "endPosition": source.get("endPosition") or 0,
            }

        return self.add_batch(
            (to_chunk_dict(doc) for doc in documents), normalize=normalize, on_error=on_error
        )

    # Snapshots

    def save_snapshot(self, path: Union[str, Path]) -> None:
        """Write ``{config, chunks, timestamp}`` as JSON.

        Raises:
            SnapshotError: If the file cannot be written
        """
        file_path = Path(path)
        data = {
            "config": self._config.to_dict(),
            "chunks": [chunk.to_dict() for chunk in self],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, file_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise SnapshotError(str(file_path), "save", str(e), cause=e) from e

        logger.info(f"Saved {len(data['chunks'])} chunks to {file_path}")

    def load_snapshot(self, path: Union[str, Path], normalize: Optional[bool] = None) -> int:
        """Replace the store contents with a snapshot.

        Every chunk is validated into a fresh arena; the current contents and
        configuration are kept if anything fails.

        Returns:
            Number of chunks loaded

        Raises:
            SnapshotError: If the file cannot be read or parsed, or holds an
                invalid configuration or chunk
        """
        file_path = Path(path)
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SnapshotError(str(file_path), "load", str(e), cause=e) from e

        if not isinstance(data, dict) or not isinstance(data.get("chunks", []), list):
            raise SnapshotError(str(file_path), "load", "Snapshot must be an object with a 'chunks' list")

        try:
            config = self._config.updated(**(data.get("config") or {}))
            fresh = SimilarityStore(config, embedding_provider=self._embedding_provider, registry=self._registry)
            for item in data.get("chunks", []):
                fresh.add(item, normalize=normalize)
        except ChunkwrightError as e:
            raise SnapshotError(str(file_path), "load", str(e), cause=e) from e

        self._config = config
        self._slots, self._handles = fresh._slots, fresh._handles
        self._tombstones, self._dimension = fresh._tombstones, fresh._dimension
        self._invalidate_matrix()
        logger.info(f"Loaded {len(self)} chunks from {file_path}")
        return len(self)

    def __repr__(self) -> str:
        return f"SimilarityStore(chunks={len(self)}, metric={self._config.similarity_metric.value})"
