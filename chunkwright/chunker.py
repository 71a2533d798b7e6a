"""Segmenter for chunkwright - turns text into vector-stamped chunks.

The segmenter owns the edge policy shared by every strategy and execution
mode:

- empty or whitespace-only text produces no chunks;
- text no longer than ``chunk_size`` becomes one trimmed chunk, or nothing
  when it is shorter than ``min_chunk_size``;
- planned spans shorter than ``min_chunk_size`` are dropped, not merged.

Strategies only plan spans (see ``providers/chunking``); this module builds
the chunks, stamps their vectors and fills in run metadata.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from .core.config import ChunkingConfig
from .core.models import Chunk, Span
from .core.types import ChunkId, CharOffset, DocumentId
from .interfaces import EmbeddingProvider
from .providers.chunking.base import trimmed_range
from .registry import ProviderRegistry, get_registry


def new_run_id() -> str:
    """Fresh token identifying one segmentation run."""
    return uuid.uuid4().hex[:12]


def chunk_id(run_id: str, index: int) -> ChunkId:
    return ChunkId(f"{run_id}_{index:04d}")


class Segmenter:
    """Synchronous segmenter applying one strategy to whole texts."""

    def __init__(
        self,
        config: Optional[Any] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        registry: Optional[ProviderRegistry] = None
    ):
        """Initialize the segmenter.

        Args:
            config: ChunkingConfig, partial mapping, or None for defaults
            embedding_provider: Vector source (registry default if omitted)
            registry: Registry resolving strategies and the default provider
        """
        self._registry = registry if registry is not None else get_registry()
        self._config = ChunkingConfig.merge(config)
        if embedding_provider is None:
            embedding_provider = self._registry.get_embedding_provider()
        self._embedding_provider = embedding_provider

    @property
    def config(self) -> ChunkingConfig:
        return self._config

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        return self._embedding_provider

    @property
    def planner(self) -> Any:
        """Planner for the configured strategy."""
        return self._registry.get_chunking_strategy(self._config.strategy)

    def get_config(self) -> ChunkingConfig:
        return self._config

    def update_config(self, changes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ChunkingConfig:
        """Apply partial changes over the current configuration.

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        updates = dict(changes or {})
        updates.update(kwargs)
        self._config = self._config.updated(**updates)
        logger.debug(f"Segmenter configuration updated: {self._config!r}")
        return self._config

    def plan(self, text: str) -> List[Span]:
        """Plan the chunk spans of ``text`` after the edge and minimum-size policy."""
        if not text or not text.strip():
            return []

        config = self._config
        if len(text) <= config.chunk_size:
            start, end = trimmed_range(text, 0, len(text))
            if len(text) >= config.min_chunk_size:
                return [Span(start, end, 0)]
            return []

        return self.plan_spans(text)

    def plan_spans(self, text: str) -> List[Span]:
        """Run the strategy over ``text`` and drop spans below the minimum size.

        Unlike ``plan`` this skips the short-text rule, so it suits the tail
        of a longer text.
        """
        config = self._config
        spans = self.planner.plan(text, config)
        kept = [span for span in spans if span.length >= config.min_chunk_size]
        if len(kept) < len(spans):
            logger.debug(f"Dropped {len(spans) - len(kept)} spans shorter than {config.min_chunk_size} characters")
        return kept

    def segment(
        self,
        text: str,
        metadata: Optional[Dict[str, Any]] = None,
        run_id: Optional[str] = None,
        document_id: Optional[str] = None
    ) -> List[Chunk]:
        """Segment ``text`` into chunks.

        Args:
            text: Source text
            metadata: Caller metadata copied onto every chunk
            run_id: Id prefix for the run (fresh token if omitted)
            document_id: Optional originating document identifier

        Returns:
            Chunks with consecutive indexes starting at 0
        """
        spans = self.plan(text)
        run_id = run_id or new_run_id()
        chunks = [
            self.build_chunk(text, span, index, run_id, metadata, document_id=document_id)
            for index, span in enumerate(spans)
        ]
        logger.debug(
            f"Segmented {len(text)} characters into {len(chunks)} chunks "
            f"(strategy={self._config.strategy.value}, run={run_id})"
        )
        return chunks

    def build_chunk(
        self,
        text: str,
        span: Span,
        index: int,
        run_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        offset: int = 0,
        extra_metadata: Optional[Dict[str, Any]] = None,
        document_id: Optional[str] = None
    ) -> Chunk:
        """Create the chunk for ``span`` of ``text``.

        Args:
            text: Text the span indexes into
            span: Planned span
            index: Chunk index within the run
            run_id: Run token used for the chunk id
            metadata: Caller metadata
            offset: Added to span positions (global position of ``text[0]``)
            extra_metadata: Execution-mode metadata merged last
            document_id: Optional originating document identifier
        """
        content = text[span.start:span.end]
        chunk_metadata: Dict[str, Any] = dict(metadata or {})
        chunk_metadata.update({
            "chunk_index": index,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "length": len(content),
            "word_count": len(content.split()),
            "strategy": self._config.strategy.value,
        })
        if extra_metadata:
            chunk_metadata.update(extra_metadata)

        return Chunk(
            id=chunk_id(run_id, index),
            content=content,
            vector=self._embedding_provider.embed_single(content),
            metadata=chunk_metadata,
            chunk_index=index,
            start_position=CharOffset(span.start + offset),
            end_position=CharOffset(span.end + offset),
            document_id=DocumentId(document_id) if document_id else None,
            chunk_type=self.planner.chunk_type,
        )

    def __repr__(self) -> str:
        return f"Segmenter({self._config!r}, provider={self._embedding_provider.name})"


def segment(
    text: str,
    config: Optional[Any] = None,
    metadata: Optional[Dict[str, Any]] = None,
    embedding_provider: Optional[EmbeddingProvider] = None
) -> List[Chunk]:
    """Segment ``text`` with a one-off ``Segmenter``."""
    return Segmenter(config, embedding_provider=embedding_provider).segment(text, metadata)
