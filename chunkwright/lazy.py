"""Lazy segmentation: plan every span up front, build chunks on demand.

Planning is cheap (spans are three integers), so the full chunk count is known
immediately. Content slicing, vector stamping and metadata happen the first
time an index is forced and are memoized until evicted.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from loguru import logger

from .chunker import Segmenter, new_run_id
from .core.models import Chunk, Span
from .interfaces import EmbeddingProvider
from .registry import ProviderRegistry


@dataclass(frozen=True)
class IndexedSlot:
    """A planned chunk that has not been materialized yet."""

    span: Span


@dataclass(frozen=True)
class MaterializedSlot:
    """A chunk that has been built, together with the span it came from."""

    span: Span
    chunk: Chunk


Slot = Union[IndexedSlot, MaterializedSlot]


class LazySegmenter:
    """Sequence of chunks over one text, materialized on first access.

    Supports ``len()``, integer and slice indexing and iteration. Chunk ids are
    stable for the lifetime of the instance: an evicted index rebuilds with
    the same id.
    """

    def __init__(
        self,
        text: str,
        config: Optional[Any] = None,
        metadata: Optional[Dict[str, Any]] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        registry: Optional[ProviderRegistry] = None
    ):
        self._text = text
        self._metadata = dict(metadata or {})
        self._segmenter = Segmenter(config, embedding_provider=embedding_provider, registry=registry)
        self._run_id = new_run_id()
        self._slots: List[Slot] = [IndexedSlot(span) for span in self._segmenter.plan(text)]
        self._materialized = 0
        logger.debug(f"Lazy run {self._run_id}: planned {len(self._slots)} chunks")

    @property
    def config(self):
        return self._segmenter.config

    @property
    def run_id(self) -> str:
        return self._run_id

    def __len__(self) -> int:
        return len(self._slots)

    def get_total_chunks(self) -> int:
        return len(self._slots)

    def _check_index(self, index: int) -> int:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"Chunk index must be an integer, got {type(index).__name__}")
        if index < 0 or index >= len(self._slots):
            raise IndexError(f"Chunk index {index} out of range (0..{len(self._slots) - 1})")
        return index

    def force(self, index: int) -> Chunk:
        """Materialize the chunk at ``index`` (memoized)."""
        index = self._check_index(index)
        slot = self._slots[index]
        if isinstance(slot, MaterializedSlot):
            return slot.chunk

        chunk = self._segmenter.build_chunk(
            self._text,
            slot.span,
            index,
            self._run_id,
            self._metadata,
            extra_metadata={"lazy": True},
        )
        self._slots[index] = MaterializedSlot(slot.span, chunk)
        self._materialized += 1
        return chunk

    def get_chunk(self, index: int) -> Chunk:
        """Get the chunk at ``index``.

        Raises:
            IndexError: If ``index`` is outside ``0..len(self) - 1``
        """
        return self.force(index)

    def __getitem__(self, index: Union[int, slice]) -> Union[Chunk, List[Chunk]]:
        if isinstance(index, slice):
            return [self.force(i) for i in range(*index.indices(len(self._slots)))]
        if isinstance(index, int) and index < 0:
            index += len(self._slots)
        return self.force(index)

    def __iter__(self) -> Iterator[Chunk]:
        for index in range(len(self._slots)):
            yield self.force(index)

    def get_chunks(self, start: int, end: Optional[int] = None) -> List[Chunk]:
        """Chunks ``start`` (inclusive) to ``end`` (exclusive), clamped to the run."""
        stop = len(self._slots) if end is None else min(end, len(self._slots))
        return [self.force(i) for i in range(max(0, start), stop)]

    def get_all_chunks(self) -> List[Chunk]:
        return self.get_chunks(0)

    def process_batch(self, start: int, size: int) -> List[Chunk]:
        """Materialize ``size`` chunks starting at ``start``."""
        return self.get_chunks(start, start + max(0, size))

    def preload(self, indices: Iterable[int]) -> int:
        """Materialize the given indexes; out-of-range indexes are skipped.

        Returns:
            Number of chunks newly materialized
        """
        before = self._materialized
        for index in indices:
            if 0 <= index < len(self._slots):
                self.force(index)
        return self._materialized - before

    def is_materialized(self, index: int) -> bool:
        index = self._check_index(index)
        return isinstance(self._slots[index], MaterializedSlot)

    def evict(self, index: int) -> bool:
        """Drop the materialized chunk at ``index``; True if one was dropped."""
        index = self._check_index(index)
        slot = self._slots[index]
        if isinstance(slot, MaterializedSlot):
            self._slots[index] = IndexedSlot(slot.span)
            self._materialized -= 1
            return True
        return False

    def clear_cache(self) -> None:
        """Evict every materialized chunk."""
        self._slots = [IndexedSlot(slot.span) for slot in self._slots]
        self._materialized = 0

    def get_memory_stats(self) -> Dict[str, int]:
        """Rough memory figures, in characters of chunk content."""
        total = len(self._slots)
        average = len(self._text) / max(1, total)
        return {
            "total_chunks": total,
            "processed_chunks": self._materialized,
            "memory_usage": round(self._materialized * average),
            "estimated_memory_savings": round((total - self._materialized) * average),
        }
