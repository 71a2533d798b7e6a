"""Sliding window strategy: fixed windows advancing by ``chunk_size - overlap``."""

from typing import List

from ...core.config import ChunkingConfig
from ...core.models import Span
from ...core.types import ChunkingStrategy
from .base import SpanPlanner, trimmed_range


class SlidingWindowPlanner(SpanPlanner):
    """Windows ``text[i:i + chunk_size]``, trimmed, for ``i = 0, step, 2 * step, ...``.

    Windows holding only whitespace produce no span. Each span's origin is its
    window offset ``i``.
    """

    name = ChunkingStrategy.SLIDING

    def plan(self, text: str, config: ChunkingConfig) -> List[Span]:
        size = config.chunk_size
        spans = []
        for i in range(0, len(text), config.step):
            rng = trimmed_range(text, i, min(i + size, len(text)))
            if rng is not None:
                spans.append(Span(rng[0], rng[1], i))
        return spans

    def is_settled(self, spans: List[Span], buffer_length: int, config: ChunkingConfig) -> bool:
        return spans[0].origin + config.chunk_size <= buffer_length

    def resume_offset(self, spans: List[Span], config: ChunkingConfig) -> int:
        return spans[0].origin + config.step

    def discard_offset(self, buffer_length: int, config: ChunkingConfig) -> int:
        # Keep the window grid aligned across releases.
        return (buffer_length // config.step) * config.step
