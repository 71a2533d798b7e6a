"""Adaptive strategy: blank-line separated paragraphs grouped up to ``chunk_size``."""

import re
from typing import List, Tuple

from ...core.config import ChunkingConfig
from ...core.models import Span
from ...core.types import ChunkingStrategy, ChunkType
from .base import SpanPlanner, accumulate_units, iter_segments

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def split_paragraphs(text: str) -> List[Tuple[int, int]]:
    """Trimmed ``(start, end)`` ranges of the non-blank paragraphs in ``text``."""
    return list(iter_segments(text, PARAGRAPH_BREAK))


class AdaptivePlanner(SpanPlanner):
    """Paragraph accumulation; oversized paragraphs are emitted whole."""

    name = ChunkingStrategy.ADAPTIVE
    chunk_type = ChunkType.PARAGRAPH

    def plan(self, text: str, config: ChunkingConfig) -> List[Span]:
        return accumulate_units(split_paragraphs(text), config.chunk_size)
