"""Semantic strategy: whole sentences grouped up to ``chunk_size``."""

import re
from typing import List, Tuple

from ...core.config import ChunkingConfig
from ...core.models import Span
from ...core.types import ChunkingStrategy
from .base import SpanPlanner, accumulate_units, trimmed_range

# A sentence runs up to and including its terminator run; stray terminators
# form their own sentence.
_SENTENCE = re.compile(r"[^.!?]+[.!?]*|[.!?]+")


def split_sentences(text: str) -> List[Tuple[int, int]]:
    """Trimmed ``(start, end)`` ranges of the sentences in ``text``."""
    sentences = []
    for match in _SENTENCE.finditer(text):
        rng = trimmed_range(text, match.start(), match.end())
        if rng is not None:
            sentences.append(rng)
    return sentences


class SemanticPlanner(SpanPlanner):
    """Never splits a sentence; a sentence longer than ``chunk_size`` stands alone."""

    name = ChunkingStrategy.SEMANTIC

    def plan(self, text: str, config: ChunkingConfig) -> List[Span]:
        return accumulate_units(split_sentences(text), config.chunk_size)
