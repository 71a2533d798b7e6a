"""Fixed-size strategy: greedy word accumulation with word-seeded overlap."""

import math
import re
from typing import List, Tuple

from ...core.config import ChunkingConfig
from ...core.models import Span
from ...core.types import ChunkingStrategy
from .base import SpanPlanner

_WORD = re.compile(r"\S+")


class FixedSizePlanner(SpanPlanner):
    """Accumulate whitespace-delimited words while the span fits ``chunk_size``.

    With ``overlap > 0`` the next chunk starts on the last
    ``max(2, ceil(overlap / 3))`` words of the previous one. This is a word
    approximation of overlap, not a character-exact one. Seed words are dropped
    from the front until the next word fits, and every chunk starts at least
    one word after the previous chunk's first word.
    """

    name = ChunkingStrategy.FIXED

    def plan(self, text: str, config: ChunkingConfig) -> List[Span]:
        size = config.chunk_size
        pieces = self._pieces(text, size)
        if not pieces:
            return []

        seed = max(2, math.ceil(config.overlap / 3)) if config.overlap > 0 else 0
        spans: List[Span] = []
        first = 0
        origin = 0
        n = len(pieces)

        while first < n:
            last = first
            while last + 1 < n and pieces[last + 1][1] - pieces[first][0] <= size:
                last += 1
            spans.append(Span(pieces[first][0], pieces[last][1], origin))
            if last == n - 1:
                break

            following = pieces[last + 1]
            if seed:
                nxt = max(first + 1, last - seed + 1)
                while nxt <= last and following[1] - pieces[nxt][0] > size:
                    nxt += 1
            else:
                nxt = last + 1

            first = nxt
            origin = pieces[first][0]

        return spans

    def is_settled(self, spans: List[Span], buffer_length: int, config: ChunkingConfig) -> bool:
        # The word after the head decides where the next chunk starts, so it
        # must be complete.
        return len(spans) > 1 and spans[1].end < buffer_length

    @staticmethod
    def _pieces(text: str, size: int) -> List[Tuple[int, int]]:
        """Word ranges, with words longer than ``size`` cut into ``size`` pieces."""
        pieces = []
        for match in _WORD.finditer(text):
            start, end = match.span()
            while end - start > size:
                pieces.append((start, start + size))
                start += size
            pieces.append((start, end))
        return pieces
