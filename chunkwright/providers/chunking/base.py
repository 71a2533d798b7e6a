"""Shared helpers for span planners."""

import re
from typing import Iterator, List, Optional, Tuple

from ...core.config import ChunkingConfig
from ...core.models import Span
from ...core.types import ChunkType

_LEADING_WS = re.compile(r"\s*")


def trimmed_range(text: str, start: int, end: int) -> Optional[Tuple[int, int]]:
    """Shrink ``[start, end)`` past surrounding whitespace; None if nothing is left."""
    start = _LEADING_WS.match(text, start, end).end()
    while end > start and text[end - 1].isspace():
        end -= 1
    if start >= end:
        return None
    return start, end


def iter_segments(text: str, separator: re.Pattern) -> Iterator[Tuple[int, int]]:
    """Yield trimmed ``(start, end)`` ranges between matches of ``separator``."""
    cursor = 0
    for match in separator.finditer(text):
        rng = trimmed_range(text, cursor, match.start())
        if rng is not None:
            yield rng
        cursor = match.end()
    rng = trimmed_range(text, cursor, len(text))
    if rng is not None:
        yield rng


class SpanPlanner:
    """Base class for strategies that grow a chunk until the next unit overflows.

    Subclasses implement ``plan``. For these strategies the first planned span
    is settled as soon as another span follows it, and streaming resumes from
    the next span's origin.
    """

    chunk_type: ChunkType = ChunkType.TEXT

    def plan(self, text: str, config: ChunkingConfig) -> List[Span]:
        raise NotImplementedError

    def is_settled(self, spans: List[Span], buffer_length: int, config: ChunkingConfig) -> bool:
        return len(spans) > 1

    def resume_offset(self, spans: List[Span], config: ChunkingConfig) -> int:
        return spans[1].origin

    def discard_offset(self, buffer_length: int, config: ChunkingConfig) -> int:
        return buffer_length

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def accumulate_units(units: List[Tuple[int, int]], chunk_size: int) -> List[Span]:
    """Greedily group whole units into spans no longer than ``chunk_size``.

    A unit that alone exceeds ``chunk_size`` becomes its own span.
    """
    spans: List[Span] = []
    cur_start: Optional[int] = None
    cur_end = 0
    origin = 0

    for start, end in units:
        if cur_start is None:
            cur_start, cur_end = start, end
            continue
        if end - cur_start > chunk_size:
            spans.append(Span(cur_start, cur_end, origin))
            origin = start
            cur_start, cur_end = start, end
        else:
            cur_end = end

    if cur_start is not None:
        spans.append(Span(cur_start, cur_end, origin))
    return spans
