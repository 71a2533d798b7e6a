"""ChunkingStrategy protocol for chunkwright - interface for span planners."""

from typing import List, Protocol, runtime_checkable

from ..core.config import ChunkingConfig
from ..core.models import Span
from ..core.types import ChunkingStrategy as StrategyName, ChunkType


@runtime_checkable
class ChunkingStrategy(Protocol):
    """Protocol for segmentation strategies.

    A strategy only plans: it maps text to a list of spans whose trimmed
    content becomes chunk content. Building chunks, stamping vectors and
    applying the minimum-size policy happen in the segmenter, so every
    execution mode shares one planner per strategy.

    The streaming hooks let a continuous segmenter decide how much buffered
    text a planned span pins down.
    """

    @property
    def name(self) -> StrategyName:
        """Strategy identifier."""
        ...

    @property
    def chunk_type(self) -> ChunkType:
        """Chunk type assigned to chunks this strategy produces."""
        ...

    def plan(self, text: str, config: ChunkingConfig) -> List[Span]:
        """Plan chunk spans over ``text``.

        Spans are ordered by start, have ``start < end`` and cover
        non-whitespace content with no leading or trailing whitespace.
        """
        ...

    def is_settled(self, spans: List[Span], buffer_length: int, config: ChunkingConfig) -> bool:
        """True if ``spans[0]`` cannot change when more text is appended."""
        ...

    def resume_offset(self, spans: List[Span], config: ChunkingConfig) -> int:
        """Buffer offset up to which text may be released after emitting ``spans[0]``."""
        ...

    def discard_offset(self, buffer_length: int, config: ChunkingConfig) -> int:
        """Buffer offset to release when the buffer holds only whitespace."""
        ...
