"""Chunkwright Span Model - A planned chunk boundary without content."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """Character range a chunking strategy decided to emit.

    Attributes:
        start: First character of the (trimmed) chunk
        end: One past the last character of the chunk
        origin: Cursor from which accumulation of this chunk began. Streaming
            segmentation releases buffered text up to the origin of the next span.
    """

    start: int
    end: int
    origin: int

    @property
    def length(self) -> int:
        """Number of characters covered."""
        return self.end - self.start

    def shifted(self, offset: int) -> "Span":
        """Return the same span moved by ``offset`` characters."""
        return Span(self.start + offset, self.end + offset, self.origin + offset)
