"""Chunkwright Core Models Package - Domain model definitions.

The models follow these principles:
- Immutable data structures using dataclasses with frozen=True
- Validation at construction time
- Dictionary conversion for the snapshot and bulk-document wire shapes
"""

from .vector import Vector
from .chunk import Chunk
from .span import Span
from .search_result import SearchResult

__all__ = [
    "Vector",
    "Chunk",
    "Span",
    "SearchResult",
]
