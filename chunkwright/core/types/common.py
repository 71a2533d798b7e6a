"""Chunkwright Core Types - Common type definitions and aliases.

This module contains type definitions, enums, and type aliases used throughout
the chunkwright system.
"""

from enum import Enum
from typing import List, NewType


# String-based type aliases for better semantic clarity
ChunkId = NewType("ChunkId", str)           # Opaque chunk handle, e.g. "3f9c0a1b2d4e_0007"
DocumentId = NewType("DocumentId", str)     # Originating document identifier
ProviderName = NewType("ProviderName", str)  # e.g., "fingerprint", "openai"
ModelName = NewType("ModelName", str)       # e.g., "char-histogram", "text-embedding-3-small"

# Numeric type aliases
CharOffset = NewType("CharOffset", int)     # Character position in the source text
Dimensions = NewType("Dimensions", int)     # Vector dimensions
Score = NewType("Score", float)             # Similarity score

# Complex types
EmbeddingVector = List[float]               # Raw vector values


class ChunkingStrategy(str, Enum):
    """Segmentation strategies understood by the segmenter."""

    FIXED = "fixed"
    SEMANTIC = "semantic"
    SLIDING = "sliding"
    ADAPTIVE = "adaptive"

    @classmethod
    def from_string(cls, value: str) -> "ChunkingStrategy":
        """Convert string to ChunkingStrategy, raising ValueError for unknown names."""
        return cls(value.strip().lower())


class ChunkType(str, Enum):
    """Kind of content unit a chunk represents."""

    TEXT = "text"
    PARAGRAPH = "paragraph"
    SECTION = "section"

    @classmethod
    def from_string(cls, value: str) -> "ChunkType":
        """Convert string to ChunkType enum, defaulting to TEXT for invalid values."""
        try:
            return cls(value)
        except ValueError:
            return cls.TEXT


class SimilarityMetric(str, Enum):
    """Scoring functions available to the similarity store."""

    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"
    DOT = "dot"

    @property
    def is_bounded(self) -> bool:
        """Return True if scores fall in a bounded range (distance = 1 - score)."""
        return self is not SimilarityMetric.DOT


class Relevance(str, Enum):
    """Coarse relevance bucket attached to search results."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_score(cls, score: float) -> "Relevance":
        """Bucket a score: high >= 0.8, medium >= 0.5, low otherwise."""
        if score >= 0.8:
            return cls.HIGH
        if score >= 0.5:
            return cls.MEDIUM
        return cls.LOW


class SectionType(str, Enum):
    """Structural section types detected by the indexed chunker."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    CODE = "code"
    TABLE = "table"
