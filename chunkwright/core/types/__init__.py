"""Chunkwright Core Types Package - Common type definitions and aliases.

The types are organized into logical groups:
- Strategy, metric and relevance enumerations
- Identifier and provider name types
- Common aliases for better readability
"""

from .common import (
    CharOffset,
    ChunkId,
    ChunkingStrategy,
    ChunkType,
    Dimensions,
    DocumentId,
    EmbeddingVector,
    ModelName,
    ProviderName,
    Relevance,
    Score,
    SectionType,
    SimilarityMetric,
)

__all__ = [
    # Enums
    "ChunkingStrategy",
    "ChunkType",
    "SimilarityMetric",
    "Relevance",
    "SectionType",

    # String types
    "ChunkId",
    "DocumentId",
    "ProviderName",
    "ModelName",

    # Numeric types
    "CharOffset",
    "Dimensions",
    "Score",

    # Complex types
    "EmbeddingVector",
]
