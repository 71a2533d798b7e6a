"""Chunkwright Core Package - Domain models, types, and exceptions.

This package contains the domain models and types the rest of chunkwright is
built on. They are independent of execution strategy and storage.

Modules:
    models: Vector, Chunk, Span and SearchResult
    types: Enums and type aliases
    exceptions: Exception hierarchy with structured error kinds
    config: Pydantic configuration records and loading
"""

from .exceptions import (
    ChunkwrightError,
    ConfigurationError,
    DimensionMismatch,
    ErrorKind,
    SnapshotError,
    ValidationError,
    WorkerFailure,
)
from .models import Chunk, SearchResult, Span, Vector
from .types import ChunkingStrategy, ChunkType, Relevance, SectionType, SimilarityMetric

__all__ = [
    # Domain Models
    "Vector",
    "Chunk",
    "Span",
    "SearchResult",

    # Types
    "ChunkingStrategy",
    "ChunkType",
    "SimilarityMetric",
    "Relevance",
    "SectionType",

    # Exceptions
    "ChunkwrightError",
    "ErrorKind",
    "DimensionMismatch",
    "ValidationError",
    "WorkerFailure",
    "SnapshotError",
    "ConfigurationError",
]
