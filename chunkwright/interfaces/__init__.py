"""Interfaces package for chunkwright - protocols for pluggable implementations."""

from .chunking_strategy import ChunkingStrategy
from .embedding_provider import EmbeddingProvider

__all__ = [
    "ChunkingStrategy",
    "EmbeddingProvider",
]
