"""Service layer for chunkwright."""

from .indexing_coordinator import IndexingCoordinator

__all__ = ["IndexingCoordinator"]
