"""Configuration records and loading for chunkwright."""

from .base import MergeableConfig
from .chunking_config import ChunkingConfig
from .embedding_config import EmbeddingConfig
from .parallel_config import ParallelConfig
from .store_config import SimilarityStoreConfig
from .unified_config import ChunkwrightConfig, get_config, reset_config, set_config

__all__ = [
    "MergeableConfig",
    "ChunkingConfig",
    "SimilarityStoreConfig",
    "EmbeddingConfig",
    "ParallelConfig",
    "ChunkwrightConfig",
    "get_config",
    "set_config",
    "reset_config",
]
