"""Chunkwright - text segmentation, vector stamping and similarity retrieval.

Quick start::

    from chunkwright import Segmenter, SimilarityStore

    chunks = Segmenter({"chunkSize": 256, "strategy": "semantic"}).segment(text)
    store = SimilarityStore()
    store.add_batch(chunks)
    results = store.search_by_text("query", top_k=5)
"""

__version__ = "0.3.0"

from . import vector_ops
from .chunker import Segmenter, segment
from .core.config import (
    ChunkingConfig,
    ChunkwrightConfig,
    EmbeddingConfig,
    ParallelConfig,
    SimilarityStoreConfig,
    get_config,
    reset_config,
    set_config,
)
from .core.exceptions import (
    ChunkwrightError,
    ConfigurationError,
    DimensionMismatch,
    ErrorKind,
    SnapshotError,
    ValidationError,
    WorkerFailure,
)
from .core.models import Chunk, SearchResult, Span, Vector
from .core.types import ChunkingStrategy, ChunkType, Relevance, SimilarityMetric
from .indexed import ContentIndex, ContentSection, IndexedChunker
from .lazy import IndexedSlot, LazySegmenter, MaterializedSlot
from .parallel import ParallelJob, ParallelSegmenter
from .providers.embeddings import (
    CallableEmbeddingProvider,
    FingerprintEmbeddingProvider,
    OpenAIEmbeddingProvider,
)
from .registry import ProviderRegistry, get_registry
from .services import IndexingCoordinator
from .store import SimilarityStore
from .streaming import ContinuousSegmenter
from .utils import setup_logging

__all__ = [
    "__version__",
    "vector_ops",
    # Segmentation
    "Segmenter",
    "segment",
    "ContinuousSegmenter",
    "ParallelSegmenter",
    "ParallelJob",
    "LazySegmenter",
    "IndexedSlot",
    "MaterializedSlot",
    "IndexedChunker",
    "ContentIndex",
    "ContentSection",
    # Storage
    "SimilarityStore",
    "IndexingCoordinator",
    # Models and types
    "Vector",
    "Chunk",
    "Span",
    "SearchResult",
    "ChunkingStrategy",
    "ChunkType",
    "Relevance",
    "SimilarityMetric",
    # Configuration
    "ChunkingConfig",
    "SimilarityStoreConfig",
    "EmbeddingConfig",
    "ParallelConfig",
    "ChunkwrightConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Providers
    "ProviderRegistry",
    "get_registry",
    "FingerprintEmbeddingProvider",
    "CallableEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    # Errors
    "ChunkwrightError",
    "ErrorKind",
    "DimensionMismatch",
    "ValidationError",
    "WorkerFailure",
    "SnapshotError",
    "ConfigurationError",
    # Logging
    "setup_logging",
]
