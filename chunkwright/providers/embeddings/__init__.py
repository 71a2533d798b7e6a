"""Embedding providers package for chunkwright."""

from .callable_provider import CallableEmbeddingProvider
from .factory import EmbeddingProviderFactory
from .fingerprint_provider import FingerprintEmbeddingProvider
from .openai_provider import OpenAIEmbeddingProvider

__all__ = [
    "CallableEmbeddingProvider",
    "EmbeddingProviderFactory",
    "FingerprintEmbeddingProvider",
    "OpenAIEmbeddingProvider",
]
