"""Shared fixtures for chunkwright tests."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from chunkwright.core.config import reset_config
from chunkwright.providers.embeddings import FingerprintEmbeddingProvider
from chunkwright.registry import ProviderRegistry, reset_registry


@pytest.fixture(autouse=True)
def clean_globals() -> Generator[None, None, None]:
    """Drop the global registry and configuration after every test."""
    yield
    reset_registry()
    reset_config()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry() -> ProviderRegistry:
    """Fresh registry with the default strategies and provider."""
    return ProviderRegistry()


@pytest.fixture
def provider() -> FingerprintEmbeddingProvider:
    """Small deterministic embedding provider."""
    return FingerprintEmbeddingProvider(dims=16)


@pytest.fixture
def sentence_text() -> str:
    """Ten sentences of 26 characters separated by single spaces."""
    return " ".join(f"Sentence number {i} is here." for i in range(10))


@pytest.fixture
def word_text() -> str:
    """Two hundred numbered words."""
    return " ".join(f"word{i}" for i in range(200))


@pytest.fixture
def paragraph_text() -> str:
    """Blank-line separated paragraphs of prose."""
    paragraphs = []
    for p in range(8):
        sentences = " ".join(
            f"Paragraph {p} sentence {s} talks about segmentation." for s in range(4)
        )
        paragraphs.append(sentences)
    return "\n\n".join(paragraphs)
