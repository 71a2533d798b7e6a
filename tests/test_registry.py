"""Tests for the provider registry."""

import pytest

from chunkwright.core.config import ChunkingConfig, EmbeddingConfig
from chunkwright.core.exceptions import ConfigurationError
from chunkwright.core.types import ChunkingStrategy
from chunkwright.providers.chunking import (
    AdaptivePlanner,
    FixedSizePlanner,
    SemanticPlanner,
    SlidingWindowPlanner,
)
from chunkwright.providers.embeddings import CallableEmbeddingProvider, FingerprintEmbeddingProvider
from chunkwright.registry import configure_registry, get_provider, get_registry, reset_registry
from chunkwright.services import IndexingCoordinator


class TestStrategies:
    """Test strategy lookup."""

    @pytest.mark.parametrize("name, planner_class", [
        ("fixed", FixedSizePlanner),
        ("semantic", SemanticPlanner),
        ("SLIDING", SlidingWindowPlanner),
        (ChunkingStrategy.ADAPTIVE, AdaptivePlanner),
    ])
    def test_default_planners(self, registry, name, planner_class):
        assert isinstance(registry.get_chunking_strategy(name), planner_class)

    def test_unknown_strategy(self, registry):
        with pytest.raises(ConfigurationError, match="Unknown chunking strategy"):
            registry.get_chunking_strategy("recursive")

    def test_register_replacement_planner(self, registry):
        class ReversedPlanner(FixedSizePlanner):
            pass

        registry.register_chunking_strategy(ChunkingStrategy.FIXED, ReversedPlanner)
        assert isinstance(registry.get_chunking_strategy("fixed"), ReversedPlanner)
        assert len(registry.get_all_chunking_strategies()) == 4

    def test_rejects_non_planner(self, registry):
        class NotAPlanner:
            pass

        with pytest.raises(ConfigurationError, match="does not implement span planning"):
            registry.register_chunking_strategy(ChunkingStrategy.FIXED, NotAPlanner)
        assert isinstance(registry.get_chunking_strategy("fixed"), FixedSizePlanner)

    def test_planners_are_stateless(self, registry, word_text):
        planner = registry.get_chunking_strategy("fixed")
        config = ChunkingConfig.merge({"chunkSize": 50})
        assert planner.plan(word_text, config) == planner.plan(word_text, config)


class TestEmbeddingProviders:
    """Test embedding provider resolution."""

    def test_default_provider(self, registry):
        provider = registry.get_embedding_provider()

        assert isinstance(provider, FingerprintEmbeddingProvider)
        assert provider.dims == 128
        assert registry.get_embedding_provider() is provider

    def test_configure_rebuilds_provider(self, registry):
        first = registry.get_embedding_provider()
        registry.configure(EmbeddingConfig(dims=64))

        second = registry.get_embedding_provider()
        assert second is not first
        assert second.dims == 64

    def test_configure_from_dict(self, registry):
        registry.configure({"embedding": {"dims": 12}})
        assert registry.get_embedding_provider().dims == 12

    def test_openai_without_key(self, registry):
        registry.configure(EmbeddingConfig(provider="openai"))
        with pytest.raises(ConfigurationError, match="Missing"):
            registry.get_embedding_provider()

    def test_register_provider_override(self, registry):
        custom = CallableEmbeddingProvider(lambda text: [1.0], dims=1)
        registry.register_provider("embedding", custom)
        assert registry.get_embedding_provider() is custom

    def test_non_singleton_factory(self, registry):
        registry.register_provider("scratch", dict, singleton=False)
        assert registry.get_provider("scratch") is not registry.get_provider("scratch")

    def test_unknown_provider(self, registry):
        with pytest.raises(ConfigurationError, match="No provider registered"):
            registry.get_provider("missing")


class TestGlobalRegistry:
    """Test the module-level registry helpers."""

    def test_singleton_until_reset(self):
        registry = get_registry()
        assert get_registry() is registry

        reset_registry()
        assert get_registry() is not registry

    def test_configure_registry(self):
        configure_registry(EmbeddingConfig(dims=20))
        assert get_provider("embedding").dims == 20

    def test_create_indexing_coordinator(self, registry, paragraph_text):
        registry.configure(EmbeddingConfig(dims=32))
        coordinator = registry.create_indexing_coordinator(chunking_config={"chunkSize": 200})

        assert isinstance(coordinator, IndexingCoordinator)
        result = coordinator.index_text(paragraph_text)
        assert result["status"] == "success"
        assert coordinator.store.dimension == 32
