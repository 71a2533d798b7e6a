"""Provider registry and dependency injection container for chunkwright."""

from typing import Any, Dict, Optional, Union

from loguru import logger

from ..core.config import ChunkwrightConfig, EmbeddingConfig
from ..core.exceptions import ConfigurationError
from ..core.types import ChunkingStrategy
from ..interfaces import ChunkingStrategy as SpanPlanningStrategy
from ..providers.chunking import (
    AdaptivePlanner,
    FixedSizePlanner,
    SemanticPlanner,
    SlidingWindowPlanner,
)
from ..providers.embeddings import EmbeddingProviderFactory


class ProviderRegistry:
    """Registry for segmentation strategies and embedding providers."""

    def __init__(self):
        """Initialize the provider registry."""
        self._providers: Dict[str, Any] = {}
        self._singletons: Dict[str, Any] = {}
        self._strategies: Dict[ChunkingStrategy, SpanPlanningStrategy] = {}
        self._embedding_config = EmbeddingConfig()

        self._register_default_providers()

    def configure(self, config: Union[ChunkwrightConfig, EmbeddingConfig, Dict[str, Any]]) -> None:
        """Configure the registry with application settings.

        Args:
            config: Unified configuration, an embedding configuration, or a
                dictionary with an ``embedding`` section
        """
        if isinstance(config, ChunkwrightConfig):
            self._embedding_config = config.embedding
        elif isinstance(config, EmbeddingConfig):
            self._embedding_config = config
        else:
            self._embedding_config = EmbeddingConfig(**config.get('embedding', {}))

        # Recreate the embedding provider with the new settings on next use
        self._singletons.pop("embedding", None)
        logger.info(f"Provider registry configured (embedding={self._embedding_config.provider})")

    def register_provider(self, name: str, implementation: Any, singleton: bool = True) -> None:
        """Register a provider implementation.

        Args:
            name: Provider name/identifier
            implementation: Zero-argument factory (class or callable) or an instance
            singleton: Whether to reuse one instance for this provider
        """
        self._providers[name] = (implementation, singleton)

        if singleton and name in self._singletons:
            del self._singletons[name]

        logger.debug(f"Registered {getattr(implementation, '__name__', type(implementation).__name__)} as {name}")

    def register_chunking_strategy(self, strategy: ChunkingStrategy, planner_class: Any) -> None:
        """Register the planner implementing a segmentation strategy.

        Raises:
            ConfigurationError: If instances do not implement the planner protocol
        """
        planner = planner_class()
        if not isinstance(planner, SpanPlanningStrategy):
            raise ConfigurationError(
                "strategy", strategy.value, f"{planner_class.__name__} does not implement span planning"
            )
        self._strategies[strategy] = planner
        logger.debug(f"Registered {planner_class.__name__} for {strategy.value}")

    def get_provider(self, name: str) -> Any:
        """Get a provider instance for the specified name.

        Raises:
            ConfigurationError: If no provider is registered for the name
        """
        if name not in self._providers:
            raise ConfigurationError("provider", name, f"No provider registered for {name}")

        implementation, is_singleton = self._providers[name]

        if is_singleton:
            if name not in self._singletons:
                self._singletons[name] = self._create_instance(implementation)
            return self._singletons[name]
        return self._create_instance(implementation)

    def get_chunking_strategy(self, strategy: Union[ChunkingStrategy, str]) -> SpanPlanningStrategy:
        """Get the planner for a strategy name.

        Raises:
            ConfigurationError: If the strategy is unknown
        """
        try:
            key = strategy if isinstance(strategy, ChunkingStrategy) else ChunkingStrategy.from_string(strategy)
        except ValueError:
            raise ConfigurationError("strategy", strategy, "Unknown chunking strategy")

        planner = self._strategies.get(key)
        if planner is None:
            raise ConfigurationError("strategy", key.value, "No planner registered for strategy")
        return planner

    def get_all_chunking_strategies(self) -> Dict[ChunkingStrategy, SpanPlanningStrategy]:
        return self._strategies.copy()

    def get_embedding_provider(self) -> Any:
        """Get the configured embedding provider."""
        return self.get_provider("embedding")

    def create_indexing_coordinator(self, store: Optional[Any] = None, **kwargs: Any) -> Any:
        """Create an IndexingCoordinator sharing this registry's embedding provider.

        Args:
            store: Optional similarity store to index into
            **kwargs: Extra IndexingCoordinator arguments

        Returns:
            Configured IndexingCoordinator instance
        """
        from ..services.indexing_coordinator import IndexingCoordinator

        return IndexingCoordinator(
            store=store,
            embedding_provider=self.get_embedding_provider(),
            **kwargs
        )

    def _register_default_providers(self) -> None:
        """Register default provider implementations."""
        self.register_chunking_strategy(ChunkingStrategy.FIXED, FixedSizePlanner)
        self.register_chunking_strategy(ChunkingStrategy.SEMANTIC, SemanticPlanner)
        self.register_chunking_strategy(ChunkingStrategy.SLIDING, SlidingWindowPlanner)
        self.register_chunking_strategy(ChunkingStrategy.ADAPTIVE, AdaptivePlanner)

        self.register_provider("embedding", self._create_embedding_provider, singleton=True)

    def _create_embedding_provider(self) -> Any:
        return EmbeddingProviderFactory.create_provider(self._embedding_config)

    def _create_instance(self, implementation: Any) -> Any:
        if callable(implementation):
            try:
                return implementation()
            except Exception as e:
                logger.error(f"Failed to create instance: {e}")
                raise
        return implementation


# Global registry instance (lazy initialization)
_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Get the global registry instance."""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


def configure_registry(config: Union[ChunkwrightConfig, EmbeddingConfig, Dict[str, Any]]) -> None:
    """Configure the global provider registry."""
    get_registry().configure(config)


def reset_registry() -> None:
    """Drop the global registry so the next lookup rebuilds the defaults."""
    global _registry
    _registry = None


def get_provider(name: str) -> Any:
    """Get a provider from the global registry."""
    return get_registry().get_provider(name)


__all__ = [
    'ProviderRegistry',
    'get_registry',
    'configure_registry',
    'reset_registry',
    'get_provider',
]
