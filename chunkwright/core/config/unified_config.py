"""
Unified configuration system for chunkwright.

This module groups the segmentation, store, embedding and parallel settings
into one settings model with hierarchical loading from files, environment
variables and runtime overrides.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError
from .chunking_config import ChunkingConfig
from .embedding_config import EmbeddingConfig
from .parallel_config import ParallelConfig
from .settings_sources import find_config_files, source_for_path
from .store_config import SimilarityStoreConfig


def _deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ChunkwrightConfig(BaseSettings):
    """
    Unified configuration for chunkwright.

    Configuration Sources (in order of precedence):
    1. Runtime overrides passed to ``load_hierarchical`` (highest priority)
    2. Config file (explicit path, or discovered chunkwright.{yaml,toml,json})
    3. Environment variables (CHUNKWRIGHT_*)
    4. Default values (lowest priority)

    Environment Variable Examples:
        CHUNKWRIGHT_CHUNKING__CHUNK_SIZE=256
        CHUNKWRIGHT_CHUNKING__STRATEGY=semantic
        CHUNKWRIGHT_STORE__SIMILARITY_METRIC=euclidean
        CHUNKWRIGHT_EMBEDDING__PROVIDER=openai
        CHUNKWRIGHT_EMBEDDING__API_KEY=sk-...
        CHUNKWRIGHT_PARALLEL__EXECUTOR=thread
        CHUNKWRIGHT_DEBUG=true
    """

    model_config = SettingsConfigDict(
        env_prefix='CHUNKWRIGHT_',
        env_nested_delimiter='__',
        case_sensitive=False,
        validate_default=True,
        extra='ignore',
        env_file=None,
    )

    chunking: ChunkingConfig = Field(
        default_factory=ChunkingConfig,
        description="Segmentation configuration"
    )

    store: SimilarityStoreConfig = Field(
        default_factory=SimilarityStoreConfig,
        description="Similarity store configuration"
    )

    embedding: EmbeddingConfig = Field(
        default_factory=EmbeddingConfig,
        description="Embedding provider configuration"
    )

    parallel: ParallelConfig = Field(
        default_factory=ParallelConfig,
        description="Parallel segmentation configuration"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    @classmethod
    def load_hierarchical(
        cls,
        config_file: Optional[Union[str, Path]] = None,
        project_dir: Optional[Path] = None,
        **override_values: Any
    ) -> 'ChunkwrightConfig':
        """
        Load configuration from hierarchical sources.

        Args:
            config_file: Explicit JSON/YAML/TOML file; it must exist and parse
            project_dir: Directory searched for chunkwright config files when
                no explicit file is given
            **override_values: Runtime parameter overrides

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationError: If a file cannot be loaded or a value is invalid
        """
        config_data: Dict[str, Any] = {}

        if config_file is not None:
            config_data = source_for_path(cls, config_file, strict=True)()
        else:
            search_dirs = [project_dir] if project_dir is not None else None
            for path in find_config_files(search_dirs):
                try:
                    data = source_for_path(cls, path)()
                except ConfigurationError as e:
                    logger.warning(f"Skipping config file {path}: {e}")
                    continue
                config_data = _deep_merge(config_data, data)

        config_data = _deep_merge(config_data, override_values)

        try:
            return cls(**config_data)
        except PydanticValidationError as e:
            errors = e.errors()
            first = errors[0] if errors else {}
            location = ".".join(str(part) for part in first.get("loc", ())) or "config"
            raise ConfigurationError(
                location, first.get("input"), first.get("msg", str(e))
            ) from e

    def get_missing_config(self) -> list[str]:
        """Get list of missing required configuration parameters."""
        return [f'embedding.{item}' for item in self.embedding.get_missing_config()]

    def is_fully_configured(self) -> bool:
        """Check if all required configuration is present."""
        return self.embedding.is_provider_configured()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return self.model_dump(mode='json', exclude_none=True)

    def __repr__(self) -> str:
        """String representation hiding sensitive information."""
        api_key_display = "***" if self.embedding.api_key else None
        return (
            f"ChunkwrightConfig("
            f"chunking.strategy={self.chunking.strategy.value}, "
            f"chunking.chunk_size={self.chunking.chunk_size}, "
            f"store.metric={self.store.similarity_metric.value}, "
            f"embedding.provider={self.embedding.provider}, "
            f"embedding.api_key={api_key_display}, "
            f"parallel.executor={self.parallel.executor})"
        )


# Global configuration instance
_config_instance: Optional[ChunkwrightConfig] = None


def get_config() -> ChunkwrightConfig:
    """Get the global configuration instance, loading it on first use."""
    global _config_instance
    if _config_instance is None:
        _config_instance = ChunkwrightConfig.load_hierarchical()
    return _config_instance


def set_config(config: ChunkwrightConfig) -> None:
    """Set the global configuration instance."""
    global _config_instance
    _config_instance = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config_instance
    _config_instance = None
