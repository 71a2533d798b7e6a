"""
Embedding provider factory for chunkwright.

Creates embedding providers from an ``EmbeddingConfig`` so every component
builds its vector source the same way.
"""

from loguru import logger

from ...core.config import EmbeddingConfig
from ...core.exceptions import ConfigurationError
from ...interfaces import EmbeddingProvider
from .fingerprint_provider import FingerprintEmbeddingProvider
from .openai_provider import OpenAIEmbeddingProvider


class EmbeddingProviderFactory:
    """Factory for creating embedding providers from configuration."""

    @staticmethod
    def create_provider(config: EmbeddingConfig) -> EmbeddingProvider:
        """
        Create an embedding provider from configuration.

        Args:
            config: Validated embedding configuration

        Returns:
            Configured embedding provider instance

        Raises:
            ConfigurationError: If provider configuration is incomplete
        """
        if not config.is_provider_configured():
            missing = config.get_missing_config()
            raise ConfigurationError(
                "embedding.provider",
                config.provider,
                f"Incomplete configuration for {config.provider} provider. "
                f"Missing: {', '.join(missing)}"
            )

        if config.provider == 'fingerprint':
            return FingerprintEmbeddingProvider(dims=config.dims, model=config.get_default_model())

        if config.provider == 'openai':
            api_key = config.api_key.get_secret_value() if config.api_key else None
            model = config.get_default_model()
            logger.debug(
                f"Creating OpenAI provider: model={model}, "
                f"base_url={config.base_url}, api_key={'***' if api_key else None}"
            )
            # dims is only forwarded when set explicitly; native model size otherwise
            dims = config.dims if 'dims' in config.model_fields_set else None
            return OpenAIEmbeddingProvider(
                api_key=api_key,
                base_url=config.base_url,
                model=model,
                dims=dims,
                batch_size=config.batch_size,
                timeout=config.timeout,
            )

        raise ConfigurationError("embedding.provider", config.provider, "Unsupported provider")
