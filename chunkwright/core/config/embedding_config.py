"""
Embedding provider configuration for chunkwright.

The default provider is the local character-fingerprint embedder, which needs
no configuration. The OpenAI provider needs an API key and accepts an
optional base URL for compatible servers.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator

DEFAULT_MODELS = {
    'fingerprint': 'char-histogram',
    'openai': 'text-embedding-3-small',
}


class EmbeddingConfig(BaseModel):
    """Configuration for the embedding provider stamped onto chunks."""

    provider: Literal['fingerprint', 'openai'] = Field(
        default='fingerprint',
        description="Embedding provider to use"
    )

    dims: int = Field(
        default=128,
        ge=1,
        le=8192,
        description="Vector dimensions produced by the provider"
    )

    model: Optional[str] = Field(
        default=None,
        description="Embedding model name (uses provider default if not specified)"
    )

    api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key for authentication (openai only)"
    )

    base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the embedding API"
    )

    batch_size: int = Field(
        default=100,
        ge=1,
        le=2048,
        description="Texts per embedding request"
    )

    timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Request timeout in seconds"
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate and normalize base URL."""
        if v is None:
            return v

        # Remove trailing slash for consistency
        v = v.rstrip('/')

        if not (v.startswith('http://') or v.startswith('https://')):
            raise ValueError('base_url must start with http:// or https://')

        return v

    def get_default_model(self) -> str:
        """Get the configured model or the provider's default model."""
        return self.model or DEFAULT_MODELS[self.provider]

    def is_provider_configured(self) -> bool:
        """Check if the provider has all required configuration."""
        if self.provider == 'openai':
            return self.api_key is not None
        return True

    def get_missing_config(self) -> list[str]:
        """Get list of missing required configuration parameters."""
        missing = []
        if self.provider == 'openai' and not self.api_key:
            missing.append('api_key (CHUNKWRIGHT_EMBEDDING__API_KEY)')
        return missing

    def __repr__(self) -> str:
        """String representation hiding sensitive information."""
        api_key_display = "***" if self.api_key else None
        return (
            f"EmbeddingConfig("
            f"provider={self.provider}, "
            f"model={self.get_default_model()}, "
            f"dims={self.dims}, "
            f"api_key={api_key_display}, "
            f"base_url={self.base_url})"
        )
