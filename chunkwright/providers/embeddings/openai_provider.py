"""OpenAI embedding provider for chunkwright - vectors from the OpenAI embeddings API."""

import os
import time
from typing import Any, Dict, List, Optional

from loguru import logger

from ...core.exceptions import ConfigurationError, ValidationError
from ...core.models import Vector

try:
    import openai
    OPENAI_AVAILABLE = True
except ImportError:
    openai = None  # type: ignore
    OPENAI_AVAILABLE = False


class OpenAIEmbeddingProvider:
    """OpenAI embedding provider using text-embedding-3-small by default.

    The client is synchronous because segmenters stamp vectors inline. A
    pre-built client (anything exposing ``embeddings.create``) may be injected,
    in which case the ``openai`` package is not required.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "text-embedding-3-small",
        dims: Optional[int] = None,
        batch_size: int = 100,
        timeout: int = 30,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        client: Any = None
    ):
        """Initialize OpenAI embedding provider.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            base_url: Base URL for OpenAI API (defaults to OPENAI_BASE_URL env var)
            model: Model name to use for embeddings
            dims: Expected dimensions (defaults to the model's native size)
            batch_size: Maximum batch size for API requests
            timeout: Request timeout in seconds
            retry_attempts: Number of attempts for rate-limited or timed-out requests
            retry_delay: Base delay between retry attempts
            client: Optional pre-built client
        """
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._base_url = base_url or os.getenv("OPENAI_BASE_URL")
        self._model = model
        self._batch_size = batch_size
        self._timeout = timeout
        self._retry_attempts = max(1, retry_attempts)
        self._retry_delay = retry_delay

        self._model_dims = {
            "text-embedding-3-small": 1536,
            "text-embedding-3-large": 3072,
            "text-embedding-ada-002": 1536,
        }
        self._dims = dims or self._model_dims.get(model, 1536)

        self._usage_stats = {
            "requests_made": 0,
            "tokens_used": 0,
            "embeddings_generated": 0,
            "errors": 0
        }

        self._client = client if client is not None else self._create_client()

    def _create_client(self) -> Any:
        if not OPENAI_AVAILABLE or openai is None:
            raise ConfigurationError(
                "embedding.provider", "openai",
                "OpenAI package not available. Install with: pip install 'chunkwright[openai]'"
            )

        if not self._api_key:
            raise ConfigurationError("embedding.api_key", None, "OpenAI API key is required")

        client_kwargs: Dict[str, Any] = {
            "api_key": self._api_key,
            "timeout": self._timeout
        }
        if self._base_url:
            client_kwargs["base_url"] = self._base_url

        logger.debug(f"OpenAI client initialized with base_url={self._base_url}, timeout={self._timeout}")
        return openai.OpenAI(**client_kwargs)

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self._model

    @property
    def dims(self) -> int:
        return self._dims

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def embed_single(self, text: str) -> Vector:
        return self.embed([text])[0]

    def embed(self, texts: List[str]) -> List[Vector]:
        """Generate vectors for ``texts`` in batches of ``batch_size``."""
        if not texts:
            return []

        validated = self.validate_texts(texts)
        vectors: List[Vector] = []
        for i in range(0, len(validated), self._batch_size):
            batch = validated[i:i + self._batch_size]
            for values in self._embed_batch_internal(batch):
                if len(values) != self._dims:
                    raise ValidationError(
                        "vector",
                        len(values),
                        f"Model {self._model} returned {len(values)} dimensions, expected {self._dims}"
                    )
                vectors.append(Vector(values=tuple(values), dimension=self._dims))
        return vectors

    def _embed_batch_internal(self, texts: List[str]) -> List[List[float]]:
        for attempt in range(self._retry_attempts):
            try:
                logger.debug(f"Generating embeddings for {len(texts)} texts (attempt {attempt + 1})")
                response = self._client.embeddings.create(model=self._model, input=texts)

                embeddings = [data.embedding for data in response.data]

                self._usage_stats["requests_made"] += 1
                self._usage_stats["embeddings_generated"] += len(embeddings)
                usage = getattr(response, "usage", None)
                if usage is not None:
                    self._usage_stats["tokens_used"] += getattr(usage, "total_tokens", 0)

                return embeddings

            except Exception as e:
                self._usage_stats["errors"] += 1
                if not self._is_retryable(e) or attempt == self._retry_attempts - 1:
                    logger.error(f"Failed to generate embeddings: {e}")
                    raise
                delay = self._retry_delay * (attempt + 1)
                logger.warning(f"{type(e).__name__} from embeddings API, retrying in {delay} seconds")
                time.sleep(delay)

        raise RuntimeError(f"Failed to generate embeddings after {self._retry_attempts} attempts")

    @staticmethod
    def _is_retryable(error: Exception) -> bool:
        if openai is None:
            return False
        retryable = tuple(
            getattr(openai, name)
            for name in ("RateLimitError", "APITimeoutError", "APIConnectionError")
            if hasattr(openai, name)
        )
        return bool(retryable) and isinstance(error, retryable)

    def validate_texts(self, texts: List[str]) -> List[str]:
        """Validate and preprocess texts before embedding."""
        validated = []
        for i, text in enumerate(texts):
            if not isinstance(text, str):
                raise ValidationError(f"texts[{i}]", text, f"Text at index {i} is not a string: {type(text)}")
            if not text.strip():
                logger.warning(f"Empty text at index {i}, using placeholder")
                validated.append("[EMPTY]")
            else:
                validated.append(text.strip())
        return validated

    def get_model_info(self) -> Dict[str, Any]:
        return {
            "provider": self.name,
            "model": self.model,
            "dimensions": self.dims,
            "batch_size": self.batch_size,
            "supported_models": list(self._model_dims.keys())
        }

    def get_usage_stats(self) -> Dict[str, Any]:
        return self._usage_stats.copy()

    def reset_usage_stats(self) -> None:
        self._usage_stats = {
            "requests_made": 0,
            "tokens_used": 0,
            "embeddings_generated": 0,
            "errors": 0
        }
