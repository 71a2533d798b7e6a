"""EmbeddingProvider protocol for chunkwright - interface for vector stamping implementations."""

from typing import Any, Dict, List, Protocol, runtime_checkable

from ..core.models import Vector


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding providers.

    Defines the interface every vector source must follow. Segmenters call
    ``embed_single`` once per produced chunk; stores call it for text queries.
    Implementations must return vectors of exactly ``dims`` components.
    """

    @property
    def name(self) -> str:
        """Provider name (e.g., 'fingerprint', 'openai')."""
        ...

    @property
    def model(self) -> str:
        """Model name (e.g., 'char-histogram', 'text-embedding-3-small')."""
        ...

    @property
    def dims(self) -> int:
        """Embedding dimensions."""
        ...

    def embed_single(self, text: str) -> Vector:
        """Generate the vector for a single text.

        Raises:
            ValidationError: If the produced vector does not have ``dims`` components
        """
        ...

    def embed(self, texts: List[str]) -> List[Vector]:
        """Generate vectors for a list of texts, one per input text."""
        ...

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the embedding model."""
        ...
