"""Character fingerprint embedding provider - the default local vector source."""

from typing import Any, Dict, List

import numpy as np

from ...core.exceptions import ValidationError
from ...core.models import Vector

DEFAULT_DIMS = 128


class FingerprintEmbeddingProvider:
    """Character-code histogram folded modulo ``dims`` and L2-normalized.

    Deterministic and local. It captures character distribution
    only, which is enough for plumbing and tests but carries no meaning.
    """

    def __init__(self, dims: int = DEFAULT_DIMS, model: str = "char-histogram"):
        if dims < 1:
            raise ValidationError("dims", dims, "Dimensions must be positive")
        self._dims = dims
        self._model = model

    @property
    def name(self) -> str:
        return "fingerprint"

    @property
    def model(self) -> str:
        return self._model

    @property
    def dims(self) -> int:
        return self._dims

    def embed_single(self, text: str) -> Vector:
        codes = np.fromiter((ord(ch) % self._dims for ch in text), dtype=np.int64, count=len(text))
        counts = np.bincount(codes, minlength=self._dims).astype(np.float64)

        length = np.linalg.norm(counts)
        if length > 0:
            counts /= length

        return Vector(values=tuple(counts.tolist()), dimension=self._dims)

    def embed(self, texts: List[str]) -> List[Vector]:
        return [self.embed_single(text) for text in texts]

    def get_model_info(self) -> Dict[str, Any]:
        return {
            "provider": self.name,
            "model": self.model,
            "dimensions": self.dims,
        }

    def __repr__(self) -> str:
        return f"FingerprintEmbeddingProvider(dims={self._dims})"
