"""Embedding provider adapting any ``text -> sequence of floats`` function."""

from typing import Any, Callable, Dict, List, Sequence

from ...core.exceptions import ValidationError
from ...core.models import Vector


class CallableEmbeddingProvider:
    """Wrap a plain embedding function as an ``EmbeddingProvider``.

    Every result is checked against ``dims``; a function returning the wrong
    number of components raises ``ValidationError`` instead of being padded.
    """

    def __init__(
        self,
        func: Callable[[str], Sequence[float]],
        dims: int,
        name: str = "callable",
        model: str = "custom"
    ):
        if not callable(func):
            raise ValidationError("func", func, "Embedding function must be callable")
        if dims < 1:
            raise ValidationError("dims", dims, "Dimensions must be positive")
        self._func = func
        self._dims = dims
        self._name = name
        self._model = model

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return self._model

    @property
    def dims(self) -> int:
        return self._dims

    def embed_single(self, text: str) -> Vector:
        values = tuple(self._func(text))
        if len(values) != self._dims:
            raise ValidationError(
                "vector",
                len(values),
                f"{self._name} returned {len(values)} components, expected {self._dims}"
            )
        return Vector(values=values, dimension=self._dims)

    def embed(self, texts: List[str]) -> List[Vector]:
        return [self.embed_single(text) for text in texts]

    def get_model_info(self) -> Dict[str, Any]:
        return {
            "provider": self.name,
            "model": self.model,
            "dimensions": self.dims,
        }
