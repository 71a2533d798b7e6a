"""Chunkwright Vector Domain Model - A fixed-dimension numeric vector.

This module contains the Vector domain model. A vector always holds exactly
``dimension`` components; instances that violate this are rejected at
construction and never padded or truncated.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from ..exceptions import ValidationError


@dataclass(frozen=True)
class Vector:
    """Immutable fixed-length vector of floats.

    Attributes:
        values: Vector components
        dimension: Declared number of components
        id: Optional identifier (e.g. of the query that produced it)
        metadata: Optional free-form metadata
    """

    values: Tuple[float, ...]
    dimension: int
    id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = field(default=None, compare=False, hash=False)

    def __post_init__(self):
        """Coerce components to a float tuple and validate the dimension."""
        try:
            values = tuple(float(v) for v in self.values)
        except (TypeError, ValueError) as e:
            raise ValidationError("vector.values", self.values, f"Vector values must be numeric: {e}")
        object.__setattr__(self, "values", values)

        if not isinstance(self.dimension, int) or isinstance(self.dimension, bool):
            raise ValidationError("vector.dimension", self.dimension, "Dimension must be an integer")

        if self.dimension < 0:
            raise ValidationError("vector.dimension", self.dimension, "Dimension cannot be negative")

        if len(values) != self.dimension:
            raise ValidationError(
                "vector.values",
                len(values),
                f"Vector length ({len(values)}) must match dimension ({self.dimension})"
            )

    @classmethod
    def from_values(cls, values: Iterable[float], **kwargs: Any) -> "Vector":
        """Create a vector whose dimension is the number of values given."""
        values = tuple(values)
        return cls(values=values, dimension=len(values), **kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vector":
        """Create a Vector from ``{"values": [...], "dimension": n}``.

        A missing dimension is taken from the number of values; a present but
        disagreeing dimension is rejected.
        """
        if not isinstance(data, dict):
            raise ValidationError("vector", data, "Vector must be a mapping with 'values'")

        values = data.get("values")
        if values is None:
            raise ValidationError("vector.values", values, "Vector values are required")

        dimension = data.get("dimension")
        if dimension is None:
            dimension = len(values)

        return cls(
            values=tuple(values),
            dimension=dimension,
            id=data.get("id"),
            metadata=data.get("metadata"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the vector to its wire representation."""
        result: Dict[str, Any] = {
            "values": list(self.values),
            "dimension": self.dimension,
        }
        if self.id is not None:
            result["id"] = self.id
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result

    def __len__(self) -> int:
        return self.dimension

    def __repr__(self) -> str:
        preview = ", ".join(f"{v:.3f}" for v in self.values[:4])
        if self.dimension > 4:
            preview += ", ..."
        return f"Vector(dimension={self.dimension}, values=[{preview}])"
