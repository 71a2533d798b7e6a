"""Vector arithmetic over ``Vector`` values.

Every operation is O(d). Binary operations require both operands to have the
same dimension and raise ``DimensionMismatch`` otherwise. Components are
computed as float64 numpy arrays; results come back as ``Vector`` values or
plain floats.

The ``*_scores`` functions score one query against a stacked matrix of
vectors (one row per vector) in a single pass, for brute-force search.
"""

import sys
from typing import Iterable, Optional

import numpy as np

from .core.exceptions import DimensionMismatch, ValidationError
from .core.models import Vector

EPSILON = sys.float_info.epsilon


def _check_dimensions(a: Vector, b: Vector, operation: str) -> None:
    if a.dimension != b.dimension:
        raise DimensionMismatch(a.dimension, b.dimension, operation)


def as_array(v: Vector) -> np.ndarray:
    """Components of ``v`` as a float64 array."""
    return np.asarray(v.values, dtype=np.float64)


def from_array(values: np.ndarray, like: Optional[Vector] = None) -> Vector:
    """Wrap an array as a ``Vector``, copying id and metadata from ``like``."""
    components = tuple(values.tolist())
    if like is None:
        return Vector(values=components, dimension=len(components))
    return Vector(values=components, dimension=len(components), id=like.id, metadata=like.metadata)


def stack(vectors: Iterable[Vector], dimension: int) -> np.ndarray:
    """Stack vectors into an ``(n, dimension)`` matrix."""
    rows = [v.values for v in vectors]
    if not rows:
        return np.empty((0, dimension), dtype=np.float64)
    return np.array(rows, dtype=np.float64)


def dot_product(a: Vector, b: Vector) -> float:
    """Sum of component-wise products."""
    _check_dimensions(a, b, "dot_product")
    return float(np.dot(as_array(a), as_array(b)))


def norm(v: Vector) -> float:
    """Euclidean length of ``v``."""
    return float(np.linalg.norm(as_array(v)))


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine of the angle between ``a`` and ``b``; 0.0 if either is all zeros."""
    _check_dimensions(a, b, "cosine_similarity")
    va, vb = as_array(a), as_array(b)
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb) / denom)


def euclidean_distance(a: Vector, b: Vector) -> float:
    _check_dimensions(a, b, "euclidean_distance")
    return float(np.linalg.norm(as_array(a) - as_array(b)))


def manhattan_distance(a: Vector, b: Vector) -> float:
    _check_dimensions(a, b, "manhattan_distance")
    return float(np.abs(as_array(a) - as_array(b)).sum())


def normalize(v: Vector) -> Vector:
    """Scale ``v`` to unit length; an all-zero vector comes back as zeros."""
    values = as_array(v)
    length = np.linalg.norm(values)
    if length == 0.0:
        return from_array(values, like=v)
    return from_array(values / length, like=v)


def add(a: Vector, b: Vector) -> Vector:
    _check_dimensions(a, b, "add")
    return from_array(as_array(a) + as_array(b))


def subtract(a: Vector, b: Vector) -> Vector:
    _check_dimensions(a, b, "subtract")
    return from_array(as_array(a) - as_array(b))


def scale(v: Vector, scalar: float) -> Vector:
    return from_array(as_array(v) * scalar)


def equals(a: Vector, b: Vector) -> bool:
    """True if dimensions match and every component differs by at most machine epsilon."""
    if a.dimension != b.dimension:
        return False
    return bool(np.all(np.abs(as_array(a) - as_array(b)) <= EPSILON))


def zero(n: int) -> Vector:
    """All-zero vector of dimension ``n``."""
    if n < 0:
        raise ValidationError("dimension", n, "Dimension cannot be negative")
    return from_array(np.zeros(n))


def random(
    n: int,
    min_value: float = -1.0,
    max_value: float = 1.0,
    rng: Optional[np.random.Generator] = None
) -> Vector:
    """Vector of ``n`` components drawn i.i.d. uniform from [min_value, max_value].

    Args:
        n: Dimension
        min_value: Lower bound
        max_value: Upper bound
        rng: Optional numpy ``Generator`` for reproducible draws
    """
    if n < 0:
        raise ValidationError("dimension", n, "Dimension cannot be negative")
    if min_value > max_value:
        raise ValidationError("min_value", min_value, "min_value cannot exceed max_value")
    source = rng if rng is not None else np.random.default_rng()
    return from_array(source.uniform(min_value, max_value, size=n))


# Batch scoring


def cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine similarity of every row against ``query``; 0.0 for zero rows or query."""
    denom = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.zeros(len(matrix), dtype=np.float64)
    np.divide(dots, denom, out=scores, where=denom != 0.0)
    return scores


def euclidean_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """``1 / (1 + euclidean distance)`` of every row to ``query``."""
    return 1.0 / (1.0 + np.linalg.norm(matrix - query, axis=1))


def manhattan_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """``1 / (1 + manhattan distance)`` of every row to ``query``."""
    return 1.0 / (1.0 + np.abs(matrix - query).sum(axis=1))


def dot_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    return matrix @ query
