"""Chunkwright SearchResult Model - One ranked hit from a similarity search."""

from dataclasses import dataclass
from typing import Any, Dict

from ..types import Relevance, SimilarityMetric
from .chunk import Chunk


@dataclass(frozen=True)
class SearchResult:
    """A stored chunk together with its score against a query.

    Attributes:
        chunk: The matching chunk
        score: Similarity score under the store's metric (higher is better)
        distance: ``1 - score`` for bounded metrics, ``-score`` for dot product
        relevance: Coarse bucket derived from the score
    """

    chunk: Chunk
    score: float
    distance: float
    relevance: Relevance

    @classmethod
    def from_score(cls, chunk: Chunk, score: float, metric: SimilarityMetric) -> "SearchResult":
        """Build a result, deriving distance and relevance from the score."""
        distance = 1.0 - score if metric.is_bounded else -score
        return cls(
            chunk=chunk,
            score=score,
            distance=distance,
            relevance=Relevance.from_score(score),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a plain dictionary."""
        return {
            "chunk": self.chunk.to_dict(),
            "score": self.score,
            "distance": self.distance,
            "relevance": self.relevance.value,
        }
