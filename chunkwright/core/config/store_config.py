"""Similarity store configuration."""

from typing import Any, Literal

from pydantic import Field, field_validator

from ..types import SimilarityMetric
from .base import MergeableConfig


class SimilarityStoreConfig(MergeableConfig):
    """Scoring and result-shaping options for the similarity store."""

    similarity_metric: SimilarityMetric = Field(
        default=SimilarityMetric.COSINE,
        description="Scoring function used by search"
    )

    index_type: Literal['brute-force'] = Field(
        default='brute-force',
        description="Search index; only linear scan is available"
    )

    max_results: int = Field(
        default=10,
        ge=1,
        description="Default top_k for search"
    )

    threshold: float = Field(
        default=0.0,
        description="Default minimum score for search"
    )

    normalize_vectors: bool = Field(
        default=False,
        description="Normalize chunk vectors on insertion"
    )

    @field_validator('similarity_metric', mode='before')
    @classmethod
    def parse_metric(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, SimilarityMetric):
            return v.strip().lower()
        return v
