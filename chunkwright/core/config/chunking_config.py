"""Segmentation configuration for chunkwright.

``ChunkingConfig`` holds the knobs shared by every segmentation strategy and
execution mode. A default the caller leaves out is lowered only when it would
violate an invariant against the values the caller did supply, so
``ChunkingConfig.merge({"chunkSize": 50})`` yields overlap 25 and minimum 25
while ``ChunkingConfig.merge({"chunkSize": 150})`` keeps both defaults.
"""

from typing import Any

from pydantic import Field, field_validator, model_validator

from ..types import ChunkingStrategy
from .base import MergeableConfig

DEFAULT_CHUNK_SIZE = 512
DEFAULT_OVERLAP = 50
DEFAULT_MIN_CHUNK_SIZE = 100
DEFAULT_MAX_CHUNK_SIZE = 1024


class ChunkingConfig(MergeableConfig):
    """Segmentation parameters.

    Invariants: ``0 <= overlap < chunk_size`` and
    ``min_chunk_size <= chunk_size <= max_chunk_size``.

    ``preserve_paragraphs`` and ``max_chunk_size`` are validated and carried
    along for callers but no planner consults them.
    """

    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        ge=1,
        description="Target chunk length in characters"
    )

    overlap: int = Field(
        default=DEFAULT_OVERLAP,
        ge=0,
        description="Characters shared between consecutive chunks"
    )

    strategy: ChunkingStrategy = Field(
        default=ChunkingStrategy.FIXED,
        description="Segmentation strategy"
    )

    preserve_paragraphs: bool = Field(
        default=True,
        description="Keep paragraph boundaries where the strategy allows it"
    )

    min_chunk_size: int = Field(
        default=DEFAULT_MIN_CHUNK_SIZE,
        ge=0,
        description="Chunks shorter than this are dropped"
    )

    max_chunk_size: int = Field(
        default=DEFAULT_MAX_CHUNK_SIZE,
        ge=1,
        description="Upper bound for chunk_size"
    )

    @field_validator('strategy', mode='before')
    @classmethod
    def parse_strategy(cls, v: Any) -> Any:
        """Accept strategy names in any case."""
        if isinstance(v, str) and not isinstance(v, ChunkingStrategy):
            try:
                return ChunkingStrategy.from_string(v)
            except ValueError:
                raise ValueError(
                    f"strategy must be one of {[s.value for s in ChunkingStrategy]}, got {v!r}"
                )
        return v

    @model_validator(mode='after')
    def clamp_and_check(self) -> "ChunkingConfig":
        """Lower unsupplied defaults that would break an invariant, then enforce the invariants."""
        supplied = self.model_fields_set
        size = self.chunk_size

        # Clamped values are written directly so they do not count as supplied.
        if 'overlap' not in supplied and DEFAULT_OVERLAP >= size:
            object.__setattr__(self, 'overlap', size // 2)
        if 'min_chunk_size' not in supplied and DEFAULT_MIN_CHUNK_SIZE > size:
            object.__setattr__(self, 'min_chunk_size', size // 2)
        if 'max_chunk_size' not in supplied:
            object.__setattr__(self, 'max_chunk_size', max(DEFAULT_MAX_CHUNK_SIZE, size))

        if self.overlap >= size:
            raise ValueError(f"overlap ({self.overlap}) must be smaller than chunk_size ({size})")
        if self.min_chunk_size > size:
            raise ValueError(
                f"min_chunk_size ({self.min_chunk_size}) cannot exceed chunk_size ({size})"
            )
        if size > self.max_chunk_size:
            raise ValueError(
                f"chunk_size ({size}) cannot exceed max_chunk_size ({self.max_chunk_size})"
            )
        return self

    @property
    def step(self) -> int:
        """Window advance used by the sliding strategy."""
        return self.chunk_size - self.overlap

    def __repr__(self) -> str:
        return (
            f"ChunkingConfig(strategy={self.strategy.value}, chunk_size={self.chunk_size}, "
            f"overlap={self.overlap}, min={self.min_chunk_size}, max={self.max_chunk_size})"
        )
