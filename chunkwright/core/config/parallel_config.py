"""Worker pool configuration for parallel segmentation."""

from typing import Literal

from pydantic import BaseModel, Field


class ParallelConfig(BaseModel):
    """Parallel segmentation configuration."""

    workers: int = Field(
        default=4,
        ge=1,
        le=256,
        description="Requested worker count (capped at the CPU count)"
    )

    executor: Literal['process', 'thread'] = Field(
        default='process',
        description="Pool type backing the workers"
    )
