"""Span planners implementing the segmentation strategies."""

from .adaptive import AdaptivePlanner, split_paragraphs
from .base import SpanPlanner
from .fixed import FixedSizePlanner
from .semantic import SemanticPlanner, split_sentences
from .sliding import SlidingWindowPlanner

__all__ = [
    "SpanPlanner",
    "FixedSizePlanner",
    "SemanticPlanner",
    "SlidingWindowPlanner",
    "AdaptivePlanner",
    "split_sentences",
    "split_paragraphs",
]
