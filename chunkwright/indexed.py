"""Index-guided segmentation.

``IndexedChunker`` first builds a content index of the text's blank-line
separated sections, scoring each for relevance, and then segments only the
sections at or above a relevance threshold.
"""

import re
from collections import Counter
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from .chunker import Segmenter
from .core.config import ChunkingConfig
from .core.models import Chunk
from .core.types import ChunkingStrategy, ChunkType, SectionType
from .interfaces import EmbeddingProvider
from .providers.chunking import split_paragraphs
from .registry import ProviderRegistry

DEFAULT_RELEVANCE_THRESHOLD = 0.3
KEYWORD_BOOST = 0.3
SECTION_SEPARATOR = "\n\n"

_HEADING = re.compile(r"^#{1,6}\s")
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+\.)\s")
_CODE = re.compile(r"^(?:```|\s{4,})")
_TABLE_ROW = re.compile(r"\|.*\|")
_DIGIT = re.compile(r"\d")
_LINK = re.compile(r"\[.*\]\(.*\)|https?://")
_PUNCTUATION = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class ContentSection:
    """One blank-line separated section of the source text."""

    start: int
    end: int
    section_type: SectionType
    relevance: float
    keywords: Tuple[str, ...]

    @property
    def length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "type": self.section_type.value,
            "relevance": self.relevance,
            "keywords": list(self.keywords),
        }


@dataclass(frozen=True)
class ContentIndex:
    """Sections of a text plus summary figures."""

    sections: Tuple[ContentSection, ...]
    total_sections: int
    relevant_sections: int
    average_relevance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sections": [section.to_dict() for section in self.sections],
            "metadata": {
                "totalSections": self.total_sections,
                "relevantSections": self.relevant_sections,
                "averageRelevance": self.average_relevance,
            },
        }


def detect_section_type(section: str) -> SectionType:
    """Classify a section by its leading markup."""
    stripped = section.strip()
    if _HEADING.match(stripped):
        return SectionType.HEADING
    if _LIST_ITEM.match(stripped):
        return SectionType.LIST
    # Indentation is only visible on the untrimmed section
    if _CODE.match(section):
        return SectionType.CODE
    if _TABLE_ROW.search(stripped) and "---" in stripped:
        return SectionType.TABLE
    return SectionType.PARAGRAPH


def score_relevance(section: str) -> float:
    """Heuristic 0-1 relevance score of a trimmed section."""
    score = 0.5
    if _HEADING.match(section):
        score += 0.3
    if len(section) > 100:
        score += 0.2
    if _DIGIT.search(section):
        score += 0.1
    if _LINK.search(section):
        score += 0.1
    if len(section) < 20:
        score -= 0.2
    if section and len(_PUNCTUATION.findall(section)) / len(section) > 0.3:
        score -= 0.1
    return max(0.0, min(1.0, score))


def extract_keywords(section: str, limit: int = 5) -> Tuple[str, ...]:
    """Most frequent words longer than three characters, ties in order of appearance."""
    words = [w for w in re.sub(r"[^\w\s]", " ", section.lower()).split() if len(w) > 3]
    return tuple(word for word, _ in Counter(words).most_common(limit))


class IndexedChunker:
    """Segment only the relevant sections of a text.

    Relevant sections are joined with blank lines and segmented as one text,
    so chunk positions refer to that joined text, not the original.
    """

    def __init__(
        self,
        config: Optional[Any] = None,
        relevance_threshold: float = DEFAULT_RELEVANCE_THRESHOLD,
        embedding_provider: Optional[EmbeddingProvider] = None,
        registry: Optional[ProviderRegistry] = None
    ):
        if not isinstance(config, ChunkingConfig):
            partial = dict(config or {})
            partial.setdefault("strategy", ChunkingStrategy.SEMANTIC)
            config = ChunkingConfig.merge(partial)
        self._segmenter = Segmenter(config, embedding_provider=embedding_provider, registry=registry)
        self.relevance_threshold = relevance_threshold

    @property
    def config(self) -> ChunkingConfig:
        return self._segmenter.config

    def create_content_index(self, text: str) -> ContentIndex:
        sections = []
        for start, end in split_paragraphs(text):
            line_start = text.rfind("\n", 0, start) + 1
            trimmed = text[start:end]
            sections.append(ContentSection(
                start=start,
                end=end,
                section_type=detect_section_type(text[line_start:end]),
                relevance=score_relevance(trimmed),
                keywords=extract_keywords(trimmed),
            ))
        return self._summarize(sections)

    def _summarize(self, sections: Sequence[ContentSection]) -> ContentIndex:
        relevant = [s for s in sections if s.relevance >= self.relevance_threshold]
        average = sum(s.relevance for s in sections) / len(sections) if sections else 0.0
        return ContentIndex(
            sections=tuple(sections),
            total_sections=len(sections),
            relevant_sections=len(relevant),
            average_relevance=average,
        )

    def chunk_with_index(
        self,
        text: str,
        index: ContentIndex,
        metadata: Optional[Dict[str, Any]] = None
    ) -> List[Chunk]:
        """Segment the sections of ``index`` that meet the relevance threshold."""
        relevant = [s for s in index.sections if s.relevance >= self.relevance_threshold]
        if not relevant:
            logger.debug("No section meets the relevance threshold")
            return []

        relevant_text = SECTION_SEPARATOR.join(text[s.start:s.end] for s in relevant)
        chunk_metadata = dict(metadata or {})
        chunk_metadata.update({
            "indexed": True,
            "relevance_threshold": self.relevance_threshold,
            "original_sections": len(relevant),
            "total_sections": index.total_sections,
        })

        chunks = self._segmenter.segment(relevant_text, chunk_metadata)
        return [replace(chunk, chunk_type=ChunkType.SECTION) for chunk in chunks]

    def smart_chunk(
        self,
        text: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Tuple[List[Chunk], ContentIndex]:
        """Build the content index and segment with it."""
        index = self.create_content_index(text)
        return self.chunk_with_index(text, index, metadata), index

    def chunk_with_keywords(
        self,
        text: str,
        target_keywords: Sequence[str],
        metadata: Optional[Dict[str, Any]] = None
    ) -> List[Chunk]:
        """Segment with relevance boosted for sections containing target keywords.

        Each matching keyword adds 0.3 to a section's relevance, capped at 1.
        """
        index = self.boost_keyword_relevance(self.create_content_index(text), target_keywords)
        chunk_metadata = dict(metadata or {})
        chunk_metadata.update({"target_keywords": list(target_keywords), "keyword_boosted": True})
        return self.chunk_with_index(text, index, chunk_metadata)

    def boost_keyword_relevance(self, index: ContentIndex, target_keywords: Sequence[str]) -> ContentIndex:
        targets = [keyword.lower() for keyword in target_keywords]
        boosted = []
        for section in index.sections:
            matches = sum(1 for keyword in targets if keyword in section.keywords)
            relevance = section.relevance
            if matches:
                relevance = min(1.0, relevance + KEYWORD_BOOST * matches)
            boosted.append(replace(section, relevance=relevance))
        return self._summarize(boosted)

    def get_chunking_stats(self, index: ContentIndex) -> Dict[str, Any]:
        """Share of text skipped by the threshold and the relevance distribution."""
        total = sum(s.length for s in index.sections)
        relevant = sum(s.length for s in index.sections if s.relevance >= self.relevance_threshold)
        return {
            "total_text_length": total,
            "relevant_text_length": relevant,
            "efficiency_gain": (total - relevant) / total if total > 0 else 0.0,
            "relevance_distribution": {
                "high": sum(1 for s in index.sections if s.relevance >= 0.7),
                "medium": sum(1 for s in index.sections if 0.4 <= s.relevance < 0.7),
                "low": sum(1 for s in index.sections if s.relevance < 0.4),
            },
        }
