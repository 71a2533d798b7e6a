"""Tests for the segmenter and the span planners behind each strategy."""

import re

import pytest

from chunkwright.chunker import Segmenter, chunk_id, segment
from chunkwright.core.exceptions import ConfigurationError
from chunkwright.core.types import ChunkingStrategy, ChunkType
from chunkwright.providers.chunking import split_paragraphs, split_sentences
from chunkwright.providers.embeddings import CallableEmbeddingProvider

RUN_ID = re.compile(r"^[0-9a-f]{12}_\d{4}$")


def assert_positions(text, chunks):
    """Every chunk's content is exactly the text it claims to cover."""
    for expected_index, chunk in enumerate(chunks):
        assert chunk.chunk_index == expected_index
        assert chunk.content == text[chunk.start_position:chunk.end_position]


class TestEdgePolicy:
    """Test the rules shared by every strategy."""

    def test_empty_text(self):
        assert segment("") == []

    def test_whitespace_only_text(self):
        assert segment("   \n\t  ") == []

    def test_short_text_below_minimum(self):
        """Text shorter than min_chunk_size produces nothing."""
        assert segment("Short text") == []

    def test_short_text_single_trimmed_chunk(self):
        text = "  " + "lorem ipsum " * 12 + "\n"
        chunks = segment(text)

        assert len(chunks) == 1
        assert chunks[0].content == text.strip()
        assert_positions(text, chunks)

    def test_fixed_words_fill_chunks(self):
        """Forty five-character words at chunkSize 50 give four chunks."""
        text = "abcd " * 40
        chunks = segment(text, {"chunkSize": 50, "overlap": 0})

        assert len(chunks) == 4
        assert all(len(chunk.content) <= 50 for chunk in chunks)
        assert [c.start_position for c in chunks] == [0, 50, 100, 150]
        assert_positions(text, chunks)

    def test_short_spans_dropped(self):
        """A trailing span below the minimum is dropped, not merged."""
        text = "x" * 100
        config = {"chunkSize": 40, "overlap": 10, "strategy": "sliding"}

        kept = segment(text, dict(config, minChunkSize=0))
        dropped = segment(text, config)

        assert [len(c.content) for c in kept] == [40, 40, 40, 10]
        assert [len(c.content) for c in dropped] == [40, 40, 40]


class TestFixedStrategy:
    """Test word-accumulating fixed-size segmentation."""

    def test_overlap_seeds_next_chunk(self, word_text):
        chunks = segment(word_text, {"chunkSize": 100, "overlap": 30, "minChunkSize": 0})

        assert len(chunks) > 2
        assert all(len(chunk.content) <= 100 for chunk in chunks)
        for prev, nxt in zip(chunks, chunks[1:]):
            assert prev.start_position < nxt.start_position < prev.end_position
        assert chunks[-1].content.endswith("word199")
        assert_positions(word_text, chunks)

    def test_no_overlap_chunks_are_disjoint(self, word_text):
        chunks = segment(word_text, {"chunkSize": 100, "overlap": 0, "minChunkSize": 0})

        for prev, nxt in zip(chunks, chunks[1:]):
            assert not prev.overlaps_with(nxt)

    def test_overlong_word_is_cut(self):
        text = "x" * 120
        chunks = segment(text, {"chunkSize": 50, "overlap": 0, "minChunkSize": 0})

        assert [len(c.content) for c in chunks] == [50, 50, 20]
        assert_positions(text, chunks)


class TestSemanticStrategy:
    """Test sentence-grouping segmentation."""

    def test_groups_whole_sentences(self, sentence_text):
        chunks = segment(sentence_text, {"chunkSize": 60, "strategy": "semantic", "minChunkSize": 0})

        assert len(chunks) == 5
        for chunk in chunks:
            assert chunk.content.endswith(".")
            assert chunk.content.count("Sentence") == 2
        assert chunks[0].content == "Sentence number 0 is here. Sentence number 1 is here."
        assert_positions(sentence_text, chunks)

    def test_oversized_sentence_stands_alone(self):
        long_sentence = "This sentence goes on " + "and on " * 20 + "forever."
        text = f"Tiny one. {long_sentence} Tail here."
        chunks = segment(text, {"chunkSize": 50, "strategy": "semantic", "minChunkSize": 0})

        assert [c.content for c in chunks] == ["Tiny one.", long_sentence, "Tail here."]

    def test_split_sentences(self):
        text = "One. Two!  Three? ...and four"
        assert [text[s:e] for s, e in split_sentences(text)] == ["One.", "Two!", "Three?", "...", "and four"]


class TestSlidingStrategy:
    """Test sliding window segmentation."""

    def test_windows_advance_by_step(self):
        text = "abcdefghij" * 10
        chunks = segment(text, {"chunkSize": 40, "overlap": 10, "strategy": "sliding", "minChunkSize": 0})

        assert [c.start_position for c in chunks] == [0, 30, 60, 90]
        assert chunks[1].content == text[30:70]
        assert_positions(text, chunks)

    def test_windows_are_trimmed(self):
        text = "word " * 30
        chunks = segment(text, {"chunkSize": 40, "overlap": 0, "strategy": "sliding", "minChunkSize": 0})

        for chunk in chunks:
            assert chunk.content == chunk.content.strip()
        assert_positions(text, chunks)


class TestAdaptiveStrategy:
    """Test paragraph-grouping segmentation."""

    def test_groups_paragraphs(self):
        text = "\n\n".join(["A" * 30, "B" * 30, "C" * 30, "D" * 80])
        chunks = segment(text, {"chunkSize": 70, "strategy": "adaptive", "minChunkSize": 0})

        assert [c.content for c in chunks] == ["A" * 30 + "\n\n" + "B" * 30, "C" * 30, "D" * 80]
        assert all(c.chunk_type is ChunkType.PARAGRAPH for c in chunks)
        assert_positions(text, chunks)

    def test_split_paragraphs(self):
        text = "first\n\n  \n\nsecond\n \nthird"
        assert [text[s:e] for s, e in split_paragraphs(text)] == ["first", "second", "third"]


class TestSegmenter:
    """Test chunk construction and configuration updates."""

    @pytest.mark.parametrize("strategy", list(ChunkingStrategy))
    def test_positions_hold_for_every_strategy(self, strategy, paragraph_text):
        chunks = Segmenter({"chunkSize": 120, "strategy": strategy, "minChunkSize": 0}).segment(paragraph_text)

        assert chunks
        assert_positions(paragraph_text, chunks)

    def test_ids_share_run_prefix(self, word_text):
        chunks = segment(word_text, {"chunkSize": 100, "minChunkSize": 0})
        prefixes = {c.id.split("_")[0] for c in chunks}

        assert all(RUN_ID.match(c.id) for c in chunks)
        assert len(prefixes) == 1
        assert len({c.id for c in chunks}) == len(chunks)

    def test_runs_get_distinct_ids(self, word_text):
        segmenter = Segmenter({"chunkSize": 100, "minChunkSize": 0})
        first = segmenter.segment(word_text)
        second = segmenter.segment(word_text)
        assert first[0].id != second[0].id

    def test_explicit_run_id(self, word_text):
        config = {"chunkSize": 100, "minChunkSize": 0}
        chunks = Segmenter(config).segment(word_text, run_id="fixedrun", document_id="doc-7")
        assert chunks[2].id == chunk_id("fixedrun", 2) == "fixedrun_0002"
        assert chunks[2].document_id == "doc-7"

    def test_metadata(self, sentence_text):
        chunks = segment(
            sentence_text,
            {"chunkSize": 60, "strategy": "semantic", "minChunkSize": 0},
            metadata={"source": "unit", "chunk_index": "caller value"},
        )
        meta = chunks[1].metadata

        assert meta["source"] == "unit"
        assert meta["chunk_index"] == 1
        assert meta["length"] == len(chunks[1].content)
        assert meta["word_count"] == 10
        assert meta["strategy"] == "semantic"
        assert "timestamp" in meta

    def test_vectors_come_from_provider(self, sentence_text):
        provider = CallableEmbeddingProvider(lambda text: [float(len(text)), 1.0], dims=2)
        chunks = segment(sentence_text, {"chunkSize": 60, "strategy": "semantic"}, embedding_provider=provider)

        for chunk in chunks:
            assert chunk.vector.values == (float(len(chunk.content)), 1.0)

    def test_update_config(self):
        segmenter = Segmenter()
        config = segmenter.update_config({"chunkSize": 50})

        assert config.chunk_size == 50
        assert config.overlap == 25
        assert segmenter.get_config() is config

        segmenter.update_config(strategy="adaptive")
        assert segmenter.config.chunk_size == 50
        assert segmenter.planner.chunk_type is ChunkType.PARAGRAPH

    def test_invalid_update_keeps_old_config(self):
        segmenter = Segmenter({"chunkSize": 100, "minChunkSize": 0})
        with pytest.raises(ConfigurationError):
            segmenter.update_config(overlap=600)
        assert segmenter.config.chunk_size == 100

    def test_invalid_config(self):
        with pytest.raises(ConfigurationError):
            Segmenter({"chunkSize": 10, "overlap": 10})
