"""Tests for logging setup."""

import pytest
from loguru import logger

from chunkwright.chunker import Segmenter
from chunkwright.utils import setup_logging


@pytest.fixture
def messages():
    captured = []
    yield captured
    setup_logging()


def test_verbose_captures_debug(messages, provider, sentence_text):
    setup_logging(verbose=True, sink=messages.append)

    Segmenter({"chunkSize": 60}, embedding_provider=provider).segment(sentence_text)

    assert any("Segmented" in message for message in messages)
    assert all("DEBUG" in message for message in messages if "Segmented" in message)


def test_default_level_hides_debug(messages):
    setup_logging(sink=messages.append)

    logger.debug("hidden detail")
    logger.info("visible summary")

    assert len(messages) == 1
    assert "visible summary" in messages[0]


def test_replaces_handlers(messages):
    setup_logging(sink=messages.append)
    handler_id = setup_logging(sink=messages.append)

    logger.info("once")

    assert isinstance(handler_id, int)
    assert len(messages) == 1
