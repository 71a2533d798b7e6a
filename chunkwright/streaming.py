"""Continuous segmentation over a growing text buffer.

Text arrives in fragments. After every fragment the buffer is planned with the
configured strategy and the first span is emitted as soon as later input can
no longer change it. Emitted text is released from the buffer, so memory stays
proportional to a few chunks regardless of stream length.

Chunk positions are global offsets into the concatenated stream and chunk
indexes are consecutive across the whole stream.
"""

import asyncio
import codecs
from pathlib import Path
from typing import (
    Any, AsyncIterable, AsyncIterator, Dict, Iterable, Iterator, List, Optional, Union
)

from loguru import logger

from .chunker import Segmenter, new_run_id
from .core.models import Chunk, Span
from .interfaces import EmbeddingProvider
from .registry import ProviderRegistry

Fragment = Union[str, bytes]

DEFAULT_BLOCK_SIZE = 64 * 1024


class ContinuousSegmenter:
    """Segment a stream of text fragments with bounded buffering.

    Usage::

        stream = ContinuousSegmenter({"chunkSize": 256, "strategy": "semantic"})
        for fragment in source:
            for chunk in stream.feed(fragment):
                handle(chunk)
        for chunk in stream.finish():
            handle(chunk)
    """

    def __init__(
        self,
        config: Optional[Any] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        metadata: Optional[Dict[str, Any]] = None,
        registry: Optional[ProviderRegistry] = None
    ):
        self._segmenter = Segmenter(config, embedding_provider=embedding_provider, registry=registry)
        self._metadata = dict(metadata or {})
        self.reset()

    @property
    def config(self):
        return self._segmenter.config

    def reset(self) -> None:
        """Discard buffered text and start a new run."""
        self._buffer = ""
        self._base = 0
        self._index = 0
        self._run_id = new_run_id()
        self._decoder = codecs.getincrementaldecoder("utf-8")()

    def feed(self, fragment: Fragment) -> List[Chunk]:
        """Append a fragment and return the chunks it settled, in order.

        ``bytes`` fragments are decoded as UTF-8; a multi-byte character split
        across fragments is held back until its remaining bytes arrive.
        """
        if isinstance(fragment, (bytes, bytearray)):
            fragment = self._decoder.decode(bytes(fragment))
        self._buffer += fragment
        return self._drain()

    def finish(self) -> List[Chunk]:
        """Flush the remaining buffer through the same planner and end the run."""
        self._buffer += self._decoder.decode(b"", final=True)
        # Past the first release the buffer is the tail of a longer text
        if self._base:
            spans = self._segmenter.plan_spans(self._buffer)
        else:
            spans = self._segmenter.plan(self._buffer)
        chunks = [self._emit(span) for span in spans]
        logger.debug(
            f"Stream {self._run_id} finished: {self._index} chunks over "
            f"{self._base + len(self._buffer)} characters"
        )
        self.reset()
        return chunks

    def _drain(self) -> List[Chunk]:
        planner = self._segmenter.planner
        config = self._segmenter.config
        chunks: List[Chunk] = []

        while len(self._buffer) >= config.chunk_size:
            if not self._buffer.strip():
                released = planner.discard_offset(len(self._buffer), config)
                if released <= 0:
                    break
                self._release(released)
                continue

            spans = planner.plan(self._buffer, config)
            if not spans or not planner.is_settled(spans, len(self._buffer), config):
                break

            head = spans[0]
            if head.length >= config.min_chunk_size:
                chunks.append(self._emit(head))
            self._release(planner.resume_offset(spans, config))

        return chunks

    def _emit(self, span: Span) -> Chunk:
        chunk = self._segmenter.build_chunk(
            self._buffer,
            span,
            self._index,
            self._run_id,
            self._metadata,
            offset=self._base,
            extra_metadata={"streaming": True},
        )
        self._index += 1
        return chunk

    def _release(self, count: int) -> None:
        self._buffer = self._buffer[count:]
        self._base += count

    def iter_chunks(self, fragments: Iterable[Fragment]) -> Iterator[Chunk]:
        """Lazily segment ``fragments``; the consumer's pace drives reading."""
        for fragment in fragments:
            yield from self.feed(fragment)
        yield from self.finish()

    async def astream(
        self,
        fragments: Union[AsyncIterable[Fragment], Iterable[Fragment]]
    ) -> AsyncIterator[Chunk]:
        """Async generator counterpart of ``iter_chunks``."""
        if hasattr(fragments, "__aiter__"):
            async for fragment in fragments:
                for chunk in self.feed(fragment):
                    yield chunk
        else:
            for fragment in fragments:
                for chunk in self.feed(fragment):
                    yield chunk
                await asyncio.sleep(0)

        for chunk in self.finish():
            yield chunk

    async def pipe(
        self,
        fragments: Union[AsyncIterable[Fragment], Iterable[Fragment]],
        queue: asyncio.Queue,
        sentinel: Any = None
    ) -> int:
        """Push chunks into ``queue``, then ``sentinel``.

        With a bounded queue the producer waits on ``queue.put`` whenever the
        consumer falls behind.

        Returns:
            Number of chunks pushed
        """
        count = 0
        async for chunk in self.astream(fragments):
            await queue.put(chunk)
            count += 1
        await queue.put(sentinel)
        return count

    def process_file_stream(
        self,
        path: Union[str, Path],
        block_size: int = DEFAULT_BLOCK_SIZE
    ) -> Iterator[Chunk]:
        """Segment a UTF-8 file read in ``block_size`` byte blocks."""
        file_path = Path(path)
        logger.debug(f"Streaming {file_path} in {block_size} byte blocks")

        def blocks() -> Iterator[bytes]:
            with open(file_path, "rb") as f:
                while True:
                    block = f.read(block_size)
                    if not block:
                        break
                    yield block

        yield from self.iter_chunks(blocks())

    def get_stats(self) -> Dict[str, Any]:
        """Current stream position and buffer usage."""
        return {
            "run_id": self._run_id,
            "chunks_emitted": self._index,
            "characters_released": self._base,
            "buffered_characters": len(self._buffer),
        }
