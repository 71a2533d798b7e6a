"""Parallel segmentation over a bounded worker pool.

The input is cut into contiguous segments at whitespace, each segment is
segmented by an ordinary ``Segmenter`` in its own task, and the results are
merged after a join barrier.

Output is an approximation of sequential segmentation: chunks never cross a
segment cut, so chunk boundaries near the cuts can differ from what a single
``Segmenter`` would produce over the whole text.
"""

import os
from concurrent.futures import (
    FIRST_EXCEPTION, Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor, wait
)
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from .chunker import Segmenter, chunk_id, new_run_id
from .core.config import ChunkingConfig, ParallelConfig
from .core.exceptions import ConfigurationError, WorkerFailure
from .core.models import Chunk
from .interfaces import EmbeddingProvider
from .registry import ProviderRegistry


def _segment_task(
    text: str,
    config: ChunkingConfig,
    embedding_provider: Optional[EmbeddingProvider],
    metadata: Optional[Dict[str, Any]],
    registry: Optional[ProviderRegistry] = None
) -> List[Chunk]:
    """Worker entry point; module level so process pools can pickle it."""
    segmenter = Segmenter(config, embedding_provider=embedding_provider, registry=registry)
    return segmenter.segment(text, metadata)


def split_at_whitespace(text: str, parts: int) -> List[Tuple[int, int]]:
    """Cut ``text`` into at most ``parts`` contiguous ``(start, end)`` segments.

    Each cut lands on whitespace: searched backward from the ideal cut, then
    forward when no whitespace lies between the previous cut and the ideal one.
    Segments holding only whitespace are omitted.
    """
    length = len(text)
    if parts <= 1 or length == 0:
        bounds = [(0, length)]
    else:
        cuts = [0]
        for k in range(1, parts):
            ideal = (k * length) // parts
            cut = _whitespace_cut(text, cuts[-1], ideal)
            if cut is not None and cut > cuts[-1]:
                cuts.append(cut)
        cuts.append(length)
        bounds = [(cuts[i], cuts[i + 1]) for i in range(len(cuts) - 1) if cuts[i + 1] > cuts[i]]

    return [(start, end) for start, end in bounds if text[start:end].strip()]


def _whitespace_cut(text: str, floor: int, ideal: int) -> Optional[int]:
    for pos in range(ideal, floor, -1):
        if text[pos].isspace():
            return pos
    for pos in range(ideal + 1, len(text)):
        if text[pos].isspace():
            return pos
    return None


class ParallelJob:
    """Handle for one submitted parallel segmentation call."""

    def __init__(
        self,
        futures: List[Future],
        offsets: Sequence[int],
        run_id: str
    ):
        self._futures = futures
        self._offsets = list(offsets)
        self._run_id = run_id

    @property
    def run_id(self) -> str:
        return self._run_id

    def done(self) -> bool:
        return all(future.done() for future in self._futures)

    def cancel(self) -> bool:
        """Cancel tasks that have not started; True if every task was cancelled."""
        results = [future.cancel() for future in self._futures]
        return all(results)

    def join(self, timeout: Optional[float] = None) -> List[Chunk]:
        """Wait for every task, then merge their chunks in segment order.

        Raises:
            WorkerFailure: If any task failed (pending tasks are cancelled)
            TimeoutError: If ``timeout`` elapsed before all tasks finished
        """
        done, pending = wait(self._futures, timeout=timeout, return_when=FIRST_EXCEPTION)

        for worker_index, future in enumerate(self._futures):
            if future in done and not future.cancelled() and future.exception() is not None:
                for other in pending:
                    other.cancel()
                error = future.exception()
                logger.error(f"Parallel run {self._run_id}: worker {worker_index} failed: {error}")
                raise WorkerFailure(
                    worker_index,
                    reason=str(error),
                    cause=error,
                    context={"run_id": self._run_id},
                ) from error

        if pending:
            raise TimeoutError(
                f"Parallel run {self._run_id}: {len(pending)} of {len(self._futures)} tasks still running"
            )

        merged: List[Chunk] = []
        for worker_index, (future, offset) in enumerate(zip(self._futures, self._offsets)):
            for chunk in future.result():
                index = len(merged)
                placed = chunk.with_position(index, offset, chunk_id(self._run_id, index))
                placed.metadata["worker_index"] = worker_index
                merged.append(placed)
        return merged


class ParallelSegmenter:
    """Segment large texts with a pool of workers created once per instance.

    Usage::

        with ParallelSegmenter({"chunkSize": 512}, workers=4, executor="thread") as segmenter:
            chunks = segmenter.segment(big_text)
    """

    def __init__(
        self,
        config: Optional[Any] = None,
        workers: Optional[int] = None,
        executor: Optional[str] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        registry: Optional[ProviderRegistry] = None,
        parallel_config: Optional[ParallelConfig] = None
    ):
        """Initialize the parallel segmenter.

        Args:
            config: ChunkingConfig, partial mapping, or None for defaults
            workers: Requested worker count (capped at the CPU count)
            executor: "process" (default) or "thread"
            embedding_provider: Vector source; must be picklable for process pools
            registry: Registry resolving strategies and the default provider
            parallel_config: Defaults for ``workers`` and ``executor``
        """
        parallel_config = parallel_config or ParallelConfig()
        requested = workers if workers is not None else parallel_config.workers
        if requested < 1:
            raise ConfigurationError("workers", requested, "Worker count must be positive")

        self._executor_kind = executor or parallel_config.executor
        if self._executor_kind not in ("process", "thread"):
            raise ConfigurationError("executor", self._executor_kind, "Executor must be 'process' or 'thread'")

        self._max_concurrency = os.cpu_count() or 1
        self._num_workers = min(requested, self._max_concurrency)
        self._segmenter = Segmenter(config, embedding_provider=embedding_provider, registry=registry)
        self._registry = registry
        self._pool: Optional[Executor] = None
        self._jobs_submitted = 0
        self._tasks_submitted = 0

    @property
    def config(self) -> ChunkingConfig:
        return self._segmenter.config

    @property
    def num_workers(self) -> int:
        return self._num_workers

    def _get_pool(self) -> Executor:
        if self._pool is None:
            if self._executor_kind == "process":
                self._pool = ProcessPoolExecutor(max_workers=self._num_workers)
            else:
                self._pool = ThreadPoolExecutor(
                    max_workers=self._num_workers, thread_name_prefix="chunkwright-worker"
                )
            logger.debug(f"Started {self._executor_kind} pool with {self._num_workers} workers")
        return self._pool

    def _submit_task(self, text: str, metadata: Optional[Dict[str, Any]]) -> Future:
        # Process workers resolve strategies from their own global registry.
        registry = self._registry if self._executor_kind == "thread" else None
        self._tasks_submitted += 1
        return self._get_pool().submit(
            _segment_task,
            text,
            self._segmenter.config,
            self._segmenter.embedding_provider,
            metadata,
            registry,
        )

    def submit(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> ParallelJob:
        """Start segmenting ``text`` and return a job handle.

        Texts shorter than twice the chunk size are segmented in-process and
        the returned job is already complete.
        """
        run_id = new_run_id()
        self._jobs_submitted += 1
        config = self._segmenter.config

        if len(text) < 2 * config.chunk_size:
            future: Future = Future()
            try:
                future.set_result(self._segmenter.segment(text, metadata))
            except Exception as e:
                future.set_exception(e)
            return ParallelJob([future], [0], run_id)

        segments = split_at_whitespace(text, self._num_workers)
        futures = [self._submit_task(text[start:end], metadata) for start, end in segments]
        logger.debug(f"Parallel run {run_id}: {len(segments)} segments over {len(text)} characters")
        return ParallelJob(futures, [start for start, _ in segments], run_id)

    def segment(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> List[Chunk]:
        """Segment ``text`` and wait for the merged result."""
        return self.submit(text, metadata).join()

    def segment_many(
        self,
        texts: Sequence[str],
        metadata: Optional[Dict[str, Any]] = None
    ) -> List[List[Chunk]]:
        """Segment several documents, one task per document.

        Each document keeps its own run, positions and indexes.

        Raises:
            WorkerFailure: If any document failed (``worker_index`` is its position)
        """
        futures = [self._submit_task(text, metadata) for text in texts]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)

        for index, future in enumerate(futures):
            if future in done and future.exception() is not None:
                for other in pending:
                    other.cancel()
                error = future.exception()
                logger.error(f"Document {index} failed during parallel segmentation: {error}")
                raise WorkerFailure(index, reason=str(error), cause=error) from error

        results = [future.result() for future in futures]
        logger.info(f"Segmented {len(texts)} documents into {sum(len(r) for r in results)} chunks")
        return results

    def get_performance_stats(self) -> Dict[str, Any]:
        return {
            "num_workers": self._num_workers,
            "max_concurrency": self._max_concurrency,
            "estimated_speedup": min(self._num_workers, self._max_concurrency),
            "executor": self._executor_kind,
            "jobs_submitted": self._jobs_submitted,
            "tasks_submitted": self._tasks_submitted,
        }

    def close(self) -> None:
        """Shut the worker pool down; pending tasks are cancelled."""
        if self._pool is not None:
            self._pool.shutdown(wait=True, cancel_futures=True)
            self._pool = None
            logger.debug("Worker pool shut down")

    def __enter__(self) -> "ParallelSegmenter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
