#!/usr/bin/env python3
"""
Background Task Pool - Detached Side Effects

Runs work that must outlive the request that produced it (cache writes and
usage log appends) without making the caller wait for it.

Architecture:
    submit(name, factory) --> bounded asyncio.Queue --> N worker tasks

Flow:
    1. The orchestrator submits a coroutine factory after a successful dispatch
    2. submit() enqueues without awaiting; a full queue triggers the overflow policy
    3. A worker picks the job up and runs it exactly once
    4. Failures are logged and counted, never retried or re-raised

Architectural Decision: fixed worker tasks instead of one task per write
- Workers are created by start(), not by a request task, so cancelling a
  request can never cancel its detached writes
- The queue bounds memory under load; dropped jobs are counted
- Workers run in a fresh contextvars.Context so they never log a stale
  request id

Author: System Architect
Date: 2026-09-14
"""

import asyncio
import contextvars
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from llm_nexus.core.config.constants import Stage
from llm_nexus.core.exceptions import ConfigurationError
from llm_nexus.core.logging.logger import get_logger, log_stage
from llm_nexus.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)

OverflowPolicy = Literal["drop_oldest", "drop_newest"]
_OVERFLOW_POLICIES = ("drop_oldest", "drop_newest")


@dataclass
class _Job:
    name: str
    factory: Callable[[], Awaitable[Any]]


class BackgroundTaskPool:
    """
    Bounded pool of worker tasks for fire-and-forget jobs.

    Usage:
        pool = BackgroundTaskPool(workers=4, queue_size=1000)
        pool.start()
        pool.submit("cache_write", lambda: cache.set(key, value, ttl))
        ...
        await pool.stop()
    """

    def __init__(
        self,
        workers: int = 4,
        queue_size: int = 1000,
        overflow_policy: OverflowPolicy = "drop_oldest",
        shutdown_timeout: float = 5.0,
        metrics: MetricsCollector | None = None,
    ):
        if workers < 1:
            raise ConfigurationError("workers must be >= 1", details={"workers": workers})
        if queue_size < 1:
            raise ConfigurationError("queue_size must be >= 1", details={"queue_size": queue_size})
        if overflow_policy not in _OVERFLOW_POLICIES:
            raise ConfigurationError(
                f"Unknown overflow policy: {overflow_policy}",
                details={"allowed": list(_OVERFLOW_POLICIES)},
            )

        self._worker_count = workers
        self._queue_size = queue_size
        self._overflow_policy = overflow_policy
        self._shutdown_timeout = shutdown_timeout
        self._metrics = metrics or get_metrics_collector()

        self._queue: asyncio.Queue[_Job] = asyncio.Queue(maxsize=queue_size)
        self._workers: list[asyncio.Task] = []
        self._closed = False

        self._submitted = 0
        self._succeeded = 0
        self._failed = 0
        self._dropped = 0

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """
        Create the worker tasks on the running event loop.

        Raises:
            RuntimeError: If called outside a running event loop
        """
        if self._workers:
            return

        loop = asyncio.get_running_loop()
        self._closed = False
        for index in range(self._worker_count):
            task = loop.create_task(
                self._worker(index),
                name=f"nexus-background-{index}",
                context=contextvars.Context(),
            )
            self._workers.append(task)

        log_stage(
            logger,
            Stage.BACKGROUND,
            "Background task pool started",
            workers=self._worker_count,
            queue_size=self._queue_size,
            overflow_policy=self._overflow_policy,
        )

    def submit(self, name: str, coro_factory: Callable[[], Awaitable[Any]]) -> bool:
        """
        Enqueue a job without waiting for it.

        Never blocks and never raises. Returns False when the job was
        rejected (pool stopped, no event loop, or queue full under the
        drop_newest policy).

        Args:
            name: Job kind, used as the metrics label (e.g. "cache_write")
            coro_factory: Zero-argument callable returning the awaitable to run
        """
        if self._closed:
            self._record_dropped(name, reason="pool_stopped")
            return False

        if not self._workers:
            try:
                self.start()
            except RuntimeError:
                self._record_dropped(name, reason="no_event_loop")
                return False

        job = _Job(name=name, factory=coro_factory)
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            if self._overflow_policy == "drop_newest":
                self._record_dropped(name, reason="queue_full")
                return False

            # drop_oldest: no await between eviction and put, so the slot stays free
            evicted = self._queue.get_nowait()
            self._queue.task_done()
            self._record_dropped(evicted.name, reason="evicted")
            self._queue.put_nowait(job)

        self._submitted += 1
        self._metrics.set_background_queue_depth(self._queue.qsize())
        return True

    async def join(self) -> None:
        """Wait until every queued job has finished."""
        await self._queue.join()

    async def stop(self) -> None:
        """
        Drain pending jobs for up to ``shutdown_timeout`` seconds, then
        cancel the workers. Jobs still queued at that point are lost.
        """
        self._closed = True
        if not self._workers:
            return

        try:
            async with asyncio.timeout(self._shutdown_timeout):
                await self._queue.join()
        except TimeoutError:
            log_stage(
                logger,
                Stage.BACKGROUND,
                "Background drain timed out, abandoning pending jobs",
                level="warning",
                pending=self._queue.qsize(),
                timeout_seconds=self._shutdown_timeout,
            )

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers.clear()

        log_stage(logger, Stage.BACKGROUND, "Background task pool stopped", **self.stats())

    def stats(self) -> dict[str, Any]:
        return {
            "workers": self._worker_count,
            "running": self.running,
            "queue_size": self._queue_size,
            "pending": self._queue.qsize(),
            "overflow_policy": self._overflow_policy,
            "submitted": self._submitted,
            "succeeded": self._succeeded,
            "failed": self._failed,
            "dropped": self._dropped,
        }

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._run(job)
            finally:
                self._queue.task_done()
                self._metrics.set_background_queue_depth(self._queue.qsize())

    async def _run(self, job: _Job) -> None:
        try:
            await job.factory()
        except Exception as e:
            self._failed += 1
            self._metrics.record_background_task(job.name, "failed")
            log_stage(
                logger,
                Stage.BACKGROUND,
                "Background job failed",
                level="warning",
                job=job.name,
                error_type=type(e).__name__,
                error=str(e),
            )
        else:
            self._succeeded += 1
            self._metrics.record_background_task(job.name, "succeeded")

    def _record_dropped(self, name: str, reason: str) -> None:
        self._dropped += 1
        self._metrics.record_background_task(name, "dropped")
        log_stage(
            logger,
            Stage.BACKGROUND,
            "Background job dropped",
            level="warning",
            job=name,
            reason=reason,
        )
