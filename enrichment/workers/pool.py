"""Bounded thread pools shared by the enrichment stages."""

from __future__ import annotations

import concurrent.futures
from concurrent.futures import Future
from typing import Callable, Iterable, Iterator, List, Optional, TypeVar

from .. import logging_manager

logger = logging_manager.get_logger().getChild("workers.pool")

T = TypeVar("T")


class WorkerPool:
    """Fixed-size worker pool with a task queue, passed to its users explicitly."""

    mode = "thread"

    def __init__(self, name: str, *, max_workers: int) -> None:
        self.name = name
        self.max_workers = max(1, int(max_workers))
        self._executor: Optional[concurrent.futures.ThreadPoolExecutor] = None
        self._shutdown = False
        logger.debug(
            "Worker pool %s created with %s workers",
            name,
            self.max_workers,
            extra={"event": "worker_pool.created"},
        )

    def _ensure_executor(self) -> concurrent.futures.ThreadPoolExecutor:
        if self._shutdown:
            raise RuntimeError(f"Worker pool {self.name!r} has been shut down")
        if self._executor is None:
            self._executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix=f"{self.name}-worker",
            )
        return self._executor

    def submit(self, func: Callable[..., T], *args, **kwargs) -> Future:
        return self._ensure_executor().submit(func, *args, **kwargs)

    def run(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Run ``func`` on the pool and wait for its result."""

        return self.submit(func, *args, **kwargs).result()

    def iter_completed(self, futures: Iterable[Future]) -> Iterator[Future]:
        return concurrent.futures.as_completed(futures)

    def gather(self, futures: Iterable[Future]) -> List[T]:
        """Wait for ``futures`` and return their results in submission order."""

        return [future.result() for future in list(futures)]

    def shutdown(self, wait: bool = True) -> None:
        if self._shutdown:
            return
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
        self._shutdown = True
        logger.debug(
            "Worker pool %s shut down",
            self.name,
            extra={"event": "worker_pool.shutdown"},
        )

    def __enter__(self) -> "WorkerPool":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.shutdown()


__all__ = ["WorkerPool"]
