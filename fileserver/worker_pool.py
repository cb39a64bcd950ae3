"""Fixed-size pool of long-running worker threads fed by one job queue."""

import queue
import threading
from typing import Callable, List

from common.exceptions import PoolClosedError, PoolCreationError
from common.logging_config import get_logger

logger = get_logger(__name__)

Job = Callable[[], None]

# One per worker, queued behind any pending jobs at shutdown.
_SHUTDOWN = object()


class Worker:
    """A thread that runs jobs from the shared queue until told to stop."""

    def __init__(self, worker_id: int, jobs: 'queue.Queue[object]'):
        self.id = worker_id
        self._jobs = jobs
        self.thread = threading.Thread(
            target=self._run,
            name=f"Worker-{worker_id}",
            daemon=True,
        )
        self.thread.start()

    def _run(self) -> None:
        while True:
            job = self._jobs.get()
            try:
                if job is _SHUTDOWN:
                    logger.info(f"Worker {self.id} disconnected; shutting down.")
                    return

                logger.debug(f"Worker {self.id} got a job; executing.")
                try:
                    job()
                except Exception as e:
                    logger.error(f"Worker {self.id} job failed: {e}", exc_info=True)
            finally:
                self._jobs.task_done()


class WorkerPool:
    """
    Bounded concurrency for connection handling.

    ``submit`` never blocks: the queue is unbounded. ``shutdown`` lets the
    workers drain every job already queued, then joins them all.
    """

    def __init__(self, size: int):
        """
        Create a new WorkerPool.

        Args:
            size: Number of worker threads; must be at least 1

        Raises:
            PoolCreationError: If size is less than 1
        """
        if size < 1:
            raise PoolCreationError(f"Not enough threads: {size}")

        self._jobs: 'queue.Queue[object]' = queue.Queue()
        self._closed = False
        self._close_lock = threading.Lock()
        self.workers: List[Worker] = [Worker(i, self._jobs) for i in range(size)]

    @classmethod
    def build(cls, size: int) -> 'WorkerPool':
        """
        Create a pool of size workers.

        Raises:
            PoolCreationError: If size is less than 1
        """
        pool = cls(size)
        logger.info(f"Started {size} worker(s)")
        return pool

    @property
    def size(self) -> int:
        return len(self.workers)

    def submit(self, job: Job) -> None:
        """
        Queue a job for the next idle worker.

        Raises:
            TypeError: If job is not callable
            PoolClosedError: If the pool has been shut down
        """
        if not callable(job):
            raise TypeError(f"Job must be callable, got {job!r}")
        with self._close_lock:
            if self._closed:
                raise PoolClosedError("Cannot submit to a shut down pool")
            self._jobs.put(job)

    def shutdown(self) -> None:
        """Stop accepting jobs, let queued jobs finish and join every worker."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
            for _ in self.workers:
                self._jobs.put(_SHUTDOWN)

        for worker in self.workers:
            logger.info(f"Shutting down worker {worker.id}")
            worker.thread.join()

    def __enter__(self) -> 'WorkerPool':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
