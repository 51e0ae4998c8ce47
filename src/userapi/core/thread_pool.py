"""
=============================================================================
THREAD POOL
=============================================================================

Worker threads pulling tasks (one task = one client connection) from a
bounded queue.

    submit(task) ──► [ queue (max queue_size) ] ──► Worker-0
                                                ──► Worker-1
                                                ──► ...
                                                ──► Worker-N (≤ max_workers)

- min_workers threads start with the pool.
- When every worker is busy and tasks are waiting, one more worker is
  added, up to max_workers.
- A full queue makes submit() return False; the server answers 503.
- shutdown() waits for the queue to drain, then sends one None sentinel
  per worker.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A unit of work plus the time it was queued."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    timeout: Optional[float] = None
    on_expire: Optional[Callable[[], None]] = None
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """A daemon thread executing tasks from the shared queue."""

    def __init__(
        self,
        task_queue: queue.Queue,
        worker_id: int,
        idle_timeout: float = 60.0
    ):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            # Skip work whose client has most likely given up already
            if task.timeout and (start_time - task.submitted_at) > task.timeout:
                logger.warning(
                    f"Task timed out before execution "
                    f"(waited {start_time - task.submitted_at:.2f}s, "
                    f"timeout was {task.timeout}s)"
                )
                if task.on_expire is not None:
                    task.on_expire()
                return

            task.func(*task.args, **task.kwargs)

            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s"
            )

        except Exception as e:
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )

        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        self._shutdown.set()


class ThreadPool:
    """
    Elastic pool of worker threads.

        pool = ThreadPool(min_workers=4, max_workers=16)
        pool.start()
        pool.submit(handle_connection, args=(conn,))
        pool.shutdown(wait=True, timeout=30.0)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        idle_timeout: float = 60.0
    ):
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.max_queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue(maxsize=queue_size)

        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # guards _workers
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    def start(self):
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")

        self._shutdown = False
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker_locked()

        self._started = True

    def _add_worker_locked(self) -> Worker:
        # caller holds self._lock
        worker = Worker(
            task_queue=self._task_queue,
            worker_id=self._next_worker_id,
            idle_timeout=self.idle_timeout,
        )
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        timeout: Optional[float] = None,
        on_expire: Optional[Callable[[], None]] = None,
    ) -> bool:
        """
        Queue func(*args, **kwargs).

        A task still queued after timeout seconds is not run; on_expire()
        is called in its place so the caller can release what it holds.

        Returns:
            True if queued, False if the queue is full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(
            func=func,
            args=args,
            kwargs=kwargs or {},
            timeout=timeout,
            on_expire=on_expire,
        )

        try:
            self._task_queue.put(task, block=False)
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return

            busy_count = sum(1 for w in self._workers if w.state == WorkerState.BUSY)
            if busy_count == len(self._workers) and self._task_queue.qsize() > 0:
                logger.debug(
                    f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers"
                )
                self._add_worker_locked()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop all workers.

        Args:
            wait: Let queued tasks finish first.
            timeout: Upper bound in seconds on that wait (None = unbounded).
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            deadline = time.time() + timeout if timeout else None
            while self._task_queue.unfinished_tasks:
                if deadline and time.time() > deadline:
                    logger.warning("Shutdown timeout, forcing stop")
                    break
                time.sleep(0.05)

        with self._lock:
            workers = list(self._workers)
            self._workers.clear()

        for worker in workers:
            worker.shutdown()
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                pass  # the shutdown event still stops the worker

        for worker in workers:
            worker.join(timeout=2.0)

        self._started = False
        logger.info("Thread pool shutdown complete")

    @property
    def worker_count(self) -> int:
        with self._lock:
            return len(self._workers)
