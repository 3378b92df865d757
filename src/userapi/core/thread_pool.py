"""
=============================================================================
THREAD POOL
=============================================================================

A bounded set of worker threads pulling connection tasks from a shared
queue. Each accepted connection becomes one task; each request on it runs
the whole middleware chain on that worker thread.

    ┌─────────────────────────────────────────────────────────────────┐
    │                         ThreadPool                              │
    │                                                                 │
    │   submit(task) ──► ┌───────────────────────┐                    │
    │                    │ Queue (bounded)       │                    │
    │                    │ [task][task][task]... │                    │
    │                    └───────────┬───────────┘                    │
    │                                │                                │
    │               ┌────────────────┼────────────────┐               │
    │               ▼                ▼                ▼               │
    │          ┌─────────┐      ┌─────────┐      ┌─────────┐          │
    │          │Worker 0 │      │Worker 1 │      │Worker N │          │
    │          └─────────┘      └─────────┘      └─────────┘          │
    │                                                                 │
    │   min_workers start with the pool; more are added, up to        │
    │   max_workers, while every worker is busy and tasks wait.       │
    └─────────────────────────────────────────────────────────────────┘

A full queue makes submit() return False; the server answers those
connections with 503.

Shutdown uses "poison pills": one None per worker, each worker exits when
it takes one off the queue.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred call: func(*args, **kwargs)."""
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread that runs tasks until it receives a poison pill.

    A failing task is logged and counted; it never kills the worker.
    """

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

        self.tasks_completed = 0
        self.tasks_failed = 0

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
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
        except Exception as e:
            elapsed = time.time() - start_time
            logger.exception(
                f"Worker {self.worker_id} task failed after {elapsed:.3f}s: {e}"
            )
            self.tasks_failed += 1
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        """Signal the worker to stop after its current task."""
        self._shutdown.set()


class ThreadPool:
    """
    Thread pool for connection handling.

        pool = ThreadPool(min_workers=4, max_workers=16, queue_size=1000)
        pool.start()

        if not pool.submit(handle_connection, args=(conn,)):
            ...  # saturated: answer 503

        pool.shutdown(wait=True)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 1000,
        idle_timeout: float = 60.0
    ):
        """
        Args:
            min_workers: Workers created by start() and kept for the pool's life.
            max_workers: Upper bound when scaling up under load.
            queue_size: Tasks allowed to wait for a worker.
            idle_timeout: Seconds an idle worker blocks on the queue before
                          re-checking its shutdown flag.
        """
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.max_queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)

        self._workers: List[Worker] = []
        self._lock = threading.Lock()  # guards _workers
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    def start(self):
        """Create the initial min_workers threads."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")

        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker_locked()

        self._shutdown = False
        self._started = True

    def _add_worker_locked(self) -> Worker:
        """Start one more worker. Caller holds self._lock."""
        worker = Worker(
            task_queue=self._task_queue,
            worker_id=self._next_worker_id,
            idle_timeout=self.idle_timeout
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
        block: bool = False,
        queue_timeout: Optional[float] = None
    ) -> bool:
        """
        Queue a task.

        Args:
            func: The function to execute.
            args: Positional arguments for the function.
            kwargs: Keyword arguments for the function.
            block: Wait for room when the queue is full.
            queue_timeout: How long to wait when blocking.

        Returns:
            True if the task was queued, False if the queue was full.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        """Add a worker if all are busy, tasks are waiting and we are under max."""
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return
            if self.idle_workers > 0 or self._task_queue.qsize() == 0:
                return
            logger.debug(
                f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers"
            )
            self._add_worker_locked()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop every worker.

        Args:
            wait: Let queued tasks finish first.
            timeout: Upper bound in seconds on that wait.
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
                pass  # the worker still sees its shutdown flag

        for worker in workers:
            worker.join(timeout=2.0)

        self._started = False
        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # STATISTICS
    # =========================================================================

    @property
    def total_workers(self) -> int:
        return len(self._workers)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.IDLE)

    @property
    def queue_size(self) -> int:
        """Tasks currently waiting for a worker."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        return {
            "workers": {
                "total": self.total_workers,
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self.queue_size,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
