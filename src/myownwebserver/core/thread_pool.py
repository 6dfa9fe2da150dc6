"""
=============================================================================
THREAD POOL
=============================================================================

Runs connection handlers on worker threads so the accept loop never waits
for a slow client or a large file.

=============================================================================
SEQUENTIAL VS POOLED
=============================================================================

    SEQUENTIAL (concurrent=False):
    ──────────────────────────────

        accept() ─► handle(conn) ─► accept() ─► handle(conn) ─► ...

        One slow client stalls every other client behind it.

    POOLED (default):
    ─────────────────

        accept() ─► submit(handle, conn) ─► accept() ─► submit(...) ─► ...
                          │
                          ▼
        ┌─────────────────────────────────────────────────────────────┐
        │  TASK QUEUE (bounded)      [conn 7] [conn 8] [conn 9]       │
        └──────────────────────────────┬──────────────────────────────┘
                                       │ get()
              ┌────────────┬───────────┴┬────────────┐
              ▼            ▼            ▼            ▼
          Worker-0     Worker-1     Worker-2     Worker-3 ... (≤ max)

Each connection is a fully independent task. The only thing workers share
is the frozen ServerConfig, so no task needs a lock.

=============================================================================
BACKPRESSURE
=============================================================================

The queue is bounded. When it is full, submit() blocks the accept loop
until a worker frees a slot; connections then wait in the kernel's listen
backlog instead of piling up in memory.

=============================================================================
SHUTDOWN: THE POISON PILL
=============================================================================

shutdown() puts one None per worker on the queue. A worker that receives
None leaves its loop and the thread ends.

=============================================================================
"""

import queue
import threading
import time
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Any, Optional


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
    Worker thread that executes tasks from the shared queue.

    A failing task is logged and counted; the worker keeps running.
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int, idle_timeout: float = 1.0):
        # daemon=True: workers never keep the process alive on their own
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._stop_event = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._stop_event.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:  # Poison pill
                    break
                self._execute(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()
        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} finished task in {time.time() - start_time:.3f}s "
                f"(queued {start_time - task.submitted_at:.3f}s)"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(f"Worker {self.worker_id} task failed: {e}")
        finally:
            self.state = WorkerState.IDLE

    def stop(self):
        self._stop_event.set()


class ThreadPool:
    """
    Fixed-minimum, bounded-maximum pool of worker threads.

    Usage:
        pool = ThreadPool(min_workers=4, max_workers=16)
        pool.start()
        pool.submit(handler.handle, args=(conn,))
        ...
        pool.shutdown()
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        idle_timeout: float = 1.0,
    ):
        if min_workers < 1 or max_workers < min_workers:
            raise ValueError(f"Invalid pool size: min={min_workers}, max={max_workers}")

        self.min_workers = min_workers
        self.max_workers = max_workers
        self.idle_timeout = idle_timeout

        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue(maxsize=queue_size)
        self._workers: list[Worker] = []
        # Guards _workers; reentrant because scale-up adds under the lock
        self._lock = threading.RLock()
        self._next_worker_id = 0
        self._started = False
        self._shutting_down = False

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutting_down

    def start(self):
        """Create the minimum set of workers. Calling twice is harmless."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")
        self._shutting_down = False
        for _ in range(self.min_workers):
            self._add_worker()
        self._started = True

    def _add_worker(self) -> Worker:
        with self._lock:
            worker = Worker(self._task_queue, self._next_worker_id, self.idle_timeout)
            self._next_worker_id += 1
            self._workers.append(worker)
            worker.start()
            return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        block: bool = True,
        queue_timeout: Optional[float] = None,
    ) -> bool:
        """
        Queue a call for a worker.

        Args:
            func: The function to execute.
            args: Positional arguments.
            kwargs: Keyword arguments.
            block: Wait for a queue slot when the queue is full.
            queue_timeout: Maximum wait for a slot (None waits forever).

        Returns:
            True if queued, False if the queue stayed full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self.is_running:
            raise RuntimeError("Thread pool is not running")

        task = Task(func=func, args=args, kwargs=kwargs or {})
        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        """Add a worker when every worker is busy and tasks are waiting."""
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return
            busy = sum(1 for w in self._workers if w.state == WorkerState.BUSY)
            if busy == len(self._workers) and self._task_queue.qsize() > 0:
                logger.debug(f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers")
                self._add_worker()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = 30.0):
        """
        Stop the pool.

        Args:
            wait: Let queued tasks finish before stopping workers.
            timeout: Upper bound on that wait (None waits forever).
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutting_down = True

        if wait:
            deadline = None if timeout is None else time.time() + timeout
            while self._task_queue.unfinished_tasks:
                if deadline is not None and time.time() > deadline:
                    logger.warning("Thread pool shutdown timed out with tasks pending")
                    break
                time.sleep(0.05)

        with self._lock:
            workers = list(self._workers)
            self._workers.clear()

        for _ in workers:
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                break  # Workers still see the stop flag below

        for worker in workers:
            worker.stop()
            worker.join(timeout=2.0)

        self._started = False
        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def stats(self) -> dict:
        with self._lock:
            workers = list(self._workers)
        return {
            "workers": {
                "total": len(workers),
                "busy": sum(1 for w in workers if w.state == WorkerState.BUSY),
                "idle": sum(1 for w in workers if w.state == WorkerState.IDLE),
            },
            "tasks": {
                "queued": self._task_queue.qsize(),
                "completed": sum(w.tasks_completed for w in workers),
                "failed": sum(w.tasks_failed for w in workers),
            },
        }
