"""Background worker that services non-blocking RPC calls.

A single daemon thread runs an asyncio event loop. Work is handed over with
``call_soon_threadsafe``, so tasks run one at a time, strictly in the order
they were scheduled. The thread is started lazily on first use and lives for
the rest of the process unless ``stop()`` is called.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

Task = Callable[[], None]

DEFAULT_WORKER_NAME = "session-rpc-worker"


class AsyncWorker:
    """At-most-one background execution context for RPC work."""

    def __init__(self, name: str = DEFAULT_WORKER_NAME):
        self._name = name
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._stopped = False
        self.start_count = 0

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def thread(self) -> threading.Thread | None:
        return self._thread

    def ensure_started(self) -> None:
        """Start the worker thread if nobody has yet.

        Safe to call from any number of threads at once; exactly one thread is
        ever created.
        """
        if self._thread is not None:
            return
        with self._lock:
            if self._thread is not None:
                return
            if self._stopped:
                raise RuntimeError("RPC worker is stopped")
            loop = asyncio.new_event_loop()
            thread = threading.Thread(
                target=self._run,
                args=(loop,),
                name=self._name,
                daemon=True,
            )
            thread.start()
            self.start_count += 1
            self._loop = loop
            # Published last; the unlocked fast path above keys off it
            self._thread = thread
        logger.debug("rpc_worker_started", extra={"worker.name": self._name})

    def schedule(self, task: Task) -> None:
        """Queue a task to run on the worker thread."""
        self.ensure_started()
        with self._lock:
            if self._stopped or self._loop is None:
                raise RuntimeError("RPC worker is stopped")
            self._loop.call_soon_threadsafe(self._run_task, task)

    def stop(self, timeout: float | None = None) -> None:
        """Run everything already queued, then stop the loop and join the thread.

        A stopped worker cannot be restarted.
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            loop, thread = self._loop, self._thread
        if loop is None or thread is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout)

    @staticmethod
    def _run(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.close()

    def _run_task(self, task: Task) -> None:
        try:
            task()
        except Exception:
            logger.warning(
                "rpc_worker_task_failed",
                extra={"worker.name": self._name},
                exc_info=True,
            )


_default_worker: AsyncWorker | None = None
_default_worker_lock = threading.Lock()


def get_default_worker() -> AsyncWorker:
    """Get the process-wide worker, creating it on first use."""
    global _default_worker
    if _default_worker is None:
        with _default_worker_lock:
            if _default_worker is None:
                _default_worker = AsyncWorker()
    return _default_worker
