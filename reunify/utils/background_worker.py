"""
Background Worker Utility
=========================

A single persistent thread that runs the application's slow calls (reading
photos, Gemini requests) off the Tk thread.

Key Features:
-------------
- Single Thread: Work runs strictly in submission order, so at most one
  generation is ever in flight.
- Replaceable Tasks: ``submit_replacing`` drops a pending task with the same
  id, so rapid style clicks only run the latest one.
- Completion Callbacks: ``on_done`` / ``on_error`` are called on the worker
  thread; UI code marshals them back with ``widget.after(0, ...)``.
- Graceful Shutdown: The thread is joined on exit.

Usage:
------
    >>> worker = BackgroundWorker(name="GenerationWorker")
    >>> worker.submit(file_to_data_url, path, on_done=show_preview, on_error=show_error)
    >>> worker.submit_replacing("style", session.set_style, "anime")
    >>> worker.shutdown()
"""

import logging
import queue
import threading
from typing import Any, Callable, Dict, Optional

DoneCallback = Optional[Callable[[Any], None]]
ErrorCallback = Optional[Callable[[Exception], None]]


class BackgroundWorker:
    """
    Single-thread task executor.

    Attributes:
        name: Identifier for logging purposes.
    """

    def __init__(self, name: str = "BackgroundWorker"):
        self.name = name
        self.logger = logging.getLogger(__name__)

        self._queue: queue.Queue = queue.Queue()
        self._running = True
        self._lock = threading.Lock()

        # task_id -> marker of the latest submission under that id
        self._pending_replaceable: Dict[str, int] = {}
        self._marker_counter = 0

        self._thread = threading.Thread(
            target=self._process_queue,
            name=f"{name}-Thread",
            daemon=True
        )
        self._thread.start()
        self.logger.debug(f"BackgroundWorker '{name}' started")

    def submit(self, task: Callable, *args, on_done: DoneCallback = None, on_error: ErrorCallback = None) -> bool:
        """
        Queue ``task(*args)``.

        Returns:
            False if the worker has been shut down and the task was dropped.
        """
        if not self._running:
            self.logger.warning(f"Worker '{self.name}' is shut down, ignoring task submission")
            return False

        self._queue.put((None, None, task, args, on_done, on_error))
        return True

    def submit_replacing(
        self,
        task_id: str,
        task: Callable,
        *args,
        on_done: DoneCallback = None,
        on_error: ErrorCallback = None,
    ) -> bool:
        """
        Queue ``task(*args)``, superseding any not-yet-started task with the same id.
        """
        if not self._running:
            self.logger.warning(f"Worker '{self.name}' is shut down, ignoring task submission")
            return False

        with self._lock:
            self._marker_counter += 1
            marker = self._marker_counter
            self._pending_replaceable[task_id] = marker

        self._queue.put((task_id, marker, task, args, on_done, on_error))
        return True

    def shutdown(self, timeout: float = 2.0) -> None:
        """Stop accepting work and join the thread. Pending tasks are discarded."""
        if not self._running:
            return

        self.logger.debug(f"Worker '{self.name}' shutting down...")
        self._running = False
        self._queue.put(None)

        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                self.logger.warning(f"Worker '{self.name}' thread did not terminate within {timeout}s")

        self.logger.debug(f"Worker '{self.name}' shutdown complete")

    def _is_superseded(self, task_id: Optional[str], marker: Optional[int]) -> bool:
        if task_id is None:
            return False
        with self._lock:
            return self._pending_replaceable.get(task_id) != marker

    def _process_queue(self) -> None:
        while self._running:
            try:
                item = self._queue.get(timeout=0.1)
            except queue.Empty:
                continue

            if item is None:
                break

            task_id, marker, task, args, on_done, on_error = item
            try:
                if self._is_superseded(task_id, marker):
                    continue
                self._run(task, args, on_done, on_error)
            finally:
                if task_id is not None:
                    with self._lock:
                        if self._pending_replaceable.get(task_id) == marker:
                            del self._pending_replaceable[task_id]
                self._queue.task_done()

    def _run(self, task: Callable, args: tuple, on_done: DoneCallback, on_error: ErrorCallback) -> None:
        try:
            result = task(*args)
        except Exception as e:
            self.logger.error(
                f"Worker '{self.name}' task failed: {type(e).__name__}: {e}",
                exc_info=on_error is None
            )
            if on_error:
                self._safe_callback(on_error, e)
            return

        if on_done:
            self._safe_callback(on_done, result)

    def _safe_callback(self, callback: Callable, value: Any) -> None:
        try:
            callback(value)
        except Exception as e:
            self.logger.error(f"Worker '{self.name}' callback failed: {e}", exc_info=True)

    def is_alive(self) -> bool:
        """Check if the worker thread is still running."""
        return self._thread.is_alive()

    @property
    def pending_count(self) -> int:
        """Approximate number of queued tasks."""
        return self._queue.qsize()
