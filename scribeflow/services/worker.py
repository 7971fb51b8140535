"""Serialized request worker: one background thread handling one request at a time."""

import logging
import queue
import threading
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SerialRequestWorker(ABC):
    """Pulls requests from a queue and handles them strictly in order on one thread."""

    def __init__(self, name: str):
        self.name = name
        self.request_queue: "queue.Queue[Any]" = queue.Queue()
        self.worker_thread: Optional[threading.Thread] = None
        self.shutdown_event = threading.Event()

    def start(self) -> None:
        """Start the worker thread."""
        if self.worker_thread is not None:
            logger.warning(f"{self.name} worker already started")
            return

        self.worker_thread = threading.Thread(target=self._worker_loop, daemon=True)
        self.worker_thread.name = f"worker_{self.name}"
        self.worker_thread.start()
        logger.info(f"Started {self.name} worker")

    def submit(self, request: Any) -> None:
        """Queue a request for the worker thread."""
        if self.shutdown_event.is_set():
            raise RuntimeError(f"{self.name} worker is shut down")
        self.request_queue.put(request)
        logger.debug(f"Queued request for {self.name}; pending={self.request_queue.qsize()}")

    def _worker_loop(self) -> None:
        """Main loop of the worker thread."""
        thread_name = threading.current_thread().name
        logger.debug(f"Worker thread {thread_name} starting")

        while True:
            # Block indefinitely until a request is available
            request = self.request_queue.get()

            if request is None:
                # Sentinel value received, time to exit
                logger.debug(f"Worker {thread_name} received sentinel, exiting.")
                self.request_queue.task_done()
                break

            try:
                self.handle_request(request)
            except Exception as e:
                logger.error(f"Unhandled exception in {self.name} request: {e}", exc_info=True)
            finally:
                self.request_queue.task_done()

        logger.debug(f"Worker thread {thread_name} exiting")

    @abstractmethod
    def handle_request(self, request: Any) -> Any:
        """Handle one request synchronously."""
        pass

    def shutdown(self, timeout: float = 30.0) -> bool:
        """Let queued requests finish, then stop the worker thread.

        Returns:
            True if the worker stopped within the timeout
        """
        logger.info(f"Shutting down {self.name} worker...")
        self.shutdown_event.set()

        if self.worker_thread is None:
            return True

        self.request_queue.put(None)

        self.worker_thread.join(timeout)
        if self.worker_thread.is_alive():
            logger.warning(
                f"Worker thread {self.worker_thread.name} did not terminate within {timeout}s; "
                f"{self.request_queue.unfinished_tasks} requests remain."
            )
            return False

        logger.info(f"{self.name} worker shutdown complete.")
        return True
