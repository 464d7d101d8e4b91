"""Background process enumeration for dashtop."""

import logging
import threading
from queue import Empty, Full, Queue

from dashtop.errors import ProviderUnavailable
from dashtop.models import RawProcess
from dashtop.provider import MetricsProvider

logger = logging.getLogger(__name__)

ProcessBatch = tuple[list[RawProcess], int]


class ProcessWorker:
    """
    Enumerates processes on a daemon thread.

    The sampling engine calls request() on its refresh ticks and collect() on
    every tick. Results travel through a single-slot queue, so the engine
    only ever sees a complete ``(processes, total_memory)`` batch and a newer
    batch replaces one that was never collected.
    """

    def __init__(self, provider: MetricsProvider) -> None:
        """
        Initialize the ProcessWorker.

        Args:
            provider: Metrics provider used for process and memory readings.
        """
        self._provider = provider
        self._results: Queue[ProcessBatch] = Queue(maxsize=1)
        self._requested = threading.Event()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Check if the worker thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._work_loop,
            daemon=True,
            name="ProcessWorker",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the worker thread.

        Args:
            timeout: How long to wait for the thread to stop (seconds).
        """
        self._stop_event.set()
        self._requested.set()  # Wake the thread so it sees the stop flag
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def request(self) -> None:
        """Ask for a fresh enumeration; repeated requests coalesce."""
        self._requested.set()

    def collect(self) -> ProcessBatch | None:
        """Take the latest completed batch without blocking."""
        try:
            return self._results.get_nowait()
        except Empty:
            return None

    def _work_loop(self) -> None:
        """Main loop running in the background thread."""
        while not self._stop_event.is_set():
            self._requested.wait()
            if self._stop_event.is_set():
                break
            self._requested.clear()

            try:
                batch = (self._provider.list_processes(), self._provider.total_memory())
            except ProviderUnavailable as e:
                logger.warning("Process refresh skipped: %s", e)
                continue

            self._publish(batch)

    def _publish(self, batch: ProcessBatch) -> None:
        # Drop a stale batch so the slot always holds the newest one
        try:
            self._results.get_nowait()
        except Empty:
            pass
        try:
            self._results.put_nowait(batch)
        except Full:
            logger.debug("Result slot refilled concurrently; dropping batch")
