"""Sampling engine for dashtop."""

import logging

from dashtop.config import DashboardConfig
from dashtop.disks import DiskGauge
from dashtop.errors import OutOfOrderSample, ProviderUnavailable
from dashtop.history import InterfaceHistory, TimeSeries
from dashtop.processes import ProcessTable
from dashtop.provider import MetricsProvider
from dashtop.worker import ProcessWorker

logger = logging.getLogger(__name__)


class SamplingEngine:
    """
    Pulls readings from a metrics provider and folds them into history.

    Each tick records CPU, memory and per-interface network samples. The
    process list and the memory total are refreshed on every
    ``process_refresh_frames``-th frame,
    and disks at start() plus, optionally, every ``disk_refresh_frames``
    frames. A stream whose provider call fails keeps its previous state for
    that tick.
    """

    def __init__(
        self,
        provider: MetricsProvider,
        config: DashboardConfig | None = None,
        process_worker: ProcessWorker | None = None,
    ) -> None:
        """
        Initialize the SamplingEngine.

        Args:
            provider: Source of raw host readings.
            config: Cadence and retention settings. Defaults apply when None.
            process_worker: Optional background enumerator for the process list.
        """
        self._provider = provider
        self._config = config or DashboardConfig()
        self._worker = process_worker

        maxlen = self._config.history_maxlen
        self.cpu = TimeSeries(maxlen)
        self.memory = TimeSeries(maxlen)
        self.networks = InterfaceHistory(maxlen)
        self.disks = DiskGauge()
        self.processes = ProcessTable()
        self.memory_total = 0

        self._last_frame: int | None = None

    @property
    def last_frame(self) -> int | None:
        """Get the frame counter of the most recent tick."""
        return self._last_frame

    def start(self) -> None:
        """Take the startup disk snapshot and start the process worker, if any."""
        self._refresh_disks()
        self._refresh_memory_total()
        if self._worker is not None:
            self._worker.start()

    def stop(self) -> None:
        """Stop the process worker, if any."""
        if self._worker is not None:
            self._worker.stop()

    def tick(self, frame: int) -> None:
        """
        Sample every stream due at ``frame``.

        Raises:
            OutOfOrderSample: If ``frame`` does not advance past the last tick.
                No state is touched in that case.
        """
        if self._last_frame is not None and frame <= self._last_frame:
            raise OutOfOrderSample(frame, self._last_frame)
        self._last_frame = frame

        # Results from the worker land at the tick boundary only
        self._collect_worker_result()

        if frame % self._config.process_refresh_frames == 0:
            self._refresh_processes()

        disk_period = self._config.disk_refresh_frames
        if disk_period and frame % disk_period == 0:
            self._refresh_disks()

        self._sample_cpu(frame)
        self._sample_memory(frame)
        self._sample_networks(frame)

    def _sample_cpu(self, frame: int) -> None:
        try:
            value = self._provider.global_cpu_percent()
        except ProviderUnavailable as e:
            logger.warning("Skipping CPU sample for frame %d: %s", frame, e)
            return
        self.cpu.append(frame, value)

    def _sample_memory(self, frame: int) -> None:
        try:
            used = self._provider.used_memory()
        except ProviderUnavailable as e:
            logger.warning("Skipping memory sample for frame %d: %s", frame, e)
            return
        self.memory.append(frame, used)

    def _sample_networks(self, frame: int) -> None:
        try:
            interfaces = self._provider.list_interfaces()
        except ProviderUnavailable as e:
            logger.warning("Skipping network samples for frame %d: %s", frame, e)
            return
        for nic in interfaces:
            try:
                self.networks.record(nic.name, frame, nic.cumulative_packets)
            except OutOfOrderSample as e:
                # Provider listed the same interface twice in one reading
                logger.error("Dropping duplicate sample for %s: %s", nic.name, e)

    def _refresh_memory_total(self) -> None:
        try:
            self.memory_total = self._provider.total_memory()
        except ProviderUnavailable as e:
            logger.warning("Keeping previous memory total: %s", e)

    def _refresh_disks(self) -> None:
        try:
            raw_disks = self._provider.list_disks()
        except ProviderUnavailable as e:
            logger.warning("Keeping previous disk snapshot: %s", e)
            return
        self.disks.refresh(raw_disks)
        logger.debug("Disk snapshot refreshed: %d disks", len(self.disks))

    def _refresh_processes(self) -> None:
        # Installed memory rarely changes; re-read it on the process cadence
        self._refresh_memory_total()
        if self._worker is not None:
            self._worker.request()
            return
        try:
            raw_processes = self._provider.list_processes()
        except ProviderUnavailable as e:
            logger.warning("Keeping previous process list: %s", e)
            return
        self.processes.refresh(raw_processes, self.memory_total)

    def _collect_worker_result(self) -> None:
        if self._worker is None:
            return
        batch = self._worker.collect()
        if batch is None:
            return
        raw_processes, total_memory = batch
        self.processes.refresh(raw_processes, total_memory)
